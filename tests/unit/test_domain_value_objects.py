"""Tests for domain value objects (slugs, emails, invitation codes)."""

import pytest

from preschool.domain.value_objects import (
    SLUG_MAX_LENGTH,
    TenantSlug,
    emails_match,
    normalize_email,
    normalize_invitation_code,
    slugify,
)


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("Sunshine Prep", "sunshine-prep"),
        ("  Little Stars  Nursery ", "little-stars-nursery"),
        ("St. Mary's (Kampala)", "st-mary-s-kampala"),
        ("ABC--123", "abc-123"),
        ("!!!", "school"),
        ("", "school"),
    ],
)
def test_slugify(name: str, expected: str) -> None:
    assert slugify(name) == expected


def test_slugify_truncates_without_trailing_hyphen() -> None:
    slug = slugify("a" * 49 + " b" + "c" * 20)
    assert len(slug) <= SLUG_MAX_LENGTH
    assert not slug.endswith("-")


def test_tenant_slug_from_name_and_suffix() -> None:
    base = TenantSlug.from_name("Sunshine Prep")
    assert base.value == "sunshine-prep"
    assert base.with_suffix(2).value == "sunshine-prep-2"


def test_tenant_slug_suffix_stays_within_limit() -> None:
    base = TenantSlug("x" * SLUG_MAX_LENGTH)
    suffixed = base.with_suffix(17)
    assert len(suffixed.value) <= SLUG_MAX_LENGTH
    assert suffixed.value.endswith("-17")


@pytest.mark.parametrize("value", ["", "Sunshine", "bad_slug", "-lead", "trail-"])
def test_tenant_slug_rejects_invalid(value: str) -> None:
    with pytest.raises(ValueError):
        TenantSlug(value)


def test_normalize_email_lowercases_and_strips() -> None:
    assert normalize_email("  Ada@Sunshine.TEST ") == "ada@sunshine.test"


@pytest.mark.parametrize("value", ["", "ada", "ada@", "@sunshine.test", "a b@c.test", "ada@host"])
def test_normalize_email_rejects_malformed(value: str) -> None:
    with pytest.raises(ValueError):
        normalize_email(value)


def test_emails_match_is_case_insensitive() -> None:
    assert emails_match("Parent@X.test", "parent@x.test")
    assert emails_match(" parent@x.test", "PARENT@x.test ")
    assert not emails_match("parent@x.test", "other@x.test")
    assert not emails_match(None, "parent@x.test")


def test_normalize_invitation_code() -> None:
    assert normalize_invitation_code(" abcd2345efgh ") == "ABCD2345EFGH"


@pytest.mark.parametrize("value", ["", "ABC", "ABCD-2345", "A" * 33, "ÄBCDEFGH"])
def test_normalize_invitation_code_rejects_malformed(value: str) -> None:
    with pytest.raises(ValueError):
        normalize_invitation_code(value)
