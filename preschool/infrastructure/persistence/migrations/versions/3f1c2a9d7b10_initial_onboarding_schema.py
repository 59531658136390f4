"""Initial schema: tenants, onboarding requests, profiles, invitation codes, identities

Revision ID: 3f1c2a9d7b10
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3f1c2a9d7b10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create initial schema."""
    op.create_table(
        "tenant",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("slug", sa.String(length=50), nullable=False),
        sa.Column("contact_email", sa.String(), nullable=False),
        sa.Column("subscription_plan", sa.String(), nullable=False),
        sa.Column("subscription_status", sa.String(), nullable=False),
        sa.Column("onboarding_status", sa.String(), nullable=False),
        sa.Column("onboarding_request_id", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "onboarding_status IN ('pending', 'completed')",
            name="tenant_onboarding_status_check",
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("onboarding_request_id"),
    )
    op.create_index(op.f("ix_tenant_slug"), "tenant", ["slug"], unique=True)
    op.create_index(op.f("ix_tenant_contact_email"), "tenant", ["contact_email"], unique=False)

    op.create_table(
        "onboarding_request",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("tenant_name", sa.String(), nullable=False),
        sa.Column("admin_name", sa.String(), nullable=False),
        sa.Column("admin_email", sa.String(), nullable=False),
        sa.Column("phone", sa.String(), nullable=True),
        sa.Column("address", sa.String(), nullable=True),
        sa.Column("student_count", sa.Integer(), nullable=True),
        sa.Column("teacher_count", sa.Integer(), nullable=True),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("reviewed_by", sa.String(), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("tenant_id", sa.String(), nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "status IN ('pending', 'approved', 'rejected')",
            name="onboarding_request_status_check",
        ),
        sa.CheckConstraint(
            "(reviewed_by IS NULL) = (reviewed_at IS NULL)",
            name="onboarding_request_reviewed_pair_check",
        ),
        sa.ForeignKeyConstraint(["tenant_id"], ["tenant.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_onboarding_request_admin_email"),
        "onboarding_request",
        ["admin_email"],
        unique=False,
    )
    op.create_index(
        op.f("ix_onboarding_request_status"), "onboarding_request", ["status"], unique=False
    )

    op.create_table(
        "user_profile",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("identity_id", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("role", sa.String(), nullable=False),
        sa.Column("tenant_id", sa.String(), nullable=True),
        sa.Column("is_active", sa.Boolean(), server_default=sa.text("true"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "role IN ('superadmin', 'admin', 'principal', 'teacher', 'parent')",
            name="user_profile_role_check",
        ),
        sa.CheckConstraint(
            "tenant_id IS NOT NULL OR role = 'superadmin'",
            name="user_profile_tenant_required_check",
        ),
        sa.ForeignKeyConstraint(["tenant_id"], ["tenant.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("identity_id"),
    )
    op.create_index(op.f("ix_user_profile_email"), "user_profile", ["email"], unique=False)
    op.create_index(
        op.f("ix_user_profile_tenant_id"), "user_profile", ["tenant_id"], unique=False
    )

    op.create_table(
        "invitation_code",
        sa.Column("code", sa.String(length=32), nullable=False),
        sa.Column("tenant_id", sa.String(), nullable=False),
        sa.Column("role", sa.String(), nullable=False),
        sa.Column("invited_by", sa.String(), nullable=False),
        sa.Column("target_email", sa.String(), nullable=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("used_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("used_by", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "role IN ('admin', 'parent', 'teacher')", name="invitation_code_role_check"
        ),
        sa.ForeignKeyConstraint(["tenant_id"], ["tenant.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("code"),
    )
    op.create_index(
        op.f("ix_invitation_code_tenant_id"), "invitation_code", ["tenant_id"], unique=False
    )

    op.create_table(
        "identity_account",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("hashed_password", sa.String(), nullable=False),
        sa.Column("email_confirmed", sa.Boolean(), nullable=False),
        sa.Column("request_key", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("request_key"),
    )
    op.create_index(
        op.f("ix_identity_account_email"), "identity_account", ["email"], unique=True
    )


def downgrade() -> None:
    """Drop all tables (reverse order)."""
    op.drop_index(op.f("ix_identity_account_email"), table_name="identity_account")
    op.drop_table("identity_account")
    op.drop_index(op.f("ix_invitation_code_tenant_id"), table_name="invitation_code")
    op.drop_table("invitation_code")
    op.drop_index(op.f("ix_user_profile_tenant_id"), table_name="user_profile")
    op.drop_index(op.f("ix_user_profile_email"), table_name="user_profile")
    op.drop_table("user_profile")
    op.drop_index(op.f("ix_onboarding_request_status"), table_name="onboarding_request")
    op.drop_index(op.f("ix_onboarding_request_admin_email"), table_name="onboarding_request")
    op.drop_table("onboarding_request")
    op.drop_index(op.f("ix_tenant_contact_email"), table_name="tenant")
    op.drop_index(op.f("ix_tenant_slug"), table_name="tenant")
    op.drop_table("tenant")
