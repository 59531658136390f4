"""Transactional email templates: template id → subject/body (Jinja)."""

from __future__ import annotations

from typing import Any

from jinja2 import Environment, StrictUndefined, Template

# template id → (subject_template, body_template). Context is the template_data dict.
DEFAULT_TEMPLATES: dict[str, tuple[str, str]] = {
    "onboarding_received": (
        "We received your request for {{ tenant_name }}",
        "Hi {{ admin_name }},\n\n"
        "Thanks for applying to bring {{ tenant_name }} on board. "
        "We will review your request and email you once it has been decided.\n",
    ),
    "onboarding_approved": (
        "{{ tenant_name }} is ready",
        "Hi {{ admin_name }},\n\n"
        "Your school {{ tenant_name }} has been approved.\n"
        "Sign in with: {{ login_email }}\n"
        "{% if temp_password %}"
        "Temporary password: {{ temp_password }}\n"
        "Please change it after your first sign-in.\n"
        "{% else %}"
        "Use 'Forgot password' on the sign-in page to set your password.\n"
        "{% endif %}",
    ),
    "onboarding_rejected": (
        "Update on your request for {{ tenant_name }}",
        "Hi {{ admin_name }},\n\n"
        "We are unable to approve {{ tenant_name }} at this time."
        "{% if reason %}\nReason: {{ reason }}{% endif %}\n",
    ),
    "invitation_issued": (
        "You have been invited to join {{ tenant_name }}",
        "You have been invited to join {{ tenant_name }} as a {{ role }}.\n"
        "Invitation code: {{ code }}\n"
        "The code expires at {{ expires_at }}.\n",
    ),
    "password_reset": (
        "Your password has been reset",
        "Hi {{ name }},\n\n"
        "An administrator reset your password.\n"
        "Temporary password: {{ temp_password }}\n"
        "Please change it after signing in.\n",
    ),
}


class EmailTemplateRenderer:
    """Renders subject and body for a template id."""

    def __init__(self, templates: dict[str, tuple[str, str]] | None = None) -> None:
        env = Environment(autoescape=False, undefined=StrictUndefined)
        self._compiled: dict[str, tuple[Template, Template]] = {
            key: (env.from_string(subject), env.from_string(body))
            for key, (subject, body) in (templates or DEFAULT_TEMPLATES).items()
        }

    @property
    def template_ids(self) -> list[str]:
        return sorted(self._compiled)

    def render(self, template_id: str, data: dict[str, Any]) -> tuple[str, str]:
        """Return (subject, body). Raises KeyError for unknown ids, UndefinedError for missing fields."""
        if template_id not in self._compiled:
            raise KeyError(f"Unknown email template: {template_id}")
        subject_tpl, body_tpl = self._compiled[template_id]
        return subject_tpl.render(**data), body_tpl.render(**data)
