"""Member administration API schemas."""

from pydantic import BaseModel


class PasswordResetResponse(BaseModel):
    """Outcome of a password reset.

    The temporary password goes only to the member's email address; sent is
    False when the notifier could not deliver it and the reset should be
    retried.
    """

    profile_id: str
    sent: bool


class OkResponse(BaseModel):
    ok: bool = True
