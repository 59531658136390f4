"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Backend-specific requirements (identity API URL and
service key, email API URL) are validated at load time.
"""

from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment and .env.

    Defaults run the whole service against a local SQLite file with the
    self-hosted identity directory and log-only notifier, which is what
    development and the test suite use.
    """

    # App
    app_name: str = "preschool-onboarding"
    app_version: str = "1.0.0"
    debug: bool = False

    # Record store (SQLAlchemy async URL; postgresql+asyncpg in production)
    database_url: str = "sqlite+aiosqlite:///./preschool.db"
    database_echo: bool = False
    # Create tables from ORM metadata on startup (dev only; production uses Alembic).
    database_create_tables: bool = False

    # Identity directory: "sql" (self-hosted table, bcrypt) or "http" (managed provider admin API)
    identity_backend: str = "sql"
    identity_api_url: str | None = None
    identity_service_key: SecretStr | None = None
    identity_min_password_length: int = 8

    # Notifier: "log" (log only) or "http" (transactional email API)
    notifier_backend: str = "log"
    email_api_url: str | None = None
    email_api_key: SecretStr | None = None
    email_from: str = "no-reply@preschool.local"

    # External calls (identity directory, record store, notifier)
    external_call_timeout_seconds: float = 10.0
    external_call_max_attempts: int = 3
    external_call_backoff_seconds: float = 0.2

    # Provisioning
    temp_password_length: int = 12
    default_subscription_plan: str = "trial"
    invitation_default_ttl_hours: int = 7 * 24
    invitation_max_ttl_hours: int = 90 * 24
    # Require the redeemer to prove control of a pre-existing directory account.
    redeem_require_identity_proof: bool = True

    # HTTP surface
    allowed_origins: str = "http://localhost:3000,http://localhost:8081"
    request_id_header: str = "X-Request-ID"
    caller_header_name: str = "X-Caller-Profile-ID"

    # OpenTelemetry (off by default; "console", "otlp" or "none" exporter)
    telemetry_enabled: bool = False
    telemetry_exporter: str = "console"
    telemetry_otlp_endpoint: str | None = None
    telemetry_sample_rate: float = 1.0
    telemetry_environment: str = "development"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_backends(self) -> "Settings":
        """Validate backend selections and their required settings."""
        if self.identity_backend == "http":
            if not self.identity_api_url:
                raise ValueError(
                    "IDENTITY_API_URL is required when identity_backend is 'http'."
                )
            if not (
                self.identity_service_key
                and self.identity_service_key.get_secret_value()
            ):
                raise ValueError(
                    "IDENTITY_SERVICE_KEY is required when identity_backend is 'http'."
                )
        elif self.identity_backend != "sql":
            raise ValueError(
                f"identity_backend must be 'sql' or 'http', got: {self.identity_backend!r}"
            )
        if self.notifier_backend == "http":
            if not self.email_api_url:
                raise ValueError(
                    "EMAIL_API_URL is required when notifier_backend is 'http'."
                )
        elif self.notifier_backend != "log":
            raise ValueError(
                f"notifier_backend must be 'log' or 'http', got: {self.notifier_backend!r}"
            )
        if self.temp_password_length < 12:
            raise ValueError("TEMP_PASSWORD_LENGTH must be at least 12")
        if self.external_call_max_attempts < 1:
            raise ValueError("EXTERNAL_CALL_MAX_ATTEMPTS must be at least 1")
        if not 0.0 <= self.telemetry_sample_rate <= 1.0:
            raise ValueError("TELEMETRY_SAMPLE_RATE must be between 0.0 and 1.0")
        if not 0 < self.invitation_default_ttl_hours <= self.invitation_max_ttl_hours:
            raise ValueError(
                "INVITATION_DEFAULT_TTL_HOURS must be positive and not exceed "
                "INVITATION_MAX_TTL_HOURS"
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.
    """
    return Settings()
