"""Bounded, retryable calls to external collaborators.

Every call to the identity directory, record store or notifier goes through
call_external so it has a timeout; a timeout surfaces as
ProviderUnavailableException. ExternalCallPolicy adds bounded retries with
exponential backoff for idempotent steps.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from preschool.application.interfaces.services import INotifier
from preschool.core.config import Settings
from preschool.domain.exceptions import ProviderUnavailableException
from preschool.shared.telemetry.logging import get_logger
from preschool.shared.telemetry.tracing import TracedOperation, add_span_event

logger = get_logger(__name__)

T = TypeVar("T")


async def call_external(
    call: Callable[[], Awaitable[T]],
    provider: str,
    operation: str,
    timeout: float,
) -> T:
    """Await call() with a timeout. Timeout raises ProviderUnavailableException.

    Each call runs in its own span named provider.operation.
    """
    async with TracedOperation(
        f"{provider}.{operation}",
        {"external.provider": provider, "external.operation": operation},
    ):
        try:
            return await asyncio.wait_for(call(), timeout=timeout)
        except TimeoutError as e:
            logger.warning("%s.%s timed out after %.1fs", provider, operation, timeout)
            raise ProviderUnavailableException(provider, operation) from e


@dataclass(frozen=True)
class ExternalCallPolicy:
    """Timeout and retry budget for external calls."""

    timeout_seconds: float = 10.0
    max_attempts: int = 3
    backoff_seconds: float = 0.2

    @classmethod
    def from_settings(cls, settings: Settings) -> ExternalCallPolicy:
        return cls(
            timeout_seconds=settings.external_call_timeout_seconds,
            max_attempts=settings.external_call_max_attempts,
            backoff_seconds=settings.external_call_backoff_seconds,
        )

    async def run_once(
        self, call: Callable[[], Awaitable[T]], provider: str, operation: str
    ) -> T:
        """Single attempt with timeout (for writes that must not be blindly retried)."""
        return await call_external(call, provider, operation, self.timeout_seconds)

    async def run(
        self, call: Callable[[], Awaitable[T]], provider: str, operation: str
    ) -> T:
        """Retry ProviderUnavailableException (including timeouts) up to max_attempts.

        Only use for idempotent calls. Any other exception propagates
        immediately.
        """
        attempt = 1
        while True:
            try:
                return await call_external(call, provider, operation, self.timeout_seconds)
            except ProviderUnavailableException:
                if attempt >= self.max_attempts:
                    logger.error(
                        "%s.%s failed after %d attempts", provider, operation, attempt
                    )
                    raise
                delay = self.backoff_seconds * (2 ** (attempt - 1))
                add_span_event(
                    "external_call.retry",
                    {"provider": provider, "operation": operation, "attempt": attempt},
                )
                logger.warning(
                    "%s.%s unavailable (attempt %d/%d), retrying in %.2fs",
                    provider,
                    operation,
                    attempt,
                    self.max_attempts,
                    delay,
                )
                if delay > 0:
                    await asyncio.sleep(delay)
                attempt += 1


async def notify_best_effort(
    notifier: INotifier,
    policy: ExternalCallPolicy,
    to_email: str,
    template_id: str,
    template_data: dict[str, Any],
) -> bool:
    """Send a notification; log and swallow any failure. Return whether it was sent."""
    try:
        await policy.run_once(
            lambda: notifier.send(to_email, template_id, template_data),
            "notifier",
            template_id,
        )
    except Exception:
        logger.warning("Notification %s could not be sent", template_id, exc_info=True)
        return False
    return True
