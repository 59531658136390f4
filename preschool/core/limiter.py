"""Rate limiter instance for SlowAPI.

Shared so both main (app.state.limiter) and route modules use the same
instance. Only the anonymous endpoints are limited.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)

ONBOARDING_REQUEST_LIMIT = "5/minute"
REDEEM_LIMIT = "10/minute"
PREVIEW_LIMIT = "30/minute"

limit_onboarding_request = limiter.limit(ONBOARDING_REQUEST_LIMIT)
limit_redeem = limiter.limit(REDEEM_LIMIT)
limit_preview = limiter.limit(PREVIEW_LIMIT)
