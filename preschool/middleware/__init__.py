"""HTTP middleware. Applied in preschool.main."""

from preschool.middleware.request_id import RequestIDMiddleware

__all__ = ["RequestIDMiddleware"]
