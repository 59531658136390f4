"""Core: settings, exception handlers, rate limiter, and app lifespan."""

from preschool.core.config import Settings, get_settings

__all__ = ["Settings", "get_settings"]
