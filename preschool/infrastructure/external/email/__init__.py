"""Transactional email: templates, notifiers and factory."""

from preschool.infrastructure.external.email.factory import build_notifier
from preschool.infrastructure.external.email.notifier import HttpEmailNotifier, LogOnlyNotifier
from preschool.infrastructure.external.email.templates import EmailTemplateRenderer

__all__ = ["EmailTemplateRenderer", "HttpEmailNotifier", "LogOnlyNotifier", "build_notifier"]
