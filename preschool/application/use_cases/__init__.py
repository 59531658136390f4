"""Use cases (entry points invoked by the HTTP layer)."""

from preschool.application.use_cases.workflow_api import WorkflowApi

__all__ = ["WorkflowApi"]
