"""Pipeline trigger error taxonomy."""

from __future__ import annotations

from typing import Any


class PipelineTriggerError(Exception):
    """Base class for errors raised by the pipeline trigger."""


class ConfigurationInvalid(PipelineTriggerError, ValueError):
    """Raised when required configuration is absent or unparsable."""


class EventInvalid(PipelineTriggerError, ValueError):
    """Raised when the inbound commit event is missing required fields."""


class DiffRetrievalFailed(PipelineTriggerError, RuntimeError):
    """Raised when any page of a commit diff could not be fetched."""

    def __init__(
        self,
        message: str,
        *,
        repository: str,
        before_commit: str | None,
        after_commit: str,
    ) -> None:
        super().__init__(message)
        self.repository = repository
        self.before_commit = before_commit
        self.after_commit = after_commit


class TriggerFailed(PipelineTriggerError, RuntimeError):
    """Raised when one pipeline could not be started."""

    def __init__(self, pipeline_id: str, message: str) -> None:
        super().__init__(f"cannot start pipeline {pipeline_id!r}: {message}")
        self.pipeline_id = pipeline_id


class InvocationTimeout(PipelineTriggerError, TimeoutError):
    """Raised when the invocation deadline expires."""

    def __init__(self, stage: str) -> None:
        super().__init__(f"invocation deadline expired during {stage}")
        self.stage = stage


class DispatchFailed(PipelineTriggerError, RuntimeError):
    """Raised when one or more resolved pipelines failed to start."""

    def __init__(self, failed: tuple[str, ...], summary: dict[str, Any]) -> None:
        super().__init__(f"pipelines failed to start: {list(failed)!r}")
        self.failed = failed
        self.summary = summary
