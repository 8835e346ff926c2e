"""CodeCommit repository state change event parsing."""

from __future__ import annotations

from dataclasses import dataclass
import json
from typing import Any, Mapping

from .errors import EventInvalid
from .paths import CommitRange


REFERENCE_CREATED = "referenceCreated"


@dataclass(frozen=True)
class CommitEvent:
    repository: str
    before_commit: str | None
    after_commit: str
    reference_name: str | None = None
    reference_type: str | None = None
    event_name: str | None = None
    event_id: str | None = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "CommitEvent":
        if not isinstance(payload, Mapping):
            raise EventInvalid("event must be a mapping")
        detail = payload.get("detail")
        if isinstance(detail, str):
            try:
                detail = json.loads(detail)
            except json.JSONDecodeError as exc:
                raise EventInvalid(f"cannot decode event detail: {exc}") from exc
        if not isinstance(detail, Mapping):
            raise EventInvalid("event detail must be a mapping")

        event_name = _optional_text(detail.get("event"))
        repository = _required_text(detail, "repositoryName")
        after_commit = _required_text(detail, "commitId")
        if event_name == REFERENCE_CREATED:
            before_commit = _optional_text(detail.get("oldCommitId"))
        else:
            before_commit = _required_text(detail, "oldCommitId")
        return cls(
            repository=repository,
            before_commit=before_commit,
            after_commit=after_commit,
            reference_name=_optional_text(detail.get("referenceName")),
            reference_type=_optional_text(detail.get("referenceType")),
            event_name=event_name,
            event_id=_optional_text(payload.get("id")),
        )

    def commit_range(self) -> CommitRange:
        return CommitRange(
            repository=self.repository,
            before_commit=self.before_commit,
            after_commit=self.after_commit,
        )


def _required_text(detail: Mapping[str, Any], field_name: str) -> str:
    text = _optional_text(detail.get(field_name))
    if text is None:
        raise EventInvalid(f"event detail.{field_name} is required")
    return text


def _optional_text(value: Any) -> str | None:
    text = str(value or "").strip()
    return text or None
