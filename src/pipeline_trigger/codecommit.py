"""CodeCommit diff source."""

from __future__ import annotations

import logging
from typing import Any

from .aws import build_client, error_code, error_detail
from .paths import CommitRange, DiffEntry, DiffPage


logger = logging.getLogger("pipeline_trigger.codecommit")


class CodeCommitDiffSource:
    def __init__(
        self,
        *,
        region: str | None = None,
        endpoint_url: str | None = None,
        client: Any | None = None,
    ) -> None:
        self._client = client or build_client("codecommit", region=region, endpoint_url=endpoint_url)

    def get_differences(self, commit_range: CommitRange, next_token: str | None = None) -> DiffPage:
        request: dict[str, Any] = {
            "repositoryName": commit_range.repository,
            "afterCommitSpecifier": commit_range.after_commit,
        }
        if commit_range.before_commit:
            request["beforeCommitSpecifier"] = commit_range.before_commit
        if next_token:
            request["NextToken"] = next_token
        try:
            response = self._client.get_differences(**request)
        except Exception as exc:
            logger.warning(
                "CodeCommit get_differences failed repository=%s code=%s detail=%s",
                commit_range.repository,
                error_code(exc),
                error_detail(exc),
            )
            raise
        entries = tuple(_entry(item) for item in response.get("differences", []))
        return DiffPage(entries=entries, next_token=response.get("NextToken") or None)


def _entry(item: dict[str, Any]) -> DiffEntry:
    after_blob = item.get("afterBlob") or {}
    before_blob = item.get("beforeBlob") or {}
    return DiffEntry(
        after_path=after_blob.get("path") or None,
        before_path=before_blob.get("path") or None,
        change_type=item.get("changeType"),
    )
