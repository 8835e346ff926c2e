"""Invocation orchestration and the Lambda entrypoint."""

from __future__ import annotations

from dataclasses import dataclass
import json
import logging
from typing import Any, Mapping

from .codecommit import CodeCommitDiffSource
from .codepipeline import CodePipelineTriggerSink
from .config import InvocationConfig, load_invocation_config
from .deadline import Deadline
from .dispatcher import DispatchReport, Dispatcher, TriggerSink
from .errors import DispatchFailed
from .event import CommitEvent
from .logging_utils import configure_logging
from .paths import DiffSource, PathSet, collect_changed_paths
from .resolver import explain, resolve


logger = logging.getLogger("pipeline_trigger.handler")

STATUS_NO_MATCH = "no_match"
STATUS_TRIGGERED = "triggered"
STATUS_FAILED = "failed"
STATUS_DRY_RUN = "dry_run"


@dataclass(frozen=True)
class InvocationResult:
    event: CommitEvent
    paths: PathSet
    targets: frozenset[str]
    report: DispatchReport | None
    skipped_deletions: tuple[str, ...] = ()

    @property
    def status(self) -> str:
        if not self.targets:
            return STATUS_NO_MATCH
        if self.report is None:
            return STATUS_DRY_RUN
        return STATUS_TRIGGERED if self.report.ok else STATUS_FAILED

    @property
    def ok(self) -> bool:
        return self.status != STATUS_FAILED

    def summary(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "status": self.status,
            "event_id": self.event.event_id,
            "repository": self.event.repository,
            "before_commit": self.event.before_commit,
            "after_commit": self.event.after_commit,
            "changed_paths": len(self.paths),
            "skipped_deletions": len(self.skipped_deletions),
            "targets": sorted(self.targets),
        }
        if self.report is not None:
            payload["dispatch"] = self.report.summary()
        return payload


def run_invocation(
    event_payload: Mapping[str, Any],
    config: InvocationConfig,
    *,
    diff_source: DiffSource,
    trigger_sink: TriggerSink,
    deadline: Deadline | None = None,
    dry_run: bool = False,
) -> InvocationResult:
    event = CommitEvent.from_payload(event_payload)
    collection = collect_changed_paths(
        diff_source,
        event.commit_range(),
        include_deletions=config.include_deletions,
        deadline=deadline,
    )
    targets = resolve(collection.paths, config.catalog)
    if targets:
        logger.info(
            "target pipelines resolved: %s",
            json.dumps(explain(collection.paths, config.catalog), sort_keys=True, ensure_ascii=True),
        )
    else:
        logger.info("no pipeline prefix matched %s changed paths", len(collection.paths))

    report = None
    if not dry_run:
        dispatcher = Dispatcher(
            trigger_sink,
            max_workers=config.max_workers,
            request_token_seed=event.event_id,
        )
        report = dispatcher.dispatch(targets, deadline=deadline)
    return InvocationResult(
        event=event,
        paths=collection.paths,
        targets=targets,
        report=report,
        skipped_deletions=collection.skipped_deletions,
    )


def handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    config = load_invocation_config()
    configure_logging(config.log_level)
    result = run_invocation(
        event,
        config,
        diff_source=CodeCommitDiffSource(region=config.region, endpoint_url=config.endpoint_url),
        trigger_sink=CodePipelineTriggerSink(region=config.region, endpoint_url=config.endpoint_url),
        deadline=Deadline.from_lambda_context(context, reserve_ms=config.deadline_reserve_ms),
    )
    summary = result.summary()
    logger.info("pipeline trigger summary: %s", json.dumps(summary, sort_keys=True, ensure_ascii=True))
    if result.report is not None and not result.report.ok:
        raise DispatchFailed(tuple(result.report.failed), summary)
    return summary
