"""Fan-out of pipeline start requests with per-pipeline outcomes."""

from __future__ import annotations

from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
import hashlib
import logging
from typing import Any, Iterable, Protocol

from .deadline import Deadline
from .errors import InvocationTimeout, TriggerFailed


logger = logging.getLogger("pipeline_trigger.dispatcher")


class TriggerSink(Protocol):
    def start_execution(self, pipeline_id: str, *, request_token: str | None = None) -> str:
        ...


@dataclass(frozen=True)
class TriggerOutcome:
    pipeline_id: str
    execution_id: str | None = None
    error: TriggerFailed | None = None
    outcome_unknown: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class DispatchReport:
    outcomes: dict[str, TriggerOutcome] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return all(outcome.ok for outcome in self.outcomes.values())

    @property
    def succeeded(self) -> dict[str, str]:
        return {
            pipeline_id: str(outcome.execution_id)
            for pipeline_id, outcome in sorted(self.outcomes.items())
            if outcome.ok
        }

    @property
    def failed(self) -> dict[str, TriggerFailed]:
        return {
            pipeline_id: outcome.error
            for pipeline_id, outcome in sorted(self.outcomes.items())
            if outcome.error is not None
        }

    @property
    def outcome_unknown(self) -> tuple[str, ...]:
        return tuple(
            pipeline_id for pipeline_id, outcome in sorted(self.outcomes.items()) if outcome.outcome_unknown
        )

    def summary(self) -> dict[str, Any]:
        return {
            "attempted": len(self.outcomes),
            "succeeded": self.succeeded,
            "failed": {pipeline_id: str(error) for pipeline_id, error in self.failed.items()},
            "outcome_unknown": list(self.outcome_unknown),
        }


def request_token(seed: str, pipeline_id: str) -> str:
    """Deterministic client request token for one pipeline start within one event."""
    return hashlib.sha256(f"{seed}:{pipeline_id}".encode("utf-8")).hexdigest()


class Dispatcher:
    def __init__(
        self,
        sink: TriggerSink,
        *,
        max_workers: int = 4,
        request_token_seed: str | None = None,
    ) -> None:
        if max_workers < 1:
            raise ValueError("max_workers must be >= 1")
        self.sink = sink
        self.max_workers = max_workers
        self.request_token_seed = request_token_seed

    def dispatch(self, targets: Iterable[str], *, deadline: Deadline | None = None) -> DispatchReport:
        """Start every target exactly once; one failure never blocks the others.

        Targets are trusted to be unique. Outcomes are only written from this
        thread as futures complete. Targets still running when the deadline
        expires are recorded as failed with an ``InvocationTimeout`` cause. A
        start call that was already in flight keeps running on its worker thread
        and may still start the pipeline; such targets are flagged
        ``outcome_unknown`` rather than reported as not started.
        """
        ordered = sorted(targets)
        outcomes: dict[str, TriggerOutcome] = {}
        if not ordered:
            logger.info("dispatch skipped: no target pipelines")
            return DispatchReport(outcomes=outcomes)

        executor = ThreadPoolExecutor(
            max_workers=min(self.max_workers, len(ordered)),
            thread_name_prefix="pipeline-trigger",
        )
        try:
            pending: dict[Future[str], str] = {
                executor.submit(self._start, pipeline_id): pipeline_id for pipeline_id in ordered
            }
            while pending:
                timeout = deadline.remaining() if deadline is not None else None
                done, _ = wait(pending, timeout=timeout, return_when=FIRST_COMPLETED)
                if not done:
                    break
                for future in done:
                    pipeline_id = pending.pop(future)
                    outcomes[pipeline_id] = _outcome(pipeline_id, future)
            for future, pipeline_id in pending.items():
                in_flight = not future.cancel()
                error = TriggerFailed(pipeline_id, "invocation deadline expired before start completed")
                error.__cause__ = InvocationTimeout("dispatch")
                outcomes[pipeline_id] = TriggerOutcome(
                    pipeline_id=pipeline_id,
                    error=error,
                    outcome_unknown=in_flight,
                )
                logger.error("pipeline start timed out pipeline=%s in_flight=%s", pipeline_id, in_flight)
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        report = DispatchReport(outcomes=outcomes)
        logger.info(
            "dispatch complete attempted=%s succeeded=%s failed=%s",
            len(outcomes),
            len(report.succeeded),
            len(report.failed),
        )
        return report

    def _start(self, pipeline_id: str) -> str:
        token = None
        if self.request_token_seed:
            token = request_token(self.request_token_seed, pipeline_id)
        return self.sink.start_execution(pipeline_id, request_token=token)


def _outcome(pipeline_id: str, future: Future[str]) -> TriggerOutcome:
    try:
        execution_id = future.result()
    except TriggerFailed as exc:
        error = exc
    except Exception as exc:
        error = TriggerFailed(pipeline_id, str(exc)[:256])
        error.__cause__ = exc
    else:
        logger.info("pipeline started pipeline=%s execution_id=%s", pipeline_id, execution_id)
        return TriggerOutcome(pipeline_id=pipeline_id, execution_id=execution_id)
    logger.error("pipeline start failed pipeline=%s detail=%s", pipeline_id, error)
    return TriggerOutcome(pipeline_id=pipeline_id, error=error)
