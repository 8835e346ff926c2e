from __future__ import annotations

import threading

import pytest

from pipeline_trigger.deadline import Deadline
from pipeline_trigger.dispatcher import Dispatcher, request_token
from pipeline_trigger.errors import InvocationTimeout, TriggerFailed


class _RecordingSink:
    def __init__(self, failing: set[str] | None = None) -> None:
        self.failing = failing or set()
        self.calls: list[tuple[str, str | None]] = []
        self._lock = threading.Lock()

    def start_execution(self, pipeline_id: str, *, request_token: str | None = None) -> str:
        with self._lock:
            self.calls.append((pipeline_id, request_token))
        if pipeline_id in self.failing:
            raise RuntimeError("PipelineNotFoundException")
        return f"exec-{pipeline_id}"


class _BlockingSink:
    def __init__(self, blocked: str) -> None:
        self.blocked = blocked
        self.release = threading.Event()

    def start_execution(self, pipeline_id: str, *, request_token: str | None = None) -> str:
        if pipeline_id == self.blocked:
            self.release.wait(timeout=5)
        return f"exec-{pipeline_id}"


@pytest.mark.parametrize("max_workers", [1, 4])
def test_failure_is_isolated_to_its_pipeline(max_workers: int) -> None:
    sink = _RecordingSink(failing={"B"})

    report = Dispatcher(sink, max_workers=max_workers).dispatch({"A", "B", "C"})

    assert sorted(pipeline_id for pipeline_id, _ in sink.calls) == ["A", "B", "C"]
    assert report.ok is False
    assert report.succeeded == {"A": "exec-A", "C": "exec-C"}
    assert list(report.failed) == ["B"]
    failure = report.failed["B"]
    assert isinstance(failure, TriggerFailed)
    assert failure.pipeline_id == "B"
    assert isinstance(failure.__cause__, RuntimeError)
    assert report.outcomes["A"].ok and report.outcomes["C"].ok


def test_each_target_is_started_exactly_once() -> None:
    sink = _RecordingSink()

    report = Dispatcher(sink).dispatch(frozenset({"api", "infra"}))

    assert sorted(sink.calls) == [("api", None), ("infra", None)]
    assert report.ok is True
    assert report.summary() == {
        "attempted": 2,
        "succeeded": {"api": "exec-api", "infra": "exec-infra"},
        "failed": {},
        "outcome_unknown": [],
    }


def test_empty_target_set_makes_no_calls() -> None:
    sink = _RecordingSink()

    report = Dispatcher(sink).dispatch(frozenset())

    assert sink.calls == []
    assert report.ok is True
    assert report.outcomes == {}


def test_request_tokens_are_deterministic_per_event_and_pipeline() -> None:
    sink = _RecordingSink()

    Dispatcher(sink, request_token_seed="c1").dispatch({"api"})
    Dispatcher(sink, request_token_seed="c1").dispatch({"api"})
    Dispatcher(sink, request_token_seed="c2").dispatch({"api"})

    tokens = [token for _, token in sink.calls]
    assert tokens[0] == tokens[1] == request_token("c1", "api")
    assert tokens[2] != tokens[0]
    assert len(tokens[0]) == 64


def test_unfinished_targets_fail_with_timeout_when_deadline_expires() -> None:
    sink = _BlockingSink(blocked="slow")
    try:
        report = Dispatcher(sink, max_workers=2).dispatch({"fast", "slow"}, deadline=Deadline.after(0.3))
    finally:
        sink.release.set()

    assert report.succeeded == {"fast": "exec-fast"}
    assert list(report.failed) == ["slow"]
    assert isinstance(report.failed["slow"].__cause__, InvocationTimeout)
    assert report.outcome_unknown == ("slow",)
    assert report.summary()["outcome_unknown"] == ["slow"]


def test_queued_targets_at_deadline_are_known_not_started() -> None:
    sink = _BlockingSink(blocked="a-slow")
    try:
        report = Dispatcher(sink, max_workers=1).dispatch({"a-slow", "b-queued"}, deadline=Deadline.after(0.3))
    finally:
        sink.release.set()

    assert list(report.failed) == ["a-slow", "b-queued"]
    assert report.outcomes["a-slow"].outcome_unknown is True
    assert report.outcomes["b-queued"].outcome_unknown is False
    assert report.outcome_unknown == ("a-slow",)


def test_max_workers_must_be_positive() -> None:
    with pytest.raises(ValueError):
        Dispatcher(_RecordingSink(), max_workers=0)
