"""Monotonic deadline shared by diff retrieval and dispatch."""

from __future__ import annotations

from dataclasses import dataclass
import time
from typing import Any

from .errors import InvocationTimeout


@dataclass(frozen=True)
class Deadline:
    expires_at: float

    @classmethod
    def after(cls, seconds: float) -> "Deadline":
        return cls(expires_at=time.monotonic() + max(0.0, float(seconds)))

    @classmethod
    def from_lambda_context(cls, context: Any, *, reserve_ms: int = 1000) -> "Deadline | None":
        """Deadline that leaves ``reserve_ms`` of the Lambda budget for reporting."""
        getter = getattr(context, "get_remaining_time_in_millis", None)
        if getter is None:
            return None
        remaining_ms = int(getter()) - max(0, int(reserve_ms))
        return cls.after(remaining_ms / 1000.0)

    def remaining(self) -> float:
        return max(0.0, self.expires_at - time.monotonic())

    def expired(self) -> bool:
        return time.monotonic() >= self.expires_at

    def check(self, stage: str) -> None:
        if self.expired():
            raise InvocationTimeout(stage)
