from __future__ import annotations

import queue
from dataclasses import dataclass, field
from typing import Any, List, Optional, Protocol

from actor_runner.results import TerminalResult

STARTED_MESSAGE = "Actor execution started..."


class ProgressSink(Protocol):
    """
    Where a run reports back, independent of transport.
    - notify_started: at most once, before the terminal classification
    - complete: exactly once, ends the operation
    """

    def notify_started(self, run_id: str) -> None:
        ...

    def complete(self, result: TerminalResult) -> None:
        ...


class NullSink:
    def notify_started(self, run_id: str) -> None:
        pass

    def complete(self, result: TerminalResult) -> None:
        pass


@dataclass
class RecordingSink:
    started: List[str] = field(default_factory=list)
    completed: List[TerminalResult] = field(default_factory=list)

    def notify_started(self, run_id: str) -> None:
        self.started.append(run_id)

    def complete(self, result: TerminalResult) -> None:
        self.completed.append(result)

    @property
    def result(self) -> Optional[TerminalResult]:
        return self.completed[-1] if self.completed else None


@dataclass(frozen=True)
class SinkEvent:
    kind: str  # "started" | "complete" | "error"
    run_id: Optional[str] = None
    result: Optional[TerminalResult] = None
    error: Optional[BaseException] = None

    def to_payload(self) -> dict[str, Any]:
        if self.kind == "started":
            return {"status": "RUNNING", "runId": self.run_id, "message": STARTED_MESSAGE}
        if self.kind == "complete" and self.result is not None:
            return self.result.to_payload()
        raise ValueError(f"No payload for {self.kind} event")


class QueueSink:
    """Pushes events onto a per-request queue read by the streaming response."""

    def __init__(self, events: "queue.Queue[SinkEvent] | None" = None):
        self.events: "queue.Queue[SinkEvent]" = events if events is not None else queue.Queue()

    def notify_started(self, run_id: str) -> None:
        self.events.put(SinkEvent("started", run_id=run_id))

    def complete(self, result: TerminalResult) -> None:
        self.events.put(SinkEvent("complete", run_id=result.run_id, result=result))

    def fail(self, error: BaseException) -> None:
        self.events.put(SinkEvent("error", error=error))
