from __future__ import annotations

import json
import logging
import queue
import threading
from typing import AsyncIterator, Awaitable, Callable, Optional

import anyio

from actor_runner.errors import RunCancelled
from actor_runner.orchestrator import RunOrchestrator
from actor_runner.sink import QueueSink, SinkEvent

logger = logging.getLogger(__name__)

EVENT_POLL_SECONDS = 0.1


def _line(payload: dict) -> str:
    return json.dumps(payload, ensure_ascii=False) + "\n"


class RunStream:
    """
    Runs one execute() on a worker thread and exposes its sink events.

    The caller inspects `next_event()` to decide between a plain JSON response
    (terminal result or error arrived first) and an NDJSON stream (RUNNING first).
    When the stream ends early (client disconnect, task cancellation) the cancel token is set,
    so an abandoned run stops at its next sleep.
    """

    def __init__(self, orchestrator: RunOrchestrator, actor_id: str, credential: str, input: Optional[dict]):
        self.sink = QueueSink()
        self.cancel = threading.Event()
        self._thread = threading.Thread(
            target=self._work,
            args=(orchestrator, actor_id, credential, input),
            name=f"actor-run-{actor_id}",
            daemon=True,
        )

    def _work(self, orchestrator: RunOrchestrator, actor_id: str, credential: str, input: Optional[dict]) -> None:
        try:
            orchestrator.execute(actor_id, credential, input, self.sink, cancel=self.cancel)
        except RunCancelled:
            logger.info("Run polling stopped; client went away")
        except Exception as e:
            self.sink.fail(e)

    def start(self) -> "RunStream":
        self._thread.start()
        return self

    def next_event(self) -> SinkEvent:
        return self.sink.events.get()

    def join(self, timeout: Optional[float] = None) -> bool:
        self._thread.join(timeout)
        return not self._thread.is_alive()

    async def _next_event_async(self, is_disconnected: Optional[Callable[[], Awaitable[bool]]]) -> Optional[SinkEvent]:
        # non-blocking so the wait stays cancellable
        while True:
            try:
                return self.sink.events.get_nowait()
            except queue.Empty:
                pass
            if is_disconnected is not None and await is_disconnected():
                return None
            await anyio.sleep(EVENT_POLL_SECONDS)

    async def lines(
        self,
        first: SinkEvent,
        is_disconnected: Optional[Callable[[], Awaitable[bool]]] = None,
    ) -> AsyncIterator[str]:
        event: Optional[SinkEvent] = first
        try:
            while True:
                if event.kind == "error":
                    yield _line(error_line(event, first.run_id))
                    return
                yield _line(event.to_payload())
                if event.kind == "complete":
                    return
                event = await self._next_event_async(is_disconnected)
                if event is None:
                    logger.info(f"Client disconnected. run={first.run_id}")
                    return
        finally:
            self.cancel.set()


def error_line(event: SinkEvent, run_id: Optional[str]) -> dict:
    err = event.error
    return {
        "status": "ERROR",
        "runId": run_id,
        "error": getattr(err, "message", None) or str(err),
        "statusCode": getattr(err, "status_code", 500),
    }
