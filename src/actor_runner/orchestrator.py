from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from actor_runner.errors import MissingCredentialError, RunCancelled, UpstreamError
from actor_runner.gateway import ApifyGateway, ApiResult
from actor_runner.results import (
    DEGRADED_SUCCESS_MESSAGE,
    RunHandle,
    TerminalResult,
    TerminalStatus,
)
from actor_runner.settings import Settings, get_settings
from actor_runner.sink import NullSink, ProgressSink

logger = logging.getLogger(__name__)

FAILED_FALLBACK_MESSAGE = "Actor run failed"
ABORTED_MESSAGE = "Actor run was aborted"
NO_DATASET_MESSAGE = "Run has no default dataset"


class RunPhase(str, Enum):
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
    ABORTED = "ABORTED"
    IN_PROGRESS = "IN_PROGRESS"


@dataclass(frozen=True)
class StatusTick:
    phase: RunPhase
    raw: str  # platform status as sent, e.g. READY / RUNNING / TIMING-OUT


_TERMINAL_PHASES = {
    "SUCCEEDED": RunPhase.SUCCEEDED,
    "FAILED": RunPhase.FAILED,
    "ABORTED": RunPhase.ABORTED,
}


def classify_status(raw: Any) -> StatusTick:
    status = str(raw or "")
    return StatusTick(_TERMINAL_PHASES.get(status, RunPhase.IN_PROGRESS), status)


def timeout_message(interval: float, max_attempts: int) -> str:
    budget = interval * max_attempts
    if budget >= 60 and budget % 60 == 0:
        minutes = int(budget // 60)
        return f"Actor run timed out after {minutes} minute{'s' if minutes != 1 else ''}"
    return f"Actor run timed out after {budget:g} seconds"


def _raise_on_failure(res: ApiResult) -> None:
    if not res.success:
        raise UpstreamError(res.error_message or "Upstream request failed", status_code=res.status_code)


class RunOrchestrator:
    def __init__(
        self,
        gateway: ApifyGateway | None = None,
        settings: Settings | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.settings = settings or get_settings()
        self.gateway = gateway or ApifyGateway(self.settings)
        self._sleep = sleep

    def submit(self, actor_id: str, credential: str, input: Optional[dict] = None) -> RunHandle:
        res = self.gateway.call(f"/acts/{actor_id}/runs", credential, "POST", input or {})
        _raise_on_failure(res)

        run = res.data() or {}
        run_id = run.get("id") if isinstance(run, dict) else None
        if not run_id:
            raise UpstreamError("Platform did not return a run id", status_code=502)

        logger.info(f"Run submitted. actor={actor_id} run={run_id}")
        return RunHandle(run_id=run_id, actor_id=actor_id)

    def _wait(self, interval: float, run_id: str, cancel: Optional[threading.Event]) -> None:
        if cancel is None:
            self._sleep(interval)
            return
        if cancel.wait(interval):
            logger.info(f"Polling cancelled. run={run_id}")
            raise RunCancelled(run_id)

    def poll_until_terminal(
        self,
        actor_id: str,
        run_id: str,
        credential: str,
        sink: Optional[ProgressSink] = None,
        interval: Optional[float] = None,
        max_attempts: Optional[int] = None,
        cancel: Optional[threading.Event] = None,
    ) -> TerminalResult:
        sink = sink or NullSink()
        interval = self.settings.poll_interval_seconds if interval is None else interval
        max_attempts = self.settings.poll_max_attempts if max_attempts is None else max_attempts

        for attempt in range(max_attempts):
            self._wait(interval, run_id, cancel)

            res = self.gateway.call(f"/acts/{actor_id}/runs/{run_id}", credential)
            # a failed status query ends the run here; it is not retried
            _raise_on_failure(res)

            run = res.data()
            if not isinstance(run, dict):
                run = {}
            tick = classify_status(run.get("status"))
            stats = run.get("stats")
            logger.debug(f"Poll tick. run={run_id} attempt={attempt + 1}/{max_attempts} status={tick.raw}")

            if tick.phase is RunPhase.SUCCEEDED:
                return self._collect(run_id, run, stats, credential)

            if tick.phase is RunPhase.FAILED:
                return TerminalResult(
                    status=TerminalStatus.FAILED,
                    run_id=run_id,
                    error_message=run.get("statusMessage") or FAILED_FALLBACK_MESSAGE,
                    stats=stats,
                )

            if tick.phase is RunPhase.ABORTED:
                return TerminalResult(
                    status=TerminalStatus.ABORTED,
                    run_id=run_id,
                    error_message=ABORTED_MESSAGE,
                    stats=stats,
                )

            if attempt == 0:
                sink.notify_started(run_id)

        logger.warning(f"Run timed out locally. run={run_id} attempts={max_attempts}")
        return TerminalResult(
            status=TerminalStatus.TIMEOUT,
            run_id=run_id,
            error_message=timeout_message(interval, max_attempts),
        )

    def _collect(self, run_id: str, run: dict, stats: Any, credential: str) -> TerminalResult:
        dataset_id = run.get("defaultDatasetId")
        if not dataset_id:
            return self._degraded(run_id, stats, NO_DATASET_MESSAGE)

        res = self.gateway.call(f"/datasets/{dataset_id}/items", credential)
        if not res.success:
            return self._degraded(run_id, stats, res.error_message or "Upstream request failed")

        items = res.data()
        logger.info(f"Run succeeded. run={run_id} items={len(items) if isinstance(items, list) else 'n/a'}")
        return TerminalResult(
            status=TerminalStatus.SUCCEEDED,
            run_id=run_id,
            results=items if isinstance(items, list) else [items],
            stats=stats,
        )

    def _degraded(self, run_id: str, stats: Any, error: str) -> TerminalResult:
        # the run itself succeeded; only retrieval failed
        logger.warning(f"Run succeeded but results could not be fetched. run={run_id} error={error}")
        return TerminalResult(
            status=TerminalStatus.SUCCEEDED,
            run_id=run_id,
            stats=stats,
            error_message=error,
            message=DEGRADED_SUCCESS_MESSAGE,
        )

    def execute(
        self,
        actor_id: str,
        credential: Optional[str],
        input: Optional[dict],
        sink: ProgressSink,
        cancel: Optional[threading.Event] = None,
    ) -> TerminalResult:
        if not credential or not credential.strip():
            raise MissingCredentialError()

        handle = self.submit(actor_id, credential, input)
        result = self.poll_until_terminal(
            handle.actor_id,
            handle.run_id,
            credential,
            sink=sink,
            cancel=cancel,
        )
        sink.complete(result)
        return result
