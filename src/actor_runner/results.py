from enum import Enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


DEGRADED_SUCCESS_MESSAGE = "Run completed successfully but could not fetch results"


class TerminalStatus(str, Enum):
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
    ABORTED = "ABORTED"
    # synthesized locally when the polling budget runs out, never sent by the platform
    TIMEOUT = "TIMEOUT"


class RunHandle(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    run_id: str = Field(..., min_length=1, alias="runId")
    actor_id: str = Field(..., min_length=1, alias="actorId")


class TerminalResult(BaseModel):
    """
    Normalized outcome of one actor run.
    - FAILED / ABORTED / TIMEOUT carry error_message and never results
    - SUCCEEDED carries results, or error_message when the dataset fetch failed (degraded success)
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    status: TerminalStatus
    run_id: str = Field(..., alias="runId")
    results: Optional[list[Any]] = None
    stats: Optional[dict[str, Any]] = None
    error_message: Optional[str] = Field(default=None, alias="error")
    message: Optional[str] = None

    @model_validator(mode="after")
    def _check_shape(self) -> "TerminalResult":
        if self.status is TerminalStatus.SUCCEEDED:
            if self.results is None and self.error_message is None:
                raise ValueError("SUCCEEDED result needs results or an error message")
        else:
            if self.results is not None:
                raise ValueError(f"{self.status.value} result cannot carry results")
            if self.error_message is None:
                raise ValueError(f"{self.status.value} result needs an error message")
        return self

    @property
    def degraded(self) -> bool:
        return self.status is TerminalStatus.SUCCEEDED and self.results is None

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class RunOutcome(BaseModel):
    status: Literal["ok", "failed"]
    result: Optional[TerminalResult] = None

    # failure fields
    error_message: Optional[str] = None
    status_code: Optional[int] = None
