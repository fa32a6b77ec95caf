import pytest
from pydantic import ValidationError

from actor_runner.results import RunHandle, TerminalResult, TerminalStatus


def test_payload_uses_wire_names_and_drops_empty_fields():
    result = TerminalResult(status=TerminalStatus.FAILED, run_id="run1", error_message="bad input")
    assert result.to_payload() == {"status": "FAILED", "runId": "run1", "error": "bad input"}


def test_failed_result_cannot_carry_results():
    with pytest.raises(ValidationError):
        TerminalResult(status=TerminalStatus.FAILED, run_id="run1", results=[], error_message="x")


def test_timeout_result_needs_error_message():
    with pytest.raises(ValidationError):
        TerminalResult(status=TerminalStatus.TIMEOUT, run_id="run1")


def test_succeeded_needs_results_or_error():
    with pytest.raises(ValidationError):
        TerminalResult(status=TerminalStatus.SUCCEEDED, run_id="run1")
    assert TerminalResult(status=TerminalStatus.SUCCEEDED, run_id="run1", results=[]).degraded is False


def test_run_handle_is_immutable():
    handle = RunHandle(run_id="run1", actor_id="act1")
    with pytest.raises(ValidationError):
        handle.run_id = "run2"


def test_run_handle_requires_run_id():
    with pytest.raises(ValidationError):
        RunHandle(run_id="", actor_id="act1")
