import pytest

from actor_runner.cli import print_summary, read_inputs
from actor_runner.results import RunOutcome, TerminalResult, TerminalStatus


def test_read_inputs_skips_blank_lines(tmp_path):
    path = tmp_path / "inputs.jsonl"
    path.write_text('{"url": "https://a"}\n\n{"url": "https://b", "maxItems": 5}\n', encoding="utf-8")
    assert read_inputs(path) == [{"url": "https://a"}, {"url": "https://b", "maxItems": 5}]


def test_read_inputs_rejects_missing_and_empty_files(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_inputs(tmp_path / "nope.jsonl")

    empty = tmp_path / "empty.jsonl"
    empty.write_text("\n  \n", encoding="utf-8")
    with pytest.raises(ValueError, match="empty"):
        read_inputs(empty)


@pytest.mark.parametrize("line", ["{not json", "[1, 2]"])
def test_read_inputs_rejects_bad_lines(tmp_path, line):
    path = tmp_path / "inputs.jsonl"
    path.write_text(line + "\n", encoding="utf-8")
    with pytest.raises(ValueError, match="Line 1"):
        read_inputs(path)


def test_print_summary_groups_by_status(capsys):
    outcomes = [
        RunOutcome(status="ok", result=TerminalResult(status=TerminalStatus.SUCCEEDED, run_id="r1", results=[])),
        RunOutcome(status="ok", result=TerminalResult(status=TerminalStatus.TIMEOUT, run_id="r2", error_message="t")),
        RunOutcome(status="failed", error_message="Actor was not found", status_code=404),
    ]
    print_summary(outcomes)
    out = capsys.readouterr().out

    assert "Total   : 3" in out
    assert "SUCCEEDED: 1" in out
    assert "TIMEOUT : 1" in out
    assert "Errors  : 1" in out
    assert "- #3 [404] Actor was not found" in out
