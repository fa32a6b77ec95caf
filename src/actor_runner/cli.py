import argparse
import json
from collections import Counter
from pathlib import Path
from typing import List

from actor_runner.errors import MissingCredentialError
from actor_runner.flow import actor_batch_flow
from actor_runner.results import RunOutcome
from actor_runner.settings import get_settings


def read_inputs(path: Path) -> List[dict]:
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")

    inputs: List[dict] = []
    for lineno, line in enumerate(path.read_text(encoding="utf-8").splitlines(), 1):
        if not line.strip():
            continue
        try:
            item = json.loads(line)
        except json.JSONDecodeError as e:
            raise ValueError(f"Line {lineno} is not valid JSON: {e}") from e
        if not isinstance(item, dict):
            raise ValueError(f"Line {lineno} must be a JSON object.")
        inputs.append(item)

    if not inputs:
        raise ValueError("Input file is empty.")

    return inputs


def print_summary(outcomes: List[RunOutcome]) -> None:
    ok = [o for o in outcomes if isinstance(o, RunOutcome) and o.status == "ok"]
    failed = len(outcomes) - len(ok)
    by_status = Counter(o.result.status.value for o in ok if o.result is not None)

    print("\nBatch Summary")
    print("=" * 40)
    print(f"Total   : {len(outcomes)}")
    for status, count in sorted(by_status.items()):
        print(f"{status:<8}: {count}")
    print(f"Errors  : {failed}")
    print()

    if failed:
        print("Errors:")
        for i, o in enumerate(outcomes, 1):
            if not isinstance(o, RunOutcome):
                print(f"- #{i} crashed: {o}")
            elif o.status == "failed":
                print(f"- #{i} [{o.status_code or '-'}] {o.error_message}")
        print()


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Run one actor over a batch of inputs and wait for every run"
    )
    parser.add_argument("actor_id", help="Actor id or username~name")
    parser.add_argument(
        "input_file",
        type=Path,
        help="Path to inputs.jsonl (one JSON input object per line)",
    )

    args = parser.parse_args()

    if not get_settings().apify_token:
        raise MissingCredentialError("APIFY_TOKEN is required")

    inputs = read_inputs(args.input_file)
    outcomes = actor_batch_flow(args.actor_id, inputs)

    print_summary(outcomes)


if __name__ == "__main__":
    main()
