from prefect import flow, task, get_run_logger, unmapped

from actor_runner.errors import ActorRunnerError, UpstreamError
from actor_runner.orchestrator import RunOrchestrator
from actor_runner.results import RunOutcome
from actor_runner.settings import get_settings
from actor_runner.sink import RecordingSink


@task(retries=0)  # IMPORTANT: no Prefect retries; a failed submit or poll is final
def t_run_one(actor_id: str, input: dict) -> RunOutcome:
    """
    Best-effort wrapper:
    - never raises for platform failures; returns a failed outcome instead
    - terminal business outcomes (FAILED / ABORTED / TIMEOUT) are "ok" outcomes carrying the result
    """
    logger = get_run_logger()
    s = get_settings()
    sink = RecordingSink()

    try:
        result = RunOrchestrator(settings=s).execute(actor_id, s.apify_token, input, sink)
        logger.info(f"Run finished. run={result.run_id} status={result.status.value}")
        return RunOutcome(status="ok", result=result)

    except UpstreamError as e:
        logger.error(f"Run failed upstream. status_code={e.status_code} error={e.message}")
        return RunOutcome(status="failed", error_message=e.message, status_code=e.status_code)

    except ActorRunnerError as e:
        logger.error(f"Run failed: {e}")
        return RunOutcome(status="failed", error_message=str(e))


@flow(name="actor-run-batch", retries=0)
def actor_batch_flow(actor_id: str, inputs: list[dict]) -> list[RunOutcome]:
    logger = get_run_logger()
    logger.info(f"Starting batch actor flow. actor={actor_id} count={len(inputs)}")

    futures = t_run_one.map(unmapped(actor_id), inputs)
    # Resolve to actual values (not State objects)
    outcomes: list[RunOutcome] = [f.result(raise_on_failure=False) for f in futures]

    ok = sum(1 for o in outcomes if isinstance(o, RunOutcome) and o.status == "ok")
    logger.info(f"Batch complete. ok={ok} failed={len(outcomes) - ok}")
    return outcomes
