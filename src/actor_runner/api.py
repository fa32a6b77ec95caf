from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel, ConfigDict, Field

from actor_runner.errors import MissingCredentialError, UpstreamError
from actor_runner.gateway import ApifyGateway
from actor_runner.orchestrator import RunOrchestrator
from actor_runner.resolve import resolve_input_schema
from actor_runner.schema import ActorInfo, ActorSummary
from actor_runner.settings import Settings, get_settings
from actor_runner.stream import RunStream

logging.basicConfig(level=get_settings().log_level)
logger = logging.getLogger(__name__)

NDJSON = "application/x-ndjson"

app = FastAPI(
    title="Actor Runner",
    version="0.1.0",
    description="Run platform actors through a single request: list, inspect input schema, execute and wait.",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


class CredentialRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    api_key: Optional[str] = Field(default=None, alias="apiKey", repr=False)


class RunRequest(CredentialRequest):
    input: Optional[dict[str, Any]] = None


def get_gateway(settings: Settings = Depends(get_settings)) -> ApifyGateway:
    return ApifyGateway(settings)


def get_orchestrator(
    settings: Settings = Depends(get_settings),
    gateway: ApifyGateway = Depends(get_gateway),
) -> RunOrchestrator:
    return RunOrchestrator(gateway, settings)


def _require_credential(api_key: Optional[str]) -> str:
    if not api_key or not api_key.strip():
        raise MissingCredentialError()
    return api_key


def _unexpected_shape(what: str) -> UpstreamError:
    return UpstreamError(f"Platform returned an unexpected {what}", status_code=502)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _error_response(exc: BaseException) -> JSONResponse:
    if isinstance(exc, MissingCredentialError):
        return _error(400, exc.message)
    if isinstance(exc, UpstreamError):
        return _error(exc.status_code, exc.message)
    logger.error("Actor request failed", exc_info=exc)
    return _error(500, f"Unexpected error: {exc}")


@app.get("/api/health")
def health() -> dict:
    return {"status": "Server is running"}


@app.post("/api/actors")
def list_actors(req: CredentialRequest, gateway: ApifyGateway = Depends(get_gateway)) -> JSONResponse:
    try:
        res = gateway.call("/acts", _require_credential(req.api_key))
        if not res.success:
            raise UpstreamError(res.error_message or "Upstream request failed", status_code=res.status_code)
        data = res.data()
        if not isinstance(data, dict):
            raise _unexpected_shape("actor list")
        items = data.get("items") or []
        if not isinstance(items, list):
            raise _unexpected_shape("actor list")
        actors = [ActorSummary.from_actor(a).model_dump() for a in items]
        return JSONResponse(content={"actors": actors})
    except Exception as e:
        return _error_response(e)


@app.post("/api/actors/{actor_id}/schema")
def get_schema(actor_id: str, req: CredentialRequest, gateway: ApifyGateway = Depends(get_gateway)) -> JSONResponse:
    try:
        res = gateway.call(f"/acts/{actor_id}", _require_credential(req.api_key))
        if not res.success:
            raise UpstreamError(res.error_message or "Upstream request failed", status_code=res.status_code)
        actor = res.data()
        if not isinstance(actor, dict):
            raise _unexpected_shape("actor record")
        schema = resolve_input_schema(actor)
        return JSONResponse(
            content={
                "schema": schema.to_payload(),
                "actorInfo": ActorInfo.from_actor(actor).model_dump(),
            }
        )
    except Exception as e:
        return _error_response(e)


@app.post("/api/actors/{actor_id}/run")
def execute_run(
    actor_id: str,
    req: RunRequest,
    request: Request,
    orchestrator: RunOrchestrator = Depends(get_orchestrator),
):
    """
    Submit a run and wait for it.
    - finished on the first poll: plain JSON body
    - still running after the first poll: NDJSON, a RUNNING line then the terminal result
    Terminal outcomes (including FAILED / ABORTED / TIMEOUT) are HTTP 200; upstream errors keep their status.
    """
    try:
        credential = _require_credential(req.api_key)
    except MissingCredentialError as e:
        return _error_response(e)

    run = RunStream(orchestrator, actor_id, credential, req.input).start()
    first = run.next_event()

    if first.kind == "error":
        return _error_response(first.error)
    if first.kind == "complete":
        return JSONResponse(content=first.to_payload())

    logger.info(f"Streaming run progress. actor={actor_id} run={first.run_id}")
    return StreamingResponse(run.lines(first, request.is_disconnected), media_type=NDJSON)
