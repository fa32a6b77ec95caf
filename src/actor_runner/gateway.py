from __future__ import annotations

import logging
from typing import Any, Optional

import httpx
from pydantic import BaseModel, model_validator

from actor_runner.settings import Settings, get_settings

logger = logging.getLogger(__name__)

DEFAULT_ERROR_STATUS = 500


class ApiResult(BaseModel):
    success: bool
    payload: Any = None
    error_message: Optional[str] = None
    status_code: int

    @model_validator(mode="after")
    def _all_or_nothing(self) -> "ApiResult":
        if self.success and (self.error_message is not None or self.payload is None):
            raise ValueError("Successful result needs a payload and no error message.")
        if not self.success and (self.error_message is None or self.payload is not None):
            raise ValueError("Failed result needs an error message and no payload.")
        return self

    @classmethod
    def ok(cls, payload: Any, status_code: int = 200) -> "ApiResult":
        return cls(success=True, payload=payload, status_code=status_code)

    @classmethod
    def fail(cls, message: str, status_code: int = DEFAULT_ERROR_STATUS) -> "ApiResult":
        return cls(success=False, error_message=message, status_code=status_code)

    def data(self) -> Any:
        """Unwrap the platform's `{"data": ...}` envelope."""
        if isinstance(self.payload, dict) and "data" in self.payload:
            return self.payload["data"]
        return self.payload


def _upstream_message(response: httpx.Response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    error = body.get("error")
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    return None


class ApifyGateway:
    """
    Single outbound call to the platform, normalized into an ApiResult.
    - bearer auth per call; the credential is never logged
    - no retries here (the orchestrator owns that policy)
    """

    def __init__(self, settings: Settings | None = None, transport: httpx.BaseTransport | None = None):
        s = settings or get_settings()
        self.base_url = s.apify_api_base.rstrip("/")
        self.timeout = s.request_timeout_seconds
        self._transport = transport

    def call(
        self,
        endpoint: str,
        credential: str,
        method: str = "GET",
        body: Any = None,
    ) -> ApiResult:
        headers = {
            "Authorization": f"Bearer {credential}",
            "Content-Type": "application/json",
        }

        try:
            with httpx.Client(base_url=self.base_url, timeout=self.timeout, transport=self._transport) as client:
                response = client.request(method, endpoint, headers=headers, json=body)
                response.raise_for_status()
                payload = response.json()

        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            message = _upstream_message(e.response) or str(e)
            logger.warning(f"Platform call failed: {method} {endpoint} -> {status}: {message}")
            return ApiResult.fail(message, status_code=status)

        except httpx.HTTPError as e:
            # connect / read / timeout failures carry no upstream status
            logger.warning(f"Platform call failed: {method} {endpoint} -> transport error: {type(e).__name__}: {e}")
            return ApiResult.fail(str(e) or type(e).__name__)

        except ValueError as e:
            logger.warning(f"Platform call failed: {method} {endpoint} -> undecodable body: {e}")
            return ApiResult.fail(f"Invalid JSON from platform: {e}")

        if payload is None:
            logger.warning(f"Platform call failed: {method} {endpoint} -> empty body")
            return ApiResult.fail("Empty response body from platform")

        logger.debug(f"Platform call ok: {method} {endpoint} -> {response.status_code}")
        return ApiResult.ok(payload, status_code=response.status_code)
