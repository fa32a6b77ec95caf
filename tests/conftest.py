import pytest

from actor_runner.gateway import ApiResult
from actor_runner.settings import Settings


@pytest.fixture(autouse=True)
def pin_environment(monkeypatch):
    monkeypatch.setenv("APIFY_API_BASE", "https://api.test/v2")
    monkeypatch.setenv("POLL_INTERVAL_SECONDS", "0")
    monkeypatch.setenv("POLL_MAX_ATTEMPTS", "60")
    monkeypatch.delenv("APIFY_TOKEN", raising=False)


class ScriptedGateway:
    """Replays canned ApiResults per endpoint; the last entry repeats."""

    def __init__(self, routes: dict[str, list[ApiResult]]):
        self.routes = {k: list(v) for k, v in routes.items()}
        self.calls: list[tuple[str, str, object]] = []

    def call(self, endpoint, credential, method="GET", body=None):
        self.calls.append((method, endpoint, body))
        script = self.routes[endpoint]
        return script.pop(0) if len(script) > 1 else script[0]

    def count(self, endpoint: str) -> int:
        return sum(1 for _, e, _ in self.calls if e == endpoint)


def run_status(status, **extra) -> ApiResult:
    return ApiResult.ok({"data": {"id": "run1", "status": status, "defaultDatasetId": "ds1", **extra}})


@pytest.fixture
def settings() -> Settings:
    return Settings(poll_interval_seconds=5, poll_max_attempts=60)

