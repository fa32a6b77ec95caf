from pydantic import BaseModel, ConfigDict, Field
from dotenv import load_dotenv
import os

load_dotenv()


def _env(name: str, default: str) -> str:
    return os.getenv(name, default)


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    apify_api_base: str = Field(default_factory=lambda: _env("APIFY_API_BASE", "https://api.apify.com/v2"))
    poll_interval_seconds: float = Field(default_factory=lambda: float(_env("POLL_INTERVAL_SECONDS", "5")), ge=0)
    poll_max_attempts: int = Field(default_factory=lambda: int(_env("POLL_MAX_ATTEMPTS", "60")), ge=1)
    request_timeout_seconds: float = Field(default_factory=lambda: float(_env("REQUEST_TIMEOUT_SECONDS", "30")), gt=0)

    # only the batch CLI reads a token from the environment; the API takes it per request
    apify_token: str | None = Field(default_factory=lambda: os.getenv("APIFY_TOKEN"), repr=False)

    cors_origins: list[str] = Field(
        default_factory=lambda: [o.strip() for o in _env("CORS_ORIGINS", "*").split(",") if o.strip()]
    )
    log_level: str = Field(default_factory=lambda: _env("LOG_LEVEL", "INFO").upper())


def get_settings() -> Settings:
    # re-read env each time (good for tests)
    return Settings()
