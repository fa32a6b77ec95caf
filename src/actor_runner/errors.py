class ActorRunnerError(Exception):
    """Base exception for actor runner failures."""


class MissingCredentialError(ActorRunnerError, ValueError):
    def __init__(self, message: str = "API key is required"):
        super().__init__(message)
        self.message = message


class UpstreamError(ActorRunnerError):
    """The platform rejected a call or could not be reached. Carries its status unchanged."""

    def __init__(self, message: str, *, status_code: int = 500):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class RunCancelled(ActorRunnerError):
    def __init__(self, run_id: str):
        super().__init__(f"Polling cancelled for run {run_id}")
        self.run_id = run_id
