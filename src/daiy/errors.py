"""Error taxonomy shared by the server, the orchestrator and the client.

Each error carries the HTTP status it maps to when it escapes before the
event stream has started. Once streaming has begun, failures are surfaced
as a single terminal error event instead.
"""


class DaiyError(Exception):
    """Base class for all DAIY errors."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BadRequest(DaiyError):
    """The request cannot be served (empty messages, unknown provider)."""

    status_code = 400


class UnknownProvider(BadRequest):
    """A provider identifier outside the supported set was requested."""

    def __init__(self, provider: str):
        super().__init__(f"Unknown provider: {provider}")
        self.provider = provider


class MissingCredential(BadRequest):
    """No API key is available for the provider serving the model."""

    def __init__(self, provider: str):
        super().__init__(
            f"No API key available for {provider}. Please add one in Settings."
        )
        self.provider = provider


class UpstreamFailure(DaiyError):
    """A provider call failed during one of the passes."""

    status_code = 502

    def __init__(self, message: str, stage: str | None = None):
        super().__init__(message)
        self.stage = stage


class StreamCancelled(DaiyError):
    """The consumer went away; remaining passes were abandoned."""

    status_code = 499
