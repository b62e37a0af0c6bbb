"""Error taxonomy for a single ask: config → submit → poll."""


class AskImgError(Exception):
    """Base class for every failure surfaced by askimg."""


class InvalidConfigError(AskImgError, ValueError):
    """Missing token/image or an option that cannot be parsed. Raised before any request."""


class _HTTPPhaseError(AskImgError):

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class SubmissionError(_HTTPPhaseError):
    """The initial POST failed: transport, non-2xx or undecodable body."""


class PollError(_HTTPPhaseError):
    """A GET of the prediction failed. Aborts the whole ask, no retry."""


class DeadlineExceededError(AskImgError, TimeoutError):
    """The configured overall timeout expired before the prediction completed."""
