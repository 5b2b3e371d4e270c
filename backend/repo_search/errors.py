from typing import List, Optional

DEFAULT_RETRY_AFTER_SECONDS = 60


class SearchError(Exception):
    """Base class for every failure a single search call can end with."""

    status_code: int = 500
    retryable: bool = False

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[List[str]] = None,
        retry_after_seconds: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details
        self.retry_after_seconds = retry_after_seconds


class InvalidParameters(SearchError):
    status_code = 400

    def __init__(self, details: List[str]):
        super().__init__("Invalid search parameters", details=details)


class EmptyQuery(SearchError):
    status_code = 400

    def __init__(self, message: str = "Search query is required"):
        super().__init__(message)


class TransportUnavailable(SearchError):
    status_code = 502
    retryable = True

    def __init__(self, message: str = "Unable to reach GitHub right now."):
        super().__init__(message)


class RateLimited(SearchError):
    status_code = 429

    def __init__(
        self,
        retry_after_seconds: int = DEFAULT_RETRY_AFTER_SECONDS,
        reset_at_epoch: Optional[int] = None,
    ):
        super().__init__(
            "GitHub rate limit hit. Please retry after cooldown.",
            retry_after_seconds=retry_after_seconds,
        )
        self.reset_at_epoch = reset_at_epoch


class UpstreamRejected(SearchError):
    def __init__(self, status_code: int, message: str, details: Optional[List[str]] = None):
        super().__init__(message, status_code=status_code, details=details)

    @property
    def retryable(self) -> bool:  # type: ignore[override]
        return self.status_code >= 500


class MalformedUpstreamResponse(SearchError):
    status_code = 502
    retryable = True

    def __init__(self, message: str = "Unexpected data from GitHub."):
        super().__init__(message)


RATE_LIMIT_GUIDANCE = (
    "GitHub limits unauthenticated search requests. "
    "Configure GITHUB_TOKEN to raise the allowance for authenticated requests."
)


def describe_error(exc: BaseException) -> str:
    """Human-readable message for any error a search can raise."""
    if isinstance(exc, RateLimited):
        wait = f" Try again in {exc.retry_after_seconds}s." if exc.retry_after_seconds else ""
        return f"GitHub rate limit reached.{wait} {RATE_LIMIT_GUIDANCE}"
    if isinstance(exc, UpstreamRejected) and exc.status_code == 403:
        return f"GitHub refused the request ({exc.message}). {RATE_LIMIT_GUIDANCE}"
    if isinstance(exc, InvalidParameters):
        return "Invalid search parameters: " + "; ".join(exc.details or [])
    if isinstance(exc, EmptyQuery):
        return "Type something to search for."
    if isinstance(exc, TransportUnavailable):
        return "Could not reach GitHub. Check your connection and try again."
    if isinstance(exc, MalformedUpstreamResponse):
        return "GitHub sent a response we could not understand."
    if isinstance(exc, UpstreamRejected):
        return f"GitHub search failed ({exc.status_code}): {exc.message}"
    return "Something went wrong while searching GitHub."
