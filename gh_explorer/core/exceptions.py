# gh_explorer/core/exceptions.py - Custom exception hierarchy
from typing import Any


class GHExplorerException(Exception):  # noqa: N818
    """Base exception for gh-explorer"""

    # Whether a fresh attempt of the same remote call could succeed
    retryable = True

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API responses"""
        return {"error": self.__class__.__name__, "message": self.message, "details": self.details}


class InvalidResponseData(GHExplorerException):  # noqa: N818
    """Response body has no usable repositories"""

    retryable = False

    def __init__(
        self,
        message: str = "Invalid repository data received",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)


class HttpError(GHExplorerException):  # noqa: N818
    """Non-2xx, non-304 response from the remote API"""

    def __init__(self, status: int, details: dict[str, Any] | None = None):
        self.status = status
        super().__init__(f"HTTP error! status: {status}", {"status": status, **(details or {})})


class RequestTimedOut(GHExplorerException):  # noqa: N818
    """A single attempt exceeded its timeout budget"""

    retryable = False

    def __init__(self, message: str = "Request timed out", details: dict[str, Any] | None = None):
        super().__init__(message, details)


class RateLimitExhausted(GHExplorerException):  # noqa: N818
    """Remote quota is used up until the reset time"""

    retryable = False

    def __init__(self, reset: int, message: str | None = None):
        self.reset = reset
        super().__init__(message or "Rate limit exceeded", {"reset": reset})


class StorageError(GHExplorerException):  # noqa: N818
    """Persistent store transaction failed"""

    retryable = False


class NetworkError(GHExplorerException):  # noqa: N818
    """Transport-level failure talking to the remote API"""

    pass


class ConnectivityError(GHExplorerException):  # noqa: N818
    """Fetch attempted while the client is offline"""

    retryable = False


class ConfigurationError(GHExplorerException):  # noqa: N818
    """Configuration errors"""

    retryable = False


# HTTP Status Code mapping
EXCEPTION_STATUS_CODE_MAP = {
    InvalidResponseData: 502,
    HttpError: 502,
    RequestTimedOut: 504,
    RateLimitExhausted: 429,
    StorageError: 500,
    NetworkError: 503,
    ConnectivityError: 503,
    ConfigurationError: 500,
    GHExplorerException: 500,  # Default
}


def get_status_code(exception: GHExplorerException) -> int:
    """Get HTTP status code for exception"""
    return EXCEPTION_STATUS_CODE_MAP.get(type(exception), 500)


def is_retryable(exception: BaseException) -> bool:
    """Check whether a failed attempt is worth repeating"""
    if isinstance(exception, GHExplorerException):
        return exception.retryable
    return isinstance(exception, Exception)
