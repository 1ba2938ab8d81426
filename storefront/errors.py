"""Error taxonomy for the data access layer."""
from typing import Any, Dict, Optional


class ApiError(Exception):
    """Structured API failure carrying a status code, message and payload."""

    status: int = 0

    def __init__(self, message: str, status: Optional[int] = None, data: Any = None):
        super().__init__(message)
        if status is not None:
            self.status = status
        self.message = message
        self.data = data

    def to_dict(self) -> Dict[str, Any]:
        return {"status": self.status, "message": self.message, "data": self.data}

    def __repr__(self):
        return f"<{type(self).__name__}(status={self.status}, message='{self.message}')>"


class NetworkError(ApiError):
    """The request never produced an HTTP response."""

    status = 0

    def __init__(self, message: str = "Network error", data: Any = None):
        super().__init__(message, data=data)


class RequestTimeoutError(ApiError):
    """The request exceeded its client-side timeout."""

    status = 408

    def __init__(self, message: str = "Request timeout", data: Any = None):
        super().__init__(message, data=data)


class HttpError(ApiError):
    """The server answered with a status >= 400."""

    def __init__(self, status: int, message: str, data: Any = None):
        super().__init__(message, status=status, data=data)

    @property
    def retryable(self) -> bool:
        return self.status >= 500


class NotFoundError(ApiError):
    """A domain lookup (product by id or slug) found nothing."""

    status = 404

    def __init__(self, message: str = "Not found", data: Any = None):
        super().__init__(message, data=data)
