"""OpenAI-shaped error types returned by the mock API."""

from __future__ import annotations

from typing import Any, Dict, Optional


class MockAPIError(Exception):
    """Base class for errors rendered as ``{"error": {...}}`` envelopes."""

    status_code: int = 500
    error_type: str = "server_error"

    def __init__(
        self,
        message: str,
        *,
        param: Optional[str] = None,
        code: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.param = param
        self.code = code

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": {
                "message": self.message,
                "type": self.error_type,
                "param": self.param,
                "code": self.code,
            }
        }


class InvalidRequestError(MockAPIError):
    """Raised when a request body violates an endpoint's parameter contract."""

    status_code = 400
    error_type = "invalid_request_error"


class AuthenticationError(MockAPIError):
    status_code = 401
    error_type = "invalid_request_error"


class NotFoundError(MockAPIError):
    status_code = 404
    error_type = "invalid_request_error"


class MethodNotAllowedError(MockAPIError):
    status_code = 405
    error_type = "invalid_request_error"


class InternalServerError(MockAPIError):
    """Generic failure; the message never carries internal detail."""

    status_code = 500
    error_type = "server_error"

    def __init__(self, message: str = "The server had an error while processing your request.") -> None:
        super().__init__(message)


class RequestTimeoutError(MockAPIError):
    status_code = 504
    error_type = "server_error"

    def __init__(self, message: str = "Request timed out.") -> None:
        super().__init__(message, code="timeout")
