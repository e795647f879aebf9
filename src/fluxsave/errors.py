"""Exceptions raised by the Fluxsave SDK."""

from __future__ import annotations

from typing import Any, Optional


class FluxsaveError(Exception):
    """Base error carrying the HTTP status, a message and the decoded payload, if any."""

    def __init__(self, message: str, status: int, data: Optional[Any] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.data = data

    def __repr__(self) -> str:
        return f"{type(self).__name__}(status={self.status}, message={self.message!r})"


class AuthenticationRequiredError(FluxsaveError):
    """Raised before any network call when the key or secret is missing."""

    def __init__(self, message: str = "API key and secret are required") -> None:
        super().__init__(message, 401)


class RequestTimeoutError(FluxsaveError):
    """Raised once every attempt has run past the configured timeout."""

    def __init__(self, message: str = "Request timed out") -> None:
        super().__init__(message, 408)


class APIStatusError(FluxsaveError):
    """Non-2xx response from the server."""


__all__ = [
    "FluxsaveError",
    "AuthenticationRequiredError",
    "RequestTimeoutError",
    "APIStatusError",
]
