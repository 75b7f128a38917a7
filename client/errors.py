"""Exceptions raised by the funding client.

Two kinds of failure exist: a request the server rejected or never
answered (ApiRequestError and subclasses), and a form that failed local
validation before anything was sent (FormValidationError).
"""

from typing import Any, Optional


class FundingClientError(Exception):
    """Base class for every error raised by this package."""


class ApiRequestError(FundingClientError):
    """A request reached the network layer and failed.

    Attributes:
        status_code: HTTP status, or None for connection errors and timeouts
        message: Human-readable message extracted from the response body
        payload: Decoded response body, if any
    """

    def __init__(self, message: str, status_code: Optional[int] = None,
                 payload: Any = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    def __str__(self) -> str:
        if self.status_code is None:
            return self.message
        return f"{self.message} (HTTP {self.status_code})"


class AuthenticationError(ApiRequestError):
    """The server answered 401; the client's token has been cleared."""


class FormValidationError(FundingClientError):
    """Local validation failed; carries the ValidationResult."""

    def __init__(self, result: Any):
        self.result = result
        super().__init__(result.first_error() or "Validation failed")


def raise_for_result(result: Any) -> None:
    """Raise FormValidationError if *result* holds any error-level issue."""
    if not result.is_valid():
        raise FormValidationError(result)


def extract_error_message(payload: Any, fallback: str = "Request failed") -> str:
    """Pull a readable message out of an error response body.

    Tries ``message``, ``detail`` (a string, or a list of validation errors
    with ``msg``), ``error``, then *fallback*.

    Examples:
        extract_error_message({"message": "Project not found"}) -> "Project not found"
        extract_error_message({"detail": [{"msg": "field required"}]}) -> "field required"
        extract_error_message(None, "Failed to save draft") -> "Failed to save draft"
    """
    if isinstance(payload, str) and payload.strip():
        return payload.strip()
    if not isinstance(payload, dict):
        return fallback

    for key in ("message", "detail", "error"):
        value = payload.get(key)
        if isinstance(value, str) and value.strip():
            return value
        if isinstance(value, list) and value:
            first = value[0]
            if isinstance(first, dict) and first.get("msg"):
                return str(first["msg"])
            if isinstance(first, str):
                return first
        if isinstance(value, dict) and value.get("message"):
            return str(value["message"])
    return fallback
