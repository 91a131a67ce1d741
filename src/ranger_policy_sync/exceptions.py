"""Custom exceptions for Ranger policy reconciliation."""

from __future__ import annotations


class RangerPolicyError(Exception):
    """Base exception for all Ranger policy reconciliation errors."""


class ConfigurationError(RangerPolicyError):
    """Exception raised for configuration related errors."""


class ValidationError(RangerPolicyError):
    """Exception raised for locally detectable bad input."""


class ReplacementRequiredError(ValidationError):
    """Exception raised when a change can only be applied by recreating the policy."""


class PolicyNotFoundError(RangerPolicyError):
    """Exception raised when the remote policy does not exist."""


class RangerAPIError(RangerPolicyError):
    """Exception raised when Ranger rejects a request with a non-success status."""

    def __init__(self, status_code: int, body: str = "") -> None:
        self.status_code = status_code
        self.body = body
        message = f"API returned unexpected status code: {status_code}"
        if body:
            message = f"{message}: {body[:200]}"
        super().__init__(message)


class RangerUnreachableError(RangerPolicyError):
    """Exception raised when unable to connect to Ranger."""


class ResponseDecodeError(RangerPolicyError):
    """Exception raised when a response body does not decode as the expected shape."""


class ReconcileError(RangerPolicyError):
    """Exception raised when a reconciliation operation fails.

    Attributes:
        operation: Lifecycle operation that failed (create, read, update, ...).
        summary: Short human-readable headline for the failure.
        cause: The underlying gateway or validation error.
    """

    def __init__(self, operation: str, summary: str, cause: Exception) -> None:
        self.operation = operation
        self.summary = summary
        self.cause = cause
        super().__init__(f"{summary}: {cause}")
