from typing import Any


class SkydockError(Exception):
    """Base class for every error raised by skydock."""


class ValidationError(SkydockError, ValueError):
    """A required parameter is missing, malformed or not recognized."""


class ClientConnectionError(SkydockError):
    """The control-plane clients could not be constructed."""


class OperationError(SkydockError):
    """
    Base for errors tied to a long-running operation.
    `operation` is the last known operation document.
    """

    def __init__(self, message: str, operation: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.operation = operation or {}

    @property
    def operation_name(self) -> str | None:
        return self.operation.get("name")


class OperationFetchError(OperationError):
    """Fetching the operation status failed. Never retried."""


class OperationFailed(OperationError):
    """The control plane reported the operation as failed."""

    @property
    def error(self) -> dict[str, Any] | None:
        return self.operation.get("error") or None


class OperationWaitAbandoned(OperationError):
    """The wait deadline expired while the operation was still in flight."""
