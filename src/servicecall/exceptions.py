"""Exceptions raised by the command execution pipeline.

Every failure that leaves the pipeline is an ``AwsError`` (or a subclass),
so callers only ever need to catch one kind. The subclasses classify where
the failure happened so that callers can decide whether a retry makes sense.
"""

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from servicecall.models.command import Command


class AwsError(Exception):
    """Base exception for every failure surfaced by a service client.

    Attributes:
        message: Human-readable error message.
        service_code: Error code reported by the service (e.g. 'ThrottlingException').
        service_type: Error type reported by the service ('client' or 'server').
        cause: The underlying exception, if any.
        command: Command that was being executed. Diagnostic back-reference only.
        status_code: HTTP status code of the failed response, if one was received.
        request_id: Request ID reported by the service, if any.
        details: Additional error context as dictionary.
    """

    def __init__(
        self,
        message: str,
        service_code: str | None = None,
        service_type: str | None = None,
        cause: BaseException | None = None,
        command: "Command | None" = None,
        status_code: int | None = None,
        request_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the error with its diagnostic context.

        Args:
            message: Human-readable error message.
            service_code: Service error code. Defaults to None.
            service_type: Service error type. Defaults to None.
            cause: Underlying exception. Defaults to None.
            command: Command being executed. Defaults to None.
            status_code: HTTP status code. Defaults to None.
            request_id: Service request ID. Defaults to None.
            details: Additional error context. Defaults to None.
        """
        super().__init__(message)
        self.message = message
        self.service_code = service_code
        self.service_type = service_type
        self.cause = cause
        self.command = command
        self.status_code = status_code
        self.request_id = request_id
        self.details = details or {}

    @property
    def operation(self) -> str | None:
        """Name of the operation that failed, if known."""
        return self.command.operation_name if self.command is not None else None

    def __str__(self) -> str:
        """Return formatted error string with context."""
        parts = [self.message]
        if self.operation:
            parts.append(f"Operation: {self.operation}")
        if self.service_code:
            parts.append(f"Code: {self.service_code}")
        if self.request_id:
            parts.append(f"RequestId: {self.request_id}")
        return " | ".join(parts)


class ValidationError(AwsError):
    """Raised for malformed parameters or an unknown operation name.

    The request never leaves the process.
    """


class SigningError(AwsError):
    """Raised when credentials cannot be resolved or the request cannot be signed.

    Nothing is sent to the transport when this is raised.
    """


class TransportError(AwsError):
    """Raised for network or timeout failures without a service response.

    The request may or may not have reached the remote side.
    """


class ServiceError(AwsError):
    """Raised when the remote side answered with a failure response."""


class PaginationConfigError(AwsError):
    """Raised when paginating an operation whose model has no pagination metadata."""


class WaitFailure(AwsError):
    """Raised when a waiter reaches its failure state.

    Attributes:
        reason: One of 'failure_acceptor', 'max_attempts_exceeded' or 'cancelled'.
        attempts: Number of attempts that were performed.
        last_result: Output of the last successful attempt, if any.
    """

    FAILURE_ACCEPTOR = "failure_acceptor"
    MAX_ATTEMPTS_EXCEEDED = "max_attempts_exceeded"
    CANCELLED = "cancelled"

    def __init__(
        self,
        message: str,
        reason: str,
        attempts: int = 0,
        last_result: dict[str, Any] | None = None,
        cause: BaseException | None = None,
        command: "Command | None" = None,
    ) -> None:
        super().__init__(message, cause=cause, command=command)
        self.reason = reason
        self.attempts = attempts
        self.last_result = last_result
