"""servicecall - generic, model-driven client for remote service operations.

This package turns a declarative API model and call-time parameters into
signed requests, executes them synchronously or asynchronously, and builds
paginated iteration and waiters on top of single-call execution.
"""

from servicecall.client import ExecutionPipeline, ExecutionResult, ServiceClient
from servicecall.exceptions import (
    AwsError,
    PaginationConfigError,
    ServiceError,
    SigningError,
    TransportError,
    ValidationError,
    WaitFailure,
)
from servicecall.models import Command, ServiceModel
from servicecall.version import __version__

__all__ = [
    "AwsError",
    "Command",
    "ExecutionPipeline",
    "ExecutionResult",
    "PaginationConfigError",
    "ServiceClient",
    "ServiceError",
    "ServiceModel",
    "SigningError",
    "TransportError",
    "ValidationError",
    "WaitFailure",
    "__version__",
]
