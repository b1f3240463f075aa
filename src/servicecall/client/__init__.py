"""Command execution for model-driven service clients.

This package provides:
- The execution pipeline (serialize, sign, send, interpret)
- Realized and deferred result handles
- Collaborator interfaces for serializers, signers and transports
- ``ServiceClient``, the caller-facing surface

Example:
    >>> from servicecall.client import ServiceClient
    >>> client = ServiceClient.from_settings(model)
    >>> output = client.execute(client.build_command("ListTables")).result()
"""

from servicecall.client.client import ServiceClient
from servicecall.client.pipeline import ExecutionPipeline
from servicecall.client.protocols import AsyncTransport, Transport
from servicecall.client.results import (
    ExecutionResult,
    FutureResult,
    RealizedResult,
    ResultState,
)

__all__ = [
    "AsyncTransport",
    "ExecutionPipeline",
    "ExecutionResult",
    "FutureResult",
    "RealizedResult",
    "ResultState",
    "ServiceClient",
    "Transport",
]
