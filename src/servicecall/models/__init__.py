"""Data models for service descriptions and commands."""

from servicecall.models.command import Command
from servicecall.models.operation import (
    Acceptor,
    OperationModel,
    PaginationConfig,
    ServiceMetadata,
    ServiceModel,
    WaiterConfig,
)

__all__ = [
    "Acceptor",
    "Command",
    "OperationModel",
    "PaginationConfig",
    "ServiceMetadata",
    "ServiceModel",
    "WaiterConfig",
]
