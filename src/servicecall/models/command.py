"""Command model: one bound, executable invocation of an operation."""

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from servicecall.models.operation import OperationModel


class Command(BaseModel):
    """An operation bound to concrete parameters and call options.

    Commands are immutable once built. Deriving a command with other
    parameters (as the paginator and waiter do) creates a new instance.

    Attributes:
        operation_name: Name of the operation to invoke.
        parameters: Call-time parameters.
        is_async: Whether the caller asked for a deferred result.
        model: Shared, read-only operation model.

    Example:
        >>> command = client.build_command("ListTables", {"Limit": 10})
        >>> command.with_parameters({"ExclusiveStartTableName": "t1"}).parameters
        {'Limit': 10, 'ExclusiveStartTableName': 't1'}
    """

    model_config = ConfigDict(frozen=True)

    operation_name: str = Field(..., min_length=1)
    parameters: dict[str, Any] = Field(default_factory=dict)
    is_async: bool = False
    model: OperationModel

    def with_parameters(self, parameters: Mapping[str, Any]) -> "Command":
        """Return a new command with ``parameters`` merged over the current ones."""
        return self.model_copy(update={"parameters": {**self.parameters, **parameters}})

    def as_async(self, is_async: bool = True) -> "Command":
        """Return a copy of this command with the async flag set."""
        if self.is_async == is_async:
            return self
        return self.model_copy(update={"is_async": is_async})
