"""Operation and service models loaded from declarative API descriptions.

These models are immutable. A ``ServiceModel`` is built once per client and
its ``OperationModel`` values are shared read-only by every command that
references them.

The accepted layout follows the botocore model files: a ``metadata`` block,
an ``operations`` table, and optional ``pagination`` and ``waiters`` tables
keyed by operation and waiter name respectively.
"""

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any, Final, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from servicecall.exceptions import ValidationError

logger: Final = logging.getLogger(__name__)


def _as_list(value: str | list[str] | None) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return list(value)


class PaginationConfig(BaseModel):
    """Pagination descriptor of a single operation.

    Attributes:
        input_token: Parameter name(s) that carry the cursor on the next call.
        output_token: Response path(s) holding the next cursor.
        result_key: Response path(s) holding the list of interest.
        limit_key: Parameter name that limits the page size.
        more_results: Response path of a boolean truncation flag.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    input_token: str | list[str] | None = None
    output_token: str | list[str] | None = None
    result_key: str | list[str] | None = None
    limit_key: str | None = None
    more_results: str | None = None

    @property
    def input_tokens(self) -> list[str]:
        return _as_list(self.input_token)

    @property
    def output_tokens(self) -> list[str]:
        return _as_list(self.output_token)

    @property
    def result_keys(self) -> list[str]:
        return _as_list(self.result_key)

    @property
    def is_paginable(self) -> bool:
        """Whether the operation can be paginated at all."""
        return bool(self.output_tokens)

    def merged(self, overrides: Mapping[str, Any] | None) -> "PaginationConfig":
        """Return a copy with call-time overrides applied."""
        if not overrides:
            return self
        return self.model_validate({**self.model_dump(), **dict(overrides)})


class Acceptor(BaseModel):
    """One rule of a waiter's ordered condition list.

    Example:
        >>> Acceptor(state="success", matcher="path", argument="Table.Status", expected="ACTIVE")
    """

    model_config = ConfigDict(frozen=True)

    state: Literal["success", "failure", "retry"]
    matcher: Literal["path", "pathAll", "pathAny", "status", "error"]
    argument: str | None = None
    expected: Any = None

    @field_validator("argument")
    @classmethod
    def validate_argument(cls, v: str | None) -> str | None:
        """Reject empty path expressions."""
        if v is not None and not v.strip():
            raise ValueError("acceptor argument cannot be blank")
        return v


class WaiterConfig(BaseModel):
    """Polling description of a waiter.

    Attributes:
        operation: Operation executed on each attempt.
        delay: Seconds to sleep between attempts.
        max_attempts: Maximum number of attempts before giving up.
        acceptors: Ordered acceptor rules; the first match wins.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    operation: str
    delay: float = Field(default=15.0, ge=0.0)
    max_attempts: int = Field(default=40, ge=1, alias="maxAttempts")
    acceptors: tuple[Acceptor, ...] = ()

    def with_overrides(
        self, delay: float | None = None, max_attempts: int | None = None
    ) -> "WaiterConfig":
        """Return a copy with call-time delay and attempt overrides.

        Args:
            delay: Replacement delay in seconds. Defaults to None (keep).
            max_attempts: Replacement attempt limit. Defaults to None (keep).

        Returns:
            A new, validated WaiterConfig.
        """
        data = self.model_dump()
        if delay is not None:
            data["delay"] = delay
        if max_attempts is not None:
            data["max_attempts"] = max_attempts
        return WaiterConfig.model_validate(data)


class OperationModel(BaseModel):
    """Immutable description of a callable operation."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    http: dict[str, Any] = Field(default_factory=dict)
    input_shape: dict[str, Any] = Field(default_factory=dict, alias="input")
    output_shape: dict[str, Any] = Field(default_factory=dict, alias="output")
    pagination: PaginationConfig | None = None
    waiters: dict[str, WaiterConfig] = Field(default_factory=dict)

    @property
    def required_parameters(self) -> list[str]:
        return list(self.input_shape.get("required", []))

    @property
    def http_method(self) -> str:
        return str(self.http.get("method", "POST"))

    @property
    def request_uri(self) -> str:
        return str(self.http.get("requestUri", "/"))


class ServiceMetadata(BaseModel):
    """Service-wide metadata block of an API model."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    service_full_name: str = Field(default="", alias="serviceFullName")
    endpoint_prefix: str = Field(default="", alias="endpointPrefix")
    signing_name: str | None = Field(default=None, alias="signingName")
    target_prefix: str | None = Field(default=None, alias="targetPrefix")
    json_version: str = Field(default="1.0", alias="jsonVersion")
    api_version: str | None = Field(default=None, alias="apiVersion")
    protocol: str = "json"

    @property
    def signing_service(self) -> str:
        return self.signing_name or self.endpoint_prefix


class ServiceModel:
    """Read-only registry of the operations of one service.

    Example:
        >>> model = ServiceModel.from_file("dynamodb.json")
        >>> model.operation("ListTables").pagination.output_token
        'LastEvaluatedTableName'
    """

    def __init__(
        self, metadata: ServiceMetadata, operations: Mapping[str, OperationModel]
    ) -> None:
        self.metadata = metadata
        self.operations: Mapping[str, OperationModel] = MappingProxyType(dict(operations))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ServiceModel":
        """Build a service model from a botocore-style mapping.

        Args:
            data: Mapping with ``metadata``, ``operations`` and optional
                ``pagination`` and ``waiters`` tables.

        Returns:
            The resolved ServiceModel.

        Raises:
            ValueError: If a paginator or waiter refers to an unknown operation.
        """
        metadata = ServiceMetadata.model_validate(data.get("metadata", {}))
        pagination = data.get("pagination", {})
        waiters_by_operation: dict[str, dict[str, WaiterConfig]] = {}

        for waiter_name, raw in data.get("waiters", {}).items():
            waiter = WaiterConfig.model_validate(raw)
            waiters_by_operation.setdefault(waiter.operation, {})[waiter_name] = waiter

        raw_operations = data.get("operations", {})
        for name in list(pagination) + list(waiters_by_operation):
            if name not in raw_operations:
                raise ValueError(f"Model references unknown operation: {name}")

        operations = {}
        for name, raw in raw_operations.items():
            operations[name] = OperationModel.model_validate(
                {
                    **raw,
                    "name": name,
                    "pagination": pagination.get(name),
                    "waiters": waiters_by_operation.get(name, {}),
                }
            )

        logger.debug(
            f"Loaded model for {metadata.service_full_name or metadata.endpoint_prefix}: "
            f"{len(operations)} operations"
        )
        return cls(metadata, operations)

    @classmethod
    def from_file(cls, path: str | Path) -> "ServiceModel":
        """Load a service model from a JSON file."""
        with Path(path).open(encoding="utf-8") as fh:
            return cls.from_dict(json.load(fh))

    def operation(self, name: str) -> OperationModel:
        """Resolve an operation by name.

        Names are tried as given and then with an upper-cased first letter,
        so ``listTables`` resolves ``ListTables``.

        Raises:
            ValidationError: If no such operation exists.
        """
        if name in self.operations:
            return self.operations[name]
        if name and name[:1].upper() + name[1:] in self.operations:
            return self.operations[name[:1].upper() + name[1:]]
        raise ValidationError(f"Operation not found: {name}")

    def waiter(self, name: str) -> WaiterConfig:
        """Resolve a waiter by name across all operations.

        Raises:
            ValidationError: If no such waiter exists.
        """
        for operation in self.operations.values():
            if name in operation.waiters:
                return operation.waiters[name]
        raise ValidationError(f"Waiter does not exist: {name}")

    @property
    def waiter_names(self) -> list[str]:
        return sorted(name for op in self.operations.values() for name in op.waiters)

    @property
    def service_name(self) -> str:
        return self.metadata.service_full_name or self.metadata.endpoint_prefix
