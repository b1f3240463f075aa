"""Service client: command building, execution, pagination and waiters.

A ``ServiceClient`` binds a ``ServiceModel`` to an ``ExecutionPipeline``.
Operations are resolved once from the model's read-only registry and the
resolved ``OperationModel`` is passed by reference into every command.
"""

import logging
from collections.abc import Callable, Mapping
from typing import Any, Final

from servicecall.aws import (
    JsonRpcSerializer,
    SessionCredentialsProvider,
    SigV4Signer,
    URLLib3Transport,
    parse_json_error,
    parse_json_response,
)
from servicecall.client.pipeline import ExecutionPipeline
from servicecall.client.protocols import CredentialsProvider
from servicecall.client.results import ExecutionResult
from servicecall.config.settings import Settings, get_settings
from servicecall.constants import FUTURE_PARAMETER
from servicecall.exceptions import PaginationConfigError, ServiceError, ValidationError
from servicecall.models.command import Command
from servicecall.models.operation import PaginationConfig, ServiceModel, WaiterConfig
from servicecall.paginate.paginator import ResourceIterator, ResultPaginator
from servicecall.waiter.waiter import ResourceWaiter, Waiter

logger: Final = logging.getLogger(__name__)


class ServiceClient:
    """Generic, model-driven client for one service.

    Example:
        >>> client = ServiceClient.from_settings(ServiceModel.from_file("dynamodb.json"))
        >>> client.execute(client.build_command("ListTables")).result()
        >>> for name in client.iterate("ListTables"):
        ...     print(name)
        >>> client.wait("TableExists", parameters={"TableName": "orders"})
    """

    def __init__(
        self,
        model: ServiceModel,
        pipeline: ExecutionPipeline,
        defaults: Mapping[str, Any] | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            model: Service model providing the operation registry.
            pipeline: Execution pipeline used for every command.
            defaults: Parameters merged under every command's parameters.
                Defaults to None.
            settings: Settings providing waiter overrides. Defaults to get_settings().
        """
        self.model = model
        self.pipeline = pipeline
        self.defaults = dict(defaults or {})
        self.settings = settings or get_settings()
        logger.info(f"Initialized client for {self.service_name}")

    @classmethod
    def from_settings(
        cls,
        model: ServiceModel,
        settings: Settings | None = None,
        credentials_provider: CredentialsProvider | None = None,
        defaults: Mapping[str, Any] | None = None,
        exception_class: type[ServiceError] = ServiceError,
    ) -> "ServiceClient":
        """Assemble a client from the default botocore-backed collaborators.

        Args:
            model: Service model.
            settings: Client settings. Defaults to get_settings().
            credentials_provider: Credentials source. Defaults to the boto3
                chain for ``settings.profile``.
            defaults: Default command parameters. Defaults to None.
            exception_class: ServiceError subclass for service failures.
                Defaults to ServiceError.

        Returns:
            A ready-to-use ServiceClient.
        """
        settings = settings or get_settings()
        metadata = model.metadata
        pipeline = ExecutionPipeline(
            serializer=JsonRpcSerializer(metadata, settings.endpoint_for(metadata.endpoint_prefix)),
            signer=SigV4Signer(metadata.signing_service, settings.region),
            transport=URLLib3Transport(settings),
            credentials_provider=credentials_provider
            or SessionCredentialsProvider(profile=settings.profile),
            error_parser=parse_json_error,
            response_parser=parse_json_response,
            exception_class=exception_class,
            client_name=model.service_name or cls.__name__,
        )
        return cls(model, pipeline, defaults=defaults, settings=settings)

    @property
    def service_name(self) -> str:
        return self.model.service_name

    @property
    def supports_async(self) -> bool:
        return self.pipeline.supports_async

    # =========================================================================
    # Commands
    # =========================================================================

    def build_command(
        self,
        operation_name: str,
        parameters: Mapping[str, Any] | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> Command:
        """Bind an operation to parameters and call options.

        Client defaults are merged under ``parameters``. A ``@future`` key in
        ``parameters``, or ``options["future"]``, requests a deferred result.

        Raises:
            ValidationError: If the operation does not exist.
        """
        operation = self.model.operation(operation_name)
        params = {**self.defaults, **dict(parameters or {})}
        is_async = bool(params.pop(FUTURE_PARAMETER, False))
        if options is not None:
            is_async = bool(options.get("future", is_async))

        return Command(
            operation_name=operation.name,
            parameters=params,
            is_async=is_async,
            model=operation,
        )

    def execute(self, command: Command) -> ExecutionResult:
        """Execute a command through the pipeline. See ``ExecutionPipeline.execute``."""
        return self.pipeline.execute(command)

    async def execute_async(self, command: Command) -> dict[str, Any]:
        """Execute a command without blocking the running event loop."""
        return await self.pipeline.execute_async(command)

    async def call(self, operation_name: str, **parameters: Any) -> dict[str, Any]:
        """Build and execute an operation, returning its output.

        Example:
            >>> output = await client.call("DescribeTable", TableName="orders")
        """
        return await self.execute_async(self.build_command(operation_name, parameters))

    # =========================================================================
    # Pagination
    # =========================================================================

    def get_paginator(
        self,
        operation_name: str,
        parameters: Mapping[str, Any] | None = None,
        config: Mapping[str, Any] | None = None,
        page_size: int | None = None,
    ) -> ResultPaginator:
        """Create a page iterator for an operation.

        Raises:
            ValidationError: If the operation does not exist.
            PaginationConfigError: If the operation cannot be paginated.
        """
        operation = self.model.operation(operation_name)
        return ResultPaginator(
            self,
            operation.name,
            dict(parameters or {}),
            self._pagination_config(operation.name, operation.pagination, config),
            page_size=page_size,
        )

    def paginate(
        self, operation_name: str, parameters: Mapping[str, Any] | None = None
    ) -> ResultPaginator:
        """Return the lazy sequence of result pages of an operation."""
        return self.get_paginator(operation_name, parameters)

    def get_iterator(
        self,
        operation_name: str,
        parameters: Mapping[str, Any] | None = None,
        config: Mapping[str, Any] | None = None,
        max_items: int | None = None,
    ) -> ResourceIterator:
        """Create an element iterator that flattens the operation's result key.

        Raises:
            ValidationError: If the operation does not exist.
            PaginationConfigError: If the operation cannot be paginated or has
                no result key.
        """
        return ResourceIterator(
            self.get_paginator(operation_name, parameters, config),
            max_items=max_items,
        )

    def iterate(
        self, operation_name: str, parameters: Mapping[str, Any] | None = None
    ) -> ResourceIterator:
        """Return the lazy sequence of result elements of an operation."""
        return self.get_iterator(operation_name, parameters)

    # =========================================================================
    # Waiters
    # =========================================================================

    def get_waiter(
        self,
        waiter_name: str,
        parameters: Mapping[str, Any] | None = None,
        config: Mapping[str, Any] | None = None,
        operation_name: str | None = None,
    ) -> ResourceWaiter:
        """Create a waiter declared by the model.

        Args:
            waiter_name: Name of the waiter.
            parameters: Parameters of the polled operation. Defaults to None.
            config: Overrides: ``delay``, ``max_attempts``, ``before_attempt``
                and ``sleep``. Defaults to None.
            operation_name: Operation the waiter must belong to. Defaults to
                None (any operation).

        Raises:
            ValidationError: If the waiter does not exist, or does not belong
                to ``operation_name``.
        """
        if operation_name is not None:
            operation = self.model.operation(operation_name)
            if waiter_name not in operation.waiters:
                raise ValidationError(
                    f"Waiter {waiter_name} is not defined for operation {operation.name}"
                )
            waiter_config = operation.waiters[waiter_name]
        else:
            waiter_config = self.model.waiter(waiter_name)

        overrides = dict(config or {})
        waiter_config = waiter_config.with_overrides(
            delay=overrides.get("delay", self.settings.waiter_delay_override),
            max_attempts=overrides.get("max_attempts", self.settings.waiter_max_attempts_override),
        )
        return ResourceWaiter(
            self,
            waiter_name,
            parameters,
            waiter_config,
            before_attempt=overrides.get("before_attempt"),
            sleep=overrides.get("sleep"),
        )

    def wait(
        self,
        waiter_name: str,
        operation_name: str | None = None,
        parameters: Mapping[str, Any] | None = None,
        config: Mapping[str, Any] | None = None,
    ) -> Any:
        """Block until a model-declared waiter succeeds.

        Returns:
            The output of the successful attempt.

        Raises:
            WaitFailure: If a failure acceptor matched or attempts ran out.
        """
        return self.get_waiter(waiter_name, parameters, config, operation_name).wait()

    async def wait_async(
        self,
        waiter_name: str,
        operation_name: str | None = None,
        parameters: Mapping[str, Any] | None = None,
        config: Mapping[str, Any] | None = None,
    ) -> Any:
        """Suspend the calling task until a model-declared waiter succeeds."""
        waiter = self.get_waiter(waiter_name, parameters, config, operation_name)
        return await waiter.wait_async()

    def wait_until(
        self,
        name: str | Callable[[int], Any],
        parameters: Mapping[str, Any] | None = None,
        config: Mapping[str, Any] | None = None,
    ) -> Any:
        """Wait on a named waiter, or poll a callable until it returns truthy.

        For a callable, ``config`` supplies ``delay`` and ``max_attempts``.

        Example:
            >>> client.wait_until("TableExists", {"TableName": "orders"})
            >>> client.wait_until(lambda attempt: job.done(), config={"max_attempts": 5})
        """
        if callable(name):
            overrides = dict(config or {})
            waiter = Waiter(
                name,
                delay=overrides.get("delay", 0.0),
                max_attempts=overrides.get("max_attempts", 1),
                before_attempt=overrides.get("before_attempt"),
                sleep=overrides.get("sleep"),
            )
            return waiter.wait()
        return self.wait(name, parameters=parameters, config=config)

    def _pagination_config(
        self,
        operation_name: str,
        pagination: PaginationConfig | None,
        overrides: Mapping[str, Any] | None,
    ) -> PaginationConfig:
        if pagination is None and not overrides:
            raise PaginationConfigError(
                f"Results for the {operation_name} operation of {self.service_name} "
                "cannot be paginated."
            )
        base = pagination or PaginationConfig()
        return base.merged(overrides)
