"""Command execution pipeline: serialize, sign, send, interpret.

Each step is a collaborator injected at construction. The pipeline itself
only sequences them and converts every failure into the ``AwsError``
taxonomy before it becomes visible to the caller. It never retries.

The pipeline holds no per-call mutable state, so one instance can serve any
number of concurrent ``execute`` calls as long as its collaborators can.
"""

import asyncio
import logging
from collections.abc import Iterator
from concurrent.futures import CancelledError, Future
from contextlib import contextmanager
from typing import Any, Final

from servicecall.client.protocols import (
    AsyncTransport,
    CredentialsProvider,
    ErrorParser,
    ResponseParser,
    Serializer,
    Signer,
    Transport,
)
from servicecall.client.results import ExecutionResult, FutureResult, RealizedResult
from servicecall.exceptions import (
    AwsError,
    ServiceError,
    SigningError,
    TransportError,
    ValidationError,
)
from servicecall.models.command import Command

logger: Final = logging.getLogger(__name__)


class ExecutionPipeline:
    """Drives one command through serialize, sign, send and interpret.

    Example:
        >>> pipeline = ExecutionPipeline(
        ...     serializer=JsonRpcSerializer(model, endpoint),
        ...     signer=SigV4Signer("dynamodb", "us-east-1"),
        ...     transport=URLLib3Transport(),
        ...     credentials_provider=SessionCredentialsProvider(),
        ...     error_parser=parse_json_error,
        ...     response_parser=parse_json_response,
        ... )
        >>> output = pipeline.execute(command).result()
    """

    def __init__(
        self,
        serializer: Serializer,
        signer: Signer,
        transport: Transport,
        credentials_provider: CredentialsProvider,
        error_parser: ErrorParser,
        response_parser: ResponseParser,
        exception_class: type[ServiceError] = ServiceError,
        client_name: str = "ServiceClient",
    ) -> None:
        """Initialize the pipeline with its collaborators.

        Args:
            serializer: Turns a command into a request.
            signer: Signs a request with the resolved credentials.
            transport: Sends requests; may also support ``send_async``.
            credentials_provider: Resolves credentials for each request.
            error_parser: Extracts service error fields from failure responses.
            response_parser: Decodes successful responses into output mappings.
            exception_class: ServiceError subclass raised for service failures.
                Defaults to ServiceError.
            client_name: Name used in error messages. Defaults to "ServiceClient".

        Raises:
            ValueError: If exception_class does not derive from ServiceError.
        """
        if not issubclass(exception_class, ServiceError):
            raise ValueError(f"exception_class must derive from ServiceError: {exception_class}")

        self.serializer = serializer
        self.signer = signer
        self.transport = transport
        self.credentials_provider = credentials_provider
        self.error_parser = error_parser
        self.response_parser = response_parser
        self.exception_class = exception_class
        self.client_name = client_name

    @property
    def supports_async(self) -> bool:
        return isinstance(self.transport, AsyncTransport)

    def execute(self, command: Command) -> ExecutionResult:
        """Execute a command.

        Args:
            command: The command to run.

        Returns:
            A RealizedResult, or a FutureResult when the command is async and
            the transport supports non-blocking sends.

        Raises:
            ValidationError: If the command cannot be serialized.
            SigningError: If credentials cannot be resolved or signing fails.
            TransportError: If the request failed without a service response.
            ServiceError: If the service answered with a failure.
            AwsError: For any other failure.
        """
        with self._normalized(command):
            request = self._serialize(command)
            request = self._sign(command, request)

            if command.is_async and self.supports_async:
                logger.debug(f"Sending {command.operation_name} without blocking")
                future = self._send_async(command, request)
                return FutureResult(
                    command, future, lambda f: self._interpret_future(command, request, f)
                )

            response = self._send(command, request)
            return RealizedResult(command, self._interpret(command, request, response))

    async def execute_async(self, command: Command) -> dict[str, Any]:
        """Execute a command without blocking the running event loop.

        Serializing, credential resolution and signing run in the loop's
        default executor. The send then uses the transport's non-blocking
        path when available, otherwise it also runs in the executor.

        Returns:
            The decoded output.

        Raises:
            AwsError: Same taxonomy as ``execute``.
        """
        loop = asyncio.get_running_loop()
        command = command.as_async(self.supports_async)
        result = await loop.run_in_executor(None, self.execute, command)
        return await result

    @contextmanager
    def _normalized(self, command: Command) -> Iterator[None]:
        try:
            yield
        except AwsError:
            raise
        except CancelledError:
            raise
        except Exception as e:
            logger.warning(f"Uncaught error while executing {command.operation_name}: {e}")
            raise AwsError(
                f"Uncaught exception while executing {self.client_name}::"
                f"{command.operation_name} - {e}",
                cause=e,
                command=command,
            ) from e

    def _serialize(self, command: Command) -> Any:
        logger.debug(f"Serializing {command.operation_name}")
        try:
            return self.serializer(command)
        except AwsError:
            raise
        except Exception as e:
            raise ValidationError(
                f"Unable to serialize {command.operation_name}: {e}",
                cause=e,
                command=command,
            ) from e

    def _sign(self, command: Command, request: Any) -> Any:
        logger.debug(f"Signing {command.operation_name}")
        try:
            credentials = self.credentials_provider()
            signed = self.signer(request, credentials)
        except AwsError:
            raise
        except Exception as e:
            raise SigningError(
                f"Unable to sign {command.operation_name}: {e}",
                cause=e,
                command=command,
            ) from e
        return request if signed is None else signed

    def _send(self, command: Command, request: Any) -> Any:
        logger.debug(f"Sending {command.operation_name} to {getattr(request, 'url', '')}")
        try:
            return self.transport.send(request)
        except AwsError:
            raise
        except Exception as e:
            raise self._transport_failure(command, request, e) from e

    def _send_async(self, command: Command, request: Any) -> "Future[Any]":
        assert isinstance(self.transport, AsyncTransport)
        try:
            return self.transport.send_async(request)
        except AwsError:
            raise
        except Exception as e:
            raise self._transport_failure(command, request, e) from e

    def _interpret_future(self, command: Command, request: Any, future: "Future[Any]") -> Any:
        with self._normalized(command):
            try:
                response = future.result()
            except (AwsError, CancelledError):
                raise
            except Exception as e:
                raise self._transport_failure(command, request, e) from e
            return self._interpret(command, request, response)

    def _interpret(self, command: Command, request: Any, response: Any) -> dict[str, Any]:
        if response.status_code >= 300:
            raise self._service_error(command, request, response)

        output = self.response_parser(response, command.model)
        logger.debug(f"Completed {command.operation_name} with status {response.status_code}")
        return output

    def _transport_failure(self, command: Command, request: Any, error: Exception) -> AwsError:
        response = getattr(error, "response", None)
        if response is not None:
            return self._service_error(command, request, response, cause=error)

        logger.warning(f"{command.operation_name} failed in transport: {error}")
        return TransportError(
            self._describe(command, request, str(error)),
            cause=error,
            command=command,
        )

    def _service_error(
        self,
        command: Command,
        request: Any,
        response: Any,
        cause: Exception | None = None,
    ) -> ServiceError:
        parsed = self.error_parser(response) or {}
        code = parsed.get("code")
        error_type = parsed.get("type")
        message = parsed.get("message") or ""
        status_code = getattr(response, "status_code", None) or parsed.get("status_code")

        if code:
            detail = f"{code} ({error_type} error): {message}"
        elif cause is not None:
            detail = str(cause)
        else:
            detail = message or f"HTTP {status_code}"

        logger.warning(f"{command.operation_name} failed with {code or status_code}: {message}")
        return self.exception_class(
            self._describe(command, request, detail),
            service_code=code,
            service_type=error_type,
            cause=cause,
            command=command,
            status_code=status_code,
            request_id=parsed.get("request_id"),
        )

    def _describe(self, command: Command, request: Any, detail: str) -> str:
        name = command.operation_name
        url = getattr(request, "url", "")
        method = f"{name[:1].lower()}{name[1:]}"
        return f'Error executing {self.client_name}::{method}() on "{url}"; {detail}'
