"""Result handles returned by the execution pipeline.

A handle is either already realized or wraps a deferred transport response.
Both expose the same surface so callers never need to know which one they
received:

    >>> output = pipeline.execute(command).result()
    >>> output = await pipeline.execute(async_command)
"""

import asyncio
import logging
import threading
from abc import ABC, abstractmethod
from collections.abc import Callable, Generator
from concurrent.futures import CancelledError, Future
from enum import Enum
from typing import Any, Final

from servicecall.exceptions import AwsError
from servicecall.models.command import Command

logger: Final = logging.getLogger(__name__)


class ResultState(str, Enum):
    """Lifecycle of a result handle."""

    PENDING = "pending"
    RESOLVED = "resolved"
    FAILED = "failed"
    CANCELLED = "cancelled"


class ExecutionResult(ABC):
    """Common interface of realized and deferred results.

    Attributes:
        command: The command this result belongs to.
    """

    def __init__(self, command: Command) -> None:
        self.command = command

    @property
    @abstractmethod
    def state(self) -> ResultState:
        """Current lifecycle state."""

    @abstractmethod
    def result(self) -> dict[str, Any]:
        """Return the decoded output, blocking the calling thread if needed.

        Raises:
            AwsError: If execution failed or the result was cancelled.
        """

    @abstractmethod
    def cancel(self) -> bool:
        """Try to cancel the underlying request.

        Returns:
            True if cancellation took effect before completion.
        """

    def done(self) -> bool:
        return self.state is not ResultState.PENDING

    async def _resolve(self) -> dict[str, Any]:
        return self.result()

    def __await__(self) -> Generator[Any, None, dict[str, Any]]:
        return self._resolve().__await__()


class RealizedResult(ExecutionResult):
    """A result whose output is already available."""

    def __init__(self, command: Command, output: dict[str, Any]) -> None:
        super().__init__(command)
        self._output = output

    @property
    def state(self) -> ResultState:
        return ResultState.RESOLVED

    def result(self) -> dict[str, Any]:
        return self._output

    def cancel(self) -> bool:
        return False

    def __repr__(self) -> str:
        return f"RealizedResult(operation={self.command.operation_name!r})"


class FutureResult(ExecutionResult):
    """A result backed by a deferred transport response.

    The first call to ``result()`` waits for the transport, decodes the
    response once and caches either the output or the normalized error.
    Later calls return the cached value and never touch the transport again.

    Attributes:
        command: The command this result belongs to.
    """

    def __init__(
        self,
        command: Command,
        future: "Future[Any]",
        interpret: Callable[["Future[Any]"], dict[str, Any]],
    ) -> None:
        """Initialize the handle.

        Args:
            command: Command being executed.
            future: Deferred raw response from the transport.
            interpret: Decodes the completed future into output, raising a
                normalized AwsError on failure.
        """
        super().__init__(command)
        self._future = future
        self._interpret = interpret
        self._state = ResultState.PENDING
        self._output: dict[str, Any] | None = None
        self._error: AwsError | None = None
        self._lock = threading.Lock()

    @property
    def state(self) -> ResultState:
        return self._state

    def result(self) -> dict[str, Any]:
        with self._lock:
            if self._state is ResultState.RESOLVED:
                assert self._output is not None
                return self._output
            if self._state is ResultState.FAILED:
                assert self._error is not None
                raise self._error
            if self._state is ResultState.CANCELLED:
                raise self._cancelled_error()

            try:
                output = self._interpret(self._future)
            except CancelledError:
                self._state = ResultState.CANCELLED
                raise self._cancelled_error() from None
            except AwsError as e:
                self._error = e
                self._state = ResultState.FAILED
                raise

            self._output = output
            self._state = ResultState.RESOLVED
            return output

    def cancel(self) -> bool:
        if self._state is not ResultState.PENDING:
            return self._state is ResultState.CANCELLED
        cancelled = self._future.cancel()
        if cancelled:
            self._state = ResultState.CANCELLED
            logger.debug(f"Cancelled pending {self.command.operation_name} request")
        return cancelled

    async def _resolve(self) -> dict[str, Any]:
        if not self._future.done():
            try:
                await asyncio.wait([asyncio.wrap_future(self._future)])
            except asyncio.CancelledError:
                self.cancel()
                raise
        return self.result()

    def _cancelled_error(self) -> AwsError:
        return AwsError(
            f"Execution of {self.command.operation_name} was cancelled",
            command=self.command,
        )

    def __repr__(self) -> str:
        return (
            f"FutureResult(operation={self.command.operation_name!r}, "
            f"state={self._state.value!r})"
        )
