"""Polling until a resource reaches a desired state.

A waiter repeats an attempt, judges each attempt as success, failure or
retry, and sleeps between attempts. Attempts are strictly sequential.

``wait()`` blocks the calling thread only; ``wait_async()`` suspends only the
calling task. Either can be stopped with ``cancel()``, which prevents any
further attempt from being scheduled.
"""

import asyncio
import logging
import threading
from collections.abc import Callable, Mapping
from enum import Enum
from typing import TYPE_CHECKING, Any, Final, NoReturn

from servicecall.exceptions import AwsError, WaitFailure
from servicecall.models.operation import WaiterConfig
from servicecall.waiter.acceptors import Outcome, first_match

if TYPE_CHECKING:
    from servicecall.client.client import ServiceClient
    from servicecall.client.results import ExecutionResult

logger: Final = logging.getLogger(__name__)

SUCCESS: Final = "success"
FAILURE: Final = "failure"
RETRY: Final = "retry"


class WaiterState(str, Enum):
    """State machine of a waiter. SUCCEEDED and FAILED are terminal."""

    WAITING = "waiting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class Waiter:
    """Polls a callable until it reports success.

    The predicate receives the attempt number and returns a truthy value once
    the desired condition holds. Subclasses replace the attempt with an
    operation execution judged by acceptors.

    Attributes:
        name: Waiter name used in logs and errors.
        delay: Seconds to sleep between attempts.
        max_attempts: Maximum number of attempts.
        attempts: Number of attempts performed so far.
        state: Current WaiterState.
        last_result: Last successful output or predicate return value.
        last_error: Last error observed by an attempt.

    Example:
        >>> waiter = Waiter(lambda attempt: job.is_done(), delay=2, max_attempts=10)
        >>> waiter.wait()
    """

    def __init__(
        self,
        predicate: Callable[[int], Any] | None = None,
        delay: float = 0.0,
        max_attempts: int = 1,
        name: str = "callable",
        before_attempt: Callable[[int], None] | None = None,
        sleep: Callable[[float], Any] | None = None,
    ) -> None:
        """Initialize the waiter.

        Args:
            predicate: Callable returning truthy once waiting is over.
            delay: Seconds between attempts. Defaults to 0.
            max_attempts: Attempt limit, at least 1. Defaults to 1.
            name: Name used in logs and errors. Defaults to "callable".
            before_attempt: Called with the attempt number before each attempt.
                Defaults to None.
            sleep: Replacement for the blocking inter-attempt sleep. Defaults
                to an interruptible sleep on the waiter's cancel event.

        Raises:
            ValueError: If delay is negative or max_attempts is below 1.
        """
        if delay < 0:
            raise ValueError("delay cannot be negative")
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

        self.name = name
        self.delay = delay
        self.max_attempts = max_attempts
        self.before_attempt = before_attempt
        self.attempts = 0
        self.state = WaiterState.WAITING
        self.last_result: Any = None
        self.last_error: AwsError | None = None

        self._predicate = predicate
        self._cancelled = threading.Event()
        self._sleep = sleep or self._cancelled.wait
        self._failure: WaitFailure | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._wake: asyncio.Event | None = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> None:
        """Stop scheduling attempts. An in-flight attempt is left to finish."""
        logger.info(f"Cancelling waiter {self.name} after {self.attempts} attempt(s)")
        self._cancelled.set()
        loop, wake = self._loop, self._wake
        if loop is not None and wake is not None and not loop.is_closed():
            loop.call_soon_threadsafe(wake.set)

    def wait(self) -> Any:
        """Block until the waiter succeeds.

        Returns:
            The last result observed by the successful attempt.

        Raises:
            WaitFailure: On a failure verdict, attempt exhaustion or cancellation.
        """
        if self._finished():
            return self.last_result

        logger.info(f"Waiting for {self.name} (max {self.max_attempts} attempts)")
        while True:
            self._begin_attempt()
            verdict = self._attempt()
            if self._settle(verdict):
                return self.last_result
            self._sleep(self.delay)

    async def wait_async(self) -> Any:
        """Suspend the calling task until the waiter succeeds.

        Returns:
            The last result observed by the successful attempt.

        Raises:
            WaitFailure: On a failure verdict, attempt exhaustion or cancellation.
        """
        if self._finished():
            return self.last_result

        self._loop = asyncio.get_running_loop()
        self._wake = asyncio.Event()
        if self.cancelled:
            self._wake.set()

        logger.info(f"Waiting for {self.name} (max {self.max_attempts} attempts)")
        while True:
            self._begin_attempt()
            verdict = await self._attempt_async()
            if self._settle(verdict):
                return self.last_result
            await self._sleep_async()

    def _attempt(self) -> str:
        assert self._predicate is not None
        self.last_result = self._predicate(self.attempts)
        return SUCCESS if self.last_result else RETRY

    async def _attempt_async(self) -> str:
        return self._attempt()

    async def _sleep_async(self) -> None:
        assert self._wake is not None
        wake = asyncio.ensure_future(self._wake.wait())
        try:
            await asyncio.wait([wake], timeout=self.delay)
        finally:
            wake.cancel()

    def _finished(self) -> bool:
        if self.state is WaiterState.FAILED:
            assert self._failure is not None
            raise self._failure
        return self.state is WaiterState.SUCCEEDED

    def _begin_attempt(self) -> None:
        if self.cancelled:
            self._fail(
                f"Waiter {self.name} was cancelled after {self.attempts} attempt(s)",
                WaitFailure.CANCELLED,
            )
        self.attempts += 1
        if self.before_attempt is not None:
            self.before_attempt(self.attempts)

    def _settle(self, verdict: str) -> bool:
        if self.cancelled:
            self._fail(
                f"Waiter {self.name} was cancelled after {self.attempts} attempt(s)",
                WaitFailure.CANCELLED,
            )
        if verdict == SUCCESS:
            self.state = WaiterState.SUCCEEDED
            logger.info(f"Waiter {self.name} succeeded after {self.attempts} attempt(s)")
            return True
        if verdict == FAILURE:
            self._fail(
                f"Waiter {self.name} encountered a terminal failure state",
                WaitFailure.FAILURE_ACCEPTOR,
            )
        if self.attempts >= self.max_attempts:
            self._fail(
                f"Waiter {self.name} failed: max attempts exceeded ({self.max_attempts})",
                WaitFailure.MAX_ATTEMPTS_EXCEEDED,
            )
        logger.debug(f"Waiter {self.name} attempt {self.attempts} not done, retrying")
        return False

    def _fail(self, message: str, reason: str) -> NoReturn:
        self.state = WaiterState.FAILED
        self._failure = WaitFailure(
            message,
            reason=reason,
            attempts=self.attempts,
            last_result=self.last_result if isinstance(self.last_result, dict) else None,
            cause=self.last_error,
        )
        logger.warning(message)
        raise self._failure


class ResourceWaiter(Waiter):
    """Waiter that executes a model-declared operation and judges it by acceptors.

    Example:
        >>> waiter = client.get_waiter("TableExists", {"TableName": "orders"})
        >>> waiter.wait()
    """

    def __init__(
        self,
        client: "ServiceClient",
        name: str,
        parameters: Mapping[str, Any] | None,
        config: WaiterConfig,
        before_attempt: Callable[[int], None] | None = None,
        sleep: Callable[[float], Any] | None = None,
    ) -> None:
        """Initialize the waiter.

        Args:
            client: Client executing each attempt.
            name: Waiter name.
            parameters: Parameters of the polled operation.
            config: Waiter descriptor (operation, delay, attempts, acceptors).
            before_attempt: Called with the attempt number before each attempt.
                Defaults to None.
            sleep: Replacement for the blocking inter-attempt sleep. Defaults to None.
        """
        super().__init__(
            delay=config.delay,
            max_attempts=config.max_attempts,
            name=name,
            before_attempt=before_attempt,
            sleep=sleep,
        )
        self.client = client
        self.config = config
        self.parameters = dict(parameters or {})
        self._in_flight: "ExecutionResult | None" = None

    def cancel(self) -> None:
        """Stop scheduling attempts and cancel the attempt in flight, if any."""
        super().cancel()
        in_flight = self._in_flight
        if in_flight is not None:
            in_flight.cancel()

    def _attempt(self) -> str:
        command = self.client.build_command(self.config.operation, self.parameters)
        try:
            in_flight = self.client.execute(command.as_async())
            self._in_flight = in_flight
            if self.cancelled:
                in_flight.cancel()
            outcome = Outcome(output=in_flight.result())
        except AwsError as e:
            outcome = Outcome(error=e)
        finally:
            self._in_flight = None
        return self._judge(outcome)

    async def _attempt_async(self) -> str:
        command = self.client.build_command(self.config.operation, self.parameters)
        loop = asyncio.get_running_loop()
        try:
            in_flight = await loop.run_in_executor(None, self.client.execute, command.as_async())
            self._in_flight = in_flight
            if self.cancelled:
                in_flight.cancel()
            outcome = Outcome(output=await in_flight)
        except AwsError as e:
            outcome = Outcome(error=e)
        finally:
            self._in_flight = None
        return self._judge(outcome)

    def _judge(self, outcome: Outcome) -> str:
        if outcome.error is not None:
            self.last_error = outcome.error
        else:
            self.last_result = outcome.output
            self.last_error = None

        acceptor = first_match(self.config.acceptors, outcome)
        if acceptor is None:
            return RETRY
        logger.debug(
            f"Waiter {self.name} attempt {self.attempts} matched "
            f"{acceptor.matcher} acceptor -> {acceptor.state}"
        )
        return acceptor.state
