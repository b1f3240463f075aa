"""HTTP transport built on botocore's urllib3 session.

Blocking sends run on the caller's thread. Non-blocking sends are submitted
to a bounded thread pool and returned as ``concurrent.futures.Future``
objects, which the execution pipeline wraps into deferred results.
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from types import TracebackType
from typing import Final

from botocore.awsrequest import AWSRequest, AWSResponse
from botocore.httpsession import URLLib3Session

from servicecall.config.settings import Settings, get_settings

logger: Final = logging.getLogger(__name__)


class URLLib3Transport:
    """Sends signed ``AWSRequest`` objects over pooled HTTP connections.

    Safe for concurrent use: the connection pool is thread-safe and the
    transport keeps no per-request state.

    Example:
        >>> with URLLib3Transport() as transport:
        ...     response = transport.send(request)
        ...     future = transport.send_async(request)
    """

    def __init__(
        self,
        settings: Settings | None = None,
        session: URLLib3Session | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            settings: Settings providing timeouts, pool size and worker count.
                Defaults to get_settings().
            session: Pre-built urllib3 session. Defaults to None.
        """
        settings = settings or get_settings()
        self._session = session or URLLib3Session(
            timeout=(settings.connect_timeout, settings.read_timeout),
            max_pool_connections=settings.max_pool_connections,
        )
        self._executor = ThreadPoolExecutor(
            max_workers=settings.async_workers,
            thread_name_prefix="servicecall-transport",
        )
        logger.info(
            f"Initialized transport: {settings.max_pool_connections} connections, "
            f"{settings.async_workers} async workers"
        )

    def send(self, request: AWSRequest) -> AWSResponse:
        """Send a request and wait for the response.

        Raises:
            botocore.exceptions.HTTPClientError: On connection or timeout failures.
        """
        return self._session.send(request.prepare())

    def send_async(self, request: AWSRequest) -> "Future[AWSResponse]":
        """Send a request on the worker pool and return immediately."""
        return self._executor.submit(self.send, request)

    def close(self) -> None:
        """Release pooled connections and stop the worker threads."""
        self._executor.shutdown(wait=False, cancel_futures=True)
        self._session.close()

    def __enter__(self) -> "URLLib3Transport":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
