"""Interfaces of the collaborators the execution pipeline is assembled from.

The pipeline owns none of these behaviours. Concrete botocore-backed
implementations live in ``servicecall.aws``; tests and callers may supply
any object that satisfies the same shape.
"""

from collections.abc import Callable, Mapping, MutableMapping
from concurrent.futures import Future
from typing import Any, Protocol, runtime_checkable

from servicecall.models.command import Command
from servicecall.models.operation import OperationModel


class Request(Protocol):
    """A transport-ready request. Signers mutate its headers in place."""

    method: str
    url: str
    headers: MutableMapping[str, str]


class Response(Protocol):
    """A raw response as returned by a transport."""

    status_code: int
    headers: Mapping[str, str]

    @property
    def content(self) -> bytes: ...


@runtime_checkable
class Transport(Protocol):
    """Sends a prepared request and returns the raw response."""

    def send(self, request: Any) -> Any: ...


@runtime_checkable
class AsyncTransport(Transport, Protocol):
    """A transport that can also send without blocking the caller."""

    def send_async(self, request: Any) -> "Future[Any]": ...


Serializer = Callable[[Command], Any]
"""Turns a command into a request. Raises on unknown operations or bad input."""

Signer = Callable[[Any, Any], Any]
"""Signs ``(request, credentials)``; returns the signed request or None if signed in place."""

CredentialsProvider = Callable[[], Any]
"""Returns the credentials used for signing. Raises when none can be resolved."""

ErrorParser = Callable[[Any], Mapping[str, Any]]
"""Extracts ``code``, ``type``, ``message``, ``request_id`` and ``status_code`` from a failure.

Best effort: an empty mapping means the body carried no structured error.
"""

ResponseParser = Callable[[Any, OperationModel], dict[str, Any]]
"""Decodes a successful raw response into the operation's output mapping."""
