"""Continuation-token pagination over a single operation.

``ResultPaginator`` yields whole result pages, chaining requests through the
operation's pagination descriptor. ``ResourceIterator`` flattens those pages
into the individual elements named by the descriptor's result key.

Both are lazy and single-use: each page request is only issued after the
previous page's cursor was extracted, and an exhausted iterator stays
exhausted.
"""

import logging
from collections.abc import Iterator
from typing import TYPE_CHECKING, Any, Final

import jmespath

from servicecall.exceptions import PaginationConfigError
from servicecall.models.command import Command
from servicecall.models.operation import PaginationConfig

if TYPE_CHECKING:
    from servicecall.client.client import ServiceClient

logger: Final = logging.getLogger(__name__)


class ResultPaginator:
    """Iterates over the result pages of a paginated operation.

    Supports both ``for page in paginator`` and ``async for page in paginator``.

    Attributes:
        operation_name: Operation being paginated.
        parameters: Base parameters sent with every page request.
        config: Pagination descriptor driving the iteration.
        page_size: Value written to the limit key, if any.
        request_count: Number of page requests issued so far.
        next_token: Cursor value(s) for the next request, if any.

    Example:
        >>> paginator = client.get_paginator("ListTables", {"Limit": 10})
        >>> for page in paginator:
        ...     print(page["TableNames"])
    """

    def __init__(
        self,
        client: "ServiceClient",
        operation_name: str,
        parameters: dict[str, Any] | None = None,
        config: PaginationConfig | None = None,
        page_size: int | None = None,
    ) -> None:
        """Initialize the paginator and validate its descriptor.

        Args:
            client: Client used to build and execute page requests.
            operation_name: Operation to paginate.
            parameters: Base parameters. Defaults to None.
            config: Pagination descriptor. Defaults to None.
            page_size: Page size written to ``limit_key``. Defaults to None.

        Raises:
            PaginationConfigError: If the descriptor has no output or input
                token, or their counts differ. No request is issued.
        """
        if config is None or not config.is_paginable or not config.input_tokens:
            raise PaginationConfigError(
                f"Results for the {operation_name} operation of "
                f"{client.service_name} cannot be paginated."
            )
        if len(config.input_tokens) != len(config.output_tokens):
            raise PaginationConfigError(
                f"Pagination for {operation_name} maps {len(config.input_tokens)} input "
                f"token(s) to {len(config.output_tokens)} output token(s)"
            )

        self.client = client
        self.operation_name = operation_name
        self.parameters = dict(parameters or {})
        self.config = config
        self.page_size = page_size
        self.request_count = 0
        self.next_token: list[Any] | None = None

        self._output_tokens = [jmespath.compile(token) for token in config.output_tokens]
        self._result_keys = [jmespath.compile(key) for key in config.result_keys]
        self._more_results = (
            jmespath.compile(config.more_results) if config.more_results else None
        )
        self._exhausted = False

    @property
    def result_keys(self) -> list[str]:
        return self.config.result_keys

    def __iter__(self) -> "ResultPaginator":
        return self

    def __next__(self) -> dict[str, Any]:
        if self._exhausted:
            raise StopIteration
        page = self.client.execute(self._next_command()).result()
        self._advance(page)
        return page

    def __aiter__(self) -> "ResultPaginator":
        return self

    async def __anext__(self) -> dict[str, Any]:
        if self._exhausted:
            raise StopAsyncIteration
        page = await self.client.execute_async(self._next_command())
        self._advance(page)
        return page

    def result_items(self, page: dict[str, Any]) -> list[Any]:
        """Extract the result-set elements of one page.

        A page without the result key yields an empty list.
        """
        items: list[Any] = []
        for expression in self._result_keys:
            value = expression.search(page)
            if value is None:
                continue
            if isinstance(value, list):
                items.extend(value)
            else:
                items.append(value)
        return items

    def search(self, expression: str) -> Iterator[Any]:
        """Apply a JMESPath expression to every page and yield the matches.

        List results are flattened, ``None`` results are skipped.

        Example:
            >>> for name in client.get_paginator("ListTables").search("TableNames[]"):
            ...     print(name)
        """
        compiled = jmespath.compile(expression)
        for page in self:
            value = compiled.search(page)
            if isinstance(value, list):
                yield from value
            elif value is not None:
                yield value

    def _next_command(self) -> Command:
        parameters = dict(self.parameters)
        if self.page_size is not None and self.config.limit_key:
            parameters[self.config.limit_key] = self.page_size
        if self.next_token is not None:
            for name, value in zip(self.config.input_tokens, self.next_token, strict=True):
                if value is not None:
                    parameters[name] = value
        return self.client.build_command(self.operation_name, parameters)

    def _advance(self, page: dict[str, Any]) -> None:
        self.request_count += 1
        tokens = [expression.search(page) for expression in self._output_tokens]

        if self._more_results is not None and not self._more_results.search(page):
            self._finish()
        elif all(token in (None, "", [], {}) for token in tokens):
            self._finish()
        else:
            self.next_token = tokens
            logger.debug(f"{self.operation_name} page {self.request_count} has more results")

    def _finish(self) -> None:
        self._exhausted = True
        self.next_token = None
        logger.info(f"Paginated {self.operation_name} in {self.request_count} request(s)")


class ResourceIterator:
    """Iterates over individual result elements across pages.

    Attributes:
        paginator: Page source.
        max_items: Maximum number of elements to yield, if any.
        count: Number of elements yielded so far.

    Example:
        >>> for table_name in client.get_iterator("ListTables"):
        ...     print(table_name)
    """

    def __init__(self, paginator: ResultPaginator, max_items: int | None = None) -> None:
        """Initialize the iterator.

        Raises:
            PaginationConfigError: If the paginator has no result key to flatten.
        """
        if not paginator.result_keys:
            raise PaginationConfigError(
                f"There are no resources to iterate for the {paginator.operation_name} "
                f"operation of {paginator.client.service_name}."
            )
        if max_items is not None and max_items < 0:
            raise ValueError("max_items cannot be negative")

        self.paginator = paginator
        self.max_items = max_items
        self.count = 0
        self._buffer: list[Any] = []
        self._position = 0

    def __iter__(self) -> "ResourceIterator":
        return self

    def __next__(self) -> Any:
        if self._limit_reached():
            raise StopIteration
        while self._position >= len(self._buffer):
            self._load(next(self.paginator))
        return self._take()

    def __aiter__(self) -> "ResourceIterator":
        return self

    async def __anext__(self) -> Any:
        if self._limit_reached():
            raise StopAsyncIteration
        while self._position >= len(self._buffer):
            self._load(await self.paginator.__anext__())
        return self._take()

    def _limit_reached(self) -> bool:
        return self.max_items is not None and self.count >= self.max_items

    def _load(self, page: dict[str, Any]) -> None:
        self._buffer = self.paginator.result_items(page)
        self._position = 0

    def _take(self) -> Any:
        item = self._buffer[self._position]
        self._position += 1
        self.count += 1
        return item
