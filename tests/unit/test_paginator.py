"""Tests for result pagination and element iteration."""

import pytest

from servicecall.client.client import ServiceClient
from servicecall.exceptions import PaginationConfigError, ServiceError
from servicecall.paginate import ResourceIterator, ResultPaginator
from tests.fakes import AsyncScriptedTransport, ScriptedTransport, ok, service_error


def _table_pages(transport: ScriptedTransport) -> None:
    transport.queue(
        ok({"TableNames": ["a1", "a2"], "LastEvaluatedTableName": "A"}),
        ok({"TableNames": ["b1"], "LastEvaluatedTableName": "B"}),
        ok({"TableNames": ["c1"], "LastEvaluatedTableName": "C"}),
        ok({"TableNames": []}),
    )


class TestResultPaginator:
    """Tests for ResultPaginator."""

    def test_follows_tokens_until_exhausted(
        self, client: ServiceClient, transport: ScriptedTransport
    ) -> None:
        """Test that each page request carries the previous page's token."""
        _table_pages(transport)

        pages = list(client.paginate("ListTables", {"Region": "x"}))

        assert len(pages) == 4
        assert [request.body for request in transport.requests] == [
            {"Region": "x"},
            {"Region": "x", "ExclusiveStartTableName": "A"},
            {"Region": "x", "ExclusiveStartTableName": "B"},
            {"Region": "x", "ExclusiveStartTableName": "C"},
        ]

    def test_three_pages_when_last_page_has_no_token(
        self, client: ServiceClient, transport: ScriptedTransport
    ) -> None:
        """Test that a page without a token is the last one."""
        transport.queue(
            ok({"TableNames": ["a"], "LastEvaluatedTableName": "A"}),
            ok({"TableNames": ["b"], "LastEvaluatedTableName": "B"}),
            ok({"TableNames": ["c"]}),
        )
        paginator = client.get_paginator("ListTables")

        pages = list(paginator)

        assert [page["TableNames"] for page in pages] == [["a"], ["b"], ["c"]]
        assert paginator.request_count == 3
        assert paginator.next_token is None

    def test_is_lazy(self, client: ServiceClient, transport: ScriptedTransport) -> None:
        """Test that pages are only requested when consumed."""
        _table_pages(transport)
        paginator = client.get_paginator("ListTables")

        assert transport.requests == []
        next(paginator)
        assert len(transport.requests) == 1
        assert paginator.next_token == ["A"]

    def test_exhausted_paginator_stays_exhausted(
        self, client: ServiceClient, transport: ScriptedTransport
    ) -> None:
        """Test that an exhausted paginator issues no further requests."""
        transport.queue(ok({"TableNames": ["a"]}))
        paginator = client.get_paginator("ListTables")

        assert len(list(paginator)) == 1
        assert list(paginator) == []
        assert len(transport.requests) == 1

    def test_page_size_sets_limit_key(
        self, client: ServiceClient, transport: ScriptedTransport
    ) -> None:
        """Test that the page size is written to the limit key."""
        transport.queue(ok({"TableNames": []}))

        list(client.get_paginator("ListTables", page_size=25))

        assert transport.requests[0].body == {"Limit": 25}

    def test_more_results_flag_stops_pagination(
        self, client: ServiceClient, transport: ScriptedTransport
    ) -> None:
        """Test that a false truncation flag ends pagination despite a token."""
        transport.queue(
            ok({"Contents": [1, 2], "IsTruncated": True, "NextMarker": "m1"}),
            ok({"Contents": [3], "IsTruncated": False, "NextMarker": "m2"}),
        )

        pages = list(client.paginate("ListObjects"))

        assert len(pages) == 2
        assert transport.requests[1].body == {"Marker": "m1"}

    def test_empty_token_stops_pagination(
        self, client: ServiceClient, transport: ScriptedTransport
    ) -> None:
        """Test that an empty-string token is treated as the end."""
        transport.queue(ok({"TableNames": ["a"], "LastEvaluatedTableName": ""}))

        assert len(list(client.paginate("ListTables"))) == 1

    def test_unpaginated_operation_fails_before_any_request(
        self, client: ServiceClient, transport: ScriptedTransport
    ) -> None:
        """Test that operations without pagination metadata are rejected upfront."""
        with pytest.raises(PaginationConfigError) as exc_info:
            client.paginate("ListStreams")

        assert str(exc_info.value) == (
            "Results for the ListStreams operation of Example Service cannot be paginated."
        )
        assert transport.requests == []

    def test_config_overrides_enable_pagination(
        self, client: ServiceClient, transport: ScriptedTransport
    ) -> None:
        """Test that call-time config can describe pagination."""
        transport.queue(
            ok({"Streams": ["s1"], "NextToken": "t"}),
            ok({"Streams": ["s2"]}),
        )
        config = {"input_token": "NextToken", "output_token": "NextToken", "result_key": "Streams"}

        paginator = client.get_paginator("ListStreams", config=config)

        assert [paginator.result_items(page) for page in paginator] == [["s1"], ["s2"]]

    def test_mismatched_token_counts(self, client: ServiceClient) -> None:
        """Test that input and output tokens must pair up."""
        config = {"input_token": ["A", "B"], "output_token": "NextA"}

        with pytest.raises(PaginationConfigError, match="maps 2 input token"):
            client.get_paginator("ListStreams", config=config)

    def test_missing_input_token(self, client: ServiceClient) -> None:
        """Test that an output token alone cannot drive pagination."""
        with pytest.raises(PaginationConfigError):
            client.get_paginator("ListStreams", config={"output_token": "NextToken"})

    def test_result_items_without_result_key(
        self, client: ServiceClient, transport: ScriptedTransport
    ) -> None:
        """Test that a page missing the result key yields no items."""
        transport.queue(ok({"LastEvaluatedTableName": None}))
        paginator = client.get_paginator("ListTables")

        page = next(paginator)

        assert paginator.result_items(page) == []

    def test_search(self, client: ServiceClient, transport: ScriptedTransport) -> None:
        """Test that search applies an expression across every page."""
        _table_pages(transport)

        names = list(client.get_paginator("ListTables").search("TableNames[]"))

        assert names == ["a1", "a2", "b1", "c1"]

    def test_errors_propagate_mid_pagination(
        self, client: ServiceClient, transport: ScriptedTransport
    ) -> None:
        """Test that a failing page request raises from the iterator."""
        transport.queue(
            ok({"TableNames": ["a"], "LastEvaluatedTableName": "A"}),
            service_error("ThrottlingException", "slow down"),
        )
        paginator = client.get_paginator("ListTables")

        next(paginator)
        with pytest.raises(ServiceError) as exc_info:
            next(paginator)

        assert exc_info.value.service_code == "ThrottlingException"

    @pytest.mark.asyncio
    async def test_async_iteration(
        self, async_client: ServiceClient, async_transport: AsyncScriptedTransport
    ) -> None:
        """Test that pages can be consumed with async for."""
        _table_pages(async_transport)

        pages = [page async for page in async_client.paginate("ListTables")]

        assert len(pages) == 4
        assert async_transport.send_async_calls == 4


class TestResourceIterator:
    """Tests for ResourceIterator."""

    def test_flattens_result_key(
        self, client: ServiceClient, transport: ScriptedTransport
    ) -> None:
        """Test that elements are yielded across pages in order."""
        _table_pages(transport)

        assert list(client.iterate("ListTables")) == ["a1", "a2", "b1", "c1"]

    def test_skips_pages_without_elements(
        self, client: ServiceClient, transport: ScriptedTransport
    ) -> None:
        """Test that empty pages in the middle do not end iteration."""
        transport.queue(
            ok({"LastEvaluatedTableName": "A"}),
            ok({"TableNames": [], "LastEvaluatedTableName": "B"}),
            ok({"TableNames": ["b1"]}),
        )

        assert list(client.iterate("ListTables")) == ["b1"]

    def test_max_items_limits_requests(
        self, client: ServiceClient, transport: ScriptedTransport
    ) -> None:
        """Test that iteration stops once max_items elements were yielded."""
        _table_pages(transport)

        iterator = client.get_iterator("ListTables", max_items=2)

        assert list(iterator) == ["a1", "a2"]
        assert iterator.count == 2
        assert len(transport.requests) == 1

    def test_negative_max_items(self, client: ServiceClient) -> None:
        """Test that a negative max_items is rejected."""
        with pytest.raises(ValueError):
            client.get_iterator("ListTables", max_items=-1)

    def test_requires_result_key(
        self, client: ServiceClient, transport: ScriptedTransport
    ) -> None:
        """Test that iterating needs a result key, checked before any request."""
        with pytest.raises(PaginationConfigError, match="There are no resources to iterate"):
            client.iterate("ListJobs")

        assert transport.requests == []

    def test_unpaginated_operation(self, client: ServiceClient) -> None:
        """Test that iterating an unpaginated operation fails upfront."""
        with pytest.raises(PaginationConfigError, match="cannot be paginated"):
            client.iterate("DescribeTable")

    def test_wraps_given_paginator(self, client: ServiceClient) -> None:
        """Test constructing the iterator around an existing paginator."""
        paginator = client.get_paginator("ListTables")

        iterator = ResourceIterator(paginator, max_items=0)

        assert isinstance(iterator.paginator, ResultPaginator)
        assert list(iterator) == []

    @pytest.mark.asyncio
    async def test_async_iteration(
        self, async_client: ServiceClient, async_transport: AsyncScriptedTransport
    ) -> None:
        """Test that elements can be consumed with async for."""
        _table_pages(async_transport)

        names = [name async for name in async_client.get_iterator("ListTables", max_items=3)]

        assert names == ["a1", "a2", "b1"]
        assert async_transport.send_async_calls == 2
