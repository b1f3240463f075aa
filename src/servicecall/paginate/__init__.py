"""Pagination over continuation-token operations."""

from servicecall.paginate.paginator import ResourceIterator, ResultPaginator

__all__ = ["ResourceIterator", "ResultPaginator"]
