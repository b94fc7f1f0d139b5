"""
Cursor-driven range queries.

DynamoDB returns query results in bounded pages plus a LastEvaluatedKey
cursor. PaginatedScan follows the cursor until the backend stops returning
one or the caller's item budget is spent.
"""

from collections.abc import Iterator
from typing import Any

from ..logging_config import get_logger
from .client import DynamoDBClient
from .expressions import ExpressionBuilder

logger = get_logger(__name__)


class PaginatedScan:
    """
    One logical range query over any number of pages.

    If a page fails, the error propagates unchanged; ``results`` then holds
    what was read so far and ``complete`` stays False.

    Args:
        client: DynamoDB client
        builder: Builder carrying the key condition, filters and projection
        index_name: Secondary index to query (optional)
        forward: Ascending sort order if True
        limit: Maximum number of items to return across all pages (optional)
        page_size: Maximum number of items per request (optional)
    """

    def __init__(
        self,
        client: DynamoDBClient,
        builder: ExpressionBuilder,
        *,
        index_name: str | None = None,
        forward: bool = True,
        limit: int | None = None,
        page_size: int | None = None,
    ):
        self.client = client
        self.builder = builder
        self.index_name = index_name
        self.forward = forward
        self.limit = limit
        self.page_size = page_size
        self.results: list[dict[str, Any]] = []
        self.total = 0
        self.pages_read = 0
        self.complete = False

    def _request(self, cursor: dict[str, Any] | None, remaining: int | None) -> dict[str, Any]:
        kwargs = self.builder.query_kwargs()
        kwargs["ScanIndexForward"] = self.forward
        if self.index_name:
            kwargs["IndexName"] = self.index_name
        if cursor:
            kwargs["ExclusiveStartKey"] = cursor

        page_limit = self.page_size
        if remaining is not None:
            page_limit = remaining if page_limit is None else min(page_limit, remaining)
        if page_limit is not None:
            kwargs["Limit"] = page_limit
        return kwargs

    def pages(self, select_count: bool = False) -> Iterator[dict[str, Any]]:
        """
        Yield raw query responses, following the cursor.

        Args:
            select_count: Ask only for counts (Select=COUNT); the builder
                must not carry a projection
        """
        cursor: dict[str, Any] | None = None
        while True:
            kwargs = self._request(cursor, None)
            if select_count:
                kwargs["Select"] = "COUNT"
            response = self.client.query(**kwargs)
            self.pages_read += 1
            yield response

            cursor = response.get("LastEvaluatedKey")
            if not cursor:
                return

    def items(self) -> list[dict[str, Any]]:
        """
        Run the query to completion and return every matching item.

        The limit budget is shared across pages: each page asks for at most
        the number of items still wanted.
        """
        self.results = []
        self.complete = False
        remaining = self.limit
        cursor: dict[str, Any] | None = None

        while remaining is None or remaining > 0:
            response = self.client.query(**self._request(cursor, remaining))
            self.pages_read += 1

            page = response.get("Items", [])
            if remaining is not None:
                page = page[:remaining]
                remaining -= len(page)
            self.results.extend(page)

            cursor = response.get("LastEvaluatedKey")
            if not cursor:
                break
            logger.debug(f"Following query cursor, {len(self.results)} items so far")

        self.complete = True
        return self.results

    def count(self) -> int:
        """Count matching items across all pages without reading them."""
        self.total = 0
        self.complete = False
        for response in self.pages(select_count=True):
            self.total += response.get("Count", 0)
        self.complete = True
        return self.total
