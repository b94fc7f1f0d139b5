"""Tests for PaginatedScan."""

import pytest

from dynamo_redis_tool.store.core.expressions import ExpressionBuilder
from dynamo_redis_tool.store.core.hash_operations import hset
from dynamo_redis_tool.store.core.pagination import PaginatedScan
from dynamo_redis_tool.store.exceptions import KVStoreError


class FakeQueryClient:
    """Serves a fixed item list in pages of at most max_page items."""

    def __init__(self, items, max_page=3, fail_on_call=None):
        self.items = items
        self.max_page = max_page
        self.fail_on_call = fail_on_call
        self.calls = []

    def query(self, **kwargs):
        self.calls.append(kwargs)
        if self.fail_on_call == len(self.calls):
            raise KVStoreError("backend went away")

        start = kwargs.get("ExclusiveStartKey", {}).get("offset", 0)
        size = min(kwargs.get("Limit", self.max_page), self.max_page)
        ordered = self.items if kwargs["ScanIndexForward"] else self.items[::-1]
        page = ordered[start : start + size]

        response = {"Count": len(page)}
        if kwargs.get("Select") != "COUNT":
            response["Items"] = page
        if start + size < len(ordered):
            response["LastEvaluatedKey"] = {"offset": start + size}
        return response


def key_condition() -> ExpressionBuilder:
    return ExpressionBuilder().condition_equals("PK", {"S": "k"})


ITEMS = [{"n": i} for i in range(10)]


class TestPaginatedScan:
    def test_follows_cursor_to_the_end(self):
        fake = FakeQueryClient(ITEMS)
        scan = PaginatedScan(fake, key_condition())
        assert scan.items() == ITEMS
        assert scan.pages_read == 4
        assert scan.complete

    def test_limit_budget_shared_across_pages(self):
        fake = FakeQueryClient(ITEMS)
        scan = PaginatedScan(fake, key_condition(), limit=5)
        assert scan.items() == ITEMS[:5]
        assert [call["Limit"] for call in fake.calls] == [5, 2]

    def test_page_size(self):
        fake = FakeQueryClient(ITEMS, max_page=100)
        PaginatedScan(fake, key_condition(), page_size=4).items()
        assert [call["Limit"] for call in fake.calls] == [4, 4, 4]

    def test_descending(self):
        fake = FakeQueryClient(ITEMS)
        assert PaginatedScan(fake, key_condition(), forward=False, limit=2).items() == [
            {"n": 9},
            {"n": 8},
        ]

    def test_count(self):
        fake = FakeQueryClient(ITEMS)
        scan = PaginatedScan(fake, key_condition())
        assert scan.count() == 10
        assert all(call["Select"] == "COUNT" for call in fake.calls)

    def test_index_name_passed(self):
        fake = FakeQueryClient(ITEMS)
        PaginatedScan(fake, key_condition(), index_name="LSI-score").items()
        assert fake.calls[0]["IndexName"] == "LSI-score"

    def test_error_keeps_partial_results(self):
        fake = FakeQueryClient(ITEMS, fail_on_call=2)
        scan = PaginatedScan(fake, key_condition())
        with pytest.raises(KVStoreError):
            scan.items()
        assert scan.results == ITEMS[:3]
        assert not scan.complete

    def test_small_pages_match_single_request(self, client):
        hset(client, "big", {f"field{i:02d}": i for i in range(30)})
        builder = ExpressionBuilder().condition_equals("PK", {"S": "big"})

        whole = PaginatedScan(client, builder).items()
        paged = PaginatedScan(client, builder, page_size=7)
        assert paged.items() == whole
        assert len(whole) == 30
        assert paged.pages_read >= 5
