"""Tests for list operations."""

import pytest

from dynamo_redis_tool.store.core import list_operations as lists
from dynamo_redis_tool.store.utils import redis_slice


def texts(values) -> list[str]:
    return [value.as_text() for value in values]


class TestRedisSlice:
    @pytest.mark.parametrize(
        "start, stop, expected",
        [
            (0, -1, [0, 1, 2, 3, 4]),
            (0, 1, [0, 1]),
            (-2, -1, [3, 4]),
            (-100, 100, [0, 1, 2, 3, 4]),
            (3, 1, []),
            (5, 10, []),
            (2, 2, [2]),
        ],
    )
    def test_inclusive_and_negative(self, start, stop, expected):
        assert redis_slice(list(range(5)), start, stop) == expected


class TestLists:
    def test_lpush_puts_last_value_first(self, client):
        assert lists.lpush(client, "stack", "a", "b", "c") == 3
        assert texts(lists.lrange(client, "stack", 0, -1)) == ["c", "b", "a"]

    def test_rpush_appends(self, client):
        lists.rpush(client, "queue", "a", "b")
        assert lists.rpush(client, "queue", "c") == 3
        assert texts(lists.lrange(client, "queue", 0, -1)) == ["a", "b", "c"]

    def test_mixed_pushes(self, client):
        lists.rpush(client, "l", "middle")
        lists.lpush(client, "l", "head")
        lists.rpush(client, "l", "tail")
        assert texts(lists.lrange(client, "l", 0, -1)) == ["head", "middle", "tail"]

    def test_lrange_indices(self, client):
        lists.rpush(client, "l", "a", "b", "c", "d")
        assert texts(lists.lrange(client, "l", 1, 2)) == ["b", "c"]
        assert texts(lists.lrange(client, "l", -2, -1)) == ["c", "d"]
        assert lists.lrange(client, "l", 10, 20) == []

    def test_lindex(self, client):
        lists.rpush(client, "l", "a", "b", "c")
        assert lists.lindex(client, "l", 0).as_text() == "a"
        assert lists.lindex(client, "l", -1).as_text() == "c"
        assert not lists.lindex(client, "l", 3).present

    def test_pops(self, client):
        lists.rpush(client, "l", "a", "b", "c")
        assert lists.lpop(client, "l").as_text() == "a"
        assert lists.rpop(client, "l").as_text() == "c"
        assert lists.llen(client, "l") == 1

    def test_pop_empty(self, client):
        assert not lists.lpop(client, "empty").present
        assert not lists.rpop(client, "empty").present
        assert lists.llen(client, "empty") == 0

    def test_values_keep_their_kind(self, client):
        lists.rpush(client, "l", 7, b"\x01")
        values = lists.lrange(client, "l", 0, -1)
        assert values[0].as_int() == 7
        assert values[1].as_bytes() == b"\x01"

    def test_push_requires_values(self, client):
        with pytest.raises(ValueError):
            lists.rpush(client, "l")


class TestPushIfExists:
    def test_missing_list_is_not_created(self, client):
        assert lists.lpushx(client, "l", "a") == 0
        assert lists.rpushx(client, "l", "a", "b") == 0
        assert lists.llen(client, "l") == 0

    def test_existing_list_grows(self, client):
        lists.rpush(client, "l", "middle")
        assert lists.lpushx(client, "l", "b", "a") == 3
        assert lists.rpushx(client, "l", "tail") == 4
        assert texts(lists.lrange(client, "l", 0, -1)) == ["a", "b", "middle", "tail"]

    def test_emptied_list_is_not_recreated(self, client):
        lists.rpush(client, "l", "only")
        lists.lpop(client, "l")
        assert lists.rpushx(client, "l", "again") == 0

    def test_requires_values(self, client):
        with pytest.raises(ValueError):
            lists.lpushx(client, "l")
