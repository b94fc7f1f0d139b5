"""Tests for stream operations."""

import pytest

from dynamo_redis_tool.store.core import stream_operations as streams
from dynamo_redis_tool.store.core.keys import stream_last_id_key
from dynamo_redis_tool.store.core.ordering import STREAM_END, STREAM_START, StreamID
from dynamo_redis_tool.store.exceptions import StreamAppendError


class TestXadd:
    def test_auto_ids_are_ordered_and_ranged(self, client):
        first, ok_first = streams.xadd(client, "events", {"type": "login"})
        second, ok_second = streams.xadd(client, "events", {"type": "logout"})

        assert ok_first and ok_second
        assert str(first) < str(second)

        entries = streams.xrange(client, "events", STREAM_START, STREAM_END)
        assert [entry.id for entry in entries] == [first, second]
        assert [entry.fields for entry in entries] == [{"type": "login"}, {"type": "logout"}]

    def test_explicit_ids_must_increase(self, client):
        assert streams.xadd(client, "s", {"a": "1"}, StreamID(10, 0)) == (StreamID(10, 0), True)
        assert streams.xadd(client, "s", {"a": "2"}, StreamID(10, 0)) == (StreamID(10, 0), False)
        assert streams.xadd(client, "s", {"a": "3"}, StreamID(9, 5)) == (StreamID(9, 5), False)
        assert streams.xadd(client, "s", {"a": "4"}, "00000000000000000010-00000000000000000001")[1]
        assert streams.xlen(client, "s") == 2

    def test_last_id_sentinel_tracks_highest_id(self, client):
        streams.xadd(client, "s", {"a": "1"}, StreamID(10, 0))
        sentinel = client.get_item(stream_last_id_key("s").to_attributes())
        assert sentinel["value"]["S"] == str(StreamID(10, 0))

    def test_auto_id_behind_explicit_future_id_gives_up(self, client):
        streams.xadd(client, "s", {"a": "1"}, StreamID(10**19, 0))
        with pytest.raises(StreamAppendError):
            streams.xadd(client, "s", {"a": "2"})

    def test_fields_required(self, client):
        with pytest.raises(ValueError):
            streams.xadd(client, "s", {})

    def test_malformed_explicit_id(self, client):
        with pytest.raises(ValueError):
            streams.xadd(client, "s", {"a": "1"}, "1-2")


@pytest.fixture
def stream(client):
    for i in range(1, 6):
        streams.xadd(client, "s", {"n": str(i)}, StreamID(100, i))
    return client


class TestReads:
    def test_xrange_bounds_inclusive(self, stream):
        entries = streams.xrange(stream, "s", StreamID(100, 2), StreamID(100, 4))
        assert [entry.fields["n"] for entry in entries] == ["2", "3", "4"]

    def test_xrange_count(self, stream):
        entries = streams.xrange(stream, "s", count=2)
        assert [entry.fields["n"] for entry in entries] == ["1", "2"]

    def test_xrevrange(self, stream):
        entries = streams.xrevrange(stream, "s", count=2)
        assert [entry.fields["n"] for entry in entries] == ["5", "4"]

    def test_xread_is_exclusive(self, stream):
        entries = streams.xread(stream, "s", StreamID(100, 3))
        assert [entry.id for entry in entries] == [StreamID(100, 4), StreamID(100, 5)]
        assert streams.xread(stream, "s", StreamID(100, 5)) == []

    def test_xlen_ignores_bookkeeping_items(self, stream):
        assert streams.xlen(stream, "s") == 5

    def test_empty_stream(self, client):
        assert streams.xrange(client, "nope") == []
        assert streams.xlen(client, "nope") == 0


class TestDeletes:
    def test_xdel(self, stream):
        assert streams.xdel(stream, "s", StreamID(100, 1), StreamID(100, 1), StreamID(1, 1)) == 1
        assert streams.xlen(stream, "s") == 4

    def test_deleted_ids_are_not_reused(self, stream):
        streams.xdel(stream, "s", StreamID(100, 5))
        assert not streams.xadd(stream, "s", {"n": "again"}, StreamID(100, 5))[1]

    def test_xtrim_keeps_newest(self, stream):
        assert streams.xtrim(stream, "s", 2) == 3
        assert [entry.fields["n"] for entry in streams.xrange(stream, "s")] == ["4", "5"]
        assert streams.xtrim(stream, "s", 10) == 0
