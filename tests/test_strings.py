"""Tests for string operations."""

import time
from decimal import Decimal

import pytest

from dynamo_redis_tool.store.core import string_operations as strings
from dynamo_redis_tool.store.core.keys import scalar_key
from dynamo_redis_tool.store.exceptions import KVStoreError
from dynamo_redis_tool.store.models import Flag, Value


class TestSetGet:
    def test_conditional_write_scenario(self, client):
        assert strings.set_value(client, "hello", "world", flags=[Flag.IF_NOT_EXISTS])

        assert not strings.set_value(client, "hello", "mars", flags=[Flag.IF_NOT_EXISTS])
        assert strings.get_value(client, "hello") == Value.of_text("world")

        assert strings.set_value(client, "hello", "venus", flags=[Flag.IF_EXISTS])
        assert strings.get_value(client, "hello") == Value.of_text("venus")

    def test_if_exists_on_missing_key(self, client):
        assert not strings.set_value(client, "missing", "x", flags=[Flag.IF_EXISTS])
        assert not strings.exists_value(client, "missing")

    def test_get_missing_is_absent(self, client):
        value = strings.get_value(client, "missing")
        assert not value.present

    def test_values_keep_their_kind(self, client):
        strings.set_value(client, "text", "42")
        strings.set_value(client, "number", 42)
        strings.set_value(client, "bytes", b"\x00\x01")
        assert strings.get_value(client, "text") == Value.of_text("42")
        assert strings.get_value(client, "number").as_int() == 42
        assert strings.get_value(client, "bytes").as_bytes() == b"\x00\x01"

    def test_setnx(self, client):
        assert strings.setnx(client, "k", "a")
        assert not strings.setnx(client, "k", "b")
        assert strings.get_value(client, "k").as_text() == "a"

    def test_getset(self, client):
        assert not strings.getset(client, "k", "a").present
        assert strings.getset(client, "k", "b").as_text() == "a"
        assert strings.get_value(client, "k").as_text() == "b"

    def test_delete(self, client):
        strings.set_value(client, "k", "v")
        assert strings.delete_value(client, "k")
        assert not strings.delete_value(client, "k")
        assert not strings.exists_value(client, "k")

    def test_strlen(self, client):
        strings.set_value(client, "k", "héllo")
        strings.set_value(client, "b", b"abc")
        assert strings.strlen(client, "k") == 5
        assert strings.strlen(client, "b") == 3
        assert strings.strlen(client, "missing") == 0


class TestTTL:
    def ttl_of(self, client, key):
        item = client.get_item(scalar_key(key).to_attributes())
        return int(item["ttl"]["N"]) if "ttl" in item else None

    def test_setex_stamps_ttl(self, client):
        before = int(time.time())
        strings.setex(client, "session", "abc", 60)
        assert before + 60 <= self.ttl_of(client, "session") <= int(time.time()) + 60

    def test_plain_set_clears_ttl(self, client):
        strings.setex(client, "session", "abc", 60)
        strings.set_value(client, "session", "def")
        assert self.ttl_of(client, "session") is None

    def test_keep_ttl(self, client):
        strings.setex(client, "session", "abc", 60)
        strings.set_value(client, "session", "def", flags=[Flag.KEEP_TTL])
        assert self.ttl_of(client, "session") is not None

    def test_setex_requires_positive_ttl(self, client):
        with pytest.raises(ValueError):
            strings.setex(client, "session", "abc", 0)


class TestMulti:
    def test_mset_mget(self, client):
        assert strings.mset(client, {"a": "1", "b": "2"})
        values = strings.mget(client, ["a", "missing", "b"])
        assert [value.as_text() for value in values] == ["1", None, "2"]

    def test_msetnx_is_all_or_nothing(self, client):
        strings.set_value(client, "b", "old")
        assert not strings.msetnx(client, {"a": "1", "b": "2"})
        assert not strings.exists_value(client, "a")
        assert strings.get_value(client, "b").as_text() == "old"


class TestCounters:
    def test_incr_from_missing(self, client):
        assert strings.incr(client, "counter") == 1
        assert strings.incr(client, "counter") == 2
        assert strings.decr(client, "counter") == 1

    def test_incr_by(self, client):
        assert strings.incr_by(client, "counter", 10) == 10
        assert strings.decr_by(client, "counter", 15) == -5

    def test_incr_by_float_is_exact(self, client):
        strings.incr_by_float(client, "f", Decimal("0.1"))
        assert strings.incr_by_float(client, "f", Decimal("0.2")) == Decimal("0.3")

    def test_incr_on_stored_number(self, client):
        strings.set_value(client, "counter", 41)
        assert strings.incr(client, "counter") == 42

    def test_incr_on_text_fails(self, client):
        strings.set_value(client, "k", "not a number")
        with pytest.raises(KVStoreError):
            strings.incr(client, "k")
