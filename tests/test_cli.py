"""Tests for the command line interface."""

import json

import pytest
from click.testing import CliRunner

from dynamo_redis_tool.cli import main
from tests.conftest import TABLE_NAME

runner = CliRunner()


def store(*args: str):
    return runner.invoke(main, ["store", *args, "--table", TABLE_NAME])


def store_json(*args: str) -> dict:
    result = store(*args)
    assert result.exit_code == 0, result.output
    return json.loads(result.stdout)


class TestRootApp:
    def test_help_lists_commands(self):
        result = runner.invoke(main, ["store", "--help"])
        assert result.exit_code == 0
        for command in ("create-table", "set", "hgetall", "zrangebyscore", "xadd"):
            assert command in result.output

    def test_version(self):
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output


@pytest.mark.usefixtures("table")
class TestTableCommands:
    def test_create_existing_table(self):
        result = store("create-table")
        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_drop_requires_approval(self):
        result = store("drop-table")
        assert result.exit_code == 2
        assert "approval" in result.output

    def test_drop_table(self):
        assert store_json("drop-table", "--approve")["table"] == TABLE_NAME

    def test_invalid_table_name(self):
        result = runner.invoke(main, ["store", "get", "k", "--table", "no"])
        assert result.exit_code == 2


@pytest.mark.usefixtures("mocked_aws")
def test_create_table():
    output = store_json("create-table")
    assert output["table"] == TABLE_NAME
    assert output["status"] == "ACTIVE"


@pytest.mark.usefixtures("table")
class TestStringCommands:
    def test_set_get_del(self):
        assert store_json("set", "greeting", "hello")["applied"] is True
        assert store_json("get", "greeting") == {"key": "greeting", "value": "hello"}
        assert store_json("del", "greeting")["deleted"] is True

    def test_set_nx(self):
        store_json("set", "greeting", "hello")
        assert store_json("set", "greeting", "bye", "--nx")["applied"] is False

    def test_get_missing_exits_1(self):
        result = store("get", "missing")
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_text_output(self):
        store_json("set", "greeting", "hello")
        result = store("get", "greeting", "--text")
        assert result.stdout.strip() == "greeting = hello"

    def test_incr(self):
        assert store_json("incr", "hits")["value"] == 1
        assert store_json("incr", "hits", "--by", "5")["value"] == 6

    def test_incr_on_number_set(self):
        store_json("set", "hits", "41", "--number")
        assert store_json("incr", "hits")["value"] == 42

    def test_mset(self):
        assert store_json("mset", "a", "1", "b", "2")["applied"] is True
        assert store_json("get", "b")["value"] == "2"

    def test_mset_odd_arguments(self):
        assert store("mset", "a", "1", "b").exit_code == 2

    def test_invalid_number(self):
        assert store("set", "k", "abc", "--number").exit_code == 2


@pytest.mark.usefixtures("table")
class TestCollectionCommands:
    def test_hashes(self):
        assert store_json("hset", "user", "name", "alice", "role", "admin")["written"] == 2
        assert store_json("hget", "user", "name")["value"] == "alice"
        assert store_json("hgetall", "user")["fields"] == {"name": "alice", "role": "admin"}
        assert store_json("hdel", "user", "role")["deleted"] == 1
        assert store("hget", "user", "role").exit_code == 1

    def test_sets(self):
        assert store_json("sadd", "agents", "b", "a")["added"] == 2
        assert store_json("smembers", "agents")["members"] == ["a", "b"]
        assert store_json("srem", "agents", "a")["removed"] == 1
        assert store_json("scard", "agents")["count"] == 1

    def test_sorted_sets(self):
        assert store_json("zadd", "board", "100", "alice", "85.5", "bob")["added"] == 2
        assert store_json("zscore", "board", "bob")["score"] == 85.5
        members = store_json("zrangebyscore", "board", "90", "inf")["members"]
        assert members == [{"member": "alice", "score": 100.0}]

    def test_zadd_bad_score(self):
        assert store("zadd", "board", "high", "alice").exit_code == 2

    def test_lists(self):
        assert store_json("rpush", "queue", "a", "b")["length"] == 2
        assert store_json("lpush", "queue", "z")["length"] == 3
        assert store_json("lrange", "queue")["items"] == ["z", "a", "b"]
        assert store_json("lrange", "queue", "--start", "-1")["items"] == ["b"]
        assert store_json("lpop", "queue")["value"] == "z"
        assert store_json("rpop", "queue")["value"] == "b"

    def test_pop_empty_exits_1(self):
        assert store("lpop", "empty").exit_code == 1

    def test_streams(self):
        first = store_json("xadd", "events", "type", "login")
        second = store_json("xadd", "events", "type", "logout")
        assert first["id"] < second["id"]
        assert store_json("xlen", "events")["length"] == 2

        entries = store_json("xrange", "events")["entries"]
        assert [entry["fields"]["type"] for entry in entries] == ["login", "logout"]

    def test_xadd_stale_id_exits_1(self):
        store_json("xadd", "events", "a", "1", "--id", "00000000000000000010-00000000000000000000")
        result = store("xadd", "events", "a", "2", "--id", "00000000000000000009-00000000000000000000")
        assert result.exit_code == 1

    def test_xrange_bad_id_exits_2(self):
        assert store("xrange", "events", "--start", "nonsense").exit_code == 2
