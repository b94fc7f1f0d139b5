"""Tests for BatchWriter."""

import pytest

from dynamo_redis_tool.store.core.batch import BatchWriter, delete_request, put_request
from dynamo_redis_tool.store.core.keys import ItemKey
from dynamo_redis_tool.store.exceptions import BatchWriteError


class FakeBatchClient:
    """Hands back a scripted number of unprocessed requests per call."""

    def __init__(self, unprocessed_counts):
        self.unprocessed_counts = list(unprocessed_counts)
        self.calls = []

    def batch_write_item(self, requests):
        self.calls.append(list(requests))
        count = self.unprocessed_counts.pop(0) if self.unprocessed_counts else 0
        return requests[len(requests) - count :] if count else []


def requests(count: int) -> list[dict]:
    return [put_request(ItemKey("k", f"m{i:03d}"), {"type": {"S": "set"}}) for i in range(count)]


class TestBatchWriter:
    def test_requests_split_into_chunks_of_25(self):
        fake = FakeBatchClient([])
        assert BatchWriter(fake).write(requests(60)) == 60
        assert [len(call) for call in fake.calls] == [25, 25, 10]

    def test_only_unprocessed_are_resubmitted(self):
        fake = FakeBatchClient([10, 4, 1])
        assert BatchWriter(fake, backoff_base=0).write(requests(20)) == 20
        assert [len(call) for call in fake.calls] == [20, 10, 4, 1]
        assert fake.calls[1] == requests(20)[10:]

    def test_stall_raises_with_progress_report(self):
        fake = FakeBatchClient([5] + [5] * 10)
        writer = BatchWriter(fake, max_stalled_rounds=3, backoff_base=0)
        with pytest.raises(BatchWriteError) as excinfo:
            writer.write(requests(8))
        assert excinfo.value.written == 3
        assert len(excinfo.value.pending) == 5
        assert len(fake.calls) == 4

    def test_stall_counter_resets_on_progress(self):
        fake = FakeBatchClient([4, 3, 3, 2, 0])
        writer = BatchWriter(fake, max_stalled_rounds=2, backoff_base=0)
        assert writer.write(requests(4)) == 4

    def test_empty_input(self):
        fake = FakeBatchClient([])
        assert BatchWriter(fake).write([]) == 0
        assert fake.calls == []

    def test_against_table(self, client):
        items = requests(30) + [delete_request(ItemKey("k", "missing"))]
        assert BatchWriter(client).write(items) == 31
