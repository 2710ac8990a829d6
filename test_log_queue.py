#!/usr/bin/env python3
"""
Tests for the bounded conversation log queue and the MySQL conversation logger
"""
import asyncio
import threading
from unittest.mock import MagicMock

import mysql.connector
import pytest

from replybot.conversation_log import ConversationLogger
from replybot.errors import ConversationLogError
from replybot.log_queue import DROP_OLDEST, REJECT, ConversationLogQueue
from replybot.models import ConversationRecord


def record(n):
    return ConversationRecord(client_id="c1", sender_id=f"62800{n}", request_text=f"q{n}", response_text=f"a{n}")


def test_workers_drain_queue_into_sink():
    written = []

    async def scenario():
        queue = ConversationLogQueue(written.append, maxsize=10, workers=3)
        queue.start()
        for i in range(5):
            assert queue.submit(record(i))
        await queue.join()
        await queue.stop()
        return queue

    queue = asyncio.run(scenario())
    assert sorted(r.sender_id for r in written) == [f"62800{i}" for i in range(5)]
    assert queue.written == 5
    assert queue.dropped == 0


def test_drop_oldest_keeps_newest_records():
    async def scenario():
        queue = ConversationLogQueue(lambda r: None, maxsize=2, workers=1, overflow_policy=DROP_OLDEST)
        results = [queue.submit(record(i)) for i in range(4)]
        pending = [queue._queue.get_nowait().sender_id for _ in range(queue.qsize())]
        return queue, results, pending

    queue, results, pending = asyncio.run(scenario())
    assert results == [True, True, True, True]
    assert pending == ["628002", "628003"]
    assert queue.dropped == 2


def test_reject_discards_new_records():
    async def scenario():
        queue = ConversationLogQueue(lambda r: None, maxsize=2, workers=1, overflow_policy=REJECT)
        results = [queue.submit(record(i)) for i in range(4)]
        pending = [queue._queue.get_nowait().sender_id for _ in range(queue.qsize())]
        return queue, results, pending

    queue, results, pending = asyncio.run(scenario())
    assert results == [True, True, False, False]
    assert pending == ["628000", "628001"]
    assert queue.dropped == 2


def test_submit_never_blocks_while_sink_is_stuck():
    release = threading.Event()

    def slow_sink(rec):
        release.wait(timeout=5)

    async def scenario():
        queue = ConversationLogQueue(slow_sink, maxsize=1, workers=1)
        queue.start()
        for i in range(50):
            queue.submit(record(i))
        dropped = queue.dropped
        release.set()
        await queue.stop(timeout=5)
        return dropped

    assert asyncio.run(scenario()) > 0


def test_sink_failures_are_counted_not_retried():
    calls = []

    def failing_sink(rec):
        calls.append(rec)
        raise ConversationLogError("db down")

    async def scenario():
        queue = ConversationLogQueue(failing_sink, maxsize=10, workers=2)
        queue.start()
        queue.submit(record(1))
        queue.submit(record(2))
        await queue.stop(timeout=5)
        return queue

    queue = asyncio.run(scenario())
    assert len(calls) == 2
    assert queue.failed == 2
    assert queue.written == 0


def test_invalid_settings_rejected():
    with pytest.raises(ValueError):
        ConversationLogQueue(lambda r: None, overflow_policy="block")
    with pytest.raises(ValueError):
        ConversationLogQueue(lambda r: None, maxsize=0)


# --- ConversationLogger ----------------------------------------------------

def test_logger_inserts_then_increments_credits():
    db = MagicMock()
    ConversationLogger(db).log_conversation("c1", "628123", "Jam buka?", "08.00-21.00")

    first, second = db.execute.call_args_list
    assert "INSERT INTO conversations" in first.args[0]
    assert first.args[1][:4] == ("c1", "628123", "Jam buka?", "08.00-21.00")
    assert "credits_used = credits_used + 1" in second.args[0]
    assert second.args[1] == ("c1",)


def test_logger_credit_failure_is_best_effort():
    db = MagicMock()
    db.execute.side_effect = [1, mysql.connector.Error("lock wait timeout")]
    ConversationLogger(db).log_conversation("c1", "628123", "q", "a")
    assert db.execute.call_count == 2


def test_logger_insert_failure_raises():
    db = MagicMock()
    db.execute.side_effect = mysql.connector.Error("table missing")
    with pytest.raises(ConversationLogError):
        ConversationLogger(db).log_conversation("c1", "628123", "q", "a")
    assert db.execute.call_count == 1
