#!/usr/bin/env python3
"""
Tests for the inbound webhook endpoint
"""
import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

from fastapi.testclient import TestClient

from replybot import main

WAHA_MESSAGE = {
    "event": "message",
    "session": "default",
    "payload": {"from": "628123@c.us", "body": "Jam buka jam berapa?", "fromMe": False},
}


def make_engine():
    engine = MagicMock()
    engine.handle_event = AsyncMock()
    engine.llm.get_provider_name.return_value = "OpenAI"
    engine.log_queue.qsize.return_value = 0
    engine.log_queue.dropped = 0
    return engine


def test_webhook_schedules_engine():
    engine = make_engine()
    with patch.object(main, "engine", engine):
        # no context manager: startup wiring is not triggered
        response = TestClient(main.app).post("/webhook", json=WAHA_MESSAGE)

    assert response.json() == {"status": "ok"}
    event = engine.handle_event.call_args.args[0]
    assert event.sender_id == "628123"
    assert event.text == "Jam buka jam berapa?"


def test_webhook_ignores_unknown_and_non_actionable_payloads():
    engine = make_engine()
    client = TestClient(main.app)
    with patch.object(main, "engine", engine):
        assert client.post("/webhook", json={"hello": "world"}).json() == {"status": "ignored"}
        own = {**WAHA_MESSAGE, "payload": {**WAHA_MESSAGE["payload"], "fromMe": True}}
        assert client.post("/webhook", json=own).json() == {"status": "ignored"}

    engine.handle_event.assert_not_called()


def test_health_reports_queue_depth():
    with patch.object(main, "engine", make_engine()):
        body = TestClient(main.app).get("/health").json()

    assert body["status"] == "ok"
    assert body["llm_provider"] == "OpenAI"
    assert body["log_queue_depth"] == 0


def test_shutdown_drains_queue_and_closes_backends():
    engine = make_engine()
    engine.log_queue.stop = AsyncMock()
    engine.llm.aclose = AsyncMock()
    engine.knowledge.close = AsyncMock()

    with patch.object(main, "engine", engine):
        asyncio.run(main.shutdown_event())

    engine.log_queue.stop.assert_awaited_once()
    engine.llm.aclose.assert_awaited_once()
    engine.knowledge.close.assert_awaited_once()
