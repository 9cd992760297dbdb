"""
HTTP surface tests via httpx.ASGITransport.
"""
import asyncio
import json
import sys
import os
from unittest.mock import patch

from httpx import AsyncClient, ASGITransport

# Ensure src is on path
sys.path.insert(0, os.path.dirname(__file__))
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from fakes import FakeDataSource, game, patched_llms, response
from game_agent.config import Settings
from game_agent.server import KEYS_NOT_CONFIGURED, MESSAGE_REQUIRED, create_app, sse_frame

PLAN = {
    "reasoning": "count zelda games",
    "actions": [{"action": "fetch", "id": "zelda", "params": {"search": "zelda"}, "description": "Zelda"}],
}


async def _request(app, method: str, url: str, **kwargs):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        return await client.request(method, url, **kwargs)


def _parse_sse(text: str):
    frames = []
    for block in text.strip().split("\n\n"):
        lines = dict(line.split(": ", 1) for line in block.split("\n"))
        frames.append((lines["event"], json.loads(lines["data"])))
    return frames


def test_health():
    res = asyncio.run(_request(create_app(FakeDataSource()), "GET", "/api/health"))
    assert res.status_code == 200
    assert res.json()["status"] == "ok"
    assert "timestamp" in res.json()


def test_chat_requires_message():
    app = create_app(FakeDataSource())
    for body in ({}, {"message": ""}, {"message": 42}):
        res = asyncio.run(_request(app, "POST", "/api/chat", json=body))
        assert res.status_code == 400
        assert res.json() == {"error": MESSAGE_REQUIRED}


def test_chat_without_keys_is_500():
    with patch("game_agent.server.load_settings", return_value=Settings()):
        res = asyncio.run(_request(create_app(), "POST", "/api/chat", json={"message": "hi"}))
    assert res.status_code == 500
    assert res.json() == {"error": KEYS_NOT_CONFIGURED}


def test_chat_returns_agent_response():
    app = create_app(FakeDataSource(response([game("Zelda")], total_count=57)))

    with patched_llms(planner=[PLAN], reviewer=[{"satisfactory": True, "reasoning": "ok"}],
                      answer=["There are **57** Zelda games."]):
        res = asyncio.run(_request(app, "POST", "/api/chat",
                                   json={"message": "How many zelda games?", "geminiApiKey": "test-key"}))

    assert res.status_code == 200
    body = res.json()
    assert body["answer"] == "There are **57** Zelda games."
    assert body["steps"][0]["name"] == "Analyzing Query"
    assert body["widgets"][0]["total_count"] == 57


def test_chat_stream_emits_sse_frames():
    app = create_app(FakeDataSource(response([game("Zelda")], total_count=57)))

    with patched_llms(planner=[PLAN], reviewer=[{"satisfactory": True, "reasoning": "ok"}],
                      answer=["**57**"]):
        res = asyncio.run(_request(app, "POST", "/api/chat/stream",
                                   json={"message": "How many zelda games?", "geminiApiKey": "test-key"}))

    assert res.status_code == 200
    assert res.headers["content-type"].startswith("text/event-stream")
    frames = _parse_sse(res.text)
    events = [event for event, _ in frames]
    assert events[0] == "step"
    assert events[-2:] == ["answer", "done"]
    assert frames[-2][1]["answer"] == "**57**"
    assert frames[-1][1] == {"complete": True}


def test_chat_stream_rejects_missing_message():
    res = asyncio.run(_request(create_app(FakeDataSource()), "POST", "/api/chat/stream", json={}))
    assert _parse_sse(res.text) == [("error", {"error": MESSAGE_REQUIRED})]


def test_sse_frame_format():
    assert sse_frame("step", {"a": 1}) == 'event: step\ndata: {"a": 1}\n\n'


if __name__ == "__main__":
    test_health()
    test_chat_stream_emits_sse_frames()
    print("✅ PASSED: server")
