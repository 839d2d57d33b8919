"""tests/test_sse.py"""

import json
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from starlette.testclient import TestClient

from plates_search.bus import GenerationBus
from plates_search.models import TopicSection
from plates_search.sse import create_sse_router, generation_stream, stream_events


def _events(response) -> list[dict]:
    lines = [line for line in response.text.strip().split("\n") if line.startswith("data:")]
    return [json.loads(line.removeprefix("data: ")) for line in lines]


async def _collect(frames) -> list[str]:
    return [frame async for frame in frames]


class TestSSEEndpoint:
    def setup_method(self):
        self.app = FastAPI()
        self.generations: dict[str, GenerationBus] = {}
        self.app.include_router(create_sse_router(self.generations))

    def test_stream_returns_events(self):
        bus = GenerationBus()
        bus.status("Searching for relevant information")
        bus.done("result")
        self.generations["g1"] = bus

        response = TestClient(self.app).get("/api/generate/g1/stream", timeout=5)
        events = _events(response)
        assert [e["type"] for e in events] == ["status", "done"]
        assert events[0]["data"] == {"message": "Searching for relevant information"}
        assert events[1]["data"] == {"kind": "text", "text": "result"}
        # Finished generation is released
        assert "g1" not in self.generations

    def test_sections_streamed_as_objects(self):
        bus = GenerationBus()
        bus.done(
            [
                TopicSection(id="topic-1", title="Introduction", content="foo"),
                TopicSection(id="topic-2", title="Ruling", content="bar"),
            ]
        )
        self.generations["g1"] = bus

        response = TestClient(self.app).get("/api/generate/g1/stream", timeout=5)
        (done,) = _events(response)
        assert done["data"]["kind"] == "sections"
        assert [s["title"] for s in done["data"]["sections"]] == ["Introduction", "Ruling"]
        assert "text" not in done["data"]

    def test_stream_404_for_unknown_generation(self):
        response = TestClient(self.app).get("/api/generate/unknown/stream")
        assert response.status_code == 404
        assert response.json()["detail"] == "Generation not found"

    def test_replay_sends_full_history(self):
        bus = GenerationBus()
        bus.status("first")
        bus.read(0)  # an earlier client already received it
        bus.error("EngineError: No relevant information found")
        self.generations["g1"] = bus

        response = TestClient(self.app).get("/api/generate/g1/stream?replay=true", timeout=5)
        assert [e["type"] for e in _events(response)] == ["status", "error"]

    def test_resume_skips_delivered_events(self):
        bus = GenerationBus()
        bus.status("first")
        bus.read(0)
        bus.error("EngineError: No relevant information found")
        self.generations["g1"] = bus

        response = TestClient(self.app).get("/api/generate/g1/stream", timeout=5)
        assert [e["type"] for e in _events(response)] == ["error"]

    def test_timeout_fails_generation(self):
        app = FastAPI()
        bus = GenerationBus()
        generations = {"g1": bus}
        app.include_router(create_sse_router(generations, deadline_s=0))

        response = TestClient(app).get("/api/generate/g1/stream", timeout=5)
        events = _events(response)
        assert events[-1]["type"] == "error"
        assert events[-1]["data"]["message"] == "Generation timed out"
        # A late result cannot overwrite the timeout
        bus.done("late answer")
        assert [e.type for e in bus.events] == ["error"]
        assert "g1" not in generations


class TestGenerationStream:
    @pytest.mark.asyncio
    async def test_disconnect_after_completion_releases_generation(self):
        bus = GenerationBus()
        bus.done("answer")
        bus.read(0)  # delivered to a reader that has since gone away
        generations = {"g1": bus}

        frames = await _collect(
            generation_stream(generations, "g1", bus, is_disconnected=AsyncMock(return_value=True))
        )
        assert frames == []
        assert "g1" not in generations

    @pytest.mark.asyncio
    async def test_disconnect_mid_run_keeps_generation(self):
        bus = GenerationBus()
        bus.status("Searching for relevant information")
        generations = {"g1": bus}

        frames = await _collect(
            generation_stream(generations, "g1", bus, is_disconnected=AsyncMock(return_value=True))
        )
        assert len(frames) == 1
        assert "g1" in generations

    @pytest.mark.asyncio
    async def test_stream_events_stops_at_terminal(self):
        bus = GenerationBus()
        bus.status("one")
        bus.done("answer")
        frames = await _collect(stream_events(bus, replay=True))
        assert [json.loads(f.removeprefix("data: "))["type"] for f in frames] == ["status", "done"]
        assert all(f.endswith("\n\n") for f in frames)
