"""Server-sent events stream of one generation's status and result."""

from __future__ import annotations

import asyncio
import time
from collections.abc import AsyncIterator, Awaitable, Callable

from fastapi import APIRouter, HTTPException, Query, Request
from starlette.responses import StreamingResponse

from plates_search.bus import GenerationBus
from plates_search.models import GenerationEvent

KEEPALIVE_S = 15
POLL_S = 0.1

Disconnected = Callable[[], Awaitable[bool]]


def format_event(event: GenerationEvent) -> str:
    return f"data: {event.model_dump_json(exclude_none=True)}\n\n"


async def stream_events(
    bus: GenerationBus,
    *,
    replay: bool = False,
    is_disconnected: Disconnected | None = None,
    deadline_s: float = 600,
) -> AsyncIterator[str]:
    """Yield SSE frames for *bus* up to and including its terminal event.

    With *replay* the full history is sent first, otherwise the stream resumes
    after the last event any reader received. Past *deadline_s* the generation
    is failed with ``Generation timed out``.
    """
    cursor = 0 if replay else bus.delivered
    deadline = time.monotonic() + deadline_s
    last_sent = time.monotonic()

    while time.monotonic() < deadline:
        events, cursor = bus.read(cursor)
        for event in events:
            yield format_event(event)
        if events:
            if events[-1].is_terminal:
                return
            last_sent = time.monotonic()

        if is_disconnected is not None and await is_disconnected():
            return
        if time.monotonic() - last_sent >= KEEPALIVE_S:
            yield ": keepalive\n\n"
            last_sent = time.monotonic()
        await asyncio.sleep(POLL_S)

    bus.error("Generation timed out")
    events, _ = bus.read(cursor)
    for event in events:
        yield format_event(event)


async def generation_stream(
    generations: dict[str, GenerationBus],
    generation_id: str,
    bus: GenerationBus,
    **kwargs,
) -> AsyncIterator[str]:
    """``stream_events`` for a registered generation, released once it has finished.

    Release happens however the reader leaves (terminal event, disconnect,
    timeout), but only when the generation is done, so a client that drops
    mid-run can still reconnect.
    """
    try:
        async for frame in stream_events(bus, **kwargs):
            yield frame
    finally:
        if bus.is_done:
            generations.pop(generation_id, None)


def create_sse_router(generations: dict[str, GenerationBus], deadline_s: float = 600) -> APIRouter:
    router = APIRouter()

    @router.get("/api/generate/{generation_id}/stream")
    async def stream_generation(
        generation_id: str,
        request: Request,
        replay: bool = Query(default=False),
    ) -> StreamingResponse:
        bus = generations.get(generation_id)
        if bus is None:
            raise HTTPException(status_code=404, detail="Generation not found")

        frames = generation_stream(
            generations,
            generation_id,
            bus,
            replay=replay,
            is_disconnected=request.is_disconnected,
            deadline_s=deadline_s,
        )
        return StreamingResponse(
            frames,
            media_type="text/event-stream",
            headers={
                "Cache-Control": "no-cache",
                "Connection": "keep-alive",
                "X-Accel-Buffering": "no",
            },
        )

    return router
