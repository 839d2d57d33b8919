"""FastAPI backend for the Plates answer engine."""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware

from plates_search.bus import GenerationBus
from plates_search.config import (
    GEMINI_API_KEY,
    GOOGLE_API_KEY,
    IS_DEV,
    PLATES_API_KEY,
    PLATES_BACKEND_PORT,
    SEARCH_ENGINE_ID,
)
from plates_search.context import EngineContext, build_context
from plates_search.engine import generate_content
from plates_search.models import (
    GenerateRequest,
    GenerateResponse,
    HealthResponse,
    OrganizeRequest,
    TopicSection,
)
from plates_search.organizer import organize_topics
from plates_search.sse import create_sse_router

_log = logging.getLogger("plates_search")

# Active generations: generation_id -> GenerationBus
_generations: dict[str, GenerationBus] = {}
# Strong refs so running tasks are not garbage-collected mid-flight
_tasks: dict[str, asyncio.Task] = {}


def _require_api_key(request: Request) -> None:
    """Reject requests without the configured ``x-api-key`` (no-op when unset)."""
    if not PLATES_API_KEY:
        return
    if request.headers.get("x-api-key") != PLATES_API_KEY:
        raise HTTPException(status_code=401, detail="Invalid or missing API key")


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """Startup/shutdown lifecycle — config check + stale generation cleanup."""
    if not GEMINI_API_KEY:
        _log.warning("GEMINI_API_KEY is not set. Generation requests will fail.")
    if not (GOOGLE_API_KEY and SEARCH_ENGINE_ID):
        _log.warning("Google search is not configured. Every sub-query will be skipped.")

    async def _cleanup_stale() -> None:
        while True:
            await asyncio.sleep(300)
            stale = [gid for gid, bus in _generations.items() if bus.is_done]
            for gid in stale:
                _generations.pop(gid, None)

    task = asyncio.create_task(_cleanup_stale())
    yield
    task.cancel()


app = FastAPI(
    title="Plates Answer Engine",
    version="0.1.0",
    lifespan=lifespan,
    dependencies=[Depends(_require_api_key)],
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(create_sse_router(_generations))


# ---------------------------------------------------------------------------
# Generation orchestration
# ---------------------------------------------------------------------------


async def _run_generation(
    generation_id: str, query: str, bus: GenerationBus, ctx: EngineContext | None = None
) -> None:
    """Run ``generate_content`` and record its statuses and outcome on *bus*."""
    if ctx is None:
        ctx = build_context()
    try:
        result = await generate_content(ctx, query, bus.status)
    except Exception as e:
        print(f"[GENERATE:{generation_id}] ERROR | {type(e).__name__}: {e}")
        bus.error(f"{type(e).__name__}: {e}")
        return
    finally:
        _tasks.pop(generation_id, None)

    if isinstance(result, str):
        print(f"[GENERATE:{generation_id}] Completed | text answer_len={len(result)}")
    else:
        print(f"[GENERATE:{generation_id}] Completed | sections={len(result)}")
    bus.done(result)


def _start_generation(generation_id: str, query: str, bus: GenerationBus) -> None:
    _tasks[generation_id] = asyncio.create_task(_run_generation(generation_id, query, bus))


# ---------------------------------------------------------------------------
# API endpoints
# ---------------------------------------------------------------------------


@app.post("/api/generate", response_model=GenerateResponse)
async def start_generation(req: GenerateRequest) -> GenerateResponse:
    if not req.query.strip():
        raise HTTPException(status_code=422, detail="Empty input provided")
    generation_id = str(uuid.uuid4())[:12]
    print(f"[API] POST /api/generate | generation={generation_id} query={req.query!r}")

    bus = GenerationBus()
    _generations[generation_id] = bus
    _start_generation(generation_id, req.query, bus)
    return GenerateResponse(generation_id=generation_id)


@app.post("/api/organize", response_model=list[TopicSection])
async def organize(req: OrganizeRequest) -> list[TopicSection]:
    return organize_topics(req.content)


@app.get("/api/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    generation = "configured" if GEMINI_API_KEY else "missing_key"
    search = "configured" if GOOGLE_API_KEY and SEARCH_ENGINE_ID else "missing_key"
    status = "ok" if generation == search == "configured" else "degraded"
    return HealthResponse(status=status, generation=generation, search=search)


def main() -> None:
    import uvicorn

    uvicorn.run("plates_search.api:app", host="0.0.0.0", port=PLATES_BACKEND_PORT, reload=IS_DEV)


if __name__ == "__main__":
    main()
