"""Per-request engine context — holds the provider clients."""

from __future__ import annotations

import dataclasses
from typing import Any

from plates_search.clients import GeminiClient, GoogleSearchClient


@dataclasses.dataclass
class EngineContext:
    """Collaborators passed explicitly through every engine call.

    Every stage receives ``ctx`` as its first argument instead of reaching
    for process-wide clients, so tests swap in mocks and concurrent requests
    never share mutable state.
    """

    generator: Any  # exposes ``async generate(prompt, max_tokens, temperature) -> str``
    searcher: Any  # exposes ``async search(query, search_type=None, num=None) -> httpx.Response``


def build_context(
    gemini_api_key: str | None = None,
    google_api_key: str | None = None,
    search_engine_id: str | None = None,
) -> EngineContext:
    """Build an ``EngineContext`` from config defaults, with optional key overrides."""
    gen_kwargs: dict[str, Any] = {}
    if gemini_api_key is not None:
        gen_kwargs["api_key"] = gemini_api_key
    search_kwargs: dict[str, Any] = {}
    if google_api_key is not None:
        search_kwargs["api_key"] = google_api_key
    if search_engine_id is not None:
        search_kwargs["engine_id"] = search_engine_id
    return EngineContext(
        generator=GeminiClient(**gen_kwargs),
        searcher=GoogleSearchClient(**search_kwargs),
    )
