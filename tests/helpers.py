"""Test doubles for the provider clients."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import httpx


def make_response(data: Any = None, status_code: int = 200, text: str = "") -> MagicMock:
    """Build a MagicMock shaped like an ``httpx.Response``."""
    resp = MagicMock(spec=httpx.Response)
    resp.status_code = status_code
    resp.is_success = 200 <= status_code < 300
    resp.reason_phrase = "OK" if resp.is_success else "Internal Server Error"
    resp.text = text
    resp.json.return_value = data if data is not None else {}
    return resp


def make_item(n: int, snippet: str | None = None, **extra: Any) -> dict:
    item = {
        "title": f"Title {n}",
        "link": f"https://example.org/{n}",
        "snippet": f"Snippet {n}" if snippet is None else snippet,
    }
    item.update(extra)
    return item


def scripted_generator(
    needs_search: str = "yes",
    optimized: str = "- first term\n- second term",
    answer: str = "### Introduction\nAn answer.",
) -> AsyncMock:
    """Generator mock that answers by prompt kind."""

    def _generate(prompt: str, max_tokens: int = 8000, temperature: float = 0.1) -> str:
        if "requires web search" in prompt:
            return needs_search
        if "Convert this query" in prompt:
            return optimized
        if "clear, concise explanation" in prompt:
            return "A direct explanation."
        return answer

    return AsyncMock(side_effect=_generate)
