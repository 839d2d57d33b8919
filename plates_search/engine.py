"""Answer orchestration: classify, aggregate, generate, organize."""

from __future__ import annotations

import logging
import re
import time
from typing import TYPE_CHECKING

from plates_search.aggregator import StatusCallback, notify, search_and_fetch_content
from plates_search.classifier import break_into_single_topics, detect_multi_topic_query
from plates_search.organizer import count_headings, organize_topics
from plates_search.prompts import build_answer_prompt

if TYPE_CHECKING:
    from plates_search.context import EngineContext
    from plates_search.models import Quote, TopicSection

_log = logging.getLogger("plates_search")

_WHITESPACE = re.compile(r"\s+")


class EngineError(RuntimeError):
    """A required step produced nothing usable (empty input, no results, no sections)."""


def _log_status(status: str) -> None:
    _log.info("Status: %s", status)


def process_content(content: str, quotes: list[Quote] | None = None) -> str:
    """Normalise free text (e.g. a transcript) and append any quotes as citations."""
    if not content or not isinstance(content, str):
        _log.warning("Invalid content received: %r", content)
        return ""
    clean = _WHITESPACE.sub(" ", content).strip()
    if quotes:
        clean += "\n\nRelevant Quotes:\n" + "\n".join(q.citation() for q in quotes)
    return clean


async def generate_content(
    ctx: EngineContext,
    text: str,
    status_callback: StatusCallback | None = None,
) -> str | list[TopicSection]:
    """Answer *text* from web sources via one grounded generation call.

    Returns the organized sections when the answer carries ``### `` headings,
    otherwise the raw answer text. Callers must branch on the result type.

    Raises:
        EngineError: empty input, no aggregated results, empty generation, or
            headings present but nothing could be organized.
        GenerationError: the final generation call failed.
        ConfigurationError: the Gemini key is missing; raised by the first
            classifier call, before any search.
    """
    if not text or not text.strip():
        raise EngineError("Empty input provided")
    if status_callback is None:
        status_callback = _log_status

    question = text.strip()
    is_multi_topic = detect_multi_topic_query(question)
    topics = break_into_single_topics(question) if is_multi_topic else None
    t0 = time.monotonic()

    notify(status_callback, "Searching for relevant information")
    results = await search_and_fetch_content(ctx, question, status_callback)
    if not results:
        raise EngineError("No relevant information found")

    prompt = build_answer_prompt(question, results, multi_topic=is_multi_topic, topics=topics)
    notify(status_callback, "Formulating detailed response...")
    response = await ctx.generator.generate(prompt)
    if not response or not response.strip():
        raise EngineError("Empty response received")

    n_headings = count_headings(response)
    elapsed_ms = int((time.monotonic() - t0) * 1000)
    print(
        f"[generate] multi_topic={is_multi_topic} sources={len(results)} "
        f"answer_len={len(response)} headings={n_headings} time={elapsed_ms}ms"
    )
    if n_headings == 0:
        return response

    sections = organize_topics(response)
    if not sections:
        raise EngineError("Failed to organize response into sections")
    return sections
