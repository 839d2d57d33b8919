"""Query classification: search necessity, multi-topic detection, query expansion.

Every collaborator call here is wrapped; on failure the functions degrade to
a safe default (search needed, original query). A missing provider key is not
a provider failure and always propagates.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from plates_search.clients.gemini import ConfigurationError
from plates_search.constants import MAX_SUB_QUERIES, SIMPLE_QUERY_LEN
from plates_search.prompts import build_needs_search_prompt, build_optimize_prompt

if TYPE_CHECKING:
    from plates_search.context import EngineContext

_log = logging.getLogger("plates_search")

_MULTI_TOPIC_PATTERNS = [
    re.compile(r"\d+\s*[.)]\s*\w+"),  # numbered points
    re.compile(r"(?:^|\s)[-•*]\s*\w+"),  # bullet markers
    re.compile(r"\?.*\?"),  # two question marks
    re.compile(r"\?.+and.+\?", re.IGNORECASE),
    re.compile(r"\b(?:what about|also|additionally)\b", re.IGNORECASE),
    re.compile(r"\?\s+[A-Z]"),  # a new sentence after a question
]

_NUMBERED_ITEM = re.compile(r"\d+[.)]\s*[^.?!]+[.?!]")
_BULLET_ITEM = re.compile(r"[-•*]\s*[^.?!]+[.?!]")
_QUESTION = re.compile(r"[^.!?]+\?")
_CONJUNCTION_SPLIT = re.compile(r"\s+(?:and|vs|versus)\s+", re.IGNORECASE)


async def needs_web_search(ctx: EngineContext, query: str) -> bool:
    """Ask the generator whether *query* needs fresh sources.

    Fails open: any provider error means ``True``. ``ConfigurationError`` propagates.
    """
    try:
        decision = await ctx.generator.generate(
            build_needs_search_prompt(query), max_tokens=1024, temperature=0.1
        )
    except ConfigurationError:
        raise
    except Exception as e:
        _log.warning("Failed to determine search necessity, assuming search: %s", e)
        return True
    return decision.strip().rstrip(".").strip().lower() == "yes"


def detect_multi_topic_query(query: str) -> bool:
    """Return True if *query* shows any structural sign of several topics."""
    return any(p.search(query) for p in _MULTI_TOPIC_PATTERNS)


def is_simple_query(query: str) -> bool:
    return len(query) < SIMPLE_QUERY_LEN and " and " not in query and "?" not in query


async def optimize_query(ctx: EngineContext, query: str) -> list[str]:
    """Expand *query* into at most 3 sub-queries, original first.

    Short simple queries are returned as-is without a generator call.
    """
    if is_simple_query(query):
        return [query]

    try:
        raw = await ctx.generator.generate(
            build_optimize_prompt(query), max_tokens=1024, temperature=0.3
        )
    except ConfigurationError:
        raise
    except Exception as e:
        _log.warning("Query optimization failed, using original query: %s", e)
        return [query]

    queries = [query]
    for line in raw.split("\n"):
        line = line.strip()
        if not line.startswith("-"):
            continue
        term = line[1:].strip()
        if term:
            queries.append(term)
    optimized = list(dict.fromkeys(queries))[:MAX_SUB_QUERIES]
    print(f"[classify] optimized {query[:60]!r} -> {optimized}")
    return optimized


def break_into_single_topics(query: str) -> list[str]:
    """Split a multi-topic question into its individual topics.

    Tries numbered items, bullet items, separate questions, then a split on
    ``and``/``vs``/``versus``. Falls back to ``[query]``.
    """
    numbered = _NUMBERED_ITEM.findall(query)
    if len(numbered) > 1:
        return [m.strip() for m in numbered]

    bullets = _BULLET_ITEM.findall(query)
    if len(bullets) > 1:
        return [m.strip() for m in bullets]

    questions = _QUESTION.findall(query)
    if len(questions) > 1:
        return [q.strip() for q in questions]

    if any(sep in query for sep in (" and ", " vs ", " versus ")):
        parts = [p.strip() for p in _CONJUNCTION_SPLIT.split(query)]
        parts = [p for p in parts if len(p) > 10]
        if len(parts) > 1:
            return parts

    return [query]
