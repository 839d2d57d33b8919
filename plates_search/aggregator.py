"""Result aggregation: run sub-queries against the search provider and package results."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from plates_search.classifier import needs_web_search, optimize_query
from plates_search.clients.gemini import ConfigurationError
from plates_search.constants import (
    DIRECT_ANSWER_TITLE,
    EXCERPT_LEN,
    MAX_IMAGES,
    MAX_RESULTS_PER_QUERY,
    MAX_TOTAL_RESULTS,
)
from plates_search.models import ImageResult, Quote, SearchResult
from plates_search.prompts import build_direct_answer_prompt

if TYPE_CHECKING:
    from plates_search.context import EngineContext

_log = logging.getLogger("plates_search")

StatusCallback = Callable[[str], None]


def notify(status_callback: StatusCallback | None, status: str) -> None:
    """Fire-and-forget status update; a failing sink never breaks the flow."""
    if status_callback is None:
        return
    try:
        status_callback(status)
    except Exception:
        _log.debug("status callback failed for %r", status, exc_info=True)


def select_content(item: dict[str, Any]) -> str:
    """Pick the richest text for a search hit: snippet, longer meta description, or placeholder."""
    content = item.get("snippet") or ""
    metatags = (item.get("pagemap") or {}).get("metatags") or []
    if metatags and isinstance(metatags[0], dict):
        meta = metatags[0]
        description = meta.get("og:description") or meta.get("description")
        if description and len(description) > len(content):
            content = description
    if not content:
        content = f"Information from {item.get('title', '')}"
    return content


def make_excerpt(content: str, limit: int = EXCERPT_LEN) -> str:
    excerpt = content[:limit].strip()
    if len(content) > limit:
        excerpt += "..."
    return excerpt


def parse_images(image_resp: Any) -> list[ImageResult]:
    """Extract up to ``MAX_IMAGES`` images; any failure just means no images.

    A single unusable item (no link, wrong shape) is skipped on its own.
    """
    if isinstance(image_resp, BaseException) or not getattr(image_resp, "is_success", False):
        return []
    try:
        items = image_resp.json().get("items") or []
    except (ValueError, AttributeError) as e:
        _log.warning("Image results unusable: %s", e)
        return []

    images: list[ImageResult] = []
    for item in items:
        if len(images) >= MAX_IMAGES:
            break
        if not isinstance(item, dict) or not item.get("link"):
            continue
        try:
            image = item.get("image") or {}
            images.append(
                ImageResult(
                    url=item["link"],
                    title=item.get("title") or "",
                    thumbnail_url=image.get("thumbnailLink", ""),
                    context_url=image.get("contextLink", ""),
                )
            )
        except (ValidationError, AttributeError) as e:
            _log.warning("Skipping image item: %s", e)
    return images


async def _direct_answer(ctx: EngineContext, query: str) -> list[SearchResult]:
    try:
        answer = await ctx.generator.generate(
            build_direct_answer_prompt(query), max_tokens=2048, temperature=0.3
        )
    except ConfigurationError:
        raise
    except Exception as e:
        _log.warning("Direct answer generation failed: %s", e)
        return []
    return [
        SearchResult(title=DIRECT_ANSWER_TITLE, content=answer, quotes=[], url="", query=query)
    ]


async def search_and_fetch_content(
    ctx: EngineContext,
    query: str,
    status_callback: StatusCallback | None = None,
) -> list[SearchResult]:
    """Search each optimised sub-query and collect deduplicated results.

    Sub-queries run sequentially; the image and web request for one sub-query
    run concurrently. At most ``MAX_TOTAL_RESULTS`` results overall and
    ``MAX_RESULTS_PER_QUERY`` per sub-query, with unique URLs. A failing
    sub-query is skipped.

    Returns:
        Results in sub-query order, then search engine order.
    """
    if not await needs_web_search(ctx, query):
        print(f"[search] no web search needed for {query[:60]!r}, answering directly")
        return await _direct_answer(ctx, query)

    sub_queries = await optimize_query(ctx, query)
    results: list[SearchResult] = []
    processed_urls: set[str] = set()

    for sub_query in sub_queries:
        if len(results) >= MAX_TOTAL_RESULTS:
            break
        notify(status_callback, f'Searching for: "{sub_query}"')

        image_resp, web_resp = await asyncio.gather(
            ctx.searcher.search(sub_query, search_type="image", num=MAX_IMAGES),
            ctx.searcher.search(sub_query),
            return_exceptions=True,
        )

        if isinstance(web_resp, BaseException):
            _log.warning("Search failed for query %r: %s", sub_query, web_resp)
            continue
        if not web_resp.is_success:
            _log.warning(
                "Search error for query %r: %s %s",
                sub_query,
                web_resp.status_code,
                web_resp.reason_phrase,
            )
            continue
        try:
            items = web_resp.json().get("items") or []
        except (ValueError, AttributeError) as e:
            _log.warning("Unparseable search response for query %r: %s", sub_query, e)
            continue
        if not items:
            continue

        images = parse_images(image_resp)
        found = 0
        for item in items:
            if found >= MAX_RESULTS_PER_QUERY or len(results) >= MAX_TOTAL_RESULTS:
                break
            try:
                url = item.get("link")
                if not url or url in processed_urls:
                    continue
                title = item.get("title", "")
                content = select_content(item)
                results.append(
                    SearchResult(
                        title=title,
                        content=content,
                        quotes=[Quote(text=make_excerpt(content), source=title, url=url)],
                        url=url,
                        query=sub_query,
                        images=images,
                    )
                )
                processed_urls.add(url)
                found += 1
            except Exception as e:
                _log.warning("Failed to process result for %r: %s", sub_query, e)
                continue

        print(f"[search] query={sub_query!r} added={found} total={len(results)} images={len(images)}")

    if results:
        notify(status_callback, f"Preparing information from {len(results)} sources...")
    return results
