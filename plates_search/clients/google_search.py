"""Google Custom Search JSON API client."""

from __future__ import annotations

import httpx

from plates_search.config import GOOGLE_API_KEY, GOOGLE_SEARCH_URL, SEARCH_ENGINE_ID, SEARCH_TIMEOUT


class GoogleSearchClient:
    """Thin wrapper around ``customsearch/v1``.

    ``search`` hands back the raw ``httpx.Response``: callers decide what a
    non-2xx status means for them (the aggregator skips the sub-query).
    """

    def __init__(
        self,
        api_key: str = GOOGLE_API_KEY,
        engine_id: str = SEARCH_ENGINE_ID,
        base_url: str = GOOGLE_SEARCH_URL,
        timeout: float = SEARCH_TIMEOUT,
    ):
        self.api_key = api_key
        self.engine_id = engine_id
        self.base_url = base_url
        self.timeout = timeout

    def __repr__(self) -> str:
        return f"GoogleSearchClient(engine_id={self.engine_id!r}, key={'SET' if self.api_key else 'MISSING'})"

    def build_params(
        self, query: str, search_type: str | None = None, num: int | None = None
    ) -> dict[str, str | int]:
        params: dict[str, str | int] = {"key": self.api_key, "cx": self.engine_id, "q": query}
        if search_type:
            params["searchType"] = search_type
        if num is not None:
            params["num"] = num
        return params

    async def search(
        self, query: str, search_type: str | None = None, num: int | None = None
    ) -> httpx.Response:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.get(self.base_url, params=self.build_params(query, search_type, num))
