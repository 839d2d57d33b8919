"""Gemini ``generateContent`` client over httpx."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from plates_search.config import GEMINI_API_KEY, GEMINI_API_URL, GENERATION_TIMEOUT

_log = logging.getLogger("plates_search")


class GenerationError(RuntimeError):
    """The generation provider failed or returned an unusable payload."""


class ConfigurationError(GenerationError):
    """Generation was attempted without the required configuration."""


class GeminiClient:
    """
    LM client for the Gemini REST API.

    The API key is only checked when ``generate`` is first called, so a
    context can be built (and the pure helpers used) without credentials.
    """

    def __init__(
        self,
        api_key: str = GEMINI_API_KEY,
        api_url: str = GEMINI_API_URL,
        timeout: float = GENERATION_TIMEOUT,
        top_p: float = 0.95,
        top_k: int = 64,
    ):
        self.api_key = api_key
        self.api_url = api_url
        self.timeout = timeout
        self.top_p = top_p
        self.top_k = top_k
        self.call_count = 0

    def __repr__(self) -> str:
        return f"GeminiClient(api_url={self.api_url!r}, key={'SET' if self.api_key else 'MISSING'})"

    def _build_body(self, prompt: str, max_tokens: int, temperature: float) -> dict[str, Any]:
        return {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "maxOutputTokens": max_tokens,
                "temperature": temperature,
                "topP": self.top_p,
                "topK": self.top_k,
            },
        }

    async def generate(
        self, prompt: str, max_tokens: int = 8000, temperature: float = 0.1
    ) -> str:
        if not prompt or not isinstance(prompt, str):
            raise GenerationError("Invalid prompt: Must provide a non-empty string")
        if not self.api_key:
            raise ConfigurationError("Missing Gemini API key")

        body = self._build_body(prompt, max_tokens, temperature)
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.post(
                    self.api_url,
                    params={"key": self.api_key},
                    json=body,
                    headers={"Content-Type": "application/json"},
                )
        except httpx.HTTPError as e:
            raise GenerationError(f"Gemini API request failed: {e}") from e

        self.call_count += 1
        if not resp.is_success:
            detail = resp.text or resp.reason_phrase
            raise GenerationError(f"Gemini API error: {resp.status_code} - {detail}")

        try:
            text = resp.json()["candidates"][0]["content"]["parts"][0]["text"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise GenerationError("Invalid response from Gemini API") from e
        if not text or not isinstance(text, str):
            raise GenerationError("Invalid response from Gemini API")
        return text
