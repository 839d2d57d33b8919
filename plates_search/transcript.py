"""Request-scoped transcript accumulation for voice queries."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from plates_search.engine import process_content

_log = logging.getLogger("plates_search")

Transcriber = Callable[[bytes], Awaitable[str]]


class TranscriptSession:
    """Accumulate one recording's transcript from audio chunks.

    Each voice session owns its transcript; the finished text is handed to the
    engine explicitly via ``to_query()`` rather than through shared state.
    The speech-to-text model is an opaque async *transcriber*.
    """

    def __init__(
        self,
        transcriber: Transcriber,
        on_update: Callable[[str], None] | None = None,
    ) -> None:
        self._transcriber = transcriber
        self._on_update = on_update
        self._transcript = ""
        self._finished = False

    @property
    def transcript(self) -> str:
        return self._transcript

    async def feed(self, chunk: bytes) -> str:
        """Transcribe *chunk* and append it. A failed chunk is dropped."""
        if self._finished:
            raise RuntimeError("Transcript session already finished")
        if not chunk:
            return self._transcript
        try:
            text = await self._transcriber(chunk)
        except Exception as e:
            _log.warning("Transcription error, dropping chunk: %s", e)
            return self._transcript
        self._transcript += text + " "
        if self._on_update is not None:
            try:
                self._on_update(self._transcript)
            except Exception:
                _log.debug("transcript update callback failed", exc_info=True)
        return self._transcript

    def finish(self) -> str:
        self._finished = True
        return self._transcript

    def to_query(self) -> str | None:
        """Normalised transcript ready for ``generate_content``, or None if nothing was heard."""
        if not self._transcript.strip():
            return None
        return process_content(self._transcript, [])
