"""Per-generation event log read by the SSE stream."""

from __future__ import annotations

import threading

from plates_search.models import DoneData, ErrorData, GenerationEvent, StatusData, TopicSection


class GenerationBus:
    """Ordered event log for one generation.

    The engine writes any number of ``status`` events and then exactly one
    terminal event (``done`` or ``error``); whatever arrives after the terminal
    event is dropped. Readers pull by cursor: a replaying client starts at 0,
    a resuming one at ``delivered``.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._events: list[GenerationEvent] = []
        self._delivered = 0  # furthest position any reader has received

    def _append(self, event: GenerationEvent) -> bool:
        with self._lock:
            if self._events and self._events[-1].is_terminal:
                return False
            self._events.append(event)
        return True

    def status(self, message: str) -> None:
        """Status callback for ``generate_content``."""
        self._append(GenerationEvent(type="status", data=StatusData(message=message)))

    def done(self, result: str | list[TopicSection]) -> None:
        if isinstance(result, str):
            data = DoneData(kind="text", text=result)
        else:
            data = DoneData(kind="sections", sections=result)
        self._append(GenerationEvent(type="done", data=data))

    def error(self, message: str) -> bool:
        """Fail the generation. False if it had already finished."""
        return self._append(GenerationEvent(type="error", data=ErrorData(message=message)))

    def read(self, cursor: int) -> tuple[list[GenerationEvent], int]:
        """Events from *cursor* on, plus the cursor to read from next."""
        with self._lock:
            events = self._events[cursor:]
            end = len(self._events)
            self._delivered = max(self._delivered, end)
        return events, end

    @property
    def delivered(self) -> int:
        return self._delivered

    @property
    def events(self) -> list[GenerationEvent]:
        with self._lock:
            return self._events[:]

    @property
    def is_done(self) -> bool:
        with self._lock:
            return bool(self._events) and self._events[-1].is_terminal
