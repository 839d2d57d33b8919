"""Shared pytest fixtures."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from plates_search.context import EngineContext
from tests.helpers import make_item, make_response, scripted_generator


@pytest.fixture
def ctx() -> EngineContext:
    """Engine context with a scripted generator and a one-hit searcher."""
    generator = MagicMock()
    generator.generate = scripted_generator()
    searcher = MagicMock()
    searcher.search = AsyncMock(return_value=make_response({"items": [make_item(1)]}))
    return EngineContext(generator=generator, searcher=searcher)
