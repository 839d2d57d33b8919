"""Pydantic models for the Plates answer engine and its HTTP API."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class Quote(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    source: str
    url: str | None = None

    def citation(self) -> str:
        """Render as ``"text" [source url]`` for prompts and transcripts."""
        suffix = f" {self.url}" if self.url else ""
        return f'"{self.text}" [{self.source}{suffix}]'


class ImageResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str
    title: str = ""
    thumbnail_url: str = ""
    context_url: str = ""


class SearchResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    content: str
    quotes: list[Quote] = Field(default_factory=list)
    url: str = ""
    query: str = ""
    images: list[ImageResult] | None = None


class TopicSection(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    content: str


# ---------------------------------------------------------------------------
# Generation stream events
# ---------------------------------------------------------------------------


class StatusData(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str


class DoneData(BaseModel):
    """Final answer: raw text when the model used no headings, else sections."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["text", "sections"]
    text: str | None = None
    sections: list[TopicSection] | None = None


class ErrorData(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str


class GenerationEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["status", "done", "error"]
    data: StatusData | DoneData | ErrorData
    timestamp: datetime = Field(default_factory=datetime.now)

    @property
    def is_terminal(self) -> bool:
        return self.type != "status"


class GenerateRequest(BaseModel):
    query: str


class GenerateResponse(BaseModel):
    generation_id: str


class OrganizeRequest(BaseModel):
    content: str


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = "0.1.0"
    generation: str = "configured"  # configured | missing_key
    search: str = "configured"
