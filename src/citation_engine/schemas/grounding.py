"""Grounding payload schemas.

Two layers of models live here:

- Wire models (GroundingMetadata and friends) mirror the payload produced by
  the upstream generator. They accept the producer's camelCase field names
  (``groundingChunks``, ``confidenceScores``...) as well as snake_case, and
  every field is optional because producers routinely omit them.
- Normalized models (SourceChunk, Span, Support) are what the engine works
  with after ingestion. They are frozen.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


_WIRE_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    extra="ignore",
)


# =============================================================================
# Wire Models
# =============================================================================

class WebSource(BaseModel):
    """Web location behind a grounding chunk."""

    model_config = _WIRE_CONFIG

    uri: str | None = None
    title: str | None = None


class GroundingChunk(BaseModel):
    """One candidate source offered by the generator."""

    model_config = _WIRE_CONFIG

    web: WebSource | None = None


class Segment(BaseModel):
    """Character span of the generated text."""

    model_config = _WIRE_CONFIG

    start_index: int | None = None
    end_index: int | None = None
    text: str | None = None


class GroundingSupport(BaseModel):
    """Claim that a segment is backed by one or more chunks."""

    model_config = _WIRE_CONFIG

    segment: Segment | None = None
    grounding_chunk_indices: list[int | None] | None = None
    confidence_scores: list[float | None] | None = None


class GroundingMetadata(BaseModel):
    """Grounding payload attached to a generated response.

    Example:
        >>> GroundingMetadata.model_validate({
        ...     "groundingChunks": [{"web": {"uri": "https://a.example"}}],
        ...     "groundingSupports": [],
        ... }).grounding_chunks[0].web.uri
        'https://a.example'
    """

    model_config = _WIRE_CONFIG

    grounding_chunks: list[GroundingChunk] | None = None
    grounding_supports: list[GroundingSupport] | None = None
    web_search_queries: list[str] | None = None


# =============================================================================
# Normalized Models
# =============================================================================

class SourceChunk(BaseModel):
    """A grounding chunk reduced to what selection needs.

    Attributes:
        index: Position of the chunk in the payload's chunk list
        uri: Source URI (a chunk without one is never selected)
        title: Source title
    """

    model_config = ConfigDict(frozen=True)

    index: int = Field(..., ge=0)
    uri: str | None = None
    title: str | None = None

    @property
    def is_usable(self) -> bool:
        """Return True when the chunk can back a citation."""
        return bool(self.uri)


class Span(BaseModel):
    """Half-open ``[start, end)`` range over the original text."""

    model_config = ConfigDict(frozen=True)

    start: int
    end: int


class Support(BaseModel):
    """A span plus the chunks that may back it.

    ``confidence_scores`` is positional with ``candidate_chunk_indices``;
    ``None`` means the producer sent no scores at all.
    """

    model_config = ConfigDict(frozen=True)

    span: Span
    candidate_chunk_indices: tuple[int, ...] = ()
    confidence_scores: tuple[float | None, ...] | None = None


class GroundingInput(BaseModel):
    """Validated, normalized grounding payload ready for the pipeline."""

    model_config = ConfigDict(frozen=True)

    chunks: tuple[SourceChunk, ...]
    supports: tuple[Support, ...]


__all__ = [
    "GroundingChunk",
    "GroundingInput",
    "GroundingMetadata",
    "GroundingSupport",
    "Segment",
    "SourceChunk",
    "Span",
    "Support",
    "WebSource",
]
