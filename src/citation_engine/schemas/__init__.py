"""Pydantic schemas for grounding payloads and citations."""

from citation_engine.schemas.citations import Citation, ResolvedReference
from citation_engine.schemas.grounding import (
    GroundingChunk,
    GroundingInput,
    GroundingMetadata,
    GroundingSupport,
    Segment,
    SourceChunk,
    Span,
    Support,
    WebSource,
)


__all__ = [
    "Citation",
    "GroundingChunk",
    "GroundingInput",
    "GroundingMetadata",
    "GroundingSupport",
    "ResolvedReference",
    "Segment",
    "SourceChunk",
    "Span",
    "Support",
    "WebSource",
]
