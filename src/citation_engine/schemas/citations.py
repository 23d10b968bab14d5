"""Citation and reference schemas.

Models:
- Citation: a source URI with optional span offsets into the original text
- ResolvedReference: a source after its redirect chain was followed
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Citation(BaseModel):
    """A source cited by generated text.

    A citation with both offsets is span-bound; one with only a URI is
    reference-only. Both kinds may exist for the same URI.

    Attributes:
        uri: Source URI (citations without one are dropped by deduplication)
        title: Source title
        start_index: Start offset into the original text
        end_index: End offset into the original text (exclusive)
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    uri: str | None = None
    title: str | None = None
    start_index: int | None = None
    end_index: int | None = None

    @property
    def is_span_bound(self) -> bool:
        """Return True when the citation carries both offsets."""
        return self.start_index is not None and self.end_index is not None


class ResolvedReference(BaseModel):
    """A source whose canonical location has been resolved.

    Keyed by ``original_uri``; a resolution batch creates at most one per
    original URI.
    """

    model_config = ConfigDict(frozen=True)

    original_uri: str = Field(..., min_length=1)
    resolved_uri: str
    title: str


__all__ = [
    "Citation",
    "ResolvedReference",
]
