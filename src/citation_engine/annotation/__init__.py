"""Inline citation insertion."""

from citation_engine.annotation.annotator import (
    Edit,
    SegmentAnnotator,
    format_inline_citation,
)


__all__ = [
    "Edit",
    "SegmentAnnotator",
    "format_inline_citation",
]
