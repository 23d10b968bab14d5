"""Offset-safe text rewriting.

Edits are expressed in coordinates of the ORIGINAL text. Applying one edit
shifts every later position by ``len(replacement) - (end - start)``; the
annotator tracks that drift so later edits land where they should.

Overlapping edits are a caller error. They are detected, logged and skipped
rather than merged.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from citation_engine.core.constants import AnnotationStyle
from citation_engine.core.logging import Logger, get_logger


@dataclass(frozen=True)
class Edit:
    """Replace ``original[start:end]`` with ``replacement``.

    Attributes:
        start: Start offset in the original text
        end: End offset in the original text (exclusive)
        replacement: Text spliced in place of the span
    """

    start: int
    end: int
    replacement: str


def format_inline_citation(
    style: AnnotationStyle,
    segment: str,
    number: int,
    url: str,
) -> str:
    """Render the replacement for a cited segment.

    Args:
        style: Inline citation format
        segment: Original text of the cited span
        number: 1-based reference number
        url: Resolved source URL (used by LINK style)

    Returns:
        Replacement text containing the segment and its marker
    """
    if style == AnnotationStyle.LINK:
        return f"[{segment}[{number}]]({url})"
    return f"{segment}[{number}]"


class SegmentAnnotator:
    """Apply span edits left to right while tracking offset drift.

    Example:
        >>> SegmentAnnotator().annotate("ABCDE", [Edit(1, 3, "XYZ123")])
        'AXYZ123DE'
    """

    def __init__(self, logger: Logger | None = None) -> None:
        """Initialize the annotator.

        Args:
            logger: Structured logger. Defaults to the module logger.
        """
        self._logger = logger or get_logger(__name__)

    def annotate(self, text: str, edits: Iterable[Edit]) -> str:
        """Apply ``edits`` to ``text``.

        Edits are applied in ascending ``start`` order (stable for equal
        starts). An edit is skipped, with a warning, when its adjusted range
        is empty, out of bounds, or overlaps the previously applied edit.

        Args:
            text: Original text
            edits: Edits in original-text coordinates

        Returns:
            Rewritten text
        """
        result = text
        total_offset = 0
        last_end = 0
        applied = 0

        for edit in sorted(edits, key=lambda e: e.start):
            adjusted_start = edit.start + total_offset
            adjusted_end = edit.end + total_offset

            if not 0 <= adjusted_start < adjusted_end <= len(result):
                self._logger.warning(
                    "Skipping edit with invalid span",
                    start=edit.start,
                    end=edit.end,
                    adjusted_start=adjusted_start,
                    adjusted_end=adjusted_end,
                    text_length=len(result),
                )
                continue
            if edit.start < last_end:
                self._logger.warning(
                    "Skipping edit overlapping a previous edit",
                    start=edit.start,
                    end=edit.end,
                    previous_end=last_end,
                )
                continue

            result = result[:adjusted_start] + edit.replacement + result[adjusted_end:]
            total_offset += len(edit.replacement) - (edit.end - edit.start)
            last_end = edit.end
            applied += 1

        self._logger.debug("Applied edits", applied=applied)
        return result


__all__ = [
    "Edit",
    "SegmentAnnotator",
    "format_inline_citation",
]
