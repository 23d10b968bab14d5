"""Unit tests for SegmentAnnotator and inline citation formatting."""

from __future__ import annotations

from structlog.testing import capture_logs

from citation_engine.annotation.annotator import Edit, SegmentAnnotator, format_inline_citation
from citation_engine.core.constants import AnnotationStyle


class TestSegmentAnnotator:
    """Tests for offset-tracked edit application."""

    def test_single_edit_replaces_span(self) -> None:
        """A lengthening edit splices into place."""
        assert SegmentAnnotator().annotate("ABCDE", [Edit(1, 3, "XYZ123")]) == "AXYZ123DE"

    def test_adjacent_edits_apply_with_offset(self) -> None:
        """The second edit lands on its original span after the first grows the text."""
        result = SegmentAnnotator().annotate(
            "ABCDE",
            [Edit(1, 3, "BC[1]"), Edit(3, 5, "DE[2]")],
        )

        assert result == "ABC[1]DE[2]"

    def test_edits_applied_in_start_order(self) -> None:
        """Edits given out of order are sorted by start."""
        result = SegmentAnnotator().annotate(
            "hello world",
            [Edit(6, 11, "world[2]"), Edit(0, 5, "hello[1]")],
        )

        assert result == "hello[1] world[2]"

    def test_shrinking_edit_shifts_later_edits_left(self) -> None:
        result = SegmentAnnotator().annotate("aaaaBBBBcc", [Edit(0, 4, "a"), Edit(4, 8, "b")])

        assert result == "abcc"

    def test_no_edits_returns_text(self) -> None:
        assert SegmentAnnotator().annotate("unchanged", []) == "unchanged"

    def test_multibyte_text_uses_code_point_offsets(self) -> None:
        """Offsets count characters, not bytes."""
        text = "これは最初の文章です。これは二番目の文章です。"

        result = SegmentAnnotator().annotate(
            text,
            [Edit(0, 11, text[0:11] + "[1]"), Edit(11, 23, text[11:23] + "[2]")],
        )

        assert result == "これは最初の文章です。[1]これは二番目の文章です。[2]"


class TestSegmentAnnotatorInvalidEdits:
    """Invalid and overlapping edits are skipped with a warning."""

    def test_out_of_bounds_edit_skipped(self) -> None:
        with capture_logs() as logs:
            result = SegmentAnnotator().annotate("ABC", [Edit(1, 10, "X")])

        assert result == "ABC"
        assert logs[0]["event"] == "Skipping edit with invalid span"
        assert logs[0]["log_level"] == "warning"

    def test_empty_and_reversed_spans_skipped(self) -> None:
        result = SegmentAnnotator().annotate("ABCDE", [Edit(2, 2, "X"), Edit(4, 3, "Y")])

        assert result == "ABCDE"

    def test_negative_start_skipped(self) -> None:
        assert SegmentAnnotator().annotate("ABCDE", [Edit(-1, 2, "X")]) == "ABCDE"

    def test_overlapping_edit_skipped(self) -> None:
        """The earlier edit wins; the overlapping one is dropped."""
        with capture_logs() as logs:
            result = SegmentAnnotator().annotate("ABCDE", [Edit(0, 3, "x"), Edit(2, 4, "y")])

        assert result == "xDE"
        assert any(log["event"] == "Skipping edit overlapping a previous edit" for log in logs)

    def test_valid_edits_survive_invalid_neighbour(self) -> None:
        result = SegmentAnnotator().annotate(
            "ABCDE",
            [Edit(0, 1, "a"), Edit(3, 99, "?"), Edit(4, 5, "e")],
        )

        assert result == "aBCDe"


class TestFormatInlineCitation:
    """Tests for format_inline_citation."""

    def test_marker_style(self) -> None:
        assert format_inline_citation(AnnotationStyle.MARKER, "text", 3, "https://a.example/x") == "text[3]"

    def test_link_style(self) -> None:
        result = format_inline_citation(AnnotationStyle.LINK, "text", 1, "https://a.example/x")

        assert result == "[text[1]](https://a.example/x)"
