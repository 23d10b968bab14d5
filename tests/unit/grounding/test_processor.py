"""Unit tests for GroundingProcessor (end-to-end pipeline with fake HTTP)."""

from __future__ import annotations

import pytest
from structlog.testing import capture_logs

from citation_engine.core.constants import AnnotationStyle, ReferenceStyle
from citation_engine.grounding.processor import GroundingProcessor
from citation_engine.resolution.batch import BatchResolver
from citation_engine.resolution.redirect import RedirectResolver
from citation_engine.resolution.throttle import ConcurrencyThrottle


@pytest.fixture
def make_processor(redirect_client, test_settings):
    """Build a processor whose resolver talks to the fake redirect table."""

    def factory(redirects=None, failing=None, settings=None):
        settings = settings or test_settings
        client = redirect_client(redirects, failing)
        batch = BatchResolver(
            RedirectResolver(client, settings=settings),
            ConcurrencyThrottle(settings=settings),
        )
        return GroundingProcessor(resolver=batch, settings=settings), client

    return factory


class TestGroundingProcessorPipeline:
    """Tests for the full annotate-and-reference pipeline."""

    @pytest.mark.asyncio
    async def test_japanese_report_annotated_with_resolved_references(
        self, make_processor, sample_report, sample_metadata
    ) -> None:
        """Each sentence gets its marker; the reference list uses resolved URLs."""
        processor, _ = make_processor({"https://example.com/1": "https://resolved.example/1"})

        result = await processor.process(sample_report, sample_metadata)

        assert result == (
            "これは最初の文章です。[1]これは二番目の文章です。[2]"
            "\n\n## References\n\n"
            "1. 例1のタイトル: https://resolved.example/1\n"
            "2. 例2のタイトル: https://example.com/2\n"
        )

    @pytest.mark.asyncio
    async def test_run_returns_references(self, make_processor, sample_report, sample_metadata) -> None:
        processor, _ = make_processor({"https://example.com/2": "https://resolved.example/2"})

        result = await processor.run(sample_report, sample_metadata)

        assert [r.original_uri for r in result.references] == [
            "https://example.com/1",
            "https://example.com/2",
        ]
        assert result.references[1].resolved_uri == "https://resolved.example/2"

    @pytest.mark.asyncio
    async def test_shared_source_gets_one_number_and_one_request(self, make_processor) -> None:
        text = "First claim. Second claim."
        metadata = {
            "groundingChunks": [{"web": {"uri": "https://same.example/x", "title": "Same"}}],
            "groundingSupports": [
                {"segment": {"startIndex": 0, "endIndex": 12}, "groundingChunkIndices": [0]},
                {"segment": {"startIndex": 13, "endIndex": 26}, "groundingChunkIndices": [0]},
            ],
        }
        processor, client = make_processor()

        result = await processor.process(text, metadata)

        assert result.startswith("First claim.[1] Second claim.[1]")
        assert result.count("https://same.example/x") == 1
        assert client.requested == ["https://same.example/x"]

    @pytest.mark.asyncio
    async def test_numbering_follows_span_order_not_payload_order(self, make_processor) -> None:
        text = "Alpha. Beta."
        metadata = {
            "groundingChunks": [
                {"web": {"uri": "https://b.example/x", "title": "B"}},
                {"web": {"uri": "https://a.example/x", "title": "A"}},
            ],
            "groundingSupports": [
                {"segment": {"startIndex": 7, "endIndex": 12}, "groundingChunkIndices": [0]},
                {"segment": {"startIndex": 0, "endIndex": 6}, "groundingChunkIndices": [1]},
            ],
        }
        processor, _ = make_processor()

        result = await processor.process(text, metadata)

        assert result.startswith("Alpha.[1] Beta.[2]")
        assert "1. A: https://a.example/x\n2. B: https://b.example/x\n" in result

    @pytest.mark.asyncio
    async def test_highest_confidence_chunk_is_cited(self, make_processor) -> None:
        metadata = {
            "groundingChunks": [
                {"web": {"uri": "https://low.example/x", "title": "Low"}},
                {"web": {"uri": "https://high.example/x", "title": "High"}},
            ],
            "groundingSupports": [
                {
                    "segment": {"startIndex": 0, "endIndex": 4},
                    "groundingChunkIndices": [0, 1],
                    "confidenceScores": [0.2, 0.7],
                },
            ],
        }
        processor, _ = make_processor()

        result = await processor.process("Text", metadata)

        assert result == "Text[1]\n\n## References\n\n1. High: https://high.example/x\n"

    @pytest.mark.asyncio
    async def test_missing_title_uses_default(self, make_processor) -> None:
        metadata = {
            "groundingChunks": [{"web": {"uri": "https://a.example/x"}}],
            "groundingSupports": [
                {"segment": {"startIndex": 0, "endIndex": 4}, "groundingChunkIndices": [0]},
            ],
        }
        processor, _ = make_processor()

        result = await processor.process("Text", metadata)

        assert result.endswith("1. Untitled: https://a.example/x\n")


class TestGroundingProcessorPassthrough:
    """Nothing to ground returns the text unchanged."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "metadata",
        [None, {}, {"groundingChunks": [], "groundingSupports": []}, {"groundingChunks": 3}],
        ids=["none", "empty", "empty-lists", "malformed"],
    )
    async def test_identity(self, make_processor, sample_report, metadata) -> None:
        processor, client = make_processor()

        result = await processor.run(sample_report, metadata)

        assert result.text == sample_report
        assert result.references == []
        assert client.requested == []

    @pytest.mark.asyncio
    async def test_no_eligible_chunk_returns_text(self, make_processor) -> None:
        metadata = {
            "groundingChunks": [{"web": {"title": "No URI"}}],
            "groundingSupports": [
                {"segment": {"startIndex": 0, "endIndex": 4}, "groundingChunkIndices": [0, 5]},
            ],
        }
        processor, _ = make_processor()

        assert await processor.process("Text", metadata) == "Text"


class TestGroundingProcessorDegradation:
    """Failures degrade to safe defaults."""

    @pytest.mark.asyncio
    async def test_unreachable_source_keeps_original_url(
        self, make_processor, sample_report, sample_metadata
    ) -> None:
        processor, _ = make_processor(failing={"https://example.com/1"})

        result = await processor.process(sample_report, sample_metadata)

        assert "1. 例1のタイトル: https://example.com/1\n" in result
        assert "これは最初の文章です。[1]" in result

    @pytest.mark.asyncio
    async def test_invalid_span_skipped_but_reference_kept(self, make_processor) -> None:
        metadata = {
            "groundingChunks": [
                {"web": {"uri": "https://a.example/x", "title": "A"}},
                {"web": {"uri": "https://b.example/x", "title": "B"}},
            ],
            "groundingSupports": [
                {"segment": {"startIndex": 0, "endIndex": 4}, "groundingChunkIndices": [0]},
                {"segment": {"startIndex": 5, "endIndex": 500}, "groundingChunkIndices": [1]},
            ],
        }
        processor, _ = make_processor()

        with capture_logs() as logs:
            result = await processor.process("Text body", metadata)

        assert result.startswith("Text[1] body\n\n")
        assert "2. B: https://b.example/x\n" in result
        assert any(log["event"] == "Skipping edit with invalid span" for log in logs)

    @pytest.mark.asyncio
    async def test_overlapping_support_dropped(self, make_processor) -> None:
        metadata = {
            "groundingChunks": [
                {"web": {"uri": "https://a.example/x", "title": "A"}},
                {"web": {"uri": "https://b.example/x", "title": "B"}},
            ],
            "groundingSupports": [
                {"segment": {"startIndex": 0, "endIndex": 6}, "groundingChunkIndices": [0]},
                {"segment": {"startIndex": 3, "endIndex": 9}, "groundingChunkIndices": [1]},
            ],
        }
        processor, _ = make_processor()

        with capture_logs() as logs:
            result = await processor.process("abcdefghi", metadata)

        assert result.startswith("abcdef[1]ghi\n\n")
        assert any(log["event"] == "Dropping support overlapping an earlier span" for log in logs)


class TestGroundingProcessorStyles:
    """Alternative inline and reference styles."""

    @pytest.mark.asyncio
    async def test_link_annotation_and_markdown_references(
        self, make_processor, test_settings
    ) -> None:
        settings = test_settings.model_copy(
            update={
                "annotation_style": AnnotationStyle.LINK,
                "reference_style": ReferenceStyle.MARKDOWN,
            }
        )
        metadata = {
            "groundingChunks": [{"web": {"uri": "https://short.example/x", "title": "Doc"}}],
            "groundingSupports": [
                {"segment": {"startIndex": 0, "endIndex": 4}, "groundingChunkIndices": [0]},
            ],
        }
        processor, _ = make_processor(
            {"https://short.example/x": "https://long.example/doc"},
            settings=settings,
        )

        result = await processor.process("Text.", metadata)

        assert result == (
            "[Text[1]](https://long.example/doc)."
            "\n\n## References\n\n"
            "[1] [Doc](https://long.example/doc)\n"
        )


class TestGroundingProcessorPartialPayloads:
    """Payload shapes that omit or null out fields still ground what they can."""

    @pytest.mark.asyncio
    async def test_missing_start_index_starts_at_zero(self, make_processor) -> None:
        metadata = {
            "groundingChunks": [{"web": {"uri": "https://a.example/x", "title": "A"}}],
            "groundingSupports": [
                {"segment": {"endIndex": 5}, "groundingChunkIndices": [0]},
            ],
        }
        processor, _ = make_processor()

        result = await processor.process("Hello world", metadata)

        assert result == "Hello[1] world\n\n## References\n\n1. A: https://a.example/x\n"

    @pytest.mark.asyncio
    async def test_null_chunk_index_skips_only_that_support(self, make_processor) -> None:
        metadata = {
            "groundingChunks": [{"web": {"uri": "https://a.example/x", "title": "A"}}],
            "groundingSupports": [
                {"segment": {"startIndex": 0, "endIndex": 5}, "groundingChunkIndices": [0]},
                {"segment": {"startIndex": 6, "endIndex": 11}, "groundingChunkIndices": [None]},
            ],
        }
        processor, _ = make_processor()

        result = await processor.process("Hello world", metadata)

        assert result == "Hello[1] world\n\n## References\n\n1. A: https://a.example/x\n"

    @pytest.mark.asyncio
    async def test_out_of_bounds_span_does_not_shadow_later_support(self, make_processor) -> None:
        """A span past the end of the text claims nothing, so a later valid span still applies."""
        metadata = {
            "groundingChunks": [
                {"web": {"uri": "https://a.example/x", "title": "A"}},
                {"web": {"uri": "https://b.example/x", "title": "B"}},
            ],
            "groundingSupports": [
                {"segment": {"startIndex": 0, "endIndex": 500}, "groundingChunkIndices": [0]},
                {"segment": {"startIndex": 6, "endIndex": 11}, "groundingChunkIndices": [1]},
            ],
        }
        processor, _ = make_processor()

        with capture_logs() as logs:
            result = await processor.process("Hello world", metadata)

        assert result.startswith("Hello world[2]\n\n")
        assert not any(log["event"] == "Dropping support overlapping an earlier span" for log in logs)
