"""Reference list (bibliography) formatting.

Turns resolved references into a numbered block appended after the text.
One style is picked per deployment (Settings.reference_style) and used by
both the grounding pipeline and the citation manager.

Formats:
- NUMBERED: ``1. Title: https://resolved.example/path``
- MARKDOWN: ``[1] [Title](https://resolved.example/path)``
"""

from __future__ import annotations

from collections.abc import Sequence

from citation_engine.core.config import Settings, get_settings
from citation_engine.core.constants import ReferenceStyle
from citation_engine.schemas.citations import ResolvedReference


class ReferenceListBuilder:
    """Format resolved references as a numbered reference section.

    Example:
        >>> from citation_engine.core.config import Settings
        >>> builder = ReferenceListBuilder(settings=Settings(references_heading="## Sources"))
        >>> print(builder.build([
        ...     ResolvedReference(original_uri="https://a", resolved_uri="https://b", title="B"),
        ... ]), end="")
        ## Sources
        <BLANKLINE>
        1. B: https://b
    """

    def __init__(
        self,
        style: ReferenceStyle | None = None,
        *,
        heading: str | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize the builder.

        Args:
            style: Line format. Defaults to settings.reference_style.
            heading: Section heading. Defaults to settings.references_heading.
            settings: Application settings. Uses get_settings() if not provided.
        """
        settings = settings or get_settings()
        self.style = style or settings.reference_style
        self.heading = heading if heading is not None else settings.references_heading
        self.default_title = settings.default_reference_title

    def format_line(self, number: int, reference: ResolvedReference) -> str:
        """Format one reference line.

        Args:
            number: 1-based position in the list
            reference: The reference to format

        Returns:
            Formatted line without trailing newline
        """
        title = reference.title or self.default_title
        if self.style == ReferenceStyle.MARKDOWN:
            return f"[{number}] [{title}]({reference.resolved_uri})"
        return f"{number}. {title}: {reference.resolved_uri}"

    def build(self, references: Sequence[ResolvedReference]) -> str:
        """Build the reference block.

        Args:
            references: Deduplicated references in display order

        Returns:
            Heading, blank line and one line per reference; "" when empty
        """
        if not references:
            return ""
        lines = [self.format_line(i, ref) for i, ref in enumerate(references, start=1)]
        body = "\n".join(lines) + "\n"
        if not self.heading:
            return body
        return f"{self.heading}\n\n{body}"

    def append_to(self, text: str, references: Sequence[ResolvedReference]) -> str:
        """Return ``text`` followed by the reference block, if any."""
        block = self.build(references)
        if not block:
            return text
        return f"{text}\n\n{block}"


__all__ = [
    "ReferenceListBuilder",
]
