"""Citation engine constants and default values.

All magic numbers and shared strings live here so that Settings, the
components and the tests agree on one set of defaults.
"""

from __future__ import annotations

from enum import Enum


# =============================================================================
# Redirect Resolution
# =============================================================================

DEFAULT_MAX_HOPS: int = 20
"""Redirects followed before giving up and keeping the last URL reached."""

DEFAULT_REDIRECT_TIMEOUT: float = 10.0
"""Per-request timeout in seconds for HEAD requests."""

DEFAULT_USER_AGENT: str = "citation-engine/0.1"

LOCATION_HEADER: str = "location"

# =============================================================================
# Throttling
# =============================================================================

DEFAULT_MAX_CONCURRENT: int = 10
"""Resolutions allowed in flight at any instant."""

DEFAULT_MIN_SPACING_MS: int = 100
"""Pause between a slot freeing and its next dispatch."""

DEFAULT_TASK_FALLBACK: str = ""
"""Result recorded for a task that raised."""

# =============================================================================
# Output
# =============================================================================

DEFAULT_REFERENCES_HEADING: str = "## References"

DEFAULT_REFERENCE_TITLE: str = "Untitled"

DEFAULT_GROUNDING_THRESHOLD: float = 0.5
"""Mean confidence at or above which text counts as grounded."""


class ReferenceStyle(str, Enum):
    """Reference list line formats.

    - NUMBERED: ``1. Title: https://example.com``
    - MARKDOWN: ``[1] [Title](https://example.com)``
    """

    NUMBERED = "numbered"
    MARKDOWN = "markdown"


class AnnotationStyle(str, Enum):
    """Inline citation formats inserted at supported spans.

    - MARKER: ``segment[1]``
    - LINK: ``[segment[1]](https://example.com)``
    """

    MARKER = "marker"
    LINK = "link"
