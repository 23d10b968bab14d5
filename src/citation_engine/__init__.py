"""Grounding citation engine.

Annotates generated text with evidence citations: picks the best source per
supported span, resolves source URLs through their redirect chains, inserts
inline markers without corrupting later offsets, and appends a deduplicated
reference list.
"""

__version__ = "0.1.0"
