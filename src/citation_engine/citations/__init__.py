"""Citation Management Package.

This package handles citation accumulation and reference formatting:
- CitationManager: immutable accumulator across generation rounds
- ReferenceListBuilder: numbered reference section in the deployment's style
"""

from citation_engine.citations.manager import CitationManager
from citation_engine.citations.references import ReferenceListBuilder


__all__ = [
    "CitationManager",
    "ReferenceListBuilder",
]
