"""NLP port - Abstraction for pulling a place name out of free text."""

from __future__ import annotations

from typing import Protocol


class LocationExtractorPort(Protocol):
    """Port for location extraction.

    Implementations:
    - adapters/nlp/gemini_extractor.py (GeminiLocationExtractor) - LLM backed
    - adapters/nlp/keyword_extractor.py (KeywordLocationExtractor) - heuristic
    """

    def extract_location(self, description: str) -> str:
        """Extract a single location name from a description.

        Args:
            description: Free-text disaster description.

        Returns:
            A non-empty location string.

        Raises:
            ExtractionError: If nothing usable could be extracted.
        """
        ...
