"""Keyword heuristic location extractor.

Looks for a preposition that usually introduces a place ("in", "at",
"near", "around") and takes the text that follows it up to the next
comma or sentence end. Deterministic and offline, so it serves as the
fallback when the LLM extractor is unavailable.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Sequence

from ...domain.errors import ExtractionError

DEFAULT_MARKERS: tuple[str, ...] = ("in", "at", "near", "around")
_TERMINATORS = re.compile(r"[,.!?]")
MIN_LOCATION_LENGTH = 3


@dataclass
class KeywordLocationExtractor:
    """Heuristic LocationExtractorPort implementation.

    Markers are tried in priority order; for each, only its first
    occurrence is considered.

    Attributes:
        markers: Words that introduce a place name
    """

    markers: Sequence[str] = DEFAULT_MARKERS
    _patterns: list[re.Pattern[str]] = field(init=False, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._patterns = [
            re.compile(rf"\b{re.escape(marker)}\s+", re.IGNORECASE)
            for marker in self.markers
        ]
        self._logger = logging.getLogger(__name__)

    def extract_location(self, description: str) -> str:
        """Return the place name following the first usable marker.

        Raises:
            ExtractionError: If no marker yields a candidate longer than
                two characters.
        """
        for pattern in self._patterns:
            match = pattern.search(description)
            if match is None:
                continue
            tail = description[match.end():]
            candidate = _TERMINATORS.split(tail, maxsplit=1)[0].strip()
            if len(candidate) >= MIN_LOCATION_LENGTH:
                self._logger.debug(
                    "Keyword extraction matched",
                    extra={"marker": pattern.pattern, "location": candidate},
                )
                return candidate

        raise ExtractionError(
            "No location marker found in description",
            extractor="keyword",
        )
