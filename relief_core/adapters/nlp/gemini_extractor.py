"""Gemini-backed location extractor.

Asks the Gemini generateContent endpoint to name the place a disaster
description refers to. Answers are cached per description so that
re-submitting the same text does not cost another API call.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

import requests

from ...config import ExtractionConfig, get_config
from ...domain.errors import CacheUnavailableError, ExtractionError
from ...ports.cache import CachePort
from ..cache.null_cache import NullCache

PROMPT_TEMPLATE = (
    "Extract the location name from this disaster description. "
    "Return only the location name (city, state/country format if possible): "
    '"{description}"'
)


def extraction_cache_key(description: str) -> str:
    digest = hashlib.sha1(description.encode("utf-8")).hexdigest()
    return f"extract_location:{digest}"


@dataclass
class GeminiLocationExtractor:
    """LLM LocationExtractorPort implementation.

    Attributes:
        config: Extraction configuration (API key, model, endpoint)
        cache: Cache for extracted locations
        session: HTTP session, injectable for tests
    """

    config: ExtractionConfig = field(default_factory=lambda: get_config().extraction)
    cache: CachePort[str] = field(default_factory=NullCache)
    session: requests.Session = field(default_factory=requests.Session, repr=False)

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    @property
    def endpoint(self) -> str:
        return (
            f"{self.config.gemini_base_url}/models/"
            f"{self.config.gemini_model}:generateContent"
        )

    def extract_location(self, description: str) -> str:
        """Extract a location name from a description.

        Raises:
            ExtractionError: If the API is not configured, fails, or
                returns no text.
        """
        if not self.config.gemini_api_key:
            raise ExtractionError("Gemini API key not configured", extractor="gemini")

        cache_key = extraction_cache_key(description)
        cached = self._cache_get(cache_key)
        if cached is not None:
            self._logger.debug("Location extraction cache hit")
            return cached

        try:
            response = self.session.post(
                self.endpoint,
                params={"key": self.config.gemini_api_key},
                json={
                    "contents": [
                        {"parts": [{"text": PROMPT_TEMPLATE.format(description=description)}]}
                    ]
                },
                timeout=self.config.timeout_seconds,
            )
            response.raise_for_status()
            body = response.json()
        except (requests.RequestException, ValueError) as e:
            raise ExtractionError(
                "Gemini request failed", extractor="gemini", cause=e
            )

        location = _first_candidate_text(body)
        if not location:
            raise ExtractionError(
                "No location extracted from description", extractor="gemini"
            )

        self._cache_set(cache_key, location)
        self._logger.info("Location extracted", extra={"location": location})
        return location

    def _cache_get(self, key: str) -> Optional[str]:
        try:
            return self.cache.get(key)
        except Exception as e:
            self._logger.warning(
                "Cache unavailable, extracting uncached",
                extra={
                    "error": str(CacheUnavailableError("Cache read failed", key=key, cause=e))
                },
            )
            return None

    def _cache_set(self, key: str, location: str) -> None:
        try:
            self.cache.set(key, location)
        except Exception as e:
            self._logger.warning(
                "Cache unavailable, location not cached",
                extra={
                    "error": str(CacheUnavailableError("Cache write failed", key=key, cause=e))
                },
            )


def _first_candidate_text(body: Any) -> Optional[str]:
    """Dig candidates[0].content.parts[0].text out of a Gemini response."""
    try:
        text = body["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return None
    if not isinstance(text, str):
        return None
    return text.strip().strip('"').strip() or None
