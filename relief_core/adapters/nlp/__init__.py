"""NLP adapters - Implementations of LocationExtractorPort.

Available implementations:
- GeminiLocationExtractor: LLM extraction over the Gemini REST API
- KeywordLocationExtractor: offline keyword heuristic
"""

from .gemini_extractor import GeminiLocationExtractor
from .keyword_extractor import KeywordLocationExtractor

__all__ = ["GeminiLocationExtractor", "KeywordLocationExtractor"]
