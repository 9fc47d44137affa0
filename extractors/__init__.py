"""
Extractors package - turns driver log documents into plain text.
"""

from .text_extractor import DocumentTextExtractor, TextExtractionError

__all__ = ["DocumentTextExtractor", "TextExtractionError"]
