"""
Document Text Extractor - Gets plain text out of driver log documents.

Supported inputs:
- Text exports (.txt, .text, .log), read as UTF-8
- PDF exports from the ELD portal, read page by page with pdfplumber
- Photos or scans of printed logs, read with Google Cloud Vision OCR

Any document that cannot produce text raises TextExtractionError, so the
caller can report it and carry on with the rest of the batch.
"""

import logging
import os
import threading
from pathlib import Path
from typing import List, Optional

import pdfplumber
from google.cloud import vision

from config import SUPPORTED_EXTENSIONS

logger = logging.getLogger(__name__)


class TextExtractionError(RuntimeError):
    """A document could not be turned into text."""


class DocumentTextExtractor:
    """
    Extracts text from one document at a time.

    The Vision client is only created when the first image is seen, so
    text and PDF batches need no Google Cloud credentials.
    """

    def __init__(self, vision_client=None):
        self._vision_client = vision_client
        self._vision_lock = threading.Lock()

    @staticmethod
    def supported_suffixes() -> set:
        suffixes = set()
        for group in SUPPORTED_EXTENSIONS.values():
            suffixes |= group
        return suffixes

    def find_documents(self, folder) -> List[Path]:
        """
        Get all supported documents from a folder.

        Returns:
            Sorted list of document paths
        """
        folder_path = Path(folder)
        if not folder_path.exists():
            raise FileNotFoundError(f"Logs folder not found: {folder_path}")

        suffixes = self.supported_suffixes()
        documents = [
            path for path in folder_path.iterdir()
            if path.is_file() and path.suffix.lower() in suffixes
        ]
        return sorted(documents)  # Sort for consistent processing order

    def extract_text(self, path) -> str:
        """
        Extract the full text of a document.

        Args:
            path: Path to the document

        Returns:
            Document text, pages joined with newlines

        Raises:
            TextExtractionError: when the document yields no text
        """
        path = Path(path)
        if not path.is_file():
            raise TextExtractionError(f"Document not found: {path}")

        suffix = path.suffix.lower()
        if suffix in SUPPORTED_EXTENSIONS["text"]:
            text = self._read_text_file(path)
        elif suffix in SUPPORTED_EXTENSIONS["pdf"]:
            text = self._read_pdf(path)
        elif suffix in SUPPORTED_EXTENSIONS["image"]:
            text = self._read_image(path)
        else:
            raise TextExtractionError(f"Unsupported document type: {path.name}")

        if not text or not text.strip():
            raise TextExtractionError(f"No text detected in {path.name}")

        logger.debug("Extracted %d characters from %s", len(text), path.name)
        return text

    def _read_text_file(self, path: Path) -> str:
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise TextExtractionError(f"Could not read {path.name}: {e}") from e

    def _read_pdf(self, path: Path) -> str:
        """Page texts in page order, one page per chunk."""
        try:
            with pdfplumber.open(path) as pdf:
                pages = [page.extract_text() or "" for page in pdf.pages]
        except Exception as e:
            raise TextExtractionError(f"Could not read PDF {path.name}: {e}") from e

        return "\n".join(pages)

    def _get_vision_client(self):
        # Worker threads may reach the first image at the same time
        with self._vision_lock:
            if self._vision_client is None:
                self._vision_client = self._create_vision_client()
            return self._vision_client

    def _create_vision_client(self):
        credentials_path = os.getenv("GOOGLE_APPLICATION_CREDENTIALS")
        if not credentials_path:
            raise TextExtractionError(
                "GOOGLE_APPLICATION_CREDENTIALS environment variable not set. "
                "Image documents need a Google Cloud service account JSON file."
            )
        if not os.path.exists(credentials_path):
            raise TextExtractionError(f"Google Cloud credentials file not found: {credentials_path}")

        try:
            client = vision.ImageAnnotatorClient()
        except Exception as e:
            raise TextExtractionError(f"Failed to initialize Google Cloud Vision client: {e}") from e

        logger.info("Google Cloud Vision client initialized")
        return client

    def _read_image(self, path: Path) -> str:
        """OCR an image with Google Cloud Vision text detection."""
        client = self._get_vision_client()

        try:
            with open(path, "rb") as image_file:
                content = image_file.read()
        except OSError as e:
            raise TextExtractionError(f"Could not read {path.name}: {e}") from e

        try:
            response = client.text_detection(image=vision.Image(content=content))
        except Exception as e:
            raise TextExtractionError(f"Vision API call failed for {path.name}: {e}") from e

        if response.error.message:
            raise TextExtractionError(f"Vision API error: {response.error.message}")

        texts = response.text_annotations
        if not texts:
            return ""

        # The first annotation holds the full detected text
        return texts[0].description
