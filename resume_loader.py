"""
Utilities for turning an uploaded resume file into plain text.

Plain text and markdown files are decoded directly. PDFs are read through
their text layer first; when that yields too little text the pages are
rendered and passed through OCR.
"""

from __future__ import annotations

import io
import logging
from pathlib import PurePath
from typing import Callable, List, Optional

import fitz  # PyMuPDF
import pytesseract
from PIL import Image

from errors import FileProcessingError

LOGGER = logging.getLogger(__name__)

TEXT_EXTENSIONS = {".txt", ".md"}
PDF_EXTENSION = ".pdf"
SUPPORTED_EXTENSIONS = TEXT_EXTENSIONS | {PDF_EXTENSION}

# Below this many characters a PDF is treated as scanned
OCR_MIN_TEXT_LENGTH = 100

READING_FILE_MESSAGE = "Reading file..."
READING_PDF_MESSAGE = "Reading PDF..."
OCR_MESSAGE = "No text layer found, scanning document with OCR..."

ProgressCallback = Callable[[str], None]


class TextExtractor:
    """Convert uploaded resume bytes into text."""

    def __init__(
        self,
        min_text_length: int = OCR_MIN_TEXT_LENGTH,
        ocr_language: str = "eng",
        ocr_dpi: int = 300,
    ) -> None:
        self.min_text_length = min_text_length
        self.ocr_language = ocr_language
        self.ocr_dpi = ocr_dpi

    def extract(
        self,
        file_name: str,
        data: bytes,
        on_progress: Optional[ProgressCallback] = None,
    ) -> str:
        """
        Extract text from an uploaded file.

        Args:
            file_name: Original file name; its extension selects the reader.
            data: Raw file content.
            on_progress: Optional callback receiving human-readable progress messages.

        Returns:
            Extracted text.

        Raises:
            FileProcessingError: If the file type is unsupported or reading fails.
        """
        report = on_progress or (lambda message: None)
        extension = PurePath(file_name or "").suffix.lower()
        if extension not in SUPPORTED_EXTENSIONS:
            raise FileProcessingError(
                f"Unsupported file type '{extension or file_name}'. Please upload a PDF, TXT or MD file."
            )
        if not data:
            raise FileProcessingError("Failed to read file.")

        if extension in TEXT_EXTENSIONS:
            report(READING_FILE_MESSAGE)
            return data.decode("utf-8-sig", errors="replace")

        report(READING_PDF_MESSAGE)
        try:
            text = self._read_text_layer(data)
            if len(text.strip()) < self.min_text_length:
                LOGGER.info("PDF %s has %d characters of text; falling back to OCR", file_name, len(text.strip()))
                report(OCR_MESSAGE)
                text = self._ocr(data)
            else:
                LOGGER.info("Read %d characters from PDF text layer of %s", len(text), file_name)
        except Exception as exc:
            LOGGER.error("Failed to process PDF %s: %s", file_name, exc)
            raise FileProcessingError(f"Could not process the PDF. Error: {exc}") from exc
        return text

    def _read_text_layer(self, data: bytes) -> str:
        """Return the embedded text of every page, separated by blank lines."""
        with fitz.open(stream=data, filetype="pdf") as document:
            pages: List[str] = [page.get_text() for page in document]
        return "\n\n".join(page.strip() for page in pages)

    def _ocr(self, data: bytes) -> str:
        """Render every page and run Tesseract over it."""
        chunks: List[str] = []
        with fitz.open(stream=data, filetype="pdf") as document:
            for index, page in enumerate(document, start=1):
                pixmap = page.get_pixmap(dpi=self.ocr_dpi)
                image = Image.open(io.BytesIO(pixmap.tobytes("png")))
                chunks.append(pytesseract.image_to_string(image, lang=self.ocr_language))
                LOGGER.debug("OCR finished for page %d", index)
        return "\n\n".join(chunk.strip() for chunk in chunks)
