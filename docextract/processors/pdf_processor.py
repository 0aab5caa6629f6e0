"""PDF processor implementation using PyPDF2.

This module provides a processor for extracting text from PDF files.
Parsing runs in the default executor so the event loop stays responsive
while large documents are decoded.

Example:
    >>> from docextract.processors import FileHandle, PDFProcessor
    >>> handle = FileHandle.from_path("report.pdf")
    >>> result = await PDFProcessor().extract_with_metadata(handle)
    >>> result.metadata.page_count
    12
"""

import logging
import time
from io import BytesIO
from typing import NamedTuple

import PyPDF2

from .base_processor import BaseProcessor, log_time, run_blocking
from .cleaning import clean_pdf_text
from .errors import FileProcessingError, ProcessorErrorCode
from .models import FileHandle, ProcessingMetadata, ProcessingResult

logger = logging.getLogger(__name__)

# Placeholder markers some PDF producers leave where figures were embedded
IMAGE_MARKERS = ("[image]", "[figure]")


class ParsedPDF(NamedTuple):
    """Raw parser output before cleaning."""

    text: str
    page_count: int


def parse_pdf(data: bytes) -> ParsedPDF:
    """Parse PDF bytes into raw page text joined by blank lines."""
    pdf_reader = PyPDF2.PdfReader(BytesIO(data), strict=False)
    pages = [page.extract_text() or "" for page in pdf_reader.pages]
    return ParsedPDF(text="\n\n".join(pages), page_count=len(pdf_reader.pages))


class PDFProcessor(BaseProcessor):
    """Processor for PDF files using PyPDF2."""

    MIMETYPES = ("application/pdf",)

    async def _parse(self, file: FileHandle) -> ParsedPDF:
        data = await self.read_bytes(file)
        try:
            parsed = await run_blocking(parse_pdf, data)
        except Exception as e:
            logger.warning("PyPDF2 failed to parse %s: %s", file.name, e)
            raise FileProcessingError(
                f"Failed to extract text from PDF: {e}",
                ProcessorErrorCode.EXTRACTION_FAILED,
                file,
            ) from e
        logger.debug(
            "Parsed %s: %d pages, %d raw chars", file.name, parsed.page_count, len(parsed.text)
        )
        return parsed

    @log_time
    async def extract_text(self, file: FileHandle) -> str:
        """Extract the cleaned text of a PDF.

        Raises
        ------
        FileProcessingError
            NO_TEXT_CONTENT when the PDF parses but holds no text,
            EXTRACTION_FAILED when it cannot be parsed
        """
        self.ensure_supported(file)
        parsed = await self._parse(file)

        cleaned_text = clean_pdf_text(parsed.text)
        if not cleaned_text:
            raise FileProcessingError(
                "No text content found in PDF", ProcessorErrorCode.NO_TEXT_CONTENT, file
            )
        return cleaned_text

    @log_time
    async def extract_with_metadata(self, file: FileHandle) -> ProcessingResult:
        """Extract the cleaned text with page count and an image heuristic.

        ``has_images`` is best effort: it is set when the parser left figure
        placeholder markers in the raw text.
        """
        self.ensure_supported(file)
        start_time = time.perf_counter()
        parsed = await self._parse(file)
        processing_time = time.perf_counter() - start_time

        raw_lower = parsed.text.lower()
        return ProcessingResult(
            text=clean_pdf_text(parsed.text),
            metadata=ProcessingMetadata(
                page_count=parsed.page_count,
                has_images=any(marker in raw_lower for marker in IMAGE_MARKERS),
                processing_time=processing_time,
            ),
        )
