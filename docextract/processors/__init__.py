"""Package for document processors that extract text from various file types.

This package validates uploaded files, routes each one to the processor
for its declared media type and returns cleaned text with metadata. Images
fall back to OCR through a single shared Tesseract worker.

Example:
    >>> from docextract.processors import FileHandle, file_processor
    >>> result = await file_processor.extract_with_metadata(FileHandle.from_path("document.pdf"))
    >>> print(result.text)

Currently supported document types:
- PDF files (using PyPDF2)
- Word documents (using python-docx)
- Plain text, Markdown, CSV, JSON and HTML
- PNG, JPEG and WebP images (using pytesseract)
"""

from .base_processor import BaseProcessor
from .cleaning import clean_docx_text, clean_ocr_text, clean_pdf_text, clean_plain_text, count_words
from .config import ExtractionConfig
from .docx_processor import DOCXProcessor
from .errors import FileProcessingError, ProcessorErrorCode
from .models import (
    BatchOutcome,
    FileHandle,
    FileTypeInfo,
    OcrOptions,
    ProcessingMetadata,
    ProcessingResult,
)
from .ocr_processor import OCRProcessor, OcrWorker, OcrWorkerState
from .pdf_processor import PDFProcessor
from .registry import UnifiedFileProcessor, file_processor
from .text_processor import TextProcessor

__all__ = [
    "BaseProcessor",
    "BatchOutcome",
    "DOCXProcessor",
    "ExtractionConfig",
    "FileHandle",
    "FileProcessingError",
    "FileTypeInfo",
    "OCRProcessor",
    "OcrOptions",
    "OcrWorker",
    "OcrWorkerState",
    "PDFProcessor",
    "ProcessingMetadata",
    "ProcessingResult",
    "ProcessorErrorCode",
    "TextProcessor",
    "UnifiedFileProcessor",
    "clean_docx_text",
    "clean_ocr_text",
    "clean_pdf_text",
    "clean_plain_text",
    "count_words",
    "file_processor",
]
