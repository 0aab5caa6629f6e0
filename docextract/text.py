"""Convenience functions around the shared file processor.

``extract_text`` never raises for a bad file: unsupported and failed files
come back as bracketed placeholders so callers can concatenate results.
Images are only routed to OCR when the caller passes enabled OcrOptions.

Example:
    >>> from docextract.processors import FileHandle, OcrOptions
    >>> from docextract.text import extract_text
    >>> await extract_text(FileHandle.from_path("scan.png"), OcrOptions(enabled=True))
    'Invoice 1042'
"""

import logging

from .processors import (
    FileHandle,
    FileProcessingError,
    OcrOptions,
    ProcessingResult,
    file_processor,
)

logger = logging.getLogger(__name__)


def _ocr_requested(ocr_options: OcrOptions | None) -> bool:
    return ocr_options is not None and ocr_options.enabled


async def extract_text(file: FileHandle, ocr_options: OcrOptions | None = None) -> str:
    """Extract text from a file, returning a placeholder instead of raising.

    Parameters
    ----------
    file : FileHandle
        The file to extract
    ocr_options : OcrOptions | None, optional
        OCR settings; images are treated as unsupported unless enabled

    Returns
    -------
    str
        The extracted text, ``[Unsupported file type: <name>]`` or
        ``[Error processing <name>: <message>]``
    """
    include_ocr = _ocr_requested(ocr_options)
    if file is not None and not file_processor.can_process(file, include_ocr):
        logger.info("Skipping unsupported file %s (%s)", file.name, file.media_type or "unknown")
        return f"[Unsupported file type: {file.name}]"

    try:
        return await file_processor.extract_text(file, ocr_options, include_ocr=include_ocr)
    except FileProcessingError as e:
        name = file.name if file is not None else "unknown"
        logger.warning("Error processing %s: %s", name, e)
        return f"[Error processing {name}: {e.message}]"


async def extract_text_with_metadata(
    file: FileHandle, ocr_options: OcrOptions | None = None
) -> ProcessingResult:
    """Extract text and metadata. Unlike :func:`extract_text` this raises FileProcessingError."""
    return await file_processor.extract_with_metadata(
        file, ocr_options, include_ocr=_ocr_requested(ocr_options)
    )


def is_file_supported(file: FileHandle, ocr_enabled: bool = False) -> bool:
    """Check whether a file can be extracted, counting images only when OCR is enabled."""
    return file_processor.can_process(file, include_ocr=ocr_enabled)


def requires_ocr(file: FileHandle) -> bool:
    """Check whether a file can only be extracted with OCR."""
    return file_processor.requires_ocr(file)


def get_supported_file_types() -> list[str]:
    """Return every supported media type, sorted."""
    return sorted(file_processor.get_supported_types())
