"""Dispatcher that validates files, selects a processor and delegates extraction.

Processor selection is "first match wins" over a fixed order: PDF, then
Word, then the plain-text family. The OCR processor is consulted only
when no standard processor claims the file and OCR routing is allowed.

Example:
    >>> from docextract.processors import FileHandle, file_processor
    >>> handle = FileHandle(name="notes.txt", media_type="text/plain", content=b"hello  world")
    >>> await file_processor.extract_text(handle)
    'hello world'
    >>> outcomes = await file_processor.extract_from_multiple_files([handle])
    >>> outcomes[0].result.metadata.word_count
    2
"""

import asyncio
import contextlib
import logging
import time
from collections.abc import Iterable

from .base_processor import BaseProcessor, log_memory, log_time
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
from .ocr_processor import OCRProcessor
from .pdf_processor import PDFProcessor
from .text_processor import TextProcessor

logger = logging.getLogger(__name__)


class UnifiedFileProcessor:
    """Registry of format processors plus the shared OCR processor.

    This class owns the processors for the lifetime of the instance,
    including the single OCR worker, which is released by
    :meth:`terminate_ocr` or on leaving an ``async with`` block.
    """

    def __init__(
        self,
        config: ExtractionConfig | None = None,
        processors: Iterable[BaseProcessor] | None = None,
        ocr_processor: OCRProcessor | None = None,
    ):
        """Initialize the dispatcher with the built-in processors.

        Parameters
        ----------
        config : ExtractionConfig | None, optional
            Limits and defaults, by default ExtractionConfig()
        processors : Iterable[BaseProcessor] | None, optional
            Standard processors in priority order, by default PDF, Word, text
        ocr_processor : OCRProcessor | None, optional
            The OCR fallback, by default a new OCRProcessor
        """
        self.config = config or ExtractionConfig()
        if processors is None:
            processors = [PDFProcessor(), DOCXProcessor(), TextProcessor()]
        self._processors: list[BaseProcessor] = list(processors)
        self._ocr_processor = ocr_processor or OCRProcessor()

    async def __aenter__(self) -> "UnifiedFileProcessor":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.terminate_ocr()

    @property
    def processors(self) -> tuple[BaseProcessor, ...]:
        """Standard processors in selection order."""
        return tuple(self._processors)

    @property
    def ocr_processor(self) -> OCRProcessor:
        """The shared OCR processor."""
        return self._ocr_processor

    def register_processor(self, processor: BaseProcessor) -> None:
        """Append a processor with the lowest selection priority."""
        self._processors.append(processor)
        logger.debug("Registered processor %s", processor.name)

    def get_supported_types(self) -> set[str]:
        """Return every declared media type any processor handles, OCR included."""
        types = {t for p in self._processors for t in p.supported_types}
        types.update(self._ocr_processor.supported_types)
        return types

    def _find_standard_processor(self, file: FileHandle) -> BaseProcessor | None:
        return next((p for p in self._processors if p.can_process(file)), None)

    def can_process(self, file: FileHandle, include_ocr: bool = True) -> bool:
        """Check whether a standard processor, or optionally OCR, claims the file."""
        if self._find_standard_processor(file) is not None:
            return True
        return include_ocr and self._ocr_processor.can_process(file)

    def requires_ocr(self, file: FileHandle) -> bool:
        """Return True when only the OCR processor claims the file."""
        return self._find_standard_processor(file) is None and self._ocr_processor.can_process(file)

    def get_file_type_info(self, file: FileHandle) -> FileTypeInfo:
        """Describe how a file would be routed, without side effects."""
        file_type = file.media_type or "unknown"
        standard_processor = self._find_standard_processor(file)
        if standard_processor is not None:
            return FileTypeInfo(
                type=file_type, processor_name=standard_processor.name, supported=True
            )
        if self._ocr_processor.can_process(file):
            return FileTypeInfo(
                type=file_type,
                processor_name=self._ocr_processor.name,
                supported=True,
                requires_ocr=True,
            )
        return FileTypeInfo(type=file_type, processor_name="none", supported=False)

    def validate_file(self, file: FileHandle | None, include_ocr: bool = True) -> FileHandle:
        """Validate a file before any processor runs.

        Checks run in a fixed order and never read the file bytes.

        Raises
        ------
        FileProcessingError
            NO_FILE, EMPTY_FILE, FILE_TOO_LARGE or UNSUPPORTED_TYPE
        """
        if file is None:
            raise FileProcessingError("No file provided", ProcessorErrorCode.NO_FILE)
        if not isinstance(file, FileHandle):
            raise FileProcessingError(
                f"Invalid file: expected FileHandle, got {type(file).__name__}",
                ProcessorErrorCode.NO_FILE,
                file,
            )

        if file.size_bytes == 0:
            raise FileProcessingError("File is empty", ProcessorErrorCode.EMPTY_FILE, file)

        max_size = self.config.max_file_size
        if file.size_bytes > max_size:
            raise FileProcessingError(
                f"File size ({round(file.size_bytes / 1024 / 1024)}MB) exceeds maximum "
                f"allowed size ({max_size / 1024 / 1024:g}MB)",
                ProcessorErrorCode.FILE_TOO_LARGE,
                file,
            )

        if not self.can_process(file, include_ocr):
            supported = sorted(self.get_supported_types())
            raise FileProcessingError(
                f"Unsupported file type: {file.media_type or 'unknown'}. "
                f"Supported types: {', '.join(supported)}",
                ProcessorErrorCode.UNSUPPORTED_TYPE,
                file,
            )
        return file

    def select_processor(self, file: FileHandle, include_ocr: bool = True) -> BaseProcessor:
        """Pick the first standard processor claiming the file, else OCR if allowed.

        Raises
        ------
        FileProcessingError
            NO_PROCESSOR if nothing claims the file
        """
        processor = self._find_standard_processor(file)
        if processor is not None:
            return processor
        if include_ocr and self._ocr_processor.can_process(file):
            return self._ocr_processor
        raise FileProcessingError(
            f"No processor available for file type: {file.media_type or 'unknown'}",
            ProcessorErrorCode.NO_PROCESSOR,
            file,
        )

    def _ocr_options(self, ocr_options: OcrOptions | None) -> OcrOptions:
        return ocr_options or OcrOptions(language=self.config.default_ocr_language)

    async def _delegate(self, processor: BaseProcessor, file: FileHandle, coro):
        """Await a processor call, prefixing its errors with the processor identity."""
        try:
            if self.config.extraction_timeout is None:
                return await coro
            return await asyncio.wait_for(coro, timeout=self.config.extraction_timeout)
        except FileProcessingError as e:
            raise e.with_prefix(processor.name) from e
        except asyncio.TimeoutError as e:
            raise FileProcessingError(
                f"{processor.name}: Processing failed: timed out after "
                f"{self.config.extraction_timeout:g} seconds",
                ProcessorErrorCode.PROCESSING_FAILED,
                file,
            ) from e

    @log_time
    async def extract_text(
        self,
        file: FileHandle | None,
        ocr_options: OcrOptions | None = None,
        *,
        include_ocr: bool = True,
    ) -> str:
        """Extract the text of a file using the appropriate processor.

        Parameters
        ----------
        file : FileHandle | None
            The file to extract
        ocr_options : OcrOptions | None, optional
            OCR settings for images, by default OCR enabled with the configured language
        include_ocr : bool, optional
            Whether images may be routed to OCR at all, by default True

        Returns
        -------
        str
            The cleaned text

        Raises
        ------
        FileProcessingError
            Validation errors directly; processor errors prefixed with the processor name
        """
        file = self.validate_file(file, include_ocr)
        processor = self.select_processor(file, include_ocr)
        logger.info("Extracting text from %s with %s", file.name, processor.name)

        if processor is self._ocr_processor:
            coro = self._ocr_processor.extract_text(file, self._ocr_options(ocr_options))
        else:
            coro = processor.extract_text(file)
        return await self._delegate(processor, file, coro)

    @log_time
    async def extract_with_metadata(
        self,
        file: FileHandle | None,
        ocr_options: OcrOptions | None = None,
        *,
        include_ocr: bool = True,
    ) -> ProcessingResult:
        """Extract text and metadata from a file.

        Processors without their own metadata support fall back to plain
        extraction timed here, with only word count and processing time set.
        """
        file = self.validate_file(file, include_ocr)
        processor = self.select_processor(file, include_ocr)
        logger.info("Extracting text with metadata from %s with %s", file.name, processor.name)
        log_memory(f"Before {file.name}")

        if processor is self._ocr_processor:
            result = await self._delegate(
                processor,
                file,
                self._ocr_processor.extract_with_metadata(file, self._ocr_options(ocr_options)),
            )
        elif callable(getattr(processor, "extract_with_metadata", None)):
            result = await self._delegate(processor, file, processor.extract_with_metadata(file))
        else:
            start_time = time.perf_counter()
            text = await self._delegate(processor, file, processor.extract_text(file))
            result = ProcessingResult(
                text=text,
                metadata=ProcessingMetadata(processing_time=time.perf_counter() - start_time),
            )

        log_memory(f"After {file.name}")
        logger.info(
            "Extracted %d words from %s in %.2f seconds",
            result.metadata.word_count,
            file.name,
            result.metadata.processing_time,
        )
        return result

    async def extract_from_multiple_files(
        self,
        files: Iterable[FileHandle | None],
        ocr_options: OcrOptions | None = None,
    ) -> list[BatchOutcome]:
        """Extract every file concurrently, returning one outcome per input in order.

        Failures are converted to per-item errors; this method does not raise
        for individual files.
        """
        files = list(files)
        limit = self.config.max_concurrency
        semaphore = asyncio.Semaphore(limit) if limit else None
        logger.info(
            "Batch extracting %d files (max_concurrency=%s)", len(files), limit or "unbounded"
        )

        async def settle(file) -> BatchOutcome:
            try:
                async with semaphore or contextlib.nullcontext():
                    result = await self.extract_with_metadata(file, ocr_options)
            except FileProcessingError as e:
                logger.warning("Batch item %s failed: %s", getattr(file, "name", None), e)
                return BatchOutcome(file=file, error=e)
            except Exception as e:
                logger.exception("Unexpected error processing %s", getattr(file, "name", None))
                return BatchOutcome(
                    file=file,
                    error=FileProcessingError(
                        f"Unexpected error: {e}", ProcessorErrorCode.UNEXPECTED_ERROR, file
                    ),
                )
            return BatchOutcome(file=file, result=result)

        outcomes = await asyncio.gather(*(settle(file) for file in files))
        failed = sum(1 for outcome in outcomes if not outcome.ok)
        logger.info("Batch complete: %d succeeded, %d failed", len(outcomes) - failed, failed)
        return list(outcomes)

    async def terminate_ocr(self) -> None:
        """Release the shared OCR worker. Safe to call repeatedly."""
        await self._ocr_processor.terminate()


# Create a global dispatcher instance
file_processor = UnifiedFileProcessor()
