"""OCR processor for raster images using Tesseract (via pytesseract).

The recognition engine is an explicitly owned, lazily started resource:

    UNINITIALIZED --first enabled extract--> READY --terminate()--> TERMINATED

A terminated worker is dropped, so the next enabled extraction starts a
fresh one. Access to the worker is serialized with an asyncio lock. A worker
is bound to the language it was started with; asking for another language
while it is READY raises OCR_INIT_FAILED rather than reinitializing.
"""

import asyncio
import logging
import threading
import time
from collections.abc import Callable
from enum import Enum
from io import BytesIO

import pytesseract
from PIL import Image

from .base_processor import BaseProcessor, log_time, run_blocking
from .cleaning import clean_ocr_text
from .errors import FileProcessingError, ProcessorErrorCode
from .models import FileHandle, OcrOptions, ProcessingMetadata, ProcessingResult

logger = logging.getLogger(__name__)


class OcrWorkerState(str, Enum):
    """Lifecycle states of the recognition worker."""

    UNINITIALIZED = "uninitialized"
    READY = "ready"
    TERMINATED = "terminated"


class OcrWorker:
    """A Tesseract engine bound to one recognition language.

    ``start``, ``recognize`` and ``terminate`` block and are meant to be
    run in an executor.
    """

    def __init__(self, language: str = "eng"):
        self.language = language
        self.state = OcrWorkerState.UNINITIALIZED
        self.engine_version = None
        self._engine_lock = threading.Lock()

    def start(self) -> None:
        """Locate the engine and check the language data is installed."""
        self.engine_version = pytesseract.get_tesseract_version()
        available = pytesseract.get_languages(config="")
        missing = [lang for lang in self.language.split("+") if available and lang not in available]
        if missing:
            raise RuntimeError(f"Tesseract language data not installed: {', '.join(missing)}")
        self.state = OcrWorkerState.READY
        logger.info("Tesseract %s ready (lang=%s)", self.engine_version, self.language)

    def recognize(self, data: bytes) -> str:
        """Return the raw text recognized in an encoded image."""
        if self.state is not OcrWorkerState.READY:
            raise RuntimeError(f"OCR worker is {self.state.value}, not ready")
        # held in the executor thread so a cancelled caller cannot overlap the next call
        with self._engine_lock, Image.open(BytesIO(data)) as image:
            image.load()
            return pytesseract.image_to_string(image, lang=self.language)

    def terminate(self) -> None:
        """Release the engine."""
        self.state = OcrWorkerState.TERMINATED
        logger.info("Tesseract worker terminated (lang=%s)", self.language)


class OCRProcessor(BaseProcessor):
    """Processor that recognizes text in PNG, JPEG and WebP images."""

    MIMETYPES = ("image/png", "image/jpeg", "image/webp")
    EXTENSIONS = (".png", ".jpg", ".jpeg", ".webp")

    def __init__(self, worker_factory: Callable[[str], OcrWorker] = OcrWorker):
        """Initialize the processor without starting an engine.

        Parameters
        ----------
        worker_factory : Callable[[str], OcrWorker]
            Builds a worker for a language, by default OcrWorker
        """
        self._worker_factory = worker_factory
        self._worker: OcrWorker | None = None
        self._lock: asyncio.Lock | None = None
        self._lock_loop: asyncio.AbstractEventLoop | None = None

    @property
    def state(self) -> OcrWorkerState:
        """Current lifecycle state of the shared worker."""
        if self._worker is None:
            return OcrWorkerState.UNINITIALIZED
        return self._worker.state

    def _get_lock(self) -> asyncio.Lock:
        # asyncio locks bind to the loop that first waits on them
        loop = asyncio.get_running_loop()
        if self._lock is None or self._lock_loop is not loop:
            self._lock = asyncio.Lock()
            self._lock_loop = loop
        return self._lock

    async def _ensure_worker(self, language: str, file: FileHandle) -> OcrWorker:
        """Return the READY worker, starting one if needed. Caller holds the lock."""
        if self._worker is not None and self._worker.state is OcrWorkerState.READY:
            if self._worker.language != language:
                raise FileProcessingError(
                    f"OCR worker is already initialized for '{self._worker.language}'; "
                    f"terminate it before requesting '{language}'",
                    ProcessorErrorCode.OCR_INIT_FAILED,
                    file,
                )
            return self._worker

        worker = self._worker_factory(language)
        try:
            await run_blocking(worker.start)
        except Exception as e:
            logger.error("Failed to initialize OCR worker (lang=%s): %s", language, e)
            raise FileProcessingError(
                f"Failed to initialize OCR worker: {e}",
                ProcessorErrorCode.OCR_INIT_FAILED,
                file,
            ) from e
        self._worker = worker
        return worker

    async def _recognize(self, file: FileHandle, options: OcrOptions) -> tuple[str, bool]:
        """Return the cleaned text and whether it is a generated placeholder."""
        if not options.enabled:
            return f"[Image uploaded: {file.name}. OCR disabled.]", True

        self.ensure_supported(file)
        data = await self.read_bytes(file)

        async with self._get_lock():
            worker = await self._ensure_worker(options.language, file)
            try:
                raw_text = await run_blocking(worker.recognize, data)
            except Exception as e:
                logger.error("OCR failed for %s: %s", file.name, e)
                raise FileProcessingError(
                    f"OCR processing failed: {e}", ProcessorErrorCode.OCR_FAILED, file
                ) from e

        cleaned_text = clean_ocr_text(raw_text or "")
        if not cleaned_text:
            logger.info("No text detected in %s", file.name)
            return f"[Image processed: {file.name}. No text detected.]", True
        return cleaned_text, False

    @log_time
    async def extract_text(self, file: FileHandle, options: OcrOptions | None = None) -> str:
        """Recognize the text in an image.

        Returns a placeholder instead of raising when OCR is disabled or when
        no text is found.

        Raises
        ------
        FileProcessingError
            OCR_INIT_FAILED if the engine cannot start,
            OCR_FAILED if recognition fails
        """
        text, _ = await self._recognize(file, options or OcrOptions())
        return text

    async def extract_with_metadata(
        self, file: FileHandle, options: OcrOptions | None = None
    ) -> ProcessingResult:
        """Recognize text and report timing; images always set has_images."""
        start_time = time.perf_counter()
        text, placeholder = await self._recognize(file, options or OcrOptions())
        return ProcessingResult(
            text=text,
            placeholder=placeholder,
            metadata=ProcessingMetadata(
                has_images=True,
                processing_time=time.perf_counter() - start_time,
            ),
        )

    async def terminate(self) -> None:
        """Tear down the shared worker. Safe to call when none is running."""
        async with self._get_lock():
            if self._worker is None:
                return
            worker, self._worker = self._worker, None
            worker.terminate()
