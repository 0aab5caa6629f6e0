"""Base class for document processors that extract text from various file types.

A processor handles one family of media types. It declares the types it
accepts, answers whether it can process a given file and extracts the
file's text, raising :class:`FileProcessingError` on failure. Processors
that can report richer metadata also implement ``extract_with_metadata``;
the dispatcher synthesizes minimal metadata for the ones that do not.

Example:
    >>> from docextract.processors import FileHandle, TextProcessor
    >>> handle = FileHandle(name="notes.txt", media_type="text/plain", content=b"hello")
    >>> await TextProcessor().extract_text(handle)
    'hello'
"""

import asyncio
import functools
import inspect
import logging
import os
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any, ClassVar, TypeVar

import psutil

from .errors import FileProcessingError, ProcessorErrorCode
from .models import FileHandle

logger = logging.getLogger(__name__)

T = TypeVar("T")


def get_memory_usage() -> float:
    """Get current memory usage of the process in MB."""
    process = psutil.Process(os.getpid())
    return process.memory_info().rss / 1024 / 1024


def log_memory(message: str) -> None:
    """Log memory usage with a custom message."""
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("Memory Usage (%s): %.2f MB", message, get_memory_usage())


def _log_duration(name: str, start_time: float) -> None:
    duration = time.perf_counter() - start_time
    logger.debug(
        "%s completed in %.2f seconds %s",
        name,
        duration,
        "🟢" if duration < 1 else "🟡" if duration < 5 else "🔴",
    )


def log_time(func):
    """Log the execution time of a function or coroutine function (decorator)."""
    if inspect.iscoroutinefunction(func):

        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs):
            start_time = time.perf_counter()
            logger.debug("Starting %s...", func.__qualname__)
            try:
                return await func(*args, **kwargs)
            finally:
                _log_duration(func.__qualname__, start_time)

        return async_wrapper

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        start_time = time.perf_counter()
        logger.debug("Starting %s...", func.__qualname__)
        try:
            return func(*args, **kwargs)
        finally:
            _log_duration(func.__qualname__, start_time)

    return wrapper


async def run_blocking(func: Callable[..., T], *args: Any) -> T:
    """Run a blocking parser call in the default executor."""
    return await asyncio.get_running_loop().run_in_executor(None, func, *args)


class BaseProcessor(ABC):
    """Base class for all format processors.

    Subclasses set ``MIMETYPES`` and, when they accept loosely-typed uploads,
    ``EXTENSIONS`` for filename-suffix matching.
    """

    MIMETYPES: ClassVar[tuple[str, ...]] = ()
    EXTENSIONS: ClassVar[tuple[str, ...]] = ()

    @property
    def name(self) -> str:
        """Identity used to annotate errors raised through the dispatcher."""
        return self.__class__.__name__

    @classmethod
    def supported_mimetypes(cls) -> list[str]:
        """Return the declared media types this processor handles."""
        return list(cls.MIMETYPES)

    @classmethod
    def supported_extensions(cls) -> list[str]:
        """Return the filename suffixes (with the dot) accepted as a fallback."""
        return list(cls.EXTENSIONS)

    @property
    def supported_types(self) -> list[str]:
        """Alias of :meth:`supported_mimetypes`."""
        return self.supported_mimetypes()

    def can_process(self, file: FileHandle) -> bool:
        """Check whether the file's declared type, or its suffix, is handled here."""
        if file.media_type.lower() in self.MIMETYPES:
            return True
        return bool(self.EXTENSIONS) and file.extension in self.EXTENSIONS

    def ensure_supported(self, file: FileHandle) -> None:
        """Raise UNSUPPORTED_TYPE if this processor cannot handle the file."""
        if not self.can_process(file):
            raise FileProcessingError(
                f"Unsupported file type: {file.media_type or 'unknown'}",
                ProcessorErrorCode.UNSUPPORTED_TYPE,
                file,
            )

    async def read_bytes(self, file: FileHandle) -> bytes:
        """Read the file bytes, converting unexpected failures to READ_FAILED."""
        try:
            return await file.read()
        except FileProcessingError:
            raise
        except Exception as e:
            raise FileProcessingError(
                f"Failed to read file: {e}", ProcessorErrorCode.READ_FAILED, file
            ) from e

    @abstractmethod
    async def extract_text(self, file: FileHandle) -> str:
        """Extract and clean the text of a file.

        Raises
        ------
        FileProcessingError
            If the file cannot be read or parsed
        """
        raise NotImplementedError("Subclasses must implement extract_text")
