"""Error handling utilities for processors."""

from enum import Enum
from typing import Any


class ProcessorErrorCode(str, Enum):
    """Error codes for extraction operations."""

    # Validation errors, raised before any processor runs
    NO_FILE = "NO_FILE"
    EMPTY_FILE = "EMPTY_FILE"
    FILE_TOO_LARGE = "FILE_TOO_LARGE"
    UNSUPPORTED_TYPE = "UNSUPPORTED_TYPE"
    NO_PROCESSOR = "NO_PROCESSOR"

    # Processing errors
    NO_TEXT_CONTENT = "NO_TEXT_CONTENT"
    EXTRACTION_FAILED = "EXTRACTION_FAILED"
    READ_FAILED = "READ_FAILED"

    # OCR engine errors
    OCR_INIT_FAILED = "OCR_INIT_FAILED"
    OCR_FAILED = "OCR_FAILED"

    # Batch-mode catch-alls
    UNEXPECTED_ERROR = "UNEXPECTED_ERROR"
    PROCESSING_FAILED = "PROCESSING_FAILED"


class FileProcessingError(Exception):
    """Structured, immutable error raised by processors and the dispatcher."""

    def __init__(
        self,
        message: str,
        code: ProcessorErrorCode,
        file: Any | None = None,
    ):
        """Initialize a processing error.

        Parameters
        ----------
        message : str
            A human-readable error message
        code : ProcessorErrorCode
            The error code
        file : FileHandle | None
            The file that caused the error, kept for diagnostics only
        """
        super().__init__(message)
        object.__setattr__(self, "code", ProcessorErrorCode(code))
        object.__setattr__(self, "message", message)
        object.__setattr__(self, "file", file)

    def __setattr__(self, name: str, value: Any) -> None:
        """Reject modification once constructed."""
        if name.startswith("__"):
            # interpreter-managed attributes such as __traceback__ and __notes__
            super().__setattr__(name, value)
            return
        raise AttributeError(f"FileProcessingError is immutable, cannot set {name}")

    def __delattr__(self, name: str) -> None:
        """Reject deletion once constructed."""
        raise AttributeError(f"FileProcessingError is immutable, cannot delete {name}")

    def __str__(self) -> str:
        """Return a string representation of the error."""
        error_str = f"[{self.code.value}] {self.message}"
        if self.file is not None:
            error_str += f" (File: {getattr(self.file, 'name', self.file)})"
        return error_str

    def __reduce__(self):
        return (self.__class__, (self.message, self.code, self.file))

    def with_prefix(self, prefix: str) -> "FileProcessingError":
        """Return a copy whose message is prefixed, keeping code and file."""
        return FileProcessingError(f"{prefix}: {self.message}", self.code, self.file)

    def to_dict(self) -> dict:
        """Convert the error to a dictionary."""
        return {
            "code": self.code.value,
            "message": self.message,
            "file": getattr(self.file, "name", None),
        }
