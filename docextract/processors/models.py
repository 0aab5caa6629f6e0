"""Data models exchanged between callers, the dispatcher and processors."""

import asyncio
import mimetypes
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .cleaning import count_words
from .errors import FileProcessingError, ProcessorErrorCode


class FileHandle(BaseModel):
    """Reference to uploaded bytes plus the caller-declared media type.

    The declared media type is trusted as given and never verified against
    the content.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    media_type: str = ""
    size_bytes: int = Field(default=-1, description="Byte length, derived when omitted")
    content: bytes | None = Field(default=None, repr=False)
    path: Path | None = None

    @model_validator(mode="before")
    @classmethod
    def derive_size(cls, data):
        """Fill in size_bytes from the content or the file on disk."""
        if not isinstance(data, dict) or data.get("size_bytes", -1) not in (-1, None):
            return data
        data = dict(data)
        if data.get("content") is not None:
            data["size_bytes"] = len(data["content"])
        elif data.get("path") is not None:
            data["size_bytes"] = Path(data["path"]).stat().st_size
        else:
            data["size_bytes"] = 0
        return data

    @model_validator(mode="after")
    def check_size(self) -> "FileHandle":
        """Reject negative sizes."""
        if self.size_bytes < 0:
            raise ValueError("size_bytes must be >= 0")
        return self

    @classmethod
    def from_path(cls, path: str | Path, media_type: str | None = None) -> "FileHandle":
        """Build a handle for a file on disk, guessing the media type if needed."""
        path = Path(path)
        if media_type is None:
            media_type = mimetypes.guess_type(path.name)[0] or ""
        return cls(name=path.name, media_type=media_type, path=path)

    @property
    def extension(self) -> str:
        """Lowercase filename suffix including the dot, or an empty string."""
        return Path(self.name).suffix.lower()

    async def read(self) -> bytes:
        """Return the file bytes, reading from disk in an executor when needed."""
        if self.content is not None:
            return self.content
        if self.path is None:
            raise FileProcessingError(
                "File has no content to read", ProcessorErrorCode.READ_FAILED, self
            )
        try:
            return await asyncio.get_running_loop().run_in_executor(None, self.path.read_bytes)
        except OSError as e:
            raise FileProcessingError(
                f"Failed to read file: {e}", ProcessorErrorCode.READ_FAILED, self
            ) from e


class OcrOptions(BaseModel):
    """Per-call OCR settings."""

    enabled: bool = True
    language: str = "eng"
    # Accepted for compatibility; image preprocessing is not performed.
    preprocess_image: bool = False


class ProcessingMetadata(BaseModel):
    """Extraction metadata. word_count is always derived from the result text."""

    word_count: int = Field(default=0, ge=0)
    page_count: int | None = None
    has_images: bool | None = None
    processing_time: float = Field(default=0.0, ge=0, description="Elapsed seconds")


class ProcessingResult(BaseModel):
    """Extracted text with its metadata.

    A result flagged as a placeholder carries a generated notice rather than
    file content and always counts zero words.
    """

    text: str
    metadata: ProcessingMetadata = Field(default_factory=ProcessingMetadata)
    placeholder: bool = Field(default=False, exclude=True)

    @model_validator(mode="after")
    def sync_word_count(self) -> "ProcessingResult":
        """Recompute the word count from the text so the two cannot drift."""
        self.metadata.word_count = 0 if self.placeholder else count_words(self.text)
        return self


class BatchOutcome(BaseModel):
    """Outcome for one file of a batch: exactly one of result or error."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    # the item as passed in, which may not be a FileHandle
    file: Any = None
    result: ProcessingResult | None = None
    error: FileProcessingError | None = None

    @model_validator(mode="after")
    def check_exclusive(self) -> "BatchOutcome":
        """Require exactly one of result and error."""
        if (self.result is None) == (self.error is None):
            raise ValueError("BatchOutcome needs exactly one of result or error")
        return self

    @property
    def ok(self) -> bool:
        """Whether the file was extracted successfully."""
        return self.result is not None


class FileTypeInfo(BaseModel):
    """Diagnostic description of how a file would be routed."""

    type: str
    processor_name: str
    supported: bool
    requires_ocr: bool | None = None
