"""Processor for plain-text formats: text, Markdown, CSV, JSON and HTML.

Content is decoded as UTF-8 and cleaned conservatively so that intentional
formatting survives. Files with a missing or generic declared type are
accepted by filename suffix.
"""

import logging

from .base_processor import BaseProcessor, log_time
from .cleaning import clean_plain_text
from .errors import FileProcessingError, ProcessorErrorCode
from .models import FileHandle

logger = logging.getLogger(__name__)


class TextProcessor(BaseProcessor):
    """Processor for plain-text family files."""

    MIMETYPES = (
        "text/plain",
        "text/markdown",
        "text/csv",
        "application/json",
        "text/html",
    )
    EXTENSIONS = (".txt", ".md", ".markdown", ".csv", ".json")

    @log_time
    async def extract_text(self, file: FileHandle) -> str:
        """Decode and clean a text file.

        Raises
        ------
        FileProcessingError
            EMPTY_FILE when the content is only whitespace
        """
        self.ensure_supported(file)
        data = await self.read_bytes(file)

        text = data.decode("utf-8-sig", errors="replace")
        if "\ufffd" in text:
            logger.warning("%s is not valid UTF-8; undecodable bytes were replaced", file.name)

        if not text.strip():
            raise FileProcessingError(
                "File contains only whitespace", ProcessorErrorCode.EMPTY_FILE, file
            )
        return clean_plain_text(text)
