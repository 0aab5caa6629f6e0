"""Word document processor implementation using python-docx.

Raw text keeps document order: paragraphs are separated by blank lines and
table rows are emitted one per line with tab-separated cells. For metadata
extraction an HTML rendering is produced alongside the raw text, and the
presence of ``<img>`` elements in it sets ``has_images``.
"""

import asyncio
import html
import logging
import time
from io import BytesIO

import docx
from docx.document import Document as DocxDocument
from docx.oxml.ns import qn
from docx.table import Table
from docx.text.paragraph import Paragraph

from .base_processor import BaseProcessor, log_time, run_blocking
from .cleaning import clean_docx_text
from .errors import FileProcessingError, ProcessorErrorCode
from .models import FileHandle, ProcessingMetadata, ProcessingResult

logger = logging.getLogger(__name__)

ZIP_MAGIC = b"PK\x03\x04"


def _load(data: bytes) -> DocxDocument:
    if not data.startswith(ZIP_MAGIC):
        # python-docx only reads OOXML packages; legacy binary .doc lands here
        raise ValueError("not a DOCX (OOXML) package; legacy .doc files are not supported")
    return docx.Document(BytesIO(data))


def _table_rows(table: Table) -> list[str]:
    rows = []
    for row in table.rows:
        cells = [cell.text.strip() for cell in row.cells]
        if any(cells):
            rows.append("\t".join(cells))
    return rows


def extract_raw_text(data: bytes) -> str:
    """Return the plain text of a DOCX package in document order."""
    document = _load(data)
    blocks: list[str] = []
    for block in document.iter_inner_content():
        if isinstance(block, Paragraph):
            blocks.append(block.text)
        elif isinstance(block, Table):
            blocks.append("\n".join(_table_rows(block)))
    return "\n\n".join(blocks)


def _paragraph_html(paragraph: Paragraph) -> str:
    parts = []
    for run in paragraph.runs:
        for blip in run.element.xpath(".//a:blip"):
            parts.append(f'<img data-rid="{html.escape(blip.get(qn("r:embed")) or "")}" />')
        text = html.escape(run.text)
        if text and run.bold:
            text = f"<strong>{text}</strong>"
        if text and run.italic:
            text = f"<em>{text}</em>"
        parts.append(text)

    style_name = paragraph.style.name if paragraph.style is not None else ""
    tag = "p"
    if style_name.startswith("Heading "):
        level = style_name.removeprefix("Heading ").strip()
        if level.isdigit() and 1 <= int(level) <= 6:
            tag = f"h{level}"
    return f"<{tag}>{''.join(parts)}</{tag}>"


def render_html(data: bytes) -> str:
    """Render a DOCX package to simple HTML, marking embedded images with <img>."""
    document = _load(data)
    fragments: list[str] = []
    for block in document.iter_inner_content():
        if isinstance(block, Paragraph):
            fragments.append(_paragraph_html(block))
        elif isinstance(block, Table):
            rows = []
            for row in block.rows:
                cells = "".join(
                    f"<td>{''.join(_paragraph_html(p) for p in cell.paragraphs)}</td>"
                    for cell in row.cells
                )
                rows.append(f"<tr>{cells}</tr>")
            fragments.append(f"<table>{''.join(rows)}</table>")
    return "".join(fragments)


class DOCXProcessor(BaseProcessor):
    """Processor for Word documents."""

    MIMETYPES = (
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "application/msword",
    )

    def _failure(
        self, file: FileHandle, error: Exception, what: str = "text"
    ) -> FileProcessingError:
        logger.warning("python-docx failed on %s: %s", file.name, error)
        return FileProcessingError(
            f"Failed to extract {what} from DOCX: {error}",
            ProcessorErrorCode.EXTRACTION_FAILED,
            file,
        )

    @log_time
    async def extract_text(self, file: FileHandle) -> str:
        """Extract the cleaned text of a Word document.

        Raises
        ------
        FileProcessingError
            NO_TEXT_CONTENT for a document without text,
            EXTRACTION_FAILED when the package cannot be read
        """
        self.ensure_supported(file)
        data = await self.read_bytes(file)
        try:
            raw_text = await run_blocking(extract_raw_text, data)
        except Exception as e:
            raise self._failure(file, e) from e

        if not raw_text.strip():
            raise FileProcessingError(
                "No text content found in document", ProcessorErrorCode.NO_TEXT_CONTENT, file
            )
        return clean_docx_text(raw_text)

    async def _text_and_html(self, file: FileHandle, what: str) -> tuple[str, str]:
        data = await self.read_bytes(file)
        try:
            raw_text, rendered = await asyncio.gather(
                run_blocking(extract_raw_text, data),
                run_blocking(render_html, data),
            )
        except Exception as e:
            raise self._failure(file, e, what) from e
        return raw_text, rendered

    @log_time
    async def extract_with_metadata(self, file: FileHandle) -> ProcessingResult:
        """Extract cleaned text and detect embedded images from the HTML rendering."""
        self.ensure_supported(file)
        start_time = time.perf_counter()
        raw_text, rendered = await self._text_and_html(file, "text")
        processing_time = time.perf_counter() - start_time

        return ProcessingResult(
            text=clean_docx_text(raw_text),
            metadata=ProcessingMetadata(
                has_images="<img" in rendered,
                processing_time=processing_time,
            ),
        )

    async def extract_with_formatting(self, file: FileHandle) -> dict[str, str]:
        """Return the cleaned text together with the HTML rendering."""
        self.ensure_supported(file)
        raw_text, rendered = await self._text_and_html(file, "formatted content")
        return {"text": clean_docx_text(raw_text), "html": rendered}
