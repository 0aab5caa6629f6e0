"""Text cleaning utilities shared by every processor.

Every cleaner is a fixed point on its own output: cleaning already-cleaned
text returns it unchanged.
"""

import re

_LINE_ENDINGS = re.compile(r"\r\n?")
_PARAGRAPH_BREAK = re.compile(r"\n\s*\n")
_TABLE_PIPES = re.compile(r"\|+")
_RULE_ARTIFACTS = re.compile(r"_{3,}|-{3,}")
_HORIZONTAL_SPACE = re.compile(r"[ \t]+")
_TRAILING_SPACE = re.compile(r"[ \t]+$", re.MULTILINE)
_INTERIOR_SPACE_RUN = re.compile(r"(?<=\S) {2,}(?=\S)")
_EXCESS_BLANK_LINES = re.compile(r"\n{3,}")
_TEXT_BLANK_LINES = re.compile(r"\n{4,}")
_OCR_ARTIFACTS = re.compile(r"[^\w\s.,!?;:'\"()-]")


def normalize_line_endings(text: str) -> str:
    """Convert CRLF and lone CR line endings to LF."""
    return _LINE_ENDINGS.sub("\n", text)


def _join_paragraphs(text: str) -> str:
    """Collapse whitespace inside paragraphs, keeping blank-line paragraph breaks."""
    paragraphs = (" ".join(part.split()) for part in _PARAGRAPH_BREAK.split(text))
    return "\n\n".join(p for p in paragraphs if p)


def clean_pdf_text(text: str) -> str:
    """Clean text produced by a PDF parser.

    Form feeds become paragraph breaks, table pipes and long underscore or
    dash rules are removed, single line breaks are joined into spaces and
    paragraph breaks are kept as exactly one blank line.
    """
    if not text:
        return ""
    text = normalize_line_endings(text).replace("\f", "\n\n")
    text = _TABLE_PIPES.sub(" ", text)
    text = _RULE_ARTIFACTS.sub(" ", text)
    return _join_paragraphs(text)


def clean_docx_text(text: str) -> str:
    """Clean raw text extracted from a Word document."""
    if not text:
        return ""
    text = normalize_line_endings(text)
    text = _HORIZONTAL_SPACE.sub(" ", text)
    text = _TRAILING_SPACE.sub("", text)
    text = _EXCESS_BLANK_LINES.sub("\n\n", text)
    return text.strip()


def clean_plain_text(text: str) -> str:
    """Conservatively clean plain text, Markdown, CSV, JSON or HTML.

    Leading indentation is preserved, interior runs of spaces between words
    collapse to one, and at most two consecutive blank lines survive.
    """
    if not text:
        return ""
    text = normalize_line_endings(text)
    text = _TRAILING_SPACE.sub("", text)
    text = _INTERIOR_SPACE_RUN.sub(" ", text)
    text = _TEXT_BLANK_LINES.sub("\n\n\n", text)
    return text.strip()


def clean_ocr_text(text: str) -> str:
    """Clean recognized text, dropping characters outside a conservative set."""
    if not text:
        return ""
    text = normalize_line_endings(text)
    text = _OCR_ARTIFACTS.sub("", text)
    return _join_paragraphs(text)


def count_words(text: str) -> int:
    """Count whitespace-delimited tokens."""
    return len(text.split()) if text else 0
