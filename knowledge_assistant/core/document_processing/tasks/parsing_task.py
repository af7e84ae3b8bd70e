"""
Document parsing task for PDF and Markdown payloads.

Turns raw bytes of a declared format into normalized plain text plus
parse metadata. Formats form a closed registry dispatched by the declared
format; payloads are never sniffed to pick a parser.

Dependencies: pypdf
System role: First stage of document ingestion pipeline
"""

import io
import logging
import re
from dataclasses import dataclass
from typing import Protocol

from pypdf import PdfReader

from knowledge_assistant.core.exceptions import (
    MalformedInputError,
    ParsingError,
    UnsupportedFormatError,
)
from knowledge_assistant.models.document import DocumentMetadata, ParsedDocument, SourceFormat

logger = logging.getLogger(__name__)

PDF_SIGNATURE = b"%PDF"

PDF_INFO_KEYS = (
    "Title",
    "Author",
    "Subject",
    "Keywords",
    "Creator",
    "Producer",
    "CreationDate",
    "ModDate",
)

# Applied in order; later rules never see syntax removed by earlier ones.
MARKDOWN_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"^#{1,6}\s+", re.MULTILINE), ""),  # headers
    (re.compile(r"(\*\*|__)(.*?)\1"), r"\2"),  # bold
    (re.compile(r"[*_]([^*_]+)[*_]"), r"\1"),  # italic
    (re.compile(r"~~([^~]+)~~"), r"\1"),  # strikethrough
    (re.compile(r"!\[([^\]]{0,200})\]\(([^)]{1,500})\)"), r"\1"),  # images
    (re.compile(r"\[([^\]]{1,500})\]\(([^)]{1,500})\)"), r"\1 (\2)"),  # links
    (re.compile(r"```[a-z]{0,20}\n?([^`]{1,10000})```"), r"\1"),  # code blocks
    (re.compile(r"`([^`]+)`"), r"\1"),  # inline code
    (re.compile(r"^(\*{3,}|-{3,}|_{3,})$", re.MULTILINE), ""),  # horizontal rules
    (re.compile(r"^>\s+", re.MULTILINE), ""),  # blockquotes
    (re.compile(r"^\s{0,10}[-*+]\s+", re.MULTILINE), ""),  # unordered lists
    (re.compile(r"^\s{0,10}\d+\.\s+", re.MULTILINE), ""),  # ordered lists
)

_LINE_BREAKS = re.compile(r"\r\n?")
_WHITESPACE_RUN = re.compile(r"\s+")


def normalize_text(text: str) -> str:
    """
    Normalize extracted text identically for every format.

    Line endings become LF, then every whitespace run (newlines included)
    collapses to one space and the result is trimmed. Paragraph breaks are
    therefore not kept: the output is a single line.
    """
    text = _LINE_BREAKS.sub("\n", text)
    text = _WHITESPACE_RUN.sub(" ", text)
    return text.strip()


def strip_markdown(markdown: str) -> str:
    """Reduce Markdown to plain prose using MARKDOWN_RULES."""
    result = markdown
    for pattern, replacement in MARKDOWN_RULES:
        result = pattern.sub(replacement, result)
    return result


def is_pdf_payload(data: bytes | None) -> bool:
    """Check for the %PDF signature."""
    return bool(data) and data[: len(PDF_SIGNATURE)] == PDF_SIGNATURE


@dataclass
class Extraction:
    """Raw text pulled out of a payload, before normalization."""

    text: str
    page_count: int | None = None
    info: dict[str, str] | None = None


class DocumentFormat(Protocol):
    """Capability shared by every supported format."""

    source_format: SourceFormat

    def extract(self, data: bytes) -> Extraction: ...


class PdfDocumentFormat:
    """Page-oriented binary documents read with pypdf."""

    source_format = SourceFormat.PDF

    def extract(self, data: bytes) -> Extraction:
        """
        Extract page text and allow-listed info entries.

        Raises:
            MalformedInputError: When the payload is not a readable PDF
        """
        if not is_pdf_payload(data):
            raise MalformedInputError(
                "Payload does not start with a PDF signature",
                file_type=self.source_format.value,
            )

        try:
            reader = PdfReader(io.BytesIO(data))
            pages = [page.extract_text() or "" for page in reader.pages]
            info = self._read_info(reader)
        except Exception as e:
            raise MalformedInputError(
                f"Failed to parse PDF: {e}",
                file_type=self.source_format.value,
            ) from e

        return Extraction(text="\n".join(pages), page_count=len(pages), info=info)

    @staticmethod
    def _read_info(reader: PdfReader) -> dict[str, str]:
        metadata = reader.metadata
        if metadata is None:
            return {}

        info: dict[str, str] = {}
        for name in PDF_INFO_KEYS:
            key = f"/{name}"
            if key not in metadata:
                continue
            value = metadata[key]
            if isinstance(value, str):
                info[name] = str(value)
        return info


class MarkdownDocumentFormat:
    """Lightweight markup decoded as UTF-8 and stripped to prose."""

    source_format = SourceFormat.MARKDOWN

    def extract(self, data: bytes) -> Extraction:
        try:
            markdown = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedInputError(
                f"Markdown payload is not valid UTF-8: {e.reason}",
                file_type=self.source_format.value,
                details={"position": e.start},
            ) from e
        return Extraction(text=strip_markdown(markdown))


DEFAULT_FORMATS: tuple[DocumentFormat, ...] = (PdfDocumentFormat(), MarkdownDocumentFormat())


class DocumentParser:
    """Parse raw document bytes by declared format."""

    def __init__(self, formats: tuple[DocumentFormat, ...] = DEFAULT_FORMATS) -> None:
        """
        Initialize parser with its format registry.

        Args:
            formats: Handlers, one per SourceFormat
        """
        self._formats: dict[SourceFormat, DocumentFormat] = {
            handler.source_format: handler for handler in formats
        }

    @property
    def supported_formats(self) -> list[SourceFormat]:
        return list(self._formats)

    def parse(
        self,
        data: bytes | None,
        declared_format: SourceFormat | str,
        document_id: str | None = None,
    ) -> ParsedDocument:
        """
        Parse a payload into a ParsedDocument.

        Args:
            data: Raw document bytes
            declared_format: Format the caller says the payload is in
            document_id: Optional identifier attached to raised errors

        Returns:
            ParsedDocument: Normalized content and metadata

        Raises:
            MalformedInputError: Empty payload, undecodable payload or no text
            UnsupportedFormatError: No handler for the declared format
        """
        if data is None or len(data) == 0:
            raise MalformedInputError(
                "Document payload cannot be empty",
                document_id=document_id,
                file_type=getattr(declared_format, "value", str(declared_format)),
            )

        try:
            source_format = SourceFormat.parse(declared_format)
            handler = self._formats.get(source_format)
            if handler is None:
                raise UnsupportedFormatError(
                    f"No parser registered for format: {source_format.value}",
                    file_type=source_format.value,
                )
            extraction = handler.extract(data)
        except ParsingError as e:
            if document_id:
                e.details.setdefault("document_id", document_id)
            raise

        content = normalize_text(extraction.text)
        if not content:
            raise MalformedInputError(
                "Document contains no extractable text",
                document_id=document_id,
                file_type=source_format.value,
            )

        logger.debug(
            f"{__name__}:parse - Parsed {source_format.value} payload "
            f"({len(data)} bytes -> {len(content)} chars)"
        )
        return ParsedDocument(
            content=content,
            metadata=DocumentMetadata(
                source_format=source_format,
                original_size=len(data),
                page_count=extraction.page_count,
                info=extraction.info,
            ),
        )
