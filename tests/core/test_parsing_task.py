"""
Test suite for DocumentParser.

Covers Markdown stripping, text normalization, format dispatch, malformed
payloads and PDF extraction from a minimal hand-built document.

System role: Verification of the first ingestion stage
"""

import pytest

from knowledge_assistant.core.document_processing.tasks.parsing_task import (
    DocumentParser,
    MarkdownDocumentFormat,
    is_pdf_payload,
    normalize_text,
    strip_markdown,
)
from knowledge_assistant.core.exceptions import (
    MalformedInputError,
    ParsingError,
    UnsupportedFormatError,
)
from knowledge_assistant.models.document import SourceFormat


def build_pdf(text: str, title: str = "Handbook", author: str = "Ops Team") -> bytes:
    """Assemble a one-page PDF with an info dictionary and a valid xref table."""
    stream = f"BT /F1 12 Tf 72 720 Td ({text}) Tj ET".encode("latin-1")
    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
        b"/Contents 4 0 R /Resources << /Font << /F1 5 0 R >> >> >>",
        b"<< /Length " + str(len(stream)).encode() + b" >>\nstream\n" + stream + b"\nendstream",
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
        f"<< /Title ({title}) /Author ({author}) >>".encode("latin-1"),
    ]

    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += f"{number} 0 obj\n".encode() + body + b"\nendobj\n"

    xref_offset = len(out)
    out += f"xref\n0 {len(objects) + 1}\n".encode()
    out += b"0000000000 65535 f \n"
    for offset in offsets:
        out += f"{offset:010d} 00000 n \n".encode()
    out += (
        f"trailer\n<< /Size {len(objects) + 1} /Root 1 0 R /Info 6 0 R >>\n"
        f"startxref\n{xref_offset}\n%%EOF\n"
    ).encode()
    return bytes(out)


@pytest.fixture
def parser() -> DocumentParser:
    return DocumentParser()


class TestNormalizeText:
    """Whitespace normalization shared by every format."""

    def test_collapses_whitespace_and_trims(self) -> None:
        assert normalize_text("  a\r\nb\t\tc\rd   ") == "a b c d"

    def test_paragraph_breaks_flattened(self) -> None:
        assert normalize_text("first\n\n\n\nsecond\n\nthird") == "first second third"

    @pytest.mark.parametrize(
        "text",
        ["plain", "  Mixed \r\n line\n\n\n\nendings\t", "# Title\n\n- item one\n- item two"],
    )
    def test_idempotent(self, text: str) -> None:
        once = normalize_text(text)

        assert normalize_text(once) == once


class TestStripMarkdown:
    """Markdown syntax removal rules."""

    def test_removes_common_syntax(self) -> None:
        # Arrange
        markdown = (
            "# Safety Guide\n"
            "Wear **gloves** and *goggles*.\n"
            "> Always check the valve\n"
            "- first step\n"
            "1. numbered step\n"
            "Run `reset` now. ~~old~~\n"
            "---\n"
        )

        # Act
        result = normalize_text(strip_markdown(markdown))

        # Assert
        assert result == (
            "Safety Guide Wear gloves and goggles. Always check the valve "
            "first step numbered step Run reset now. old"
        )

    def test_links_keep_text_and_url(self) -> None:
        assert strip_markdown("See [manual](http://x.io/m)") == "See manual (http://x.io/m)"

    def test_images_keep_alt_text(self) -> None:
        assert strip_markdown("![diagram](img.png)") == "diagram"

    def test_code_block_content_kept(self) -> None:
        result = strip_markdown("```python\nprint(1)\n```")

        assert "print(1)" in result
        assert "```" not in result


class TestDocumentParser:
    """Dispatch and error handling."""

    def test_parses_markdown(self, parser: DocumentParser) -> None:
        # Arrange
        data = "# Title\n\nSome **bold** text.".encode("utf-8")

        # Act
        parsed = parser.parse(data, "markdown")

        # Assert
        assert parsed.content == "Title Some bold text."
        assert parsed.metadata.source_format == SourceFormat.MARKDOWN
        assert parsed.metadata.original_size == len(data)
        assert parsed.metadata.page_count is None

    def test_declared_format_is_case_insensitive(self, parser: DocumentParser) -> None:
        parsed = parser.parse(b"hello", "MarkDown")

        assert parsed.metadata.source_format == SourceFormat.MARKDOWN

    def test_parsing_is_idempotent(self, parser: DocumentParser) -> None:
        data = b"# A\n\n* one\n* two\n\n\n\nText   with   gaps"

        first = parser.parse(data, SourceFormat.MARKDOWN)
        second = parser.parse(data, SourceFormat.MARKDOWN)

        assert first.content == second.content
        assert normalize_text(first.content) == first.content

    @pytest.mark.parametrize("data", [b"", None])
    def test_empty_payload_is_malformed(self, parser: DocumentParser, data) -> None:
        with pytest.raises(MalformedInputError):
            parser.parse(data, "markdown")

    def test_unknown_format_is_unsupported(self, parser: DocumentParser) -> None:
        with pytest.raises(UnsupportedFormatError) as exc_info:
            parser.parse(b"data", "docx", document_id="doc-1")

        assert exc_info.value.details["document_id"] == "doc-1"

    def test_unregistered_format_is_unsupported(self) -> None:
        parser = DocumentParser(formats=(MarkdownDocumentFormat(),))

        with pytest.raises(UnsupportedFormatError):
            parser.parse(b"%PDF-1.4", "pdf")

        assert parser.supported_formats == [SourceFormat.MARKDOWN]

    def test_invalid_utf8_is_malformed(self, parser: DocumentParser) -> None:
        with pytest.raises(MalformedInputError):
            parser.parse(b"\xff\xfe\xfa broken", "markdown")

    def test_markup_only_document_is_malformed(self, parser: DocumentParser) -> None:
        with pytest.raises(MalformedInputError):
            parser.parse(b"---\n\n   \n", "markdown")

    def test_pdf_without_signature_is_malformed(self, parser: DocumentParser) -> None:
        with pytest.raises(MalformedInputError) as exc_info:
            parser.parse(b"just some text", "pdf")

        assert exc_info.value.details["file_type"] == "pdf"

    def test_truncated_pdf_is_parsing_error(self, parser: DocumentParser) -> None:
        with pytest.raises(ParsingError):
            parser.parse(b"%PDF-1.4\n%garbage without objects", "pdf")

    def test_parses_pdf_text_and_info(self, parser: DocumentParser) -> None:
        # Arrange
        data = build_pdf("Hello PDF world")

        # Act
        parsed = parser.parse(data, "pdf")

        # Assert
        assert "Hello PDF world" in parsed.content
        assert parsed.metadata.source_format == SourceFormat.PDF
        assert parsed.metadata.page_count == 1
        assert parsed.metadata.info == {"Title": "Handbook", "Author": "Ops Team"}


class TestIsPdfPayload:
    def test_signature_detection(self) -> None:
        assert is_pdf_payload(b"%PDF-1.7 ...")
        assert not is_pdf_payload(b"<html>")
        assert not is_pdf_payload(b"")
        assert not is_pdf_payload(None)
