"""Tests for content extraction from generated PDF and DOCX files."""

import zipfile

import pytest

from doclens.enums import DocumentFormat, MessageKind
from doclens.exceptions import (
    DocumentNotFoundError,
    PdfExtractionFailed,
    UnsupportedFormatError,
    WordExtractionFailed,
)
from doclens.services.document.extractor import (
    LEGACY_DOC_TEXT,
    ContentExtractor,
    document_format,
)
from doclens.services.document.geometry import analyze
from doclens.services.document.html import to_plain_text_with_image_placeholders
from doclens.services.document.models import DetectionOptions, HtmlOptions


@pytest.fixture
def extractor():
    return ContentExtractor()


class TestDocumentFormat:
    """Tests for extension checks."""

    def test_known_formats(self):
        assert document_format("a.PDF") == DocumentFormat.PDF
        assert document_format("a.docx") == DocumentFormat.DOCX
        assert document_format("a.doc") == DocumentFormat.DOC

    def test_unknown_format(self):
        with pytest.raises(UnsupportedFormatError, match=r"\.txt"):
            document_format("notes.txt")

    def test_extension_checked_before_existence(self, extractor, tmp_path):
        with pytest.raises(UnsupportedFormatError):
            extractor.ensure_supported(tmp_path / "missing.txt")

    def test_missing_file(self, extractor, tmp_path):
        with pytest.raises(DocumentNotFoundError):
            extractor.ensure_supported(tmp_path / "missing.pdf")


class TestExtractDocx:
    """Tests for the estimated Word layout."""

    def test_lines_and_media_become_blocks(self, extractor, important_docx):
        content = extractor.extract(important_docx)

        assert content.source_format == DocumentFormat.DOCX
        assert content.approximate is True
        assert content.notes
        assert [b.text for b in content.text_blocks] == ["标题", "重要信息", "结尾段落"]
        assert [b.position.y for b in content.text_blocks] == [100, 130, 160]
        assert len(content.image_positions) == 1
        assert content.image_positions[0].original_path == "word/media/image1.png"
        assert content.image_positions[0].position.x == 100

    def test_corrupt_docx_raises(self, extractor, tmp_path):
        path = tmp_path / "broken.docx"
        path.write_bytes(b"this is not a zip archive")

        with pytest.raises(WordExtractionFailed):
            extractor.extract(path)

    def test_unreadable_paragraphs_fall_back_to_raw_xml(self, extractor, tmp_path):
        path = tmp_path / "bare.docx"
        with zipfile.ZipFile(path, "w") as archive:
            archive.writestr(
                "word/document.xml",
                "<w:document><w:body><w:p><w:r><w:t>Raw fallback text</w:t></w:r></w:p>",
            )

        content = extractor.extract(path)

        assert [b.text for b in content.text_blocks] == ["Raw fallback text"]
        assert content.image_positions == []
        assert content.approximate is True
        assert any(note.startswith("Paragraph extraction failed") for note in content.notes)

    def test_legacy_doc_placeholder(self, extractor, tmp_path):
        path = tmp_path / "old.doc"
        path.write_bytes(b"\xd0\xcf\x11\xe0legacy")

        content = extractor.extract(path)

        assert content.source_format == DocumentFormat.DOC
        assert [b.text for b in content.text_blocks] == [LEGACY_DOC_TEXT]
        assert content.image_positions == []


class TestExtractPdf:
    """Tests for the PDF layout read with PyMuPDF."""

    def test_text_blocks_and_images(self, extractor, pdf_factory):
        path = pdf_factory(
            [["Figure caption"], ["Second page text"]],
            images=[(0, (72, 90, 172, 190))],
        )

        content = extractor.extract(path)

        assert content.page_count == 2
        assert content.approximate is False
        assert [b.text for b in content.text_blocks] == ["Figure caption", "Second page text"]
        assert [b.page for b in content.text_blocks] == [1, 2]
        assert len(content.image_positions) == 1
        image = content.image_positions[0]
        assert image.page == 1
        assert image.position.x == pytest.approx(72)
        assert image.position.y == pytest.approx(90)

    def test_later_pages_stack_below_earlier_ones(self, extractor, pdf_factory):
        path = pdf_factory([["First page"], ["Second page"]], images=[(1, (72, 90, 172, 190))])

        content = extractor.extract(path)

        first_height = extractor.pdf_reader.page_sizes(path)[0].height
        first, second = content.text_blocks
        image = content.image_positions[0]
        assert image.page == 2
        assert second.position.y > first_height > first.position.y
        assert image.position.y == pytest.approx(first_height + 90)

    def test_image_on_next_page_is_not_after_caption(self, extractor, pdf_factory):
        path = pdf_factory([["Caption"], []], images=[(1, (72, 90, 172, 190))])

        verdict = analyze(extractor.extract(path), "Caption", DetectionOptions())

        assert verdict.found_text is True
        assert verdict.has_image_after is False
        assert verdict.image_details == ()

    def test_image_below_caption_on_same_page(self, extractor, pdf_factory):
        path = pdf_factory([["Caption"]], images=[(0, (72, 90, 172, 190))])

        verdict = analyze(extractor.extract(path), "Caption", DetectionOptions())

        assert verdict.has_image_after is True

    def test_pdf_without_text_has_note(self, extractor, pdf_factory):
        content = extractor.extract(pdf_factory([[]]))

        assert content.text_blocks == []
        assert content.page_count == 1
        assert any("No text layer" in note for note in content.notes)

    def test_corrupt_pdf_raises(self, extractor, tmp_path):
        path = tmp_path / "broken.pdf"
        path.write_bytes(b"not a pdf at all")

        with pytest.raises(PdfExtractionFailed):
            extractor.extract(path)


class TestConvertToHtml:
    """Tests for the markup model."""

    def test_docx_image_follows_text(self, extractor, important_docx):
        conversion = extractor.convert_to_html(important_docx)

        assert "<img" in conversion.html
        assert "data:image/png;base64," in conversion.html
        text = to_plain_text_with_image_placeholders(conversion.html)
        assert "重要信息[image]" in text

    def test_docx_without_image_data(self, extractor, important_docx):
        conversion = extractor.convert_to_html(important_docx, HtmlOptions(include_images=False))

        assert "base64" not in conversion.html
        assert "重要信息[image]" in to_plain_text_with_image_placeholders(conversion.html)

    def test_pdf_text_layer(self, extractor, pdf_factory):
        conversion = extractor.convert_to_html(pdf_factory([["Summary:", "Body text here"]]))

        assert "Summary:" in conversion.html
        assert "Body text here" in conversion.html
        assert conversion.messages == []

    def test_pdf_without_text_reports_warning(self, extractor, pdf_factory):
        conversion = extractor.convert_to_html(pdf_factory([[]], name="scan.pdf"))

        assert "scan.pdf" in conversion.html
        assert "No extractable text" in conversion.html
        assert [m.kind for m in conversion.messages] == [MessageKind.WARNING]

    def test_unsupported_format(self, extractor, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("hello")

        with pytest.raises(UnsupportedFormatError):
            extractor.convert_to_html(path)
