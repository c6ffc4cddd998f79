"""Content extraction into the geometric and markup document models."""

import logging
from pathlib import Path

from doclens.enums import DocumentFormat, MessageKind
from doclens.exceptions import (
    DocumentNotFoundError,
    ExtractionError,
    UnsupportedFormatError,
)
from doclens.services.document.html import pdf_text_to_html, pdf_without_text_html
from doclens.services.document.models import (
    ConversionMessage,
    DocumentContent,
    HtmlConversion,
    HtmlOptions,
    ImagePosition,
    Rect,
    TextBlock,
)
from doclens.services.document.pdf import PdfReader
from doclens.services.document.word import WordReader

logger = logging.getLogger(__name__)

# Estimated layout for Word documents, which carry no page geometry.
WORD_TEXT_X = 50
WORD_TEXT_Y = 100
WORD_TEXT_WIDTH = 700
WORD_LINE_HEIGHT = 25
WORD_LINE_SPACING = 30
WORD_IMAGE_X = 100
WORD_IMAGE_SPACING = 250
WORD_IMAGE_Y = 300
WORD_IMAGE_WIDTH = 200
WORD_IMAGE_HEIGHT = 150
WORD_PAGE_RECT = Rect(WORD_TEXT_X, WORD_TEXT_Y, WORD_TEXT_WIDTH, 600)

LEGACY_DOC_TEXT = "Word document content (.doc format needs a dedicated parser)"
ESTIMATED_LAYOUT_NOTE = "Positions are estimated from reading order, not measured"


def document_format(path: str | Path) -> DocumentFormat:
    """Map a path's extension to a supported format."""
    extension = Path(path).suffix.lower()
    try:
        return DocumentFormat(extension)
    except ValueError:
        raise UnsupportedFormatError(
            f"Unsupported file format: {extension or '(none)'}. "
            "Only .doc, .docx and .pdf are supported"
        ) from None


class ContentExtractor:
    """Convert PDF and Word documents into the geometric or markup model."""

    def __init__(self, pdf_reader: PdfReader | None = None, word_reader: WordReader | None = None):
        self.pdf_reader = pdf_reader or PdfReader()
        self.word_reader = word_reader or WordReader()

    def ensure_supported(self, path: str | Path) -> DocumentFormat:
        """Check extension first, then existence."""
        fmt = document_format(path)
        if not Path(path).is_file():
            raise DocumentNotFoundError(f"File does not exist: {Path(path).name}")
        return fmt

    def extract(self, path: str | Path) -> DocumentContent:
        """
        Build the geometric model of a document.

        Args:
            path: Path to a .pdf, .docx or .doc file

        Returns:
            DocumentContent with text blocks and image positions

        Raises:
            UnsupportedFormatError: If the extension is not supported
            DocumentNotFoundError: If the file does not exist
            ExtractionError: If the file cannot be parsed
        """
        fmt = self.ensure_supported(path)

        if fmt == DocumentFormat.PDF:
            return self.pdf_reader.read_layout(path)
        if fmt == DocumentFormat.DOCX:
            return self._extract_docx(path)
        return self._extract_legacy_doc()

    def _extract_docx(self, path: str | Path) -> DocumentContent:
        logger.info(f"Reading Word layout: {Path(path).name}")
        try:
            lines = self.word_reader.read_lines(path)
        except ExtractionError:
            raise
        except Exception as e:
            logger.warning(f"Paragraph extraction failed, falling back to raw XML: {e}")
            text = self.word_reader.read_xml_text(path)
            return DocumentContent(
                text_blocks=[
                    TextBlock(page=1, text=text or "Word document content", position=WORD_PAGE_RECT)
                ],
                image_positions=[],
                page_count=1,
                source_format=DocumentFormat.DOCX,
                approximate=True,
                notes=[ESTIMATED_LAYOUT_NOTE, f"Paragraph extraction failed: {e}"],
            )

        text_blocks = [
            TextBlock(
                page=1,
                text=line,
                position=Rect(
                    WORD_TEXT_X,
                    WORD_TEXT_Y + index * WORD_LINE_SPACING,
                    WORD_TEXT_WIDTH,
                    WORD_LINE_HEIGHT,
                ),
            )
            for index, line in enumerate(lines)
        ]
        image_positions = [
            ImagePosition(
                page=1,
                position=Rect(
                    WORD_IMAGE_X + index * WORD_IMAGE_SPACING,
                    WORD_IMAGE_Y,
                    WORD_IMAGE_WIDTH,
                    WORD_IMAGE_HEIGHT,
                ),
                kind="image",
                index=index,
                original_path=entry.name,
            )
            for index, entry in enumerate(self.word_reader.list_media(path))
        ]

        logger.info(
            f"Word layout read: {len(text_blocks)} text blocks, {len(image_positions)} images"
        )
        return DocumentContent(
            text_blocks=text_blocks,
            image_positions=image_positions,
            page_count=1,
            source_format=DocumentFormat.DOCX,
            approximate=True,
            notes=[ESTIMATED_LAYOUT_NOTE],
        )

    def _extract_legacy_doc(self) -> DocumentContent:
        return DocumentContent(
            text_blocks=[TextBlock(page=1, text=LEGACY_DOC_TEXT, position=WORD_PAGE_RECT)],
            image_positions=[],
            page_count=1,
            source_format=DocumentFormat.DOC,
            approximate=True,
            notes=["Legacy .doc files are not supported for structured extraction"],
        )

    def convert_to_html(self, path: str | Path, options: HtmlOptions | None = None) -> HtmlConversion:
        """
        Build the markup model of a document.

        Word files go through mammoth; PDFs through their text layer, with a
        diagnostic block instead of a failure when the text layer is empty.
        """
        options = options or HtmlOptions()
        fmt = self.ensure_supported(path)

        if fmt in (DocumentFormat.DOCX, DocumentFormat.DOC):
            html, messages = self.word_reader.to_html(path, options)
        else:
            pdf_text = self.pdf_reader.read_text(path)
            if pdf_text.strip():
                html = pdf_text_to_html(pdf_text, options.id_prefix)
                messages = []
            else:
                logger.warning(
                    f"No text extracted from {Path(path).name}: "
                    "scanned, password protected, corrupted or image-only PDF"
                )
                html = pdf_without_text_html(path, options.id_prefix)
                messages = [
                    ConversionMessage(
                        kind=MessageKind.WARNING,
                        message="PDF text could not be extracted; OCR may be required",
                    )
                ]

        conversion = HtmlConversion(html=html, messages=messages)
        if conversion.errors:
            logger.warning(f"Conversion errors: {[m.message for m in conversion.errors]}")
        if conversion.warnings:
            logger.warning(f"Conversion warnings: {[m.message for m in conversion.warnings]}")
        return conversion
