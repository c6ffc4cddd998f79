"""Image extraction from uploaded documents."""

import base64
import logging
import mimetypes
from pathlib import Path

from doclens.enums import DocumentFormat
from doclens.services.document.extractor import document_format
from doclens.services.document.pdf import PdfReader
from doclens.services.document.word import WordReader

logger = logging.getLogger(__name__)


class ImageExtractor:
    """List the images embedded in a document as JSON-ready dicts.

    DOCX media is returned inline as base64 data URIs. PDFs are described
    page by page without pulling image streams.
    """

    def __init__(self, pdf_reader: PdfReader | None = None, word_reader: WordReader | None = None):
        self.pdf_reader = pdf_reader or PdfReader()
        self.word_reader = word_reader or WordReader()

    def extract(self, path: str | Path, file_name: str) -> list[dict]:
        fmt = document_format(path)
        if fmt == DocumentFormat.PDF:
            return self._extract_pdf(path, file_name)
        if fmt == DocumentFormat.DOCX:
            return self._extract_docx(path, file_name)
        return [
            {
                "description": "Word document image",
                "imageUrl": "",
                "format": "DOC",
                "originalFileName": file_name,
                "note": ".doc files need a dedicated parser for image extraction",
            }
        ]

    def _extract_pdf(self, path: str | Path, file_name: str) -> list[dict]:
        return [
            {
                "description": f"PDF page {size.page}",
                "imageUrl": "",
                "format": "PDF_PAGE",
                "originalFileName": file_name,
                "pageInfo": {"page": size.page, "width": size.width, "height": size.height},
            }
            for size in self.pdf_reader.page_sizes(path)
        ]

    def _extract_docx(self, path: str | Path, file_name: str) -> list[dict]:
        images = []
        for index, entry in enumerate(self.word_reader.list_media(path)):
            mime_type = mimetypes.guess_type(entry.name)[0] or "application/octet-stream"
            encoded = base64.b64encode(entry.data).decode("utf-8")
            images.append(
                {
                    "description": f"Word document image {index + 1}",
                    "imageUrl": f"data:{mime_type};base64,{encoded}",
                    "format": entry.extension.upper(),
                    "size": len(entry.data),
                    "originalPath": entry.name,
                    "originalFileName": file_name,
                }
            )
        logger.info(f"Extracted {len(images)} images from {file_name}")
        return images
