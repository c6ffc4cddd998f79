"""PDF reading with PyMuPDF."""

import logging
from dataclasses import dataclass
from pathlib import Path

import fitz  # PyMuPDF

from doclens.enums import DocumentFormat
from doclens.exceptions import PdfExtractionFailed
from doclens.services.document.models import DocumentContent, ImagePosition, Rect, TextBlock

logger = logging.getLogger(__name__)

TEXT_BLOCK_TYPE = 0


@dataclass(frozen=True)
class PageSize:
    page: int
    width: float
    height: float


class PdfReader:
    """Read page geometry, text layer and placed images from a PDF."""

    def _open(self, path: str | Path) -> fitz.Document:
        try:
            return fitz.open(str(path), filetype="pdf")
        except Exception as e:
            raise PdfExtractionFailed(f"PDF content extraction failed: {e}") from e

    def read_layout(self, path: str | Path) -> DocumentContent:
        """
        Build the geometric model from the PDF's own layout.

        Text blocks and image rectangles come from the page content in PDF
        points. Pages stack vertically: each page's y values are offset by
        the heights of the pages before it, so positions on different pages
        never overlap. Pages without a text layer contribute no text blocks.
        """
        logger.info(f"Reading PDF layout: {Path(path).name}")
        doc = self._open(path)
        try:
            text_blocks: list[TextBlock] = []
            image_positions: list[ImagePosition] = []
            image_index = 0
            page_offset = 0.0

            for page_idx, page in enumerate(doc):
                page_num = page_idx + 1

                for x0, y0, x1, y1, text, _block_no, block_type in page.get_text("blocks", sort=True):
                    if block_type != TEXT_BLOCK_TYPE:
                        continue
                    stripped = " ".join(text.split())
                    if not stripped:
                        continue
                    text_blocks.append(
                        TextBlock(
                            page=page_num,
                            text=stripped,
                            position=Rect(x0, page_offset + y0, x1 - x0, y1 - y0),
                        )
                    )

                for image_info in page.get_images(full=True):
                    xref = image_info[0]
                    for rect in page.get_image_rects(xref):
                        image_positions.append(
                            ImagePosition(
                                page=page_num,
                                position=Rect(rect.x0, page_offset + rect.y0, rect.width, rect.height),
                                kind="image",
                                index=image_index,
                            )
                        )
                        image_index += 1

                page_offset += page.rect.height

            notes = []
            if not text_blocks:
                notes.append(
                    "No text layer found; the PDF may be scanned, image-only or password protected"
                )

            logger.info(
                f"PDF layout read: {doc.page_count} pages, "
                f"{len(text_blocks)} text blocks, {len(image_positions)} images"
            )
            return DocumentContent(
                text_blocks=text_blocks,
                image_positions=image_positions,
                page_count=max(doc.page_count, 1),
                source_format=DocumentFormat.PDF,
                approximate=False,
                notes=notes,
            )
        except PdfExtractionFailed:
            raise
        except Exception as e:
            raise PdfExtractionFailed(f"PDF content extraction failed: {e}") from e
        finally:
            doc.close()

    def read_text(self, path: str | Path) -> str:
        """Plain text layer of every page, pages separated by newlines."""
        doc = self._open(path)
        try:
            if doc.needs_pass:
                logger.warning(f"PDF is password protected: {Path(path).name}")
                return ""
            return "\n".join(page.get_text() for page in doc)
        except Exception as e:
            raise PdfExtractionFailed(f"PDF text extraction failed: {e}") from e
        finally:
            doc.close()

    def page_sizes(self, path: str | Path) -> list[PageSize]:
        doc = self._open(path)
        try:
            return [
                PageSize(page=idx + 1, width=page.rect.width, height=page.rect.height)
                for idx, page in enumerate(doc)
            ]
        finally:
            doc.close()
