"""Document analysis: is the target text followed by an image?"""

import logging
from pathlib import Path

from doclens.exceptions import ValidationError
from doclens.services.document.adjacency import check_targets
from doclens.services.document.extractor import ContentExtractor
from doclens.services.document.geometry import analyze
from doclens.services.document.html import to_plain_text_with_image_placeholders
from doclens.services.document.models import (
    DetectionOptions,
    DocumentContent,
    HtmlOptions,
    SearchOptions,
)
from doclens.services.document.similarity import search_text

logger = logging.getLogger(__name__)


def _document_info(path: str | Path, content: DocumentContent) -> dict:
    return {
        "pageCount": content.page_count,
        "fileType": content.source_format.value,
        "fileName": Path(path).name,
        "approximate": content.approximate,
        "notes": list(content.notes),
    }


def _require_text(value: str | None, label: str) -> str:
    if not value or not isinstance(value, str) or not value.strip():
        raise ValidationError(f"Please provide a valid {label}")
    return value


class DocumentAnalysisService:
    """Runs the detection and search operations over an extracted document."""

    def __init__(self, extractor: ContentExtractor | None = None):
        self.extractor = extractor or ContentExtractor()

    def detect_image_after_text(
        self,
        path: str | Path,
        target_text: str,
        options: DetectionOptions | None = None,
    ) -> dict:
        """
        Check positionally whether an image sits just below the target text.

        Returns:
            Verdict payload with document info
        """
        options = options or DetectionOptions()
        self.extractor.ensure_supported(path)
        target_text = _require_text(target_text, "target text")

        logger.info(f'Detecting image after "{target_text}" in {Path(path).name}')
        content = self.extractor.extract(path)
        verdict = analyze(content, target_text, options)
        logger.info(
            f"Detection finished: found_text={verdict.found_text}, "
            f"has_image_after={verdict.has_image_after}"
        )

        data = verdict.to_dict()
        data["documentInfo"] = _document_info(path, content)
        return data

    def find_text_position(
        self,
        path: str | Path,
        search: str,
        options: SearchOptions | None = None,
    ) -> dict:
        """Locate every text block matching ``search``."""
        options = options or SearchOptions()
        self.extractor.ensure_supported(path)
        search = _require_text(search, "search text")

        content = self.extractor.extract(path)
        matches = search_text(content, search, options)
        logger.info(f"Text search finished with {len(matches)} matches")

        return {
            "searchText": search,
            "totalMatches": len(matches),
            "matches": [match.to_dict() for match in matches],
            "documentInfo": _document_info(path, content),
        }

    def extract_document_content(
        self,
        path: str | Path,
        targets: list[str],
        options: HtmlOptions | None = None,
        raw_target_text: str = "",
    ) -> dict:
        """
        Convert the document to HTML, normalize it and check each target.

        Args:
            path: Document path
            targets: Labels that must each be followed by an image
            options: HTML conversion options
            raw_target_text: The target list as the caller sent it

        Returns:
            Cleaned text, per-target results and conversion messages
        """
        conversion = self.extractor.convert_to_html(path, options or HtmlOptions())
        cleaned = to_plain_text_with_image_placeholders(conversion.html)

        return {
            "cleanedHtmlText": cleaned,
            "result": check_targets(cleaned, targets),
            "targetText": raw_target_text,
            "originalFile": Path(path).name,
            "messages": [message.to_dict() for message in conversion.messages],
        }
