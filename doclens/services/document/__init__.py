"""Document analysis services."""

from doclens.services.document.adjacency import check_targets, is_followed_by_image, parse_targets
from doclens.services.document.extractor import ContentExtractor
from doclens.services.document.geometry import analyze
from doclens.services.document.html import IMAGE_PLACEHOLDER, to_plain_text_with_image_placeholders
from doclens.services.document.images import ImageExtractor
from doclens.services.document.models import (
    AdjacencyVerdict,
    DetectionOptions,
    DocumentContent,
    HtmlOptions,
    ImagePosition,
    MatchResult,
    Rect,
    SearchOptions,
    TextBlock,
)
from doclens.services.document.pdf import PdfReader
from doclens.services.document.service import DocumentAnalysisService
from doclens.services.document.similarity import matches, search_text, similarity
from doclens.services.document.word import WordReader

__all__ = [
    "AdjacencyVerdict",
    "ContentExtractor",
    "DetectionOptions",
    "DocumentAnalysisService",
    "DocumentContent",
    "HtmlOptions",
    "IMAGE_PLACEHOLDER",
    "ImageExtractor",
    "ImagePosition",
    "MatchResult",
    "PdfReader",
    "Rect",
    "SearchOptions",
    "TextBlock",
    "WordReader",
    "analyze",
    "check_targets",
    "is_followed_by_image",
    "matches",
    "parse_targets",
    "search_text",
    "similarity",
    "to_plain_text_with_image_placeholders",
]
