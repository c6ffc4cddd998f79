"""Data models for document analysis."""

import math
from collections.abc import Callable
from dataclasses import dataclass, field

from doclens.enums import DocumentFormat, MatchType, MessageKind, RelativePosition
from doclens.exceptions import ValidationError


@dataclass(frozen=True)
class Rect:
    """Rectangle in abstract layout units, origin top-left, y grows downward."""

    x: float
    y: float
    width: float
    height: float

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center_x(self) -> float:
        return self.x + self.width / 2

    def distance_to(self, other: "Rect") -> float:
        """Euclidean distance between the top-left corners."""
        return math.hypot(self.x - other.x, self.y - other.y)

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


@dataclass(frozen=True)
class TextBlock:
    """A run of text in reading order."""

    page: int
    text: str
    position: Rect


@dataclass(frozen=True)
class ImagePosition:
    """Where an embedded image sits in the document."""

    page: int
    position: Rect
    kind: str = "image"
    index: int = 0
    original_path: str | None = None


@dataclass
class DocumentContent:
    """Geometric model of a document.

    ``approximate`` is set when positions were estimated from reading order
    rather than read from the file; ``notes`` says why.
    """

    text_blocks: list[TextBlock]
    image_positions: list[ImagePosition]
    page_count: int
    source_format: DocumentFormat
    approximate: bool = False
    notes: list[str] = field(default_factory=list)

    def __post_init__(self):
        if self.page_count < 1:
            raise ValueError(f"page_count must be >= 1, got {self.page_count}")
        for item in [*self.text_blocks, *self.image_positions]:
            if not 1 <= item.page <= self.page_count:
                raise ValueError(f"page {item.page} outside 1..{self.page_count}")


@dataclass(frozen=True)
class MatchResult:
    """A text block that matched a search string."""

    page: int
    position: Rect
    matched_text: str
    confidence: float
    match_type: MatchType
    context: str
    match_index: int | None = None

    def to_dict(self) -> dict:
        data = {
            "page": self.page,
            "position": self.position.to_dict(),
            "matchedText": self.matched_text,
            "confidence": self.confidence,
            "matchType": self.match_type.value,
            "context": self.context,
        }
        if self.match_index is not None:
            data["matchIndex"] = self.match_index
        return data


@dataclass(frozen=True)
class ImageDetail:
    """An image found in the band below a matched text block."""

    position: Rect
    kind: str
    index: int
    distance: float
    is_below_text: bool
    relative_position: RelativePosition

    def to_dict(self) -> dict:
        return {
            "position": self.position.to_dict(),
            "type": self.kind,
            "index": self.index,
            "distance": self.distance,
            "isBelowText": self.is_below_text,
            "relativePosition": self.relative_position.value,
        }


@dataclass(frozen=True)
class AdjacencyVerdict:
    """Whether a target string is followed by an image."""

    target_text: str
    found_text: bool = False
    has_image_after: bool = False
    image_details: tuple[ImageDetail, ...] = ()
    text_position: Rect | None = None
    confidence: float = 0.0

    def to_dict(self) -> dict:
        return {
            "targetText": self.target_text,
            "foundText": self.found_text,
            "hasImageAfter": self.has_image_after,
            "imageDetails": [detail.to_dict() for detail in self.image_details],
            "textPosition": self.text_position.to_dict() if self.text_position else None,
            "confidence": self.confidence,
        }


@dataclass(frozen=True)
class ConversionMessage:
    """A message reported while converting a document to HTML."""

    kind: MessageKind
    message: str

    def to_dict(self) -> dict:
        return {"type": self.kind.value, "message": self.message}


@dataclass
class HtmlConversion:
    """Markup model of a document."""

    html: str
    messages: list[ConversionMessage] = field(default_factory=list)

    @property
    def warnings(self) -> list[ConversionMessage]:
        return [m for m in self.messages if m.kind == MessageKind.WARNING]

    @property
    def errors(self) -> list[ConversionMessage]:
        return [m for m in self.messages if m.kind == MessageKind.ERROR]


def _require_fraction(name: str, value: float) -> None:
    if not 0.0 <= value <= 1.0:
        raise ValidationError(f"{name} must be between 0 and 1, got {value}")


def _require_positive(name: str, value: float) -> None:
    if value <= 0:
        raise ValidationError(f"{name} must be greater than 0, got {value}")


@dataclass(frozen=True)
class DetectionOptions:
    """Options for position-based image detection.

    Attributes:
        search_radius: Max distance between text and image corners, > 0. Default 100.
        tolerance: Fuzzy match threshold in [0, 1]. Default 0.8.
        line_height: Line height used for the "below" band, > 0. Default 20.
        fuzzy_match: Use word-overlap matching instead of containment. Default False.
    """

    search_radius: float = 100.0
    tolerance: float = 0.8
    line_height: float = 20.0
    fuzzy_match: bool = False

    def __post_init__(self):
        _require_positive("searchRadius", self.search_radius)
        _require_fraction("tolerance", self.tolerance)
        _require_positive("lineHeight", self.line_height)


@dataclass(frozen=True)
class SearchOptions:
    """Options for document-wide text search.

    Attributes:
        case_sensitive: Compare without case folding. Default False.
        fuzzy_match: Use word-overlap similarity. Default False.
        tolerance: Fuzzy match threshold in [0, 1]. Default 0.8.
        max_results: Maximum matches returned, >= 1. Default 10.
        context_length: Characters of context around a match, >= 0. Default 50.
    """

    case_sensitive: bool = False
    fuzzy_match: bool = False
    tolerance: float = 0.8
    max_results: int = 10
    context_length: int = 50

    def __post_init__(self):
        _require_fraction("tolerance", self.tolerance)
        if self.max_results < 1:
            raise ValidationError(f"maxResults must be at least 1, got {self.max_results}")
        if self.context_length < 0:
            raise ValidationError(f"contextLength must not be negative, got {self.context_length}")


@dataclass(frozen=True)
class HtmlOptions:
    """Options for converting a document to HTML.

    Attributes:
        include_images: Embed image data in the markup. Default True.
        style_map: Extra mammoth style map rules. Default None.
        convert_image: Custom mammoth image converter. Default None (data URIs).
        ignore_empty_paragraphs: Drop empty paragraphs. Default False.
        id_prefix: Prefix for generated element ids. Default "doc-content".
    """

    include_images: bool = True
    style_map: str | None = None
    convert_image: Callable | None = None
    ignore_empty_paragraphs: bool = False
    id_prefix: str = "doc-content"
