"""Enums for tagged values used throughout the application."""

from enum import StrEnum


class DocumentFormat(StrEnum):
    """Document formats accepted by the analysis endpoints."""

    PDF = ".pdf"
    DOCX = ".docx"
    DOC = ".doc"


class MatchType(StrEnum):
    """How a text block matched a search string."""

    EXACT = "exact"
    FUZZY = "fuzzy"


class RelativePosition(StrEnum):
    """Horizontal placement of an image relative to the text above it."""

    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class MessageKind(StrEnum):
    """Severity of a document conversion message."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class ServiceErrorCategory(StrEnum):
    """Failure class of a call to an external OCR or AI service."""

    AUTH = "auth"
    RATE_LIMIT = "rate_limit"
    UPSTREAM = "upstream"
    NETWORK = "network"
