"""Exception taxonomy for document analysis and external service errors.

Each error carries the HTTP status the API layer answers with. Validation
problems are reported verbatim to the caller (400); everything else is a 500.
"""

from doclens.enums import ServiceErrorCategory


class DocLensError(Exception):
    """Base class for application errors."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(DocLensError):
    """Missing file or field, or a value of the wrong type or range."""

    status_code = 400


class UnsupportedFormatError(ValidationError):
    """File extension is not accepted by the endpoint."""

    pass


class DocumentNotFoundError(DocLensError):
    """Document path does not exist on disk."""

    pass


class ExtractionError(DocLensError):
    """Document could not be parsed.

    Examples: corrupt zip container, unreadable PDF bytes.
    """

    pass


class WordExtractionFailed(ExtractionError):
    """DOCX/DOC content could not be read."""

    pass


class PdfExtractionFailed(ExtractionError):
    """PDF content could not be read."""

    pass


class ExternalServiceError(DocLensError):
    """An OCR or AI provider call failed.

    Not retried; surfaced to the caller immediately.
    """

    def __init__(
        self,
        message: str,
        category: ServiceErrorCategory = ServiceErrorCategory.UPSTREAM,
        upstream_status: int | None = None,
    ):
        super().__init__(message)
        self.category = category
        self.upstream_status = upstream_status
