"""Document endpoints: image extraction and text/image adjacency checks."""

import logging

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from fastapi.concurrency import run_in_threadpool

from doclens.config import settings
from doclens.exceptions import ValidationError
from doclens.middleware.errors import envelope
from doclens.routes.deps import get_document_service, get_image_extractor, get_upload_store
from doclens.services.document import (
    DetectionOptions,
    DocumentAnalysisService,
    HtmlOptions,
    ImageExtractor,
    SearchOptions,
    parse_targets,
)
from doclens.services.uploads import UploadStore

logger = logging.getLogger(__name__)

router = APIRouter()

DOCUMENT_LABEL = "PDF, DOCX and DOC files"


@router.post("/extract-images")
async def extract_images(
    file: UploadFile | None = File(None),
    store: UploadStore = Depends(get_upload_store),
    extractor: ImageExtractor = Depends(get_image_extractor),
):
    """Return every image embedded in the uploaded document."""
    async with store.save(file, settings.document_extensions, DOCUMENT_LABEL) as upload:
        images = await run_in_threadpool(extractor.extract, upload.path, upload.original_name)

    logger.info(f"Extracted {len(images)} images from {upload.original_name}")
    return envelope(
        True,
        "Image extraction finished",
        {"fileName": upload.original_name, "totalImages": len(images), "images": images},
    )


@router.post("/detect-image-after-text")
async def detect_image_after_text(
    file: UploadFile | None = File(None),
    target_text: str | None = Form(None, alias="targetText"),
    search_radius: float = Form(100.0, alias="searchRadius"),
    tolerance: float = Form(0.8),
    line_height: float = Form(20.0, alias="lineHeight"),
    fuzzy_match: bool = Form(False, alias="fuzzyMatch"),
    store: UploadStore = Depends(get_upload_store),
    service: DocumentAnalysisService = Depends(get_document_service),
):
    """Check whether an image sits directly below the target text."""
    options = DetectionOptions(
        search_radius=search_radius,
        tolerance=tolerance,
        line_height=line_height,
        fuzzy_match=fuzzy_match,
    )
    async with store.save(file, settings.document_extensions, DOCUMENT_LABEL) as upload:
        if not target_text or not target_text.strip():
            raise ValidationError("Please provide the target text")
        data = await run_in_threadpool(
            service.detect_image_after_text, upload.path, target_text, options
        )

    data["documentInfo"]["fileName"] = upload.original_name
    return envelope(True, "Detection finished", data)


@router.post("/find-text-position")
async def find_text_position(
    file: UploadFile | None = File(None),
    search_text: str | None = Form(None, alias="searchText"),
    case_sensitive: bool = Form(False, alias="caseSensitive"),
    fuzzy_match: bool = Form(False, alias="fuzzyMatch"),
    tolerance: float = Form(0.8),
    max_results: int = Form(10, alias="maxResults"),
    context_length: int = Form(50, alias="contextLength"),
    store: UploadStore = Depends(get_upload_store),
    service: DocumentAnalysisService = Depends(get_document_service),
):
    """Locate the text blocks matching the search text."""
    options = SearchOptions(
        case_sensitive=case_sensitive,
        fuzzy_match=fuzzy_match,
        tolerance=tolerance,
        max_results=max_results,
        context_length=context_length,
    )
    async with store.save(file, settings.document_extensions, DOCUMENT_LABEL) as upload:
        if not search_text or not search_text.strip():
            raise ValidationError("Please provide the search text")
        data = await run_in_threadpool(service.find_text_position, upload.path, search_text, options)

    data["documentInfo"]["fileName"] = upload.original_name
    return envelope(True, "Text search finished", data)


@router.post("/extract-document-content")
async def extract_document_content(
    file: UploadFile | None = File(None),
    form_target_text: str | None = Form(None, alias="targetText"),
    query_target_text: str | None = Query(None, alias="targetText"),
    include_images: bool = Form(True, alias="includeImages"),
    ignore_empty_paragraphs: bool = Form(False, alias="ignoreEmptyParagraphs"),
    id_prefix: str = Form("doc-content", alias="idPrefix"),
    store: UploadStore = Depends(get_upload_store),
    service: DocumentAnalysisService = Depends(get_document_service),
):
    """
    Convert the document to text with [image] markers and check that each
    comma-separated target is immediately followed by an image.

    ``targetText`` is read from the form body first, then the query string.
    """
    raw_targets = form_target_text or query_target_text or ""
    options = HtmlOptions(
        include_images=include_images,
        ignore_empty_paragraphs=ignore_empty_paragraphs,
        id_prefix=id_prefix,
    )
    async with store.save(file, settings.document_extensions, DOCUMENT_LABEL) as upload:
        targets = parse_targets(raw_targets)
        if not targets:
            raise ValidationError("Please provide targetText")
        data = await run_in_threadpool(
            service.extract_document_content, upload.path, targets, options, raw_targets
        )

    data["originalFile"] = upload.original_name
    logger.info(f"Checked {len(targets)} targets in {upload.original_name}")
    return envelope(True, "Document content extracted", data)
