"""OCR endpoints forwarding images to the external recognition service."""

import logging

from fastapi import APIRouter, Depends, File, Request, UploadFile
from pydantic import BaseModel, ConfigDict, Field

from doclens.config import settings
from doclens.exceptions import DocLensError, ValidationError
from doclens.middleware.errors import envelope
from doclens.middleware.rate_limit import rate_limit_external
from doclens.routes.deps import get_ocr_client, get_upload_store
from doclens.services.ocr import OcrClient, OcrImage
from doclens.services.uploads import StoredUpload, UploadStore, remove_file

logger = logging.getLogger(__name__)

router = APIRouter()

IMAGE_LABEL = "image files"


class Base64Request(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    base64_image: str | None = Field(None, alias="base64Image")


@router.post("/recognize")
@rate_limit_external()
async def recognize(
    request: Request,
    file: UploadFile | None = File(None),
    store: UploadStore = Depends(get_upload_store),
    ocr: OcrClient = Depends(get_ocr_client),
):
    """Recognize text in one uploaded image."""
    async with store.save(file, settings.image_extensions, IMAGE_LABEL) as upload:
        result = await ocr.recognize_file(upload.path)

    return envelope(
        True,
        "OCR finished",
        {"fileName": upload.original_name, "fileSize": upload.size, "ocrResult": result},
    )


@router.post("/recognize-base64")
@rate_limit_external()
async def recognize_base64(
    request: Request,
    body: Base64Request,
    ocr: OcrClient = Depends(get_ocr_client),
):
    """Recognize text in a base64-encoded image."""
    result = await ocr.recognize_base64(body.base64_image or "")
    return envelope(True, "OCR finished", {"ocrResult": result})


@router.post("/batch-recognize")
@rate_limit_external()
async def batch_recognize(
    request: Request,
    files: list[UploadFile] | None = File(None),
    store: UploadStore = Depends(get_upload_store),
    ocr: OcrClient = Depends(get_ocr_client),
):
    """Recognize several images; one failing image does not fail the batch."""
    if not files:
        raise ValidationError("Please upload image files")

    logger.info(f"Starting batch OCR for {len(files)} images")
    stored: list[StoredUpload] = []
    rejected = []
    try:
        for upload in files:
            try:
                stored.append(await store.write(upload, settings.image_extensions, IMAGE_LABEL))
            except DocLensError as e:
                rejected.append({"fileName": upload.filename, "success": False, "error": e.message})

        images = [OcrImage(file_name=s.original_name, path=s.path) for s in stored]
        data = await ocr.batch_recognize(images, rejected)
    finally:
        for s in stored:
            remove_file(s.path)

    return envelope(True, "Batch OCR finished", data)


@router.get("/status")
async def status(ocr: OcrClient = Depends(get_ocr_client)):
    """Report whether the OCR service answers its health probe."""
    return await ocr.check_status()
