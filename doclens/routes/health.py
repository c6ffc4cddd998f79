"""Health check and legacy image listing endpoints."""

from datetime import UTC, datetime

from fastapi import APIRouter

from doclens.middleware.errors import envelope

router = APIRouter()


@router.get("/health")
async def health():
    """Basic health check."""
    return envelope(True, "Service is running", timestamp=datetime.now(UTC).isoformat())


@router.get("/images")
async def list_images():
    """Images are returned inline as base64 and never stored, so this is always empty."""
    return envelope(
        True,
        "Images are returned as base64 and no longer stored on disk",
        {"totalImages": 0, "images": []},
    )
