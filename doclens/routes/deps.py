"""FastAPI dependency providers for the route handlers.

Tests replace these through ``app.dependency_overrides``.
"""

from functools import lru_cache

from doclens.config import settings
from doclens.services.ai import ChatCompletionClient, openai_config, openrouter_config
from doclens.services.document import DocumentAnalysisService, ImageExtractor
from doclens.services.ocr import OcrClient
from doclens.services.uploads import UploadStore


def get_upload_store() -> UploadStore:
    return UploadStore()


@lru_cache
def get_document_service() -> DocumentAnalysisService:
    return DocumentAnalysisService()


@lru_cache
def get_image_extractor() -> ImageExtractor:
    return ImageExtractor()


@lru_cache
def get_ocr_client() -> OcrClient:
    return OcrClient()


@lru_cache
def get_openrouter_client() -> ChatCompletionClient:
    return ChatCompletionClient(openrouter_config())


@lru_cache
def get_openai_client() -> ChatCompletionClient:
    return ChatCompletionClient(openai_config())


async def close_clients() -> None:
    """Close any AI client created during the app's lifetime."""
    for provider in (get_openrouter_client, get_openai_client):
        if provider.cache_info().currsize:
            await provider().close()
        provider.cache_clear()


def get_analysis_upload_store() -> UploadStore:
    return UploadStore(max_size=settings.max_analysis_file_bytes)
