"""AI chat and analysis endpoints.

The same routes are mounted once per chat-completion provider; each mount
resolves its client through its own dependency.
"""

import logging
from collections.abc import Callable
from typing import Any

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from pydantic import BaseModel, ConfigDict, Field

from doclens.config import settings
from doclens.exceptions import ValidationError
from doclens.middleware.errors import envelope
from doclens.middleware.rate_limit import rate_limit_external
from doclens.routes.deps import (
    get_analysis_upload_store,
    get_openai_client,
    get_openrouter_client,
)
from doclens.services.ai import ChatCompletionClient
from doclens.services.uploads import UploadStore

logger = logging.getLogger(__name__)

ANALYSIS_LABEL = "text and image files"


class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str | None = None
    model: str | None = None
    conversation_history: list[Any] | None = Field(None, alias="conversationHistory")


class FileContentRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    file_content: str | None = Field(None, alias="fileContent")
    file_name: str | None = Field(None, alias="fileName")
    message: str | None = None
    model: str | None = None


def _require_file_fields(body: FileContentRequest) -> tuple[str, str]:
    if not body.file_content:
        raise ValidationError("File content must be a non-empty string")
    if not body.file_name:
        raise ValidationError("File name must be a non-empty string")
    return body.file_content, body.file_name


def create_router(get_client: Callable[[], ChatCompletionClient]) -> APIRouter:
    """Build the chat/analysis routes bound to one provider dependency."""
    router = APIRouter()

    @router.post("/chat")
    @rate_limit_external()
    async def chat(
        request: Request,
        body: ChatRequest,
        client: ChatCompletionClient = Depends(get_client),
    ):
        reply = await client.send_message(body.message, body.model, body.conversation_history)
        return envelope(
            True,
            "Chat finished",
            {"message": reply.content, "usage": reply.usage, "model": reply.model},
        )

    @router.post("/upload-analyze")
    @rate_limit_external()
    async def upload_analyze(
        request: Request,
        file: UploadFile | None = File(None),
        message: str = Form(""),
        model: str | None = Form(None),
        store: UploadStore = Depends(get_analysis_upload_store),
        client: ChatCompletionClient = Depends(get_client),
    ):
        """Analyze an uploaded text or image file, optionally answering a question."""
        async with store.save(file, settings.analysis_extensions, ANALYSIS_LABEL) as upload:
            logger.info(f"Analyzing upload {upload.original_name} ({upload.size} bytes)")
            result = await client.analyze_file(upload.path, upload.original_name, message, model)

        return envelope(True, "File analysis finished", result)

    @router.post("/analyze-file")
    @rate_limit_external()
    async def analyze_file(
        request: Request,
        body: FileContentRequest,
        client: ChatCompletionClient = Depends(get_client),
    ):
        content, file_name = _require_file_fields(body)
        result = await client.analyze_text(file_name, content, body.message or "", body.model)
        return envelope(True, "File analysis finished", result)

    @router.post("/generate-summary")
    @rate_limit_external()
    async def generate_summary(
        request: Request,
        body: FileContentRequest,
        client: ChatCompletionClient = Depends(get_client),
    ):
        content, file_name = _require_file_fields(body)
        result = await client.generate_summary(content, file_name, body.model)
        return envelope(True, "Summary generated", result)

    @router.get("/models")
    async def list_models(client: ChatCompletionClient = Depends(get_client)):
        models = await client.list_models()
        return envelope(True, "Model list fetched", {"models": models, "total": len(models)})

    @router.get("/status")
    async def status(client: ChatCompletionClient = Depends(get_client)):
        result = await client.check_status()
        return envelope(result["status"] == "connected", result["message"], result)

    return router


openrouter_router = create_router(get_openrouter_client)
openai_router = create_router(get_openai_client)
