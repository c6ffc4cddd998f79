"""Chat-completion pass-through for AI file and image analysis.

Both providers speak the OpenAI chat-completions protocol, so one client
class serves them, configured per provider.
"""

import base64
import logging
from dataclasses import dataclass, field
from pathlib import Path

from openai import (
    APIConnectionError,
    APIStatusError,
    APITimeoutError,
    AsyncOpenAI,
    AuthenticationError,
    PermissionDeniedError,
    RateLimitError,
)

from doclens.config import settings
from doclens.enums import ServiceErrorCategory
from doclens.exceptions import DocLensError, ExternalServiceError, ValidationError

logger = logging.getLogger(__name__)

VALID_ROLES = {"user", "assistant", "system"}
IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp"}


@dataclass(frozen=True)
class ProviderConfig:
    """Connection and model settings for one chat-completion provider."""

    name: str
    label: str
    api_key: str
    base_url: str
    default_model: str
    timeout: float
    vision_model: str | None = None
    supports_vision: bool = False
    model_filter: str = ""
    extra_headers: dict = field(default_factory=dict)


def openrouter_config() -> ProviderConfig:
    return ProviderConfig(
        name="openrouter",
        label="OpenRouter",
        api_key=settings.openrouter_api_key,
        base_url=settings.openrouter_base_url,
        default_model=settings.openrouter_default_model,
        timeout=settings.openrouter_timeout_seconds,
        extra_headers={"HTTP-Referer": settings.app_url, "X-Title": "DocLens"},
    )


def openai_config() -> ProviderConfig:
    return ProviderConfig(
        name="openai",
        label="OpenAI",
        api_key=settings.openai_api_key,
        base_url=settings.openai_base_url,
        default_model=settings.openai_default_model,
        timeout=settings.openai_timeout_seconds,
        vision_model=settings.openai_vision_model,
        supports_vision=True,
        model_filter=settings.openai_model_filter,
    )


@dataclass(frozen=True)
class ChatReply:
    content: str
    model: str
    usage: dict | None = None


FILE_ANALYSIS_PROMPT = """Analyze the following file and write a detailed report.

File name: {file_name}
File content:
{content}

Cover:
1. File type and format
2. Overview of the main content
3. Key information
4. Potential problems or suggestions
5. Overall quality"""

FILE_QUESTION_PROMPT = """Analyze the following file and answer the user's question.

File name: {file_name}
File content:
{content}

Question: {question}

Give a detailed analysis and answer."""

IMAGE_ANALYSIS_PROMPT = """Analyze the following image and describe it in detail.

Image name: {image_name}
Image format: {image_format}

Cover:
1. What the image shows
2. Image quality
3. Main elements
4. Colour and composition
5. Likely purpose or setting"""

IMAGE_QUESTION_PROMPT = """Analyze the following image and answer the user's question.

Image name: {image_name}
Image format: {image_format}

Question: {question}

Give a detailed analysis and answer."""

SUMMARY_PROMPT = """Write a concise summary of the following file in at most 200 words,
highlighting its key points.

File name: {file_name}
File content:
{content}"""


def validate_history(history: list[dict] | None) -> list[dict]:
    """Check roles and content of prior conversation turns."""
    if history is None:
        return []
    if not isinstance(history, list):
        raise ValidationError("Conversation history must be a list")
    for message in history:
        if not isinstance(message, dict) or not message.get("role") or not message.get("content"):
            raise ValidationError("Each history message needs 'role' and 'content'")
        if message["role"] not in VALID_ROLES:
            raise ValidationError("Message role must be user, assistant or system")
    return history


class ChatCompletionClient:
    """Talk to one OpenAI-compatible chat-completion provider."""

    def __init__(self, config: ProviderConfig, client: AsyncOpenAI | None = None):
        self.config = config
        self._client = client

    def _get_client(self) -> AsyncOpenAI:
        if not self.config.api_key:
            raise ExternalServiceError(
                f"{self.config.label} API key is not configured",
                category=ServiceErrorCategory.AUTH,
            )
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self.config.api_key,
                base_url=self.config.base_url,
                timeout=self.config.timeout,
                max_retries=0,
                default_headers=self.config.extra_headers or None,
            )
        return self._client

    def _translate_error(self, error: Exception) -> ExternalServiceError:
        label = self.config.label
        if isinstance(error, AuthenticationError):
            return ExternalServiceError(
                f"{label} API key is invalid or expired",
                category=ServiceErrorCategory.AUTH,
                upstream_status=401,
            )
        if isinstance(error, PermissionDeniedError):
            return ExternalServiceError(
                f"{label} API access denied, check the key's permissions",
                category=ServiceErrorCategory.AUTH,
                upstream_status=403,
            )
        if isinstance(error, RateLimitError):
            return ExternalServiceError(
                f"{label} API rate limit reached, try again later",
                category=ServiceErrorCategory.RATE_LIMIT,
                upstream_status=429,
            )
        if isinstance(error, APIStatusError):
            if error.status_code >= 500:
                message = f"{label} server error ({error.status_code}), try again later"
            else:
                message = f"{label} API error ({error.status_code}): {error.message}"
            return ExternalServiceError(
                message,
                category=ServiceErrorCategory.UPSTREAM,
                upstream_status=error.status_code,
            )
        if isinstance(error, APITimeoutError):
            return ExternalServiceError(
                f"{label} API request timed out", category=ServiceErrorCategory.NETWORK
            )
        if isinstance(error, APIConnectionError):
            return ExternalServiceError(
                f"Could not connect to the {label} API, check the network connection",
                category=ServiceErrorCategory.NETWORK,
            )
        return ExternalServiceError(f"{label} service error: {error}")

    async def _complete(self, messages: list[dict], model: str) -> ChatReply:
        client = self._get_client()
        try:
            response = await client.chat.completions.create(
                model=model,
                messages=messages,
                max_tokens=settings.ai_max_tokens,
                temperature=settings.ai_temperature,
                stream=False,
            )
        except Exception as e:
            logger.error(f"{self.config.label} request failed: {e}")
            raise self._translate_error(e) from e

        if not response.choices:
            raise ExternalServiceError(f"{self.config.label} returned a malformed response")

        usage = response.usage.model_dump() if response.usage else None
        total = usage.get("total_tokens") if usage else "unknown"
        logger.info(f"{self.config.label} replied with model {model}, tokens used: {total}")
        return ChatReply(content=response.choices[0].message.content or "", model=model, usage=usage)

    async def send_message(
        self,
        message: str,
        model: str | None = None,
        history: list[dict] | None = None,
    ) -> ChatReply:
        """
        Send a user message, optionally after prior conversation turns.

        Raises:
            ValidationError: If the message or history is malformed
            ExternalServiceError: If the provider call fails
        """
        if not message or not isinstance(message, str) or not message.strip():
            raise ValidationError("Message must be a non-empty string")
        history = validate_history(history)

        target_model = model or self.config.default_model
        logger.info(
            f"Sending message to {self.config.label}, model: {target_model}, length: {len(message)}"
        )
        return await self._complete([*history, {"role": "user", "content": message}], target_model)

    async def analyze_text(
        self,
        file_name: str,
        content: str,
        question: str = "",
        model: str | None = None,
    ) -> dict:
        if question:
            prompt = FILE_QUESTION_PROMPT.format(file_name=file_name, content=content, question=question)
        else:
            prompt = FILE_ANALYSIS_PROMPT.format(file_name=file_name, content=content)

        reply = await self.send_message(prompt, model)
        return {
            "fileName": file_name,
            "fileSize": len(content.encode("utf-8")),
            "fileExtension": Path(file_name).suffix.lower(),
            "analysis": reply.content,
            "usage": reply.usage,
            "model": reply.model,
        }

    async def analyze_image(
        self,
        path: str | Path,
        image_name: str,
        question: str = "",
        model: str | None = None,
    ) -> dict:
        """
        Describe an image.

        Providers without vision support only receive the image's name and
        format, and the result carries a note saying so.
        """
        path = Path(path)
        image_format = path.suffix.lstrip(".").lower()
        if question:
            prompt = IMAGE_QUESTION_PROMPT.format(
                image_name=image_name, image_format=image_format, question=question
            )
        else:
            prompt = IMAGE_ANALYSIS_PROMPT.format(image_name=image_name, image_format=image_format)

        logger.info(f"Analyzing image {image_name} ({image_format}) with {self.config.label}")

        result = {"imageName": image_name, "imageFormat": image_format}
        if self.config.supports_vision:
            encoded = base64.b64encode(path.read_bytes()).decode("utf-8")
            target_model = model or self.config.vision_model or self.config.default_model
            media_type = "jpeg" if image_format == "jpg" else image_format
            messages = [
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": prompt},
                        {
                            "type": "image_url",
                            "image_url": {"url": f"data:image/{media_type};base64,{encoded}"},
                        },
                    ],
                }
            ]
            reply = await self._complete(messages, target_model)
        else:
            reply = await self.send_message(prompt, model)
            result["note"] = (
                f"{self.config.label} image analysis is text-only, based on the image metadata"
            )

        result.update({"analysis": reply.content, "usage": reply.usage, "model": reply.model})
        return result

    async def analyze_file(
        self,
        path: str | Path,
        file_name: str,
        question: str = "",
        model: str | None = None,
    ) -> dict:
        """Dispatch to image or text analysis by the file's extension."""
        path = Path(path)
        if not path.is_file():
            raise ValidationError("File does not exist or the path is invalid")

        if Path(file_name).suffix.lower() in IMAGE_EXTENSIONS:
            return await self.analyze_image(path, file_name, question, model)

        content = path.read_text(encoding="utf-8", errors="replace")
        logger.info(f"Analyzing text file {file_name} ({path.stat().st_size} bytes)")
        return await self.analyze_text(file_name, content, question, model)

    async def generate_summary(self, content: str, file_name: str, model: str | None = None) -> dict:
        if not content or not isinstance(content, str):
            raise ValidationError("File content must be a non-empty string")

        reply = await self.send_message(
            SUMMARY_PROMPT.format(file_name=file_name, content=content), model
        )
        return {
            "fileName": file_name,
            "summary": reply.content,
            "usage": reply.usage,
            "model": reply.model,
        }

    async def list_models(self) -> list[dict]:
        client = self._get_client()
        try:
            page = await client.models.list()
        except Exception as e:
            raise self._translate_error(e) from e

        models = []
        for model in page.data:
            if self.config.model_filter and self.config.model_filter not in model.id:
                continue
            models.append(
                {
                    "id": model.id,
                    "name": getattr(model, "name", None) or model.id,
                    "description": getattr(model, "description", None),
                    "contextLength": getattr(model, "context_length", None),
                    "pricing": getattr(model, "pricing", None),
                }
            )
        return models

    async def check_status(self) -> dict:
        """Send a short probe message. Never raises."""
        try:
            reply = await self.send_message("Hello, this is a test message.")
            return {
                "status": "connected",
                "message": f"{self.config.label} service is reachable",
                "model": reply.model,
            }
        except DocLensError as e:
            return {
                "status": "error",
                "message": f"{self.config.label} service check failed: {e.message}",
            }

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None
