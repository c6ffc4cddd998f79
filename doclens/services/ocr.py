"""OCR pass-through to the external recognition endpoint."""

import asyncio
import base64
import logging
from dataclasses import dataclass
from pathlib import Path

import httpx

from doclens.config import settings
from doclens.enums import ServiceErrorCategory
from doclens.exceptions import DocLensError, ExternalServiceError, ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OcrImage:
    """One image of a batch request."""

    file_name: str
    path: Path


class OcrClient:
    """Send images to the OCR service as base64 JSON."""

    def __init__(
        self,
        base_url: str | None = None,
        endpoint: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url or settings.ocr_base_url
        self.endpoint = endpoint or settings.ocr_endpoint
        self.timeout = timeout or settings.ocr_timeout_seconds
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            headers={"Content-Type": "application/json"},
            transport=self._transport,
        )

    @staticmethod
    def build_request(base64_image: str) -> dict:
        return {"img_flag": 1, "images": base64_image}

    async def recognize_base64(self, base64_image: str) -> dict:
        """
        Recognize text in a base64-encoded image.

        Returns:
            The OCR service's JSON response, unchanged

        Raises:
            ValidationError: If no image data is given
            ExternalServiceError: On non-2xx responses, timeouts or connection errors
        """
        if not base64_image:
            raise ValidationError("Please provide base64-encoded image data")

        logger.info(f"Calling OCR endpoint {self.base_url}{self.endpoint}")
        try:
            async with self._client() as client:
                response = await client.post(self.endpoint, json=self.build_request(base64_image))
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as e:
            raise self._status_error(e.response) from e
        except httpx.TimeoutException as e:
            raise ExternalServiceError(
                "OCR service timed out, please check the network connection",
                category=ServiceErrorCategory.NETWORK,
            ) from e
        except httpx.RequestError as e:
            raise ExternalServiceError(
                f"OCR service did not respond: {e}",
                category=ServiceErrorCategory.NETWORK,
            ) from e

    async def recognize_file(self, path: str | Path) -> dict:
        """Recognize text in an image file on disk."""
        path = Path(path)
        if not path.is_file() or path.stat().st_size == 0:
            raise ValidationError("Invalid image file")

        encoded = base64.b64encode(path.read_bytes()).decode("utf-8")
        logger.info(f"Encoded {path.name} for OCR ({len(encoded)} base64 chars)")
        return await self.recognize_base64(encoded)

    async def batch_recognize(self, images: list[OcrImage], rejected: list[dict] | None = None) -> dict:
        """
        Recognize several images concurrently.

        Each image is independent: a failure is reported per file and does
        not abort the batch. ``rejected`` holds per-file errors found before
        recognition, such as unsupported formats, and is counted as failures.
        """

        async def _recognize_one(image: OcrImage) -> dict:
            try:
                result = await self.recognize_file(image.path)
                return {"fileName": image.file_name, "success": True, "ocrResult": result}
            except DocLensError as e:
                logger.warning(f"OCR failed for {image.file_name}: {e.message}")
                return {"fileName": image.file_name, "success": False, "error": e.message}

        outcomes = await asyncio.gather(*(_recognize_one(image) for image in images))
        results = [o for o in outcomes if o["success"]]
        errors = [*(rejected or []), *(o for o in outcomes if not o["success"])]

        logger.info(f"Batch OCR finished: {len(results)} succeeded, {len(errors)} failed")
        return {
            "totalFiles": len(images) + len(rejected or []),
            "successCount": len(results),
            "errorCount": len(errors),
            "results": results,
            "errors": errors,
        }

    async def check_status(self) -> dict:
        """Probe the OCR service health endpoint. Never raises."""
        try:
            async with self._client() as client:
                response = await client.get("/health")
                response.raise_for_status()
                try:
                    data = response.json()
                except ValueError:
                    data = response.text
            return {"success": True, "message": "OCR service is available", "data": data}
        except httpx.HTTPError as e:
            return {"success": False, "message": "OCR service is unavailable", "error": str(e)}

    @staticmethod
    def _status_error(response: httpx.Response) -> ExternalServiceError:
        try:
            body = response.json()
        except ValueError:
            body = {}
        detail = "unknown error"
        if isinstance(body, dict):
            detail = body.get("message") or body.get("error") or detail

        status = response.status_code
        if status in (401, 403):
            category = ServiceErrorCategory.AUTH
        elif status == 429:
            category = ServiceErrorCategory.RATE_LIMIT
        else:
            category = ServiceErrorCategory.UPSTREAM
        return ExternalServiceError(
            f"OCR service error ({status}): {detail}",
            category=category,
            upstream_status=status,
        )
