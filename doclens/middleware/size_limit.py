"""Request body size limit middleware."""

import logging

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from doclens.config import settings

logger = logging.getLogger(__name__)

# Room for multipart boundaries and form fields around the file itself.
MULTIPART_OVERHEAD_BYTES = 64 * 1024


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject uploads whose Content-Length exceeds the upload limit.

    Checked before the body is read, so oversized files never reach the
    upload directory.
    """

    def __init__(self, app, max_size: int | None = None):
        super().__init__(app)
        self.max_size = max_size or settings.max_upload_size_bytes + MULTIPART_OVERHEAD_BYTES

    async def dispatch(self, request: Request, call_next):
        content_length = request.headers.get("content-length")

        if content_length:
            try:
                size = int(content_length)
            except ValueError:
                # Invalid content-length header - let downstream handle it
                size = 0
            if size > self.max_size:
                logger.warning(
                    f"Request body too large: {size} bytes (max: {self.max_size})",
                    extra={
                        "content_length": size,
                        "max_size": self.max_size,
                        "path": request.url.path,
                        "method": request.method,
                    },
                )
                return JSONResponse(
                    status_code=400,
                    content={"success": False, "message": "File size exceeds the upload limit"},
                )

        return await call_next(request)
