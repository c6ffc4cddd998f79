"""Rate limiting for the OCR and AI pass-through endpoints using SlowAPI."""

import logging

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from doclens.config import settings

logger = logging.getLogger(__name__)


def get_ip_key(request: Request) -> str:
    """Limit per client IP address."""
    return f"ip:{get_remote_address(request)}"


limiter = Limiter(
    key_func=get_ip_key,
    storage_uri=settings.rate_limit_storage_uri,
    headers_enabled=False,
    enabled=settings.rate_limit_enabled,
)


def rate_limit_external():
    """Decorator for endpoints that call a paid or remote service."""
    return limiter.limit(f"{settings.rate_limit_external_per_minute}/minute")
