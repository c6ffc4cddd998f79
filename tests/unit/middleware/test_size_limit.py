"""Tests for request size limit middleware."""

import pytest
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route
from starlette.testclient import TestClient

from doclens.middleware.size_limit import MULTIPART_OVERHEAD_BYTES, RequestSizeLimitMiddleware


async def echo_endpoint(request: Request) -> Response:
    """Simple echo endpoint for testing."""
    body = await request.body()
    return JSONResponse({"size": len(body)})


@pytest.fixture
def app_with_middleware():
    """Create a test app with size limit middleware."""
    app = Starlette(routes=[Route("/echo", echo_endpoint, methods=["POST"])])
    app.add_middleware(RequestSizeLimitMiddleware, max_size=1024)  # 1KB limit
    return app


@pytest.fixture
def client(app_with_middleware):
    """Create a test client."""
    return TestClient(app_with_middleware, raise_server_exceptions=False)


class TestRequestSizeLimitMiddleware:
    """Tests for RequestSizeLimitMiddleware."""

    def test_allows_request_under_limit(self, client):
        """Requests smaller than max_size should be allowed."""
        response = client.post("/echo", content="x" * 500)

        assert response.status_code == 200
        assert response.json()["size"] == 500

    def test_allows_request_at_limit(self, client):
        """Requests exactly at max_size should be allowed."""
        response = client.post("/echo", content="x" * 1024)

        assert response.status_code == 200
        assert response.json()["size"] == 1024

    def test_rejects_request_over_limit(self, client):
        """Oversized uploads are a validation failure answered with the envelope."""
        response = client.post("/echo", content="x" * 2048)

        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "message": "File size exceeds the upload limit",
        }

    def test_allows_get_requests(self):
        """GET requests should always be allowed (no body)."""
        app = Starlette(
            routes=[Route("/test", lambda r: JSONResponse({"ok": True}), methods=["GET"])]
        )
        app.add_middleware(RequestSizeLimitMiddleware, max_size=100)
        client = TestClient(app)

        response = client.get("/test")

        assert response.status_code == 200


class TestRequestSizeLimitMiddlewareConfiguration:
    """Tests for middleware configuration."""

    def test_default_uses_upload_limit_plus_overhead(self):
        """Default limit is the upload limit with room for multipart framing."""
        from doclens.config import settings

        middleware = RequestSizeLimitMiddleware(Starlette())

        assert middleware.max_size == settings.max_upload_size_bytes + MULTIPART_OVERHEAD_BYTES
