"""Test configuration, document builders and client fixtures."""

import os
import tempfile
import zipfile
from collections.abc import AsyncGenerator
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import fitz
import pytest
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient

# Override settings before importing app modules
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="doclens-test-uploads-")
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["OPENROUTER_API_KEY"] = "test-openrouter-key"
os.environ["OPENAI_API_KEY"] = "test-openai-key"
os.environ["OCR_BASE_URL"] = "http://ocr.test"

from doclens.routes.deps import get_ocr_client, get_openai_client, get_openrouter_client
from doclens.services.ai import ChatCompletionClient, ChatReply
from doclens.services.ocr import OcrClient
from main import app

W_NS = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"
R_NS = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
WP_NS = "http://schemas.openxmlformats.org/drawingml/2006/wordprocessingDrawing"
A_NS = "http://schemas.openxmlformats.org/drawingml/2006/main"
PIC_NS = "http://schemas.openxmlformats.org/drawingml/2006/picture"

CONTENT_TYPES_XML = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<Types xmlns="http://schemas.openxmlformats.org/package/2006/content-types">
  <Default Extension="rels" ContentType="application/vnd.openxmlformats-package.relationships+xml"/>
  <Default Extension="xml" ContentType="application/xml"/>
  <Default Extension="png" ContentType="image/png"/>
  <Override PartName="/word/document.xml" ContentType="application/vnd.openxmlformats-officedocument.wordprocessingml.document.main+xml"/>
</Types>"""

ROOT_RELS_XML = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">
  <Relationship Id="rId1" Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/officeDocument" Target="word/document.xml"/>
</Relationships>"""

IMAGE_RUN_XML = f"""<w:r><w:drawing><wp:inline>
  <wp:extent cx="952500" cy="952500"/>
  <wp:docPr id="{{id}}" name="Picture {{id}}"/>
  <a:graphic><a:graphicData uri="{PIC_NS}"><pic:pic>
    <pic:blipFill><a:blip r:embed="rIdImg{{id}}"/></pic:blipFill>
  </pic:pic></a:graphicData></a:graphic>
</wp:inline></w:drawing></w:r>"""


def png_bytes(size: int = 8) -> bytes:
    """A small solid-colour PNG."""
    pix = fitz.Pixmap(fitz.csRGB, fitz.IRect(0, 0, size, size), False)
    pix.clear_with(200)
    return pix.tobytes("png")


def build_docx(path: Path, paragraphs: list[tuple[str, bool]]) -> Path:
    """
    Write a minimal DOCX.

    Each paragraph is ``(text, with_image)``; with_image appends an inline
    picture directly after the text run.
    """
    body = []
    relationships = []
    image_id = 0
    for text, with_image in paragraphs:
        runs = f'<w:r><w:t xml:space="preserve">{text}</w:t></w:r>' if text else ""
        if with_image:
            image_id += 1
            runs += IMAGE_RUN_XML.format(id=image_id)
            relationships.append(
                f'<Relationship Id="rIdImg{image_id}" '
                f'Type="{R_NS}/image" Target="media/image{image_id}.png"/>'
            )
        body.append(f"<w:p>{runs}</w:p>")

    document_xml = (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
        f'<w:document xmlns:w="{W_NS}" xmlns:r="{R_NS}" xmlns:wp="{WP_NS}" '
        f'xmlns:a="{A_NS}" xmlns:pic="{PIC_NS}"><w:body>{"".join(body)}</w:body></w:document>'
    )
    document_rels_xml = (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
        '<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">'
        f'{"".join(relationships)}</Relationships>'
    )

    with zipfile.ZipFile(path, "w", zipfile.ZIP_DEFLATED) as archive:
        archive.writestr("[Content_Types].xml", CONTENT_TYPES_XML)
        archive.writestr("_rels/.rels", ROOT_RELS_XML)
        archive.writestr("word/document.xml", document_xml)
        archive.writestr("word/_rels/document.xml.rels", document_rels_xml)
        for index in range(1, image_id + 1):
            archive.writestr(f"word/media/image{index}.png", png_bytes())
    return path


def build_pdf(
    path: Path,
    pages: list[list[str]],
    images: list[tuple[int, tuple[float, float, float, float]]] | None = None,
) -> Path:
    """
    Write a PDF with one line of text every 20pt from (72, 72) per page.

    ``images`` places a PNG at ``(page_index, (x0, y0, x1, y1))``.
    """
    doc = fitz.open()
    for lines in pages:
        page = doc.new_page()
        for index, line in enumerate(lines):
            page.insert_text((72, 72 + index * 20), line, fontsize=12)
    for page_index, rect in images or []:
        doc[page_index].insert_image(fitz.Rect(*rect), stream=png_bytes())
    doc.save(str(path))
    doc.close()
    return path


@pytest.fixture
def docx_factory(tmp_path):
    def _factory(paragraphs: list[tuple[str, bool]], name: str = "sample.docx") -> Path:
        return build_docx(tmp_path / name, paragraphs)

    return _factory


@pytest.fixture
def pdf_factory(tmp_path):
    def _factory(pages: list[list[str]], images=None, name: str = "sample.pdf") -> Path:
        return build_pdf(tmp_path / name, pages, images)

    return _factory


@pytest.fixture
def important_docx(docx_factory) -> Path:
    """Text "重要信息" immediately followed by an inline image."""
    return docx_factory([("标题", False), ("重要信息", True), ("结尾段落", False)])


@pytest.fixture
def mock_ocr_client():
    """OcrClient with every network call mocked."""
    client = MagicMock(spec=OcrClient)
    client.recognize_file = AsyncMock(return_value={"code": 0, "data": {"text": "hello"}})
    client.recognize_base64 = AsyncMock(return_value={"code": 0, "data": {"text": "hello"}})
    client.check_status = AsyncMock(
        return_value={"success": True, "message": "OCR service is available", "data": "ok"}
    )
    return client


def make_mock_chat_client(label: str) -> MagicMock:
    client = MagicMock(spec=ChatCompletionClient)
    client.send_message = AsyncMock(
        return_value=ChatReply(content=f"{label} reply", model="test-model", usage={"total_tokens": 7})
    )
    client.analyze_file = AsyncMock(
        return_value={"fileName": "notes.txt", "analysis": f"{label} analysis", "model": "test-model"}
    )
    client.analyze_text = AsyncMock(
        return_value={"fileName": "notes.txt", "analysis": f"{label} analysis", "model": "test-model"}
    )
    client.generate_summary = AsyncMock(
        return_value={"fileName": "notes.txt", "summary": f"{label} summary", "model": "test-model"}
    )
    client.list_models = AsyncMock(return_value=[{"id": "model-a", "name": "Model A"}])
    client.check_status = AsyncMock(
        return_value={"status": "connected", "message": f"{label} service is reachable", "model": "m"}
    )
    return client


@pytest.fixture
def mock_openrouter_client():
    return make_mock_chat_client("OpenRouter")


@pytest.fixture
def mock_openai_client():
    return make_mock_chat_client("OpenAI")


@pytest.fixture
def override_clients(mock_ocr_client, mock_openrouter_client, mock_openai_client):
    """Replace the external service clients with mocks."""
    app.dependency_overrides[get_ocr_client] = lambda: mock_ocr_client
    app.dependency_overrides[get_openrouter_client] = lambda: mock_openrouter_client
    app.dependency_overrides[get_openai_client] = lambda: mock_openai_client
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def sync_client(override_clients) -> TestClient:
    """Synchronous test client for multipart upload tests."""
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
async def client(override_clients) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client."""
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def upload_dir() -> Path:
    return Path(os.environ["UPLOAD_DIR"])
