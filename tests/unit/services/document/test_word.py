"""Tests for the Word reader helpers."""

from types import SimpleNamespace

import pytest

from doclens.enums import MessageKind
from doclens.exceptions import WordExtractionFailed
from doclens.services.document.word import WordReader, normalize_messages


class TestNormalizeMessages:
    """Tests for coercing mammoth messages."""

    def test_mixed_message_shapes(self):
        messages = normalize_messages(
            [
                "plain string",
                {"type": "warning", "message": "from dict"},
                SimpleNamespace(type="error", message="from object"),
                None,
                {"type": "strange", "message": "unknown kind"},
            ]
        )

        assert [(m.kind, m.message) for m in messages] == [
            (MessageKind.INFO, "plain string"),
            (MessageKind.WARNING, "from dict"),
            (MessageKind.ERROR, "from object"),
            (MessageKind.INFO, "unknown kind"),
        ]

    def test_none_input(self):
        assert normalize_messages(None) == []


class TestWordReader:
    """Tests for reading DOCX packages."""

    def test_read_lines(self, important_docx):
        assert WordReader().read_lines(important_docx) == ["标题", "重要信息", "结尾段落"]

    def test_read_xml_text(self, important_docx):
        text = WordReader().read_xml_text(important_docx)

        assert "重要信息" in text
        assert "<" not in text

    def test_list_media(self, docx_factory):
        path = docx_factory([("a", True), ("b", True)])

        media = WordReader().list_media(path)

        assert [m.name for m in media] == ["word/media/image1.png", "word/media/image2.png"]
        assert all(m.extension == "png" for m in media)
        assert all(m.data.startswith(b"\x89PNG") for m in media)

    def test_list_media_of_corrupt_file(self, tmp_path):
        path = tmp_path / "broken.docx"
        path.write_bytes(b"garbage")

        with pytest.raises(WordExtractionFailed):
            WordReader().list_media(path)
