"""Word document reading with mammoth and the DOCX zip container."""

import logging
import re
import zipfile
from dataclasses import dataclass
from pathlib import Path

import mammoth

from doclens.enums import MessageKind
from doclens.exceptions import WordExtractionFailed
from doclens.services.document.models import ConversionMessage, HtmlOptions

logger = logging.getLogger(__name__)

MEDIA_PREFIX = "word/media/"
DOCUMENT_XML = "word/document.xml"
XML_TAG_PATTERN = re.compile(r"<[^>]*>")


@dataclass(frozen=True)
class MediaEntry:
    """An embedded media file inside a DOCX package."""

    name: str
    data: bytes

    @property
    def extension(self) -> str:
        return Path(self.name).suffix.lstrip(".")


def normalize_messages(messages) -> list[ConversionMessage]:
    """
    Coerce mammoth's conversion messages into ConversionMessage records.

    Accepts strings, mammoth ``Message`` objects and dicts; anything without a
    recognised kind is reported as info.
    """
    normalized: list[ConversionMessage] = []
    for msg in messages or []:
        if msg is None:
            continue
        if isinstance(msg, str):
            normalized.append(ConversionMessage(kind=MessageKind.INFO, message=msg))
            continue

        if isinstance(msg, dict):
            kind = msg.get("type")
            text = msg.get("message")
        else:
            kind = getattr(msg, "type", None)
            text = getattr(msg, "message", None)

        try:
            message_kind = MessageKind(kind)
        except ValueError:
            message_kind = MessageKind.INFO
        if not isinstance(text, str) or not text:
            text = str(msg)
        normalized.append(ConversionMessage(kind=message_kind, message=text))
    return normalized


def _omit_image_data(image) -> dict:
    """Emit the <img> element without its data payload."""
    return {"alt": image.alt_text} if image.alt_text else {}


class WordReader:
    """Read text, HTML and embedded media from Word documents."""

    def read_lines(self, path: str | Path) -> list[str]:
        """Non-empty, stripped lines of the document's raw text."""
        with open(path, "rb") as f:
            result = mammoth.extract_raw_text(f)
        return [line.strip() for line in result.value.split("\n") if line.strip()]

    def read_xml_text(self, path: str | Path) -> str:
        """Text of word/document.xml with every tag stripped."""
        try:
            with zipfile.ZipFile(path) as archive:
                xml_content = archive.read(DOCUMENT_XML).decode("utf-8", errors="replace")
        except (zipfile.BadZipFile, KeyError, OSError) as e:
            raise WordExtractionFailed(f"Word document content extraction failed: {e}") from e
        return " ".join(XML_TAG_PATTERN.sub(" ", xml_content).split())

    def list_media(self, path: str | Path) -> list[MediaEntry]:
        """Embedded media entries in archive order."""
        try:
            with zipfile.ZipFile(path) as archive:
                return [
                    MediaEntry(name=info.filename, data=archive.read(info))
                    for info in archive.infolist()
                    if info.filename.startswith(MEDIA_PREFIX) and not info.is_dir()
                ]
        except (zipfile.BadZipFile, OSError) as e:
            raise WordExtractionFailed(f"Word document processing failed: {e}") from e

    def to_html(
        self, path: str | Path, options: HtmlOptions
    ) -> tuple[str, list[ConversionMessage]]:
        """
        Convert the document to HTML using its paragraph and run structure.

        Args:
            path: DOCX file path
            options: Style map, image handling, empty paragraph and id settings

        Returns:
            Tuple of (html, normalized conversion messages)

        Raises:
            WordExtractionFailed: If the file cannot be read or yields no HTML
        """
        if options.include_images:
            convert_image = options.convert_image
        else:
            convert_image = mammoth.images.img_element(_omit_image_data)

        kwargs = {
            "ignore_empty_paragraphs": options.ignore_empty_paragraphs,
            "id_prefix": options.id_prefix,
        }
        if options.style_map:
            kwargs["style_map"] = options.style_map
        if convert_image is not None:
            kwargs["convert_image"] = convert_image

        try:
            with open(path, "rb") as f:
                result = mammoth.convert_to_html(f, **kwargs)
        except Exception as e:
            raise WordExtractionFailed(f"Word document conversion failed: {e}") from e

        if not result.value:
            raise WordExtractionFailed("Word document conversion produced no HTML content")

        return result.value, normalize_messages(result.messages)
