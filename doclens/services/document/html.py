"""HTML normalization and generation helpers.

Turns converted document markup into plain text where every image-bearing
element is replaced by a single placeholder token.
"""

import re
from pathlib import Path

IMAGE_PLACEHOLDER = "[image]"

# Order matters: image tags are replaced before generic tag stripping,
# otherwise they would vanish without leaving a placeholder.
IMAGE_TAG_PATTERNS = [
    re.compile(r"<img[^>]*>", re.IGNORECASE),
    re.compile(r"<image[^>]*>", re.IGNORECASE),
    re.compile(r"<picture[^>]*>.*?</picture>", re.IGNORECASE | re.DOTALL),
    re.compile(r"<figure[^>]*>.*?</figure>", re.IGNORECASE | re.DOTALL),
    re.compile(r"<svg[^>]*>.*?</svg>", re.IGNORECASE | re.DOTALL),
    re.compile(r"<canvas[^>]*>.*?</canvas>", re.IGNORECASE | re.DOTALL),
]

TAG_PATTERN = re.compile(r"<[^>]*>")
WHITESPACE_PATTERN = re.compile(r"\s+")
REPEATED_PLACEHOLDER_PATTERN = re.compile(r"\[image\](?:\s*\[image\])+")

HTML_ENTITIES = {
    "&amp;": "&",
    "&lt;": "<",
    "&gt;": ">",
    "&quot;": '"',
    "&#039;": "'",
    "&nbsp;": " ",
    "&copy;": "©",
    "&reg;": "®",
    "&trade;": "™",
    "&hellip;": "...",
    "&mdash;": "—",
    "&ndash;": "–",
    "&lsquo;": "'",
    "&rsquo;": "'",
    "&ldquo;": '"',
    "&rdquo;": '"',
}
ENTITY_PATTERN = re.compile("|".join(re.escape(entity) for entity in HTML_ENTITIES))

HTML_ESCAPES = {"&": "&amp;", "<": "&lt;", ">": "&gt;", '"': "&quot;", "'": "&#039;"}
ESCAPE_PATTERN = re.compile(r"[&<>\"']")

HEADING_MAX_LENGTH = 100
LIST_MARKER_PATTERN = re.compile(r"^[\d\-•]+\.?\s")


def to_plain_text_with_image_placeholders(html) -> str:
    """
    Collapse HTML into plain text, replacing image elements with ``[image]``.

    Never raises: empty or non-string input yields an empty string.

    Args:
        html: Markup produced by a document converter

    Returns:
        Single-line text with decoded entities and merged placeholders
    """
    if not html or not isinstance(html, str):
        return ""

    text = html.strip()
    if not text:
        return ""

    for pattern in IMAGE_TAG_PATTERNS:
        text = pattern.sub(IMAGE_PLACEHOLDER, text)

    text = TAG_PATTERN.sub("", text)
    text = decode_entities(text)
    text = WHITESPACE_PATTERN.sub(" ", text).strip()
    return REPEATED_PLACEHOLDER_PATTERN.sub(IMAGE_PLACEHOLDER, text)


def decode_entities(text: str) -> str:
    """Decode the fixed entity table in one pass; other entities stay as-is."""
    return ENTITY_PATTERN.sub(lambda m: HTML_ENTITIES[m.group(0)], text)


def escape_html(text: str) -> str:
    return ESCAPE_PATTERN.sub(lambda m: HTML_ESCAPES[m.group(0)], text)


def pdf_text_to_html(pdf_text: str, id_prefix: str = "doc-content") -> str:
    """
    Wrap lines of extracted PDF text into simple HTML.

    Short lines ending in '.' or ':' become headings, lines starting with a
    number, dash or bullet become list items, the rest paragraphs.
    """
    if not pdf_text or not pdf_text.strip():
        return "<p>PDF document is empty or has no extractable text</p>"

    lines = [line.strip() for line in pdf_text.split("\n") if line.strip()]

    html_lines = []
    for index, line in enumerate(lines):
        if len(line) < HEADING_MAX_LENGTH and line.endswith((".", ":")):
            html_lines.append(f'<h3 id="{id_prefix}-{index}">{escape_html(line)}</h3>')
        elif LIST_MARKER_PATTERN.match(line):
            html_lines.append(f"<li>{escape_html(LIST_MARKER_PATTERN.sub('', line))}</li>")
        else:
            html_lines.append(f'<p id="{id_prefix}-{index}">{escape_html(line)}</p>')

    return "\n".join(html_lines)


def pdf_without_text_html(pdf_path: str | Path, id_prefix: str = "doc-content") -> str:
    """Diagnostic block for a PDF whose text layer is empty."""
    file_name = escape_html(Path(pdf_path).name)
    return f"""
<div id="{id_prefix}-container">
  <h2>PDF analysis result</h2>
  <div class="pdf-info">
    <h3>File information</h3>
    <p><strong>File name:</strong> {file_name}</p>
    <p><strong>Status:</strong> <span class="warning">No extractable text</span></p>
  </div>
  <div class="possible-reasons">
    <h3>Possible causes</h3>
    <ul>
      <li>The PDF is a scanned image with no text layer</li>
      <li>The PDF is password protected</li>
      <li>The PDF file is corrupted</li>
      <li>The PDF contains only images</li>
    </ul>
  </div>
  <div class="suggestions">
    <h3>Suggestions</h3>
    <ul>
      <li>Run scanned pages through the OCR endpoints</li>
      <li>Make sure the PDF is not password protected</li>
      <li>Open the file in another reader to verify it is intact</li>
      <li>Extract the embedded images and analyze them separately</li>
    </ul>
  </div>
</div>
""".strip()
