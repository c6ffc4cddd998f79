"""String adjacency checks between target text and image placeholders."""

from doclens.services.document.html import IMAGE_PLACEHOLDER

MISSING_PREFIX = "missing: "


def is_followed_by_image(text: str | None, target: str | None) -> bool:
    """
    Check whether any occurrence of ``target`` is immediately followed by ``[image]``.

    Occurrences are found left to right without overlap. A single qualifying
    occurrence is enough; any character between the target and the
    placeholder (including a space) disqualifies that occurrence.
    """
    if not text or not target:
        return False

    parts = text.split(target)
    if len(parts) < 2:
        return False

    return any(part.startswith(IMAGE_PLACEHOLDER) for part in parts[1:])


def parse_targets(raw: str | None) -> list[str]:
    """Split a comma-separated target list, dropping blank items."""
    if not raw:
        return []
    return [item.strip() for item in raw.split(",") if item.strip()]


def check_targets(text: str, targets: list[str]) -> list[str]:
    """Report ``""`` for each satisfied target and ``"missing: <target>"`` otherwise."""
    return [
        "" if is_followed_by_image(text, target) else f"{MISSING_PREFIX}{target}"
        for target in targets
    ]
