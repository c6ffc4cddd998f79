"""Position-based detection of images placed below a matched text block."""

from doclens.enums import RelativePosition
from doclens.services.document.models import (
    AdjacencyVerdict,
    DetectionOptions,
    DocumentContent,
    ImageDetail,
    ImagePosition,
    Rect,
)
from doclens.services.document.similarity import matches, text_confidence

# Gap between text bottom and image top, in line heights.
MIN_GAP_LINES = 0.5
MAX_GAP_LINES = 3.0

# Horizontal offset of centres beyond which an image counts as left/right.
CENTER_TOLERANCE = 50.0


def is_image_below_text(text_position: Rect, image_position: Rect, line_height: float) -> bool:
    """Image top lies in [text bottom + 0.5 lines, text bottom + 3 lines], inclusive."""
    text_bottom = text_position.bottom
    min_top = text_bottom + line_height * MIN_GAP_LINES
    max_top = text_bottom + line_height * MAX_GAP_LINES
    return min_top <= image_position.y <= max_top


def relative_position(text_position: Rect, image_position: Rect) -> RelativePosition:
    text_center = text_position.center_x
    image_center = image_position.center_x

    if image_center < text_center - CENTER_TOLERANCE:
        return RelativePosition.LEFT
    if image_center > text_center + CENTER_TOLERANCE:
        return RelativePosition.RIGHT
    return RelativePosition.CENTER


def find_images_after_text(
    images: list[ImagePosition],
    text_position: Rect,
    search_radius: float,
    line_height: float,
) -> list[ImagePosition]:
    """Images within ``search_radius`` of the text and inside the band below it."""
    return [
        image
        for image in images
        if text_position.distance_to(image.position) <= search_radius
        and is_image_below_text(text_position, image.position, line_height)
    ]


def analyze(
    content: DocumentContent,
    target: str,
    options: DetectionOptions,
) -> AdjacencyVerdict:
    """
    Decide whether ``target`` is followed by an image in the geometric model.

    The first matching text block wins; later matches are not considered.

    Args:
        content: Text blocks and image positions of the document
        target: Text to look for
        options: Radius, tolerance, line height and fuzzy settings

    Returns:
        AdjacencyVerdict for the first matching block, or an empty verdict
    """
    tolerance = options.tolerance if options.fuzzy_match else 1.0

    for block in content.text_blocks:
        if not matches(block.text, target, tolerance):
            continue

        nearby = find_images_after_text(
            content.image_positions,
            block.position,
            options.search_radius,
            options.line_height,
        )
        details = tuple(
            ImageDetail(
                position=image.position,
                kind=image.kind,
                index=image.index,
                distance=block.position.distance_to(image.position),
                is_below_text=True,
                relative_position=relative_position(block.position, image.position),
            )
            for image in nearby
        )

        return AdjacencyVerdict(
            target_text=target,
            found_text=True,
            has_image_after=bool(details),
            image_details=details,
            text_position=block.position,
            confidence=text_confidence(block.text, target),
        )

    return AdjacencyVerdict(target_text=target)
