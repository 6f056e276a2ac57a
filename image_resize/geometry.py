"""Resize and crop geometry.

Pure functions, no canvas access: the engine feeds them the live image
dimensions and the configured targets, and acts on the results.
"""

from __future__ import annotations

import math
from typing import Any

from image_resize.logger import get_logger
from image_resize.types import Anchor, AnchorKind, CropRect, Dimensions

_logger = get_logger("geometry")

_ANCHOR_TOKENS = {
    "left": AnchorKind.START,
    "top": AnchorKind.START,
    "right": AnchorKind.END,
    "bottom": AnchorKind.END,
    "center": AnchorKind.CENTER,
    "middle": AnchorKind.CENTER,
}


def auto_width(source: Dimensions, target_height: int) -> int:
    """Width that keeps the source proportions at ``target_height``.

    Returns the source width unchanged when the source height is unknown (0).
    """
    if source.height > 0:
        return (source.width * target_height) // source.height
    return source.width


def auto_height(source: Dimensions, target_width: int) -> int:
    """Height that keeps the source proportions at ``target_width``."""
    if source.width > 0:
        return (source.height * target_width) // source.width
    return source.height


def fit_dimensions(source: Dimensions, box: Dimensions) -> Dimensions:
    """Largest proportional size that fits inside ``box``.

    The axis with the smaller scale factor is kept; on a tie the width is kept
    and the height recomputed.
    """
    ratio_x = box.width / source.width
    ratio_y = box.height / source.height
    if ratio_x <= ratio_y:
        return Dimensions(box.width, auto_height(source, box.width))
    return Dimensions(auto_width(source, box.height), box.height)


def cover_dimensions(source: Dimensions, box: Dimensions) -> Dimensions:
    """Smallest proportional size that covers ``box`` on both axes."""
    if auto_height(source, box.width) < box.height:
        # wider than the box: match the height, overflow horizontally
        return Dimensions(auto_width(source, box.height), box.height)
    return Dimensions(box.width, auto_height(source, box.width))


def as_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def parse_anchor(token: Any) -> Anchor:
    """Turn a position token into an :class:`Anchor`.

    Accepts the symbolic names (case-insensitive) or a positive pixel offset
    given as a number or numeric string. Everything else is the start edge.
    """
    if isinstance(token, Anchor):
        return token
    if isinstance(token, str):
        kind = _ANCHOR_TOKENS.get(token.strip().lower())
        if kind is not None:
            return Anchor(kind)
    number = as_number(token)
    if number is not None and number > 0:
        return Anchor(AnchorKind.OFFSET, int(number))
    return Anchor(AnchorKind.START)


def resolve_anchor(token: Any, source_extent: int, window_extent: int) -> int:
    """Offset of a window of ``window_extent`` inside ``source_extent``.

    The result is not clamped; see :func:`compute_crop_rect`.
    """
    anchor = parse_anchor(token)
    if anchor.kind is AnchorKind.START:
        return 0
    if anchor.kind is AnchorKind.END:
        return source_extent - window_extent
    if anchor.kind is AnchorKind.CENTER:
        return (source_extent - window_extent) // 2
    return anchor.offset


def compute_crop_rect(
    source: Dimensions,
    width: int,
    height: int,
    position_x: Any = "center",
    position_y: Any = "center",
) -> CropRect:
    """Crop rectangle of ``width`` x ``height`` placed by the two anchors.

    The window is shrunk to the source size and moved back inside the source
    when an offset anchor pushes it past the right or bottom edge.
    """
    width = min(width, source.width)
    height = min(height, source.height)

    start_x = resolve_anchor(position_x, source.width, width)
    start_y = resolve_anchor(position_y, source.height, height)

    start_x = min(start_x, source.width - width)
    start_y = min(start_y, source.height - height)

    rect = CropRect(start_x, start_y, width, height)
    _logger.debug("crop rect for %dx%d (%r, %r): %s", source.width, source.height, position_x, position_y, rect)
    return rect
