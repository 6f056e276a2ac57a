"""Transparency preservation for freshly created canvases."""

from __future__ import annotations

from typing import Any

from image_resize.canvas.base import RasterCanvas
from image_resize.logger import get_logger
from image_resize.types import EncodedType

_logger = get_logger("transparency")


def preserve_transparency(
    canvas: RasterCanvas,
    encoded_type: EncodedType | None,
    source: Any,
    destination: Any,
) -> Any:
    """Prepare ``destination`` so a copy from ``source`` keeps its transparency.

    PNG keeps per-pixel alpha. GIF carries the source's transparent palette
    color over and pre-fills the destination with it. JPEG has nothing to keep.

    Returns the handle the caller should install (always ``destination``).
    """
    if encoded_type is EncodedType.PNG:
        canvas.set_alpha_preserving(destination, True)
    elif encoded_type is EncodedType.GIF:
        index = canvas.query_transparent_index(source)
        if index is not None:
            rgb = canvas.color_at(source, index)
            color = canvas.allocate_color(destination, rgb)
            canvas.set_transparent_color(destination, color)
            canvas.fill(destination, (0, 0), color)
            _logger.debug("gif transparent index %d -> rgb%s", index, rgb)
    elif encoded_type is EncodedType.JPEG or encoded_type is None:
        pass
    else:
        raise ValueError(f"Unsupported encoded type: {encoded_type!r}")
    return destination
