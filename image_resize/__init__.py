"""Resize and crop JPEG, GIF and PNG images.

Usage:
    from image_resize import ImageResize

    with ImageResize("in.png") as img:
        img.target_width = 300
        img.target_height = 300
        img.resize_to_fill("center", "top")
        img.save("out.png")
"""

from image_resize.canvas import RasterCanvas, get_canvas
from image_resize.engine import ImageResize
from image_resize.geometry import auto_height, auto_width, compute_crop_rect, parse_anchor, resolve_anchor
from image_resize.types import Anchor, AnchorKind, CropRect, Dimensions, EncodedType

__all__ = [
    "Anchor",
    "AnchorKind",
    "CropRect",
    "Dimensions",
    "EncodedType",
    "ImageResize",
    "RasterCanvas",
    "auto_height",
    "auto_width",
    "compute_crop_rect",
    "get_canvas",
    "parse_anchor",
    "resolve_anchor",
]
