"""Raster canvas backed by Pillow.

Pillow keeps GIF palettes and their transparent index intact on load, so this
is the backend that reproduces indexed-transparency propagation exactly.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from PIL import Image, ImageDraw

from image_resize.canvas.base import RGB, Point, RasterCanvas, Rect, pack_rgb, unpack_rgb
from image_resize.logger import get_logger
from image_resize.types import EncodedType

_logger = get_logger("canvas")

# GIF writer needs a palette image; JPEG writer rejects alpha and palettes
_JPEG_MODES = ("RGB", "L", "CMYK")


@dataclass(slots=True)
class PillowRaster:
    image: Image.Image


class PillowCanvas(RasterCanvas):
    name = "pillow"

    def __init__(self, resample: Image.Resampling = Image.Resampling.LANCZOS) -> None:
        self.resample = resample

    def create_canvas(self, width: int, height: int) -> PillowRaster:
        return PillowRaster(Image.new("RGB", (width, height), (0, 0, 0)))

    def _source_image(self, src: PillowRaster, dst: PillowRaster) -> Image.Image:
        image = src.image
        if image.mode != dst.image.mode:
            image = image.convert(dst.image.mode)
        return image

    def resample_copy(self, dst: PillowRaster, src: PillowRaster, dst_rect: Rect, src_rect: Rect) -> None:
        x, y, w, h = dst_rect
        sx, sy, sw, sh = src_rect
        piece = self._source_image(src, dst).resize((w, h), self.resample, box=(sx, sy, sx + sw, sy + sh))
        dst.image.paste(piece, (x, y))

    def region_copy(self, dst: PillowRaster, src: PillowRaster, dst_origin: Point, src_rect: Rect) -> None:
        sx, sy, sw, sh = src_rect
        piece = self._source_image(src, dst).crop((sx, sy, sx + sw, sy + sh))
        dst.image.paste(piece, dst_origin)

    def query_transparent_index(self, handle: PillowRaster) -> int | None:
        image = handle.image
        if image.mode != "P":
            return None
        index = image.info.get("transparency")
        if not isinstance(index, int) or isinstance(index, bool):
            return None
        total = len(image.getpalette() or []) // 3
        return index if 0 <= index < total else None

    def color_at(self, handle: PillowRaster, index: int) -> RGB:
        palette = handle.image.getpalette() or []
        entry = palette[index * 3 : index * 3 + 3]
        if index < 0 or len(entry) != 3:
            raise IndexError(f"palette index {index} out of range")
        return entry[0], entry[1], entry[2]

    def allocate_color(self, handle: PillowRaster, rgb: RGB) -> int:
        return pack_rgb(rgb)

    def set_transparent_color(self, handle: PillowRaster, color_index: int) -> None:
        handle.image.info["transparency"] = unpack_rgb(color_index)

    def fill(self, handle: PillowRaster, origin: Point, color_index: int) -> None:
        color: tuple[int, ...] = unpack_rgb(color_index)
        if handle.image.mode == "RGBA":
            color = (*color, 255)
        ImageDraw.floodfill(handle.image, origin, color)

    def set_alpha_preserving(self, handle: PillowRaster, enabled: bool) -> None:
        if enabled and handle.image.mode != "RGBA":
            handle.image = handle.image.convert("RGBA")
        elif not enabled and handle.image.mode == "RGBA":
            handle.image = handle.image.convert("RGB")

    def width(self, handle: PillowRaster) -> int:
        return handle.image.width

    def height(self, handle: PillowRaster) -> int:
        return handle.image.height

    def dispose(self, handle: PillowRaster) -> None:
        handle.image.close()

    def open(self, path: str) -> tuple[PillowRaster, EncodedType]:
        with Image.open(path) as image:
            encoded_type = EncodedType.from_format_name(image.format)
            if encoded_type is None:
                raise ValueError(f"Unsupported image format {image.format!r}: {path}")
            image.load()
            # copy() detaches from the file (GIF readers keep it open for seeking)
            loaded = image.copy()
        _logger.debug("pillow opened %s: %s %dx%d mode=%s", path, encoded_type.name, loaded.width, loaded.height, loaded.mode)
        return PillowRaster(loaded), encoded_type

    def write(
        self, handle: PillowRaster, path: str, encoded_type: EncodedType, quality_jpg: int, quality_png: int
    ) -> None:
        image = handle.image
        if encoded_type is EncodedType.JPEG:
            if image.mode not in _JPEG_MODES:
                image = image.convert("RGB")
            image.save(path, format="JPEG", quality=quality_jpg)
        elif encoded_type is EncodedType.PNG:
            image.save(path, format="PNG", compress_level=quality_png)
        elif encoded_type is EncodedType.GIF:
            if image.mode != "P":
                image = image.convert("P", palette=Image.Palette.ADAPTIVE)
            image.save(path, format="GIF")
        else:
            raise ValueError(f"Unsupported encoded type: {encoded_type!r}")

    def to_array(self, handle: PillowRaster) -> np.ndarray:
        image = handle.image
        # a transparent color (GIF) becomes alpha 0
        transparent = "A" in image.getbands() or "transparency" in image.info
        mode = "RGBA" if transparent else "RGB"
        if image.mode != mode:
            image = image.convert(mode)
        return np.asarray(image, dtype=np.uint8).copy()
