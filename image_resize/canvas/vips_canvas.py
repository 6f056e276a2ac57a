"""Raster canvas backed by pyvips.

libvips images are immutable, so a handle wraps the current image and every
copy swaps in the result of ``insert``. Palette images are decoded to RGB(A):
GIF transparency arrives as an alpha band, so there is never a transparent
palette index to propagate. Handles decoded with an alpha band are marked
alpha-preserving and pass that on to every canvas they are copied into.
"""

import contextlib
from dataclasses import dataclass
from typing import Any

import numpy as np

from image_resize.canvas.base import RGB, Point, RasterCanvas, Rect, pack_rgb, unpack_rgb
from image_resize.logger import get_logger
from image_resize.types import EncodedType

_logger = get_logger("canvas")

try:
    import pyvips  # type: ignore
except (ImportError, OSError):
    pyvips = None  # type: ignore
    _logger.warning("pyvips is not available; the vips canvas will raise ImportError when used")


def _get_pyvips_module() -> Any:
    """Return the pyvips module or raise ImportError if unavailable."""
    if pyvips is None:
        _logger.error("pyvips requested but not available")
        raise ImportError("pyvips is not available")
    return pyvips


@dataclass(slots=True)
class VipsRaster:
    image: Any
    alpha_preserving: bool = False


class VipsCanvas(RasterCanvas):
    name = "vips"

    def __init__(self) -> None:
        self._pyvips = _get_pyvips_module()
        # Configure pyvips caches to avoid memory growth
        with contextlib.suppress(Exception):
            self._pyvips.cache_set_max(0)
            self._pyvips.cache_set_max_mem(0)
            self._pyvips.cache_set_max_files(0)

    def create_canvas(self, width: int, height: int) -> VipsRaster:
        return VipsRaster(self._pyvips.Image.black(width, height, bands=3).copy(interpretation="srgb"))

    def _insert(self, dst: VipsRaster, src: VipsRaster, piece: Any, x: int, y: int) -> None:
        with contextlib.suppress(Exception):
            piece = piece.colourspace("srgb")
        if src.alpha_preserving and not dst.alpha_preserving:
            self.set_alpha_preserving(dst, True)
        if dst.alpha_preserving:
            if not piece.hasalpha():
                piece = piece.bandjoin(255)
        elif piece.hasalpha():
            piece = piece.flatten(background=[0, 0, 0])
        if piece.format != "uchar":
            piece = piece.cast("uchar")
        dst.image = dst.image.insert(piece, x, y)

    def resample_copy(self, dst: VipsRaster, src: VipsRaster, dst_rect: Rect, src_rect: Rect) -> None:
        x, y, w, h = dst_rect
        sx, sy, sw, sh = src_rect
        piece = src.image
        if (sx, sy, sw, sh) != (0, 0, piece.width, piece.height):
            piece = piece.crop(sx, sy, sw, sh)
        piece = piece.thumbnail_image(w, height=h, size=self._pyvips.Size.FORCE)
        self._insert(dst, src, piece, x, y)

    def region_copy(self, dst: VipsRaster, src: VipsRaster, dst_origin: Point, src_rect: Rect) -> None:
        sx, sy, sw, sh = src_rect
        self._insert(dst, src, src.image.crop(sx, sy, sw, sh), dst_origin[0], dst_origin[1])

    def query_transparent_index(self, handle: VipsRaster) -> int | None:
        return None

    def color_at(self, handle: VipsRaster, index: int) -> RGB:
        raise IndexError(f"vips images have no palette (index {index})")

    def allocate_color(self, handle: VipsRaster, rgb: RGB) -> int:
        return pack_rgb(rgb)

    def set_transparent_color(self, handle: VipsRaster, color_index: int) -> None:
        """No-op: there is no palette, decoded transparency already lives in the alpha band."""

    def fill(self, handle: VipsRaster, origin: Point, color_index: int) -> None:
        ink = list(unpack_rgb(color_index))
        if handle.image.hasalpha():
            ink.append(255)

        def _flood(mutable: Any) -> None:
            mutable.draw_flood(ink, origin[0], origin[1])

        handle.image = handle.image.mutate(_flood)

    def set_alpha_preserving(self, handle: VipsRaster, enabled: bool) -> None:
        handle.alpha_preserving = enabled
        if enabled and not handle.image.hasalpha():
            handle.image = handle.image.bandjoin(255)
        elif not enabled and handle.image.hasalpha():
            handle.image = handle.image.flatten(background=[0, 0, 0]).cast("uchar")

    def width(self, handle: VipsRaster) -> int:
        return handle.image.width

    def height(self, handle: VipsRaster) -> int:
        return handle.image.height

    def dispose(self, handle: VipsRaster) -> None:
        handle.image = None

    def open(self, path: str) -> tuple[VipsRaster, EncodedType]:
        image = self._pyvips.Image.new_from_file(path)
        loader = None
        with contextlib.suppress(Exception):
            loader = image.get("vips-loader")
        encoded_type = EncodedType.from_format_name(loader)
        if encoded_type is None:
            raise ValueError(f"Unsupported image format {loader!r}: {path}")
        # Decode now so the file handle is not kept by the lazy pipeline
        image = image.copy_memory()
        _logger.debug("vips opened %s: %s %dx%d bands=%d", path, encoded_type.name, image.width, image.height, image.bands)
        return VipsRaster(image, alpha_preserving=image.hasalpha()), encoded_type

    def write(
        self, handle: VipsRaster, path: str, encoded_type: EncodedType, quality_jpg: int, quality_png: int
    ) -> None:
        image = handle.image
        if encoded_type is EncodedType.JPEG:
            if image.hasalpha():
                image = image.flatten(background=[0, 0, 0])
            if image.format != "uchar":
                image = image.cast("uchar")
            image.jpegsave(path, Q=quality_jpg)
        elif encoded_type is EncodedType.PNG:
            image.pngsave(path, compression=quality_png)
        elif encoded_type is EncodedType.GIF:
            image.gifsave(path)
        else:
            raise ValueError(f"Unsupported encoded type: {encoded_type!r}")

    def to_array(self, handle: VipsRaster) -> np.ndarray:
        image = handle.image
        if image.format != "uchar":
            image = image.cast("uchar")
        mem = image.write_to_memory()
        array = np.frombuffer(mem, dtype=np.uint8).reshape(image.height, image.width, image.bands)
        return array.copy()
