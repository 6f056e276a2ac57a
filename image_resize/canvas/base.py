from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from image_resize.types import EncodedType

Rect = tuple[int, int, int, int]
Point = tuple[int, int]
RGB = tuple[int, int, int]


def pack_rgb(rgb: RGB) -> int:
    r, g, b = rgb
    return ((r & 0xFF) << 16) | ((g & 0xFF) << 8) | (b & 0xFF)


def unpack_rgb(color: int) -> RGB:
    return (color >> 16) & 0xFF, (color >> 8) & 0xFF, color & 0xFF


class RasterCanvas(ABC):
    """Pixel backend used by the engine.

    Handles are opaque to callers; only the canvas that created a handle may
    operate on it. Truecolor canvases return packed ``0xRRGGBB`` ints from
    :meth:`allocate_color`.
    """

    name: str = "canvas"

    @abstractmethod
    def create_canvas(self, width: int, height: int) -> Any:
        """Return a new opaque black truecolor handle."""

    @abstractmethod
    def resample_copy(self, dst: Any, src: Any, dst_rect: Rect, src_rect: Rect) -> None:
        """Scale ``src_rect`` of ``src`` into ``dst_rect`` of ``dst``."""

    @abstractmethod
    def region_copy(self, dst: Any, src: Any, dst_origin: Point, src_rect: Rect) -> None:
        """Copy ``src_rect`` of ``src`` unscaled to ``dst_origin`` of ``dst``."""

    @abstractmethod
    def query_transparent_index(self, handle: Any) -> int | None:
        """Palette index marked transparent, or None when there is none."""

    @abstractmethod
    def color_at(self, handle: Any, index: int) -> RGB:
        pass

    @abstractmethod
    def allocate_color(self, handle: Any, rgb: RGB) -> int:
        pass

    @abstractmethod
    def set_transparent_color(self, handle: Any, color_index: int) -> None:
        pass

    @abstractmethod
    def fill(self, handle: Any, origin: Point, color_index: int) -> None:
        """Flood-fill the region connected to ``origin``."""

    @abstractmethod
    def set_alpha_preserving(self, handle: Any, enabled: bool) -> None:
        """Switch between blended copies and copies that keep per-pixel alpha."""

    @abstractmethod
    def width(self, handle: Any) -> int:
        pass

    @abstractmethod
    def height(self, handle: Any) -> int:
        pass

    @abstractmethod
    def dispose(self, handle: Any) -> None:
        pass

    @abstractmethod
    def open(self, path: str) -> tuple[Any, EncodedType]:
        """Decode ``path``.

        Raises:
            ValueError: the file is not JPEG, GIF or PNG.
            OSError: the file cannot be read or decoded.
        """

    @abstractmethod
    def write(self, handle: Any, path: str, encoded_type: EncodedType, quality_jpg: int, quality_png: int) -> None:
        pass

    @abstractmethod
    def to_array(self, handle: Any) -> Any:
        """Return the pixels as an ``(height, width, bands)`` uint8 numpy array."""
