"""Resize/crop engine.

Holds at most one decoded image and the resize settings. Every resize or crop
builds a new canvas through the configured backend and replaces the held one.
"""

from __future__ import annotations

import contextlib
import os
from typing import Any

from image_resize.canvas import RasterCanvas, get_canvas
from image_resize.geometry import (
    as_number,
    auto_height,
    auto_width,
    compute_crop_rect,
    cover_dimensions,
    fit_dimensions,
)
from image_resize.logger import get_logger
from image_resize.transparency import preserve_transparency
from image_resize.types import Dimensions, EncodedType

_logger = get_logger("engine")

DEFAULT_QUALITY_JPG = 80
DEFAULT_QUALITY_PNG = 2


class ImageResize:
    """Resize and crop a single JPEG, GIF or PNG image.

    Usage:
        with ImageResize("photo.jpg") as img:
            img.target_width = 400
            img.resize()
            img.save("photo_400.jpg")

    Targets left unset fall back to the current image size. Invalid values
    passed to the setters are ignored and the previous value is kept.
    """

    def __init__(self, filename: str | os.PathLike | None = None, canvas: RasterCanvas | None = None) -> None:
        self.canvas: RasterCanvas = canvas if canvas is not None else get_canvas()
        self._image: Any | None = None
        self._image_type: EncodedType | None = None
        self._target_width: int | None = None
        self._target_height: int | None = None
        self.upscale = False
        self._quality_jpg = DEFAULT_QUALITY_JPG
        self._quality_png = DEFAULT_QUALITY_PNG
        if filename:
            self.load(filename)

    def __enter__(self) -> ImageResize:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.destroy()

    def __del__(self) -> None:
        with contextlib.suppress(Exception):
            self.destroy()

    # ---- image lifecycle ----
    def destroy(self) -> None:
        """Release the loaded image."""
        if self._image is not None:
            self.canvas.dispose(self._image)
        self._image = None
        self._image_type = None

    def load(self, filename: str | os.PathLike) -> bool:
        """Load a JPEG, GIF or PNG file, replacing the current image."""
        self.destroy()
        path = os.fspath(filename)
        try:
            handle, encoded_type = self.canvas.open(path)
        except Exception as e:
            _logger.warning("load failed for %s: %s", path, e)
            return False
        self._image = handle
        self._image_type = encoded_type
        _logger.info("loaded %s (%s %dx%d)", path, encoded_type.name, self.get_width(), self.get_height())
        return True

    def save(self, filename: str | os.PathLike, type: str | None = None) -> bool:  # noqa: A002
        """Write the current image.

        The format comes from ``type`` or else the file extension; no extension
        means JPEG. Returns False for unknown formats and write errors.
        """
        if self._image is None:
            return False
        path = os.fspath(filename)
        ext = type if type else os.path.splitext(path)[1]
        encoded_type = EncodedType.from_extension(ext)
        if encoded_type is None:
            _logger.warning("save skipped, unsupported type %r for %s", ext, path)
            return False
        try:
            self.canvas.write(self._image, path, encoded_type, self._quality_jpg, self._quality_png)
        except Exception as e:
            _logger.error("save failed for %s: %s", path, e, exc_info=True)
            return False
        _logger.info("saved %s (%s %dx%d)", path, encoded_type.name, self.get_width(), self.get_height())
        return True

    def _install(self, handle: Any) -> None:
        old = self._image
        self._image = handle
        if old is not None and old is not handle:
            self.canvas.dispose(old)

    # ---- settings ----
    @property
    def target_width(self) -> int | None:
        return self._target_width

    @target_width.setter
    def target_width(self, value: Any) -> None:
        size = self._positive_int(value)
        if size is not None:
            self._target_width = size
        else:
            _logger.debug("ignored target width %r", value)

    @property
    def target_height(self) -> int | None:
        return self._target_height

    @target_height.setter
    def target_height(self, value: Any) -> None:
        size = self._positive_int(value)
        if size is not None:
            self._target_height = size
        else:
            _logger.debug("ignored target height %r", value)

    @staticmethod
    def _positive_int(value: Any) -> int | None:
        number = as_number(value)
        if number is None or int(number) <= 0:
            return None
        return int(number)

    def set_long_side(self, value: Any) -> None:
        """Set the target for whichever side of the current image is longer."""
        width, height = self.get_width(), self.get_height()
        if width and height:
            if width >= height:
                self.target_width = value
            else:
                self.target_height = value

    def set_short_side(self, value: Any) -> None:
        """Set the target for whichever side of the current image is shorter."""
        width, height = self.get_width(), self.get_height()
        if width and height:
            if width < height:
                self.target_width = value
            else:
                self.target_height = value

    def reset(self) -> None:
        self._target_width = None
        self._target_height = None

    @property
    def quality_jpg(self) -> int:
        """JPEG quality, 0 (lowest) to 100 (highest)."""
        return self._quality_jpg

    @quality_jpg.setter
    def quality_jpg(self, value: Any) -> None:
        number = as_number(value)
        if number is not None and 0 <= number <= 100:
            self._quality_jpg = int(number)
        else:
            _logger.debug("ignored jpeg quality %r", value)

    @property
    def quality_png(self) -> int:
        """PNG zlib compression level, 0 (none) to 9 (smallest)."""
        return self._quality_png

    @quality_png.setter
    def quality_png(self, value: Any) -> None:
        number = as_number(value)
        if number is not None and 0 <= number <= 9:
            self._quality_png = int(number)
        else:
            _logger.debug("ignored png compression %r", value)

    # ---- queries ----
    def get_width(self) -> int:
        return self.canvas.width(self._image) if self._image is not None else 0

    def get_height(self) -> int:
        return self.canvas.height(self._image) if self._image is not None else 0

    def get_image_type(self) -> EncodedType | None:
        return self._image_type if self._image is not None else None

    @property
    def dimensions(self) -> Dimensions:
        return Dimensions(self.get_width(), self.get_height())

    def get_auto_width(self, height: int) -> int:
        return auto_width(self.dimensions, height)

    def get_auto_height(self, width: int) -> int:
        return auto_height(self.dimensions, width)

    def to_array(self) -> Any | None:
        """Current pixels as a numpy array, or None with no image."""
        return self.canvas.to_array(self._image) if self._image is not None else None

    def _target_box(self) -> Dimensions:
        return Dimensions(self._target_width or self.get_width(), self._target_height or self.get_height())

    # ---- resize ----
    def resize(self, proportions: bool = True) -> bool:
        """Resize to the target box.

        With ``proportions`` the image is scaled to fit inside the box; without,
        it is stretched to the box exactly.
        """
        if self._image is None:
            return False
        box = self._target_box()
        size = fit_dimensions(self.dimensions, box) if proportions else box
        self._do_resize(size.width, size.height)
        return True

    def resize_to_width(self) -> bool:
        if self._image is None or self._target_width is None:
            return False
        self._do_resize(self._target_width, self.get_auto_height(self._target_width))
        return True

    def resize_to_height(self) -> bool:
        if self._image is None or self._target_height is None:
            return False
        self._do_resize(self.get_auto_width(self._target_height), self._target_height)
        return True

    def resize_to_fill(self, position_x: Any = "center", position_y: Any = "center") -> bool:
        """Scale to cover the target box, then crop the overflow by the anchors."""
        if self._image is None:
            return False
        box = self._target_box()
        size = cover_dimensions(self.dimensions, box)
        self._do_resize(size.width, size.height)
        self._do_crop(box.width, box.height, position_x, position_y)
        return True

    def crop(self, position_x: Any = "center", position_y: Any = "center") -> bool:
        """Crop to the target box placed by the anchors.

        Anchors are ``left``/``right``/``center`` (x), ``top``/``bottom``/``center``
        (y), ``middle`` for either axis, or a pixel offset.
        """
        if self._image is None:
            return False
        box = self._target_box()
        self._do_crop(box.width, box.height, position_x, position_y)
        return True

    def _do_resize(self, width: int, height: int) -> None:
        if self._image is None:
            return
        source = self.dimensions
        if not self.upscale and (width > source.width or height > source.height):
            _logger.debug(
                "resize to %dx%d skipped: larger than %dx%d and upscale is off",
                width,
                height,
                source.width,
                source.height,
            )
            return
        width, height = max(1, width), max(1, height)

        new_image = self.canvas.create_canvas(width, height)
        new_image = preserve_transparency(self.canvas, self._image_type, self._image, new_image)
        self.canvas.resample_copy(new_image, self._image, (0, 0, width, height), (0, 0, source.width, source.height))
        self._install(new_image)
        _logger.debug("resized %dx%d -> %dx%d", source.width, source.height, width, height)

    def _do_crop(self, width: int, height: int, position_x: Any = "center", position_y: Any = "center") -> None:
        if self._image is None:
            return
        source = self.dimensions
        rect = compute_crop_rect(source, width, height, position_x, position_y)
        new_image = self.canvas.create_canvas(rect.width, rect.height)
        new_image = preserve_transparency(self.canvas, self._image_type, self._image, new_image)
        self.canvas.region_copy(new_image, self._image, (0, 0), rect.as_tuple())
        self._install(new_image)
        _logger.debug("cropped %dx%d -> %s", source.width, source.height, rect)
