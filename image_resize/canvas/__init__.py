"""Raster canvas backends.

Keep this module lightweight: backends are imported on demand so that
selecting the Pillow canvas never touches libvips.
"""

from image_resize.canvas.base import RasterCanvas

BACKENDS = ("pillow", "vips")


def get_canvas(name: str | None = None) -> RasterCanvas:
    """Return a canvas backend by name (default: pillow).

    Raises:
        ValueError: unknown backend name
        ImportError: the backend's library is not installed
    """
    key = (name or "pillow").strip().lower()
    if key == "pillow":
        from image_resize.canvas.pillow_canvas import PillowCanvas

        return PillowCanvas()
    if key in ("vips", "pyvips"):
        from image_resize.canvas.vips_canvas import VipsCanvas

        return VipsCanvas()
    raise ValueError(f"Unknown canvas backend: {name!r}")


__all__ = ["BACKENDS", "RasterCanvas", "get_canvas"]
