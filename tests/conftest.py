"""Pytest configuration.

Fixture images are written with Pillow into ``tmp_path``. Engine and policy
tests that only care about geometry use ``FakeCanvas``, which records every
primitive call instead of touching pixels.
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from image_resize.types import EncodedType
from tests.helpers.fake_canvas import FakeCanvas, FakeRaster


@pytest.fixture
def fake_canvas() -> FakeCanvas:
    return FakeCanvas()


@pytest.fixture
def fake_engine(fake_canvas):
    """Engine holding a fake 800x600 JPEG; tests can reload other sizes via ``load_fake``."""
    from image_resize.engine import ImageResize

    engine = ImageResize(canvas=fake_canvas)

    def load_fake(width: int, height: int, encoded_type: EncodedType = EncodedType.JPEG, **kwargs) -> FakeRaster:
        raster = FakeRaster(width, height, **kwargs)
        fake_canvas.files[f"{width}x{height}"] = (raster, encoded_type)
        assert engine.load(f"{width}x{height}")
        fake_canvas.calls.clear()
        return raster

    engine.load_fake = load_fake  # type: ignore[attr-defined]
    load_fake(800, 600)
    return engine


@pytest.fixture
def jpeg_path(tmp_path: Path) -> Path:
    """800x600 JPEG, left half red and right half blue."""
    arr = np.zeros((600, 800, 3), dtype=np.uint8)
    arr[:, :400] = (255, 0, 0)
    arr[:, 400:] = (0, 0, 255)
    path = tmp_path / "photo.jpg"
    Image.fromarray(arr).save(path, quality=95)
    return path


@pytest.fixture
def png_alpha_path(tmp_path: Path) -> Path:
    """200x100 RGBA PNG: left half fully transparent, right half opaque green."""
    arr = np.zeros((100, 200, 4), dtype=np.uint8)
    arr[:, 100:] = (0, 255, 0, 255)
    path = tmp_path / "alpha.png"
    Image.fromarray(arr, "RGBA").save(path)
    return path


@pytest.fixture
def gif_path(tmp_path: Path) -> Path:
    """64x48 palette GIF, index 0 (magenta) transparent, a white box at (16..47, 12..35)."""
    image = Image.new("P", (64, 48), 0)
    palette = [255, 0, 255, 255, 255, 255] + [0, 0, 0] * 254
    image.putpalette(palette)
    image.paste(1, (16, 12, 48, 36))
    path = tmp_path / "sprite.gif"
    image.save(path, transparency=0)
    return path
