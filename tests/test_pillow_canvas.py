from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from image_resize.canvas import get_canvas
from image_resize.canvas.pillow_canvas import PillowCanvas
from image_resize.engine import ImageResize
from image_resize.types import EncodedType


def _noise_png(path: Path, width: int = 256, height: int = 256) -> Path:
    arr = np.random.default_rng(0).integers(0, 256, size=(height, width, 3), dtype=np.uint8)
    Image.fromarray(arr).save(path)
    return path


def test_default_backend_is_pillow() -> None:
    assert isinstance(get_canvas(), PillowCanvas)
    assert isinstance(ImageResize().canvas, PillowCanvas)


def test_unknown_backend_raises() -> None:
    with pytest.raises(ValueError, match="Unknown canvas backend"):
        get_canvas("gd")


def test_load_jpeg_and_resize_to_width(jpeg_path: Path, tmp_path: Path) -> None:
    with ImageResize(jpeg_path) as img:
        assert img.get_image_type() is EncodedType.JPEG
        assert (img.get_width(), img.get_height()) == (800, 600)

        img.target_width = 400
        assert img.resize() is True
        assert (img.get_width(), img.get_height()) == (400, 300)

        out = tmp_path / "small.jpg"
        assert img.save(out) is True

    with Image.open(out) as saved:
        assert saved.format == "JPEG"
        assert saved.size == (400, 300)


def test_multi_picture_jpeg_loads_as_jpeg(tmp_path: Path) -> None:
    path = tmp_path / "camera.jpg"
    frames = [Image.new("RGB", (40, 30), (10, 200, 30)), Image.new("RGB", (40, 30), (200, 10, 30))]
    frames[0].save(path, format="MPO", save_all=True, append_images=frames[1:])
    with Image.open(path) as raw:
        assert raw.format == "MPO"

    img = ImageResize(path)
    assert img.get_image_type() is EncodedType.JPEG
    assert (img.get_width(), img.get_height()) == (40, 30)
    img.target_width = 20
    assert img.resize() is True
    out = tmp_path / "small.jpg"
    assert img.save(out) is True
    with Image.open(out) as saved:
        assert saved.size == (20, 15)


def test_crop_left_keeps_left_half(jpeg_path: Path) -> None:
    img = ImageResize(jpeg_path)
    img.target_width = 300
    assert img.crop("left", "top") is True
    arr = img.to_array()
    assert arr.shape == (600, 300, 3)
    r, g, b = arr[300, 150]
    assert r > 200 and b < 60

    img.load(jpeg_path)
    img.target_width = 300
    assert img.crop("right", "top") is True
    r, g, b = img.to_array()[300, 150]
    assert b > 200 and r < 60


def test_resize_to_fill_real_pixels(tmp_path: Path) -> None:
    path = _noise_png(tmp_path / "noise.png", 640, 480)
    img = ImageResize(path)
    img.target_width = 300
    img.target_height = 300
    assert img.resize_to_fill() is True
    assert (img.get_width(), img.get_height()) == (300, 300)
    assert img.to_array().shape == (300, 300, 4)


def test_upscale_guard_real_image(jpeg_path: Path) -> None:
    img = ImageResize(jpeg_path)
    before = img.to_array()
    img.target_width = 1600
    assert img.resize_to_width() is True
    assert (img.get_width(), img.get_height()) == (800, 600)
    assert np.array_equal(img.to_array(), before)


def test_full_frame_crop_is_pixel_identical(tmp_path: Path) -> None:
    path = _noise_png(tmp_path / "noise.png", 64, 40)
    img = ImageResize(path)
    before = img.to_array()
    assert img.crop() is True
    after = img.to_array()
    assert np.array_equal(after[..., :3], before[..., :3])


def test_png_alpha_survives_resize(png_alpha_path: Path, tmp_path: Path) -> None:
    img = ImageResize(png_alpha_path)
    assert img.get_image_type() is EncodedType.PNG
    img.target_width = 100
    assert img.resize_to_width() is True

    arr = img.to_array()
    assert arr.shape == (50, 100, 4)
    assert arr[25, 10, 3] == 0
    assert tuple(arr[25, 90]) == (0, 255, 0, 255)

    out = tmp_path / "alpha_small.png"
    assert img.save(out) is True
    with Image.open(out) as saved:
        assert saved.mode == "RGBA"
        assert saved.getpixel((10, 25))[3] == 0


def test_gif_transparent_color_is_carried_over(gif_path: Path) -> None:
    img = ImageResize(gif_path)
    assert img.get_image_type() is EncodedType.GIF
    assert img.canvas.query_transparent_index(img._image) == 0

    img.target_width = 32
    img.target_height = 24
    assert img.crop("left", "top") is True

    assert img._image.image.info["transparency"] == (255, 0, 255)
    arr = img.to_array()
    assert arr.shape == (24, 32, 4)
    assert arr[0, 0, 3] == 0
    assert tuple(arr[20, 20]) == (255, 255, 255, 255)


def test_gif_save_roundtrip(gif_path: Path, tmp_path: Path) -> None:
    img = ImageResize(gif_path)
    img.target_width = 32
    assert img.resize_to_width() is True
    out = tmp_path / "small.gif"
    assert img.save(out) is True
    with Image.open(out) as saved:
        assert saved.format == "GIF"
        assert saved.size == (32, 24)
        assert "transparency" in saved.info
        rgba = saved.convert("RGBA")
    assert rgba.getpixel((0, 0))[3] == 0
    assert rgba.getpixel((16, 12))[3] == 255


def test_jpeg_quality_changes_output(tmp_path: Path) -> None:
    img = ImageResize(_noise_png(tmp_path / "noise.png"))
    low, high = tmp_path / "low.jpg", tmp_path / "high.jpg"
    img.quality_jpg = 10
    assert img.save(low) is True
    img.quality_jpg = 95
    assert img.save(high) is True
    assert low.stat().st_size < high.stat().st_size


def test_png_compression_level_changes_output(tmp_path: Path) -> None:
    arr = np.zeros((256, 256, 3), dtype=np.uint8)
    arr[::2] = 255
    path = tmp_path / "stripes.png"
    Image.fromarray(arr).save(path)

    img = ImageResize(path)
    raw, packed = tmp_path / "raw.png", tmp_path / "packed.png"
    img.quality_png = 0
    assert img.save(raw) is True
    img.quality_png = 9
    assert img.save(packed) is True
    assert packed.stat().st_size < raw.stat().st_size


def test_save_with_explicit_type(jpeg_path: Path, tmp_path: Path) -> None:
    img = ImageResize(jpeg_path)
    out = tmp_path / "photo.bin"
    assert img.save(out, "png") is True
    with Image.open(out) as saved:
        assert saved.format == "PNG"


def test_png_with_alpha_saved_as_jpeg(png_alpha_path: Path, tmp_path: Path) -> None:
    img = ImageResize(png_alpha_path)
    out = tmp_path / "flat.jpg"
    assert img.save(out) is True
    with Image.open(out) as saved:
        assert saved.mode == "RGB"


def test_unsupported_and_broken_files(tmp_path: Path) -> None:
    bmp = tmp_path / "x.bmp"
    Image.new("RGB", (4, 4)).save(bmp)
    broken = tmp_path / "broken.png"
    broken.write_bytes(b"not an image")

    img = ImageResize()
    assert img.load(bmp) is False
    assert img.load(broken) is False
    assert img.load(tmp_path / "missing.jpg") is False
    assert img.get_image_type() is None


def test_load_replaces_previous_image(jpeg_path: Path, gif_path: Path) -> None:
    img = ImageResize(jpeg_path)
    old = img._image
    assert img.load(gif_path) is True
    assert (img.get_width(), img.get_height()) == (64, 48)
    assert img.get_image_type() is EncodedType.GIF
    with pytest.raises(ValueError):
        old.image.getpixel((0, 0))
