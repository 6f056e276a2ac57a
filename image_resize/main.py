"""Command line entry point: ``image-resize SOURCE DEST [options]``."""

from __future__ import annotations

import argparse
import os
import sys

from image_resize.canvas import BACKENDS, get_canvas
from image_resize.engine import ImageResize
from image_resize.logger import get_logger
from image_resize.settings import SettingsManager

MODES = ("resize", "exact", "width", "height", "fill", "crop")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="image-resize", description="Resize and crop JPEG, GIF and PNG images")
    parser.add_argument("source", help="Image to read")
    parser.add_argument("dest", help="Where to write the result")
    parser.add_argument("--mode", choices=MODES, default="resize", help="Resize strategy (default: resize)")
    parser.add_argument("--width", help="Target width in pixels")
    parser.add_argument("--height", help="Target height in pixels")
    parser.add_argument("--long-side", help="Target size of the longer side")
    parser.add_argument("--short-side", help="Target size of the shorter side")
    parser.add_argument("--anchor-x", default="center", help="left, right, center or a pixel offset")
    parser.add_argument("--anchor-y", default="center", help="top, bottom, center or a pixel offset")
    parser.add_argument("--upscale", action="store_true", default=None, help="Allow enlarging the image")
    parser.add_argument("--jpeg-quality", help="JPEG quality 0-100")
    parser.add_argument("--png-compression", help="PNG compression level 0-9")
    parser.add_argument("--type", dest="out_type", help="Output type (jpg, gif, png); default from DEST")
    parser.add_argument("--backend", choices=BACKENDS, help="Pixel backend")
    parser.add_argument("--settings", help="JSON settings file")
    parser.add_argument(
        "--save-settings",
        action="store_true",
        help="Store the effective quality, upscale and backend options in the --settings file",
    )
    parser.add_argument("--log-level", help="Set log level")
    parser.add_argument("--log-cats", help="Set log categories")
    return parser


def _apply_cli_logging_options(args: argparse.Namespace) -> None:
    # Reflected into the environment so every get_logger() call picks them up
    if args.log_level:
        os.environ["IMAGE_RESIZE_LOG_LEVEL"] = args.log_level
    if args.log_cats:
        os.environ["IMAGE_RESIZE_LOG_CATS"] = args.log_cats


def _apply_operation(engine: ImageResize, mode: str, anchor_x: str, anchor_y: str) -> bool:
    if mode == "resize":
        return engine.resize()
    if mode == "exact":
        return engine.resize(proportions=False)
    if mode == "width":
        return engine.resize_to_width()
    if mode == "height":
        return engine.resize_to_height()
    if mode == "fill":
        return engine.resize_to_fill(anchor_x, anchor_y)
    return engine.crop(anchor_x, anchor_y)


def run(argv: list[str] | None = None) -> int:
    """Application entrypoint (packaging-friendly)."""
    parser = _build_parser()
    args = parser.parse_args(sys.argv[1:] if argv is None else argv)
    if args.save_settings and not args.settings:
        parser.error("--save-settings needs --settings")
    _apply_cli_logging_options(args)
    logger = get_logger("main")

    settings = SettingsManager(args.settings) if args.settings else None
    backend = args.backend or (settings.backend if settings else None)
    try:
        canvas = get_canvas(backend)
    except (ImportError, ValueError) as e:
        logger.error("backend unavailable: %s", e)
        return 1

    with ImageResize(canvas=canvas) as engine:
        if settings is not None:
            settings.apply(engine)
        if args.upscale:
            engine.upscale = True
        if args.jpeg_quality is not None:
            engine.quality_jpg = args.jpeg_quality
        if args.png_compression is not None:
            engine.quality_png = args.png_compression
        if settings is not None and args.save_settings:
            settings.remember(engine, canvas.name)

        if not engine.load(args.source):
            logger.error("could not load %s", args.source)
            return 1

        if args.width is not None:
            engine.target_width = args.width
        if args.height is not None:
            engine.target_height = args.height
        if args.long_side is not None:
            engine.set_long_side(args.long_side)
        if args.short_side is not None:
            engine.set_short_side(args.short_side)

        if not _apply_operation(engine, args.mode, args.anchor_x, args.anchor_y):
            logger.error("%s needs a target size", args.mode)
            return 1
        if not engine.save(args.dest, args.out_type):
            logger.error("could not save %s", args.dest)
            return 1
        logger.info("%s -> %s (%dx%d)", args.source, args.dest, engine.get_width(), engine.get_height())
    return 0


if __name__ == "__main__":
    sys.exit(run())
