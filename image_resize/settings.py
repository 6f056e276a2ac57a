from __future__ import annotations

import json
import os
from typing import TYPE_CHECKING, Any

from .logger import get_logger

if TYPE_CHECKING:
    from image_resize.engine import ImageResize

_logger = get_logger("settings")


class SettingsManager:
    """Resize defaults kept in a JSON file.

    Only the keys in ``DEFAULTS`` mean anything to the tool. Other keys found in
    the file are left alone and written back unchanged by :meth:`remember`.
    """

    DEFAULTS: dict[str, Any] = {
        "jpeg_quality": 80,
        "png_compression": 2,
        "upscale": False,
        "backend": "pillow",
    }

    def __init__(self, settings_path: str):
        self.settings_path = settings_path
        self._stored: dict[str, Any] = {}
        self.load()

    def load(self) -> None:
        self._stored = {}
        if not os.path.exists(self.settings_path):
            return
        try:
            with open(self.settings_path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            _logger.warning("settings load failed: %s", e)
            return
        if not isinstance(data, dict):
            _logger.warning("settings file is not a JSON object: %s", self.settings_path)
            return
        self._stored = data
        _logger.debug("settings loaded: %s", self.settings_path)

    def get(self, key: str) -> Any:
        """Stored value for ``key``, else its default (None for unknown keys)."""
        return self._stored.get(key, self.DEFAULTS.get(key))

    @property
    def jpeg_quality(self) -> Any:
        return self.get("jpeg_quality")

    @property
    def png_compression(self) -> Any:
        return self.get("png_compression")

    @property
    def upscale(self) -> bool:
        val = self.get("upscale")
        if isinstance(val, bool):
            return val
        _logger.warning("ignored non-boolean upscale setting: %r", val)
        return self.DEFAULTS["upscale"]

    @property
    def backend(self) -> str:
        val = self.get("backend")
        return val if isinstance(val, str) and val else self.DEFAULTS["backend"]

    def apply(self, engine: ImageResize) -> None:
        """Push stored quality/upscale values into ``engine``.

        Values go through the engine setters, so invalid ones are ignored there.
        """
        engine.quality_jpg = self.jpeg_quality
        engine.quality_png = self.png_compression
        engine.upscale = self.upscale

    def remember(self, engine: ImageResize, backend: str) -> bool:
        """Store the engine's effective settings and ``backend``, then save."""
        self._stored.update(
            jpeg_quality=engine.quality_jpg,
            png_compression=engine.quality_png,
            upscale=engine.upscale,
            backend=backend,
        )
        return self.save()

    def save(self) -> bool:
        try:
            parent = os.path.dirname(self.settings_path)
            if parent:
                os.makedirs(parent, exist_ok=True)
            with open(self.settings_path, "w", encoding="utf-8") as f:
                json.dump(self._stored, f, ensure_ascii=False, indent=2)
        except OSError as e:
            _logger.error("settings save failed: %s", e)
            return False
        _logger.debug("settings saved: %s", self.settings_path)
        return True
