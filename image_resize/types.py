"""Value types shared by the geometry core, the canvases and the engine."""

from __future__ import annotations

import enum
from dataclasses import dataclass


class EncodedType(enum.Enum):
    """Encoded formats the engine can load and save."""

    JPEG = "jpeg"
    GIF = "gif"
    PNG = "png"

    @classmethod
    def from_extension(cls, ext: str | None) -> EncodedType | None:
        """Map a save type / file extension (``"jpg"``, ``".PNG"``...) to a type.

        An empty extension means JPEG, matching the save default.
        """
        key = (ext or "").strip().lower().lstrip(".")
        if key in ("", "jpg", "jpeg"):
            return cls.JPEG
        if key == "gif":
            return cls.GIF
        if key == "png":
            return cls.PNG
        return None

    @classmethod
    def from_format_name(cls, name: str | None) -> EncodedType | None:
        """Map a decoder format name (Pillow ``"JPEG"``, libvips ``"gifload"``).

        Pillow reports multi-picture camera JPEGs as ``"MPO"``.
        """
        key = (name or "").strip().lower()
        for suffix in ("load_source", "load_buffer", "load"):
            if key.endswith(suffix):
                key = key[: -len(suffix)]
                break
        return {"jpeg": cls.JPEG, "jpg": cls.JPEG, "mpo": cls.JPEG, "gif": cls.GIF, "png": cls.PNG}.get(key)


class AnchorKind(enum.Enum):
    START = "start"
    END = "end"
    CENTER = "center"
    OFFSET = "offset"


@dataclass(frozen=True, slots=True)
class Anchor:
    """Crop placement along one axis."""

    kind: AnchorKind
    offset: int = 0


@dataclass(frozen=True, slots=True)
class Dimensions:
    width: int
    height: int


@dataclass(frozen=True, slots=True)
class CropRect:
    """Crop rectangle in (x, y, width, height) form."""

    x: int
    y: int
    width: int
    height: int

    def as_tuple(self) -> tuple[int, int, int, int]:
        return self.x, self.y, self.width, self.height
