from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

import numpy as np

RGB = tuple[int, int, int]
HSL = tuple[int, int, int]

PanelSide = Literal["left", "right", "top", "bottom"]
PreferredSide = Literal["left", "right", "auto"]
SegmentShape = Literal["rectangle", "circle"]


@dataclass(frozen=True)
class Color:
    hex: str
    rgb: RGB
    hsl: HSL
    name: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "hex": self.hex,
            "rgb": list(self.rgb),
            "hsl": list(self.hsl),
        }
        if self.name is not None:
            payload["name"] = self.name
        return payload


@dataclass(frozen=True)
class SampledPixel:
    color: Color
    x: int
    y: int
    source: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "color": self.color.to_dict(),
            "x": self.x,
            "y": self.y,
            "source": self.source,
        }


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float

    @classmethod
    def from_size(cls, width: float, height: float) -> Rect:
        return cls(x=0, y=0, width=width, height=height)

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center_x(self) -> float:
        return self.x + self.width / 2

    @property
    def center_y(self) -> float:
        return self.y + self.height / 2

    def to_dict(self) -> dict[str, float]:
        return {
            "x": float(self.x),
            "y": float(self.y),
            "width": float(self.width),
            "height": float(self.height),
        }


@dataclass(frozen=True)
class PanelSize:
    width: float
    height: float


@dataclass(frozen=True)
class PanelPlacement:
    x: float
    y: float
    side: PanelSide

    def to_dict(self) -> dict[str, Any]:
        return {"x": float(self.x), "y": float(self.y), "side": self.side}


@dataclass(eq=False)
class ImageHandle:
    """Decodable pixel data identified by ``src``.

    ``natural_width``/``natural_height`` are the intrinsic pixel size when
    known; ``width``/``height`` are the nominal (display) size.
    """

    src: str
    width: int = 0
    height: int = 0
    natural_width: int = 0
    natural_height: int = 0
    pixels: np.ndarray | None = field(default=None, repr=False)

    @classmethod
    def from_array(cls, src: str, pixels: np.ndarray) -> ImageHandle:
        if pixels.ndim not in (2, 3):
            raise ValueError("pixels must have shape (H, W) or (H, W, C)")
        height, width = pixels.shape[:2]
        return cls(
            src=src,
            width=width,
            height=height,
            natural_width=width,
            natural_height=height,
            pixels=pixels,
        )


@dataclass(frozen=True)
class ColorSegment:
    id: str
    name: str
    x: float
    y: float
    width: float
    height: float
    shape: SegmentShape
    color: Color

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "coordinates": {"x": float(self.x), "y": float(self.y)},
            "dimensions": {"width": float(self.width), "height": float(self.height)},
            "shape": self.shape,
            "colorInfo": self.color.to_dict(),
        }


@dataclass(frozen=True)
class RefSheetConfig:
    image_src: str
    image_alt: str
    image_width: int
    image_height: int
    segments: list[ColorSegment]
    preferred_panel_side: PreferredSide = "auto"
    show_segment_hints: bool = True

    def segment(self, segment_id: str) -> ColorSegment:
        for segment in self.segments:
            if segment.id == segment_id:
                return segment
        raise KeyError(f"unknown segment id: {segment_id}")


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    errors: list[str]
    warnings: list[str]


@dataclass(frozen=True)
class PaletteColor:
    color: Color
    frequency: int

    def to_dict(self) -> dict[str, Any]:
        payload = self.color.to_dict()
        payload["frequency"] = int(self.frequency)
        return payload


@dataclass(frozen=True)
class InspectionResult:
    pixel: SampledPixel
    region: Rect
    placement: PanelPlacement

    def to_dict(self) -> dict[str, Any]:
        return {
            "pixel": self.pixel.to_dict(),
            "region": self.region.to_dict(),
            "placement": self.placement.to_dict(),
        }
