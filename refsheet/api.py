from __future__ import annotations

from typing import Literal

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field
from starlette.concurrency import run_in_threadpool

from refsheet.src.color_probe.conversion import (
    InvalidColor,
    format_hsl_string,
    format_rgb_string,
)
from refsheet.src.color_probe.io import ColorExtractionError, open_image
from refsheet.src.color_probe.models import Color, PanelSize, Rect
from refsheet.src.color_probe.palette import extract_palette_from_source
from refsheet.src.color_probe.placement import PanelPlacer
from refsheet.src.color_probe.sampler import PixelSampler


class RectModel(BaseModel):
    x: float
    y: float
    width: float
    height: float

    def to_rect(self) -> Rect:
        return Rect(x=self.x, y=self.y, width=self.width, height=self.height)


class SizeModel(BaseModel):
    width: float
    height: float


class PointModel(BaseModel):
    x: float = Field(..., ge=0, description="Pixel column")
    y: float = Field(..., ge=0, description="Pixel row")


class SampleRequest(PointModel):
    image_url: str = Field(..., description="HTTP(S) image URL or server-local path")


class BatchSampleRequest(BaseModel):
    image_url: str = Field(..., description="HTTP(S) image URL or server-local path")
    points: list[PointModel] = Field(..., min_length=1, max_length=100)


class PlaceRequest(BaseModel):
    region: RectModel
    container: SizeModel
    preferred_side: Literal["left", "right", "auto"] = "auto"
    panel: SizeModel | None = None
    is_compact: bool | None = Field(
        default=None,
        description="Force the compact layout; inferred from container width when omitted",
    )


class PaletteRequest(BaseModel):
    image_url: str = Field(..., description="HTTP(S) image URL or server-local path")
    max_colors: int = Field(default=8, ge=1, le=32)
    quality: int = Field(default=5, ge=1, le=10)
    ignore_white: bool = True
    ignore_black: bool = True
    min_color_difference: float = Field(default=30.0, ge=0)
    metric: Literal["redmean", "ciede2000"] = "redmean"


class ColorItem(BaseModel):
    hex: str
    rgb: list[int]
    hsl: list[int]
    rgb_string: str
    hsl_string: str
    frequency: int | None = None


class SampleResponse(BaseModel):
    color: ColorItem
    x: int
    y: int


class BatchSampleResponse(BaseModel):
    colors: list[ColorItem]


class PlaceResponse(BaseModel):
    x: float
    y: float
    side: Literal["left", "right", "top", "bottom"]


class PaletteResponse(BaseModel):
    colors: list[ColorItem]


app = FastAPI(
    title="Reference Sheet Color API",
    version="1.0.0",
    description="Sample pixel colors and place color info panels for reference sheets.",
)

_sampler = PixelSampler()


def _get_sampler() -> PixelSampler:
    return _sampler


def _color_item(color: Color, frequency: int | None = None) -> ColorItem:
    return ColorItem(
        hex=color.hex,
        rgb=list(color.rgb),
        hsl=list(color.hsl),
        rgb_string=format_rgb_string(color.rgb),
        hsl_string=format_hsl_string(color.hsl),
        frequency=frequency,
    )


@app.post("/sample", response_model=SampleResponse)
async def sample_color(payload: SampleRequest) -> SampleResponse:
    sampler = _get_sampler()
    try:
        image = await run_in_threadpool(open_image, payload.image_url)
        pixel = await run_in_threadpool(sampler.sample_at, image, payload.x, payload.y)
    except (ColorExtractionError, InvalidColor) as exc:
        raise HTTPException(
            status_code=400, detail=f"failed_to_sample_color: {exc}"
        ) from exc
    return SampleResponse(color=_color_item(pixel.color), x=pixel.x, y=pixel.y)


@app.post("/sample/batch", response_model=BatchSampleResponse)
async def sample_colors(payload: BatchSampleRequest) -> BatchSampleResponse:
    sampler = _get_sampler()
    points = [(point.x, point.y) for point in payload.points]
    try:
        image = await run_in_threadpool(open_image, payload.image_url)
        colors = await run_in_threadpool(sampler.extract_many, image, points)
    except (ColorExtractionError, InvalidColor) as exc:
        raise HTTPException(
            status_code=400, detail=f"failed_to_sample_colors: {exc}"
        ) from exc
    return BatchSampleResponse(colors=[_color_item(color) for color in colors])


@app.post("/place", response_model=PlaceResponse)
async def place_panel(payload: PlaceRequest) -> PlaceResponse:
    panel = (
        PanelSize(width=payload.panel.width, height=payload.panel.height)
        if payload.panel
        else None
    )
    placement = PanelPlacer().place(
        payload.region.to_rect(),
        Rect.from_size(payload.container.width, payload.container.height),
        preferred_side=payload.preferred_side,
        panel_size=panel,
        is_compact=payload.is_compact,
    )
    return PlaceResponse(x=placement.x, y=placement.y, side=placement.side)


@app.post("/palette", response_model=PaletteResponse)
async def extract_palette(payload: PaletteRequest) -> PaletteResponse:
    try:
        colors = await run_in_threadpool(
            extract_palette_from_source,
            payload.image_url,
            max_colors=payload.max_colors,
            quality=payload.quality,
            ignore_white=payload.ignore_white,
            ignore_black=payload.ignore_black,
            min_color_difference=payload.min_color_difference,
            metric=payload.metric,
        )
    except Exception as exc:
        raise HTTPException(
            status_code=400, detail=f"failed_to_extract_palette: {exc}"
        ) from exc
    return PaletteResponse(
        colors=[_color_item(entry.color, entry.frequency) for entry in colors]
    )
