from __future__ import annotations

from pathlib import Path

from .io import open_image
from .models import (
    ImageHandle,
    InspectionResult,
    PreferredSide,
    Rect,
    RefSheetConfig,
)
from .placement import PanelPlacer, segment_to_rect
from .sampler import PixelSampler, image_dimensions


class ColorInspectionPipeline:
    def __init__(
        self,
        sampler: PixelSampler | None = None,
        placer: PanelPlacer | None = None,
    ) -> None:
        self.sampler = sampler or PixelSampler()
        self.placer = placer or PanelPlacer()

    def run(
        self,
        image: ImageHandle | str | Path,
        x: float,
        y: float,
        container: Rect,
        region: Rect | None = None,
        preferred_side: PreferredSide = "auto",
        is_compact: bool | None = None,
    ) -> InspectionResult:
        handle = self._handle(image)
        pixel = self.sampler.sample_at(handle, x, y)
        if region is None:
            region = Rect(x=pixel.x, y=pixel.y, width=1, height=1)
        placement = self.placer.place(
            region,
            container,
            preferred_side=preferred_side,
            is_compact=is_compact,
        )
        return InspectionResult(pixel=pixel, region=region, placement=placement)

    def run_segment(
        self,
        config: RefSheetConfig,
        segment_id: str,
        image: ImageHandle | str | Path | None,
        container: Rect,
        is_compact: bool | None = None,
    ) -> InspectionResult:
        segment = config.segment(segment_id)
        handle = self._handle(image if image is not None else config.image_src)
        width, height = image_dimensions(handle)
        if width <= 0 or height <= 0:
            width, height = config.image_width, config.image_height

        center_x = (segment.x + segment.width / 2) / 100 * width
        center_y = (segment.y + segment.height / 2) / 100 * height
        return self.run(
            handle,
            center_x,
            center_y,
            container,
            region=segment_to_rect(segment, container),
            preferred_side=config.preferred_panel_side,
            is_compact=is_compact,
        )

    @staticmethod
    def _handle(image: ImageHandle | str | Path) -> ImageHandle:
        if isinstance(image, ImageHandle):
            return image
        return open_image(image)
