from __future__ import annotations

import numpy as np
import pytest
from PIL import Image

from refsheet.src.color_probe.config import load_refsheet_config
from refsheet.src.color_probe.models import ImageHandle, Rect
from refsheet.src.color_probe.pipeline import ColorInspectionPipeline
from refsheet.src.color_probe.sampler import OutOfBounds, PixelSampler


def _write_image(path, array):
    Image.fromarray(array.astype(np.uint8)).save(path)


def _sheet() -> np.ndarray:
    image = np.zeros((100, 200, 3), dtype=np.uint8)
    image[:, :] = [240, 230, 220]
    image[10:30, 20:60] = [255, 87, 51]
    image[50:60, 100:120] = [30, 60, 200]
    return image


def test_run_samples_pixel_and_places_panel(tmp_path):
    image_path = tmp_path / "sheet.png"
    _write_image(image_path, _sheet())

    pipeline = ColorInspectionPipeline()
    result = pipeline.run(
        str(image_path), 30, 20, container=Rect.from_size(800, 600)
    )

    assert result.pixel.color.hex == "#FF5733"
    assert (result.pixel.x, result.pixel.y) == (30, 20)
    assert result.region == Rect(30, 20, 1, 1)
    assert result.placement.side == "right"

    payload = result.to_dict()
    assert payload["pixel"]["color"]["hsl"] == [11, 100, 60]
    assert payload["placement"]["side"] == "right"


def test_run_uses_given_region_and_side():
    handle = ImageHandle.from_array("memory", _sheet())
    pipeline = ColorInspectionPipeline()

    result = pipeline.run(
        handle,
        110,
        55,
        container=Rect.from_size(800, 600),
        region=Rect(400, 200, 50, 50),
        preferred_side="left",
    )

    assert result.pixel.color.hex == "#1E3CC8"
    assert result.placement.side == "left"
    assert result.region == Rect(400, 200, 50, 50)


def test_run_propagates_out_of_bounds():
    handle = ImageHandle.from_array("memory", _sheet())

    with pytest.raises(OutOfBounds):
        ColorInspectionPipeline().run(handle, 200, 10, container=Rect.from_size(800, 600))


def test_pipeline_shares_sampler_cache():
    sampler = PixelSampler()
    pipeline = ColorInspectionPipeline(sampler=sampler)
    handle = ImageHandle.from_array("memory", _sheet())

    pipeline.run(handle, 30, 20, container=Rect.from_size(800, 600))
    pipeline.run(handle, 30, 20, container=Rect.from_size(320, 480))

    assert sampler.cache_size() == 1


def test_run_segment_samples_segment_center(tmp_path):
    image_path = tmp_path / "sheet.png"
    _write_image(image_path, _sheet())
    config = load_refsheet_config(
        {
            "image": {
                "src": str(image_path),
                "alt": "sheet",
                "originalDimensions": {"width": 200, "height": 100},
            },
            "colorSegments": [
                {
                    "id": "jacket",
                    "name": "Jacket",
                    "coordinates": {"x": 10, "y": 10},
                    "dimensions": {"width": 20, "height": 20},
                    "shape": "rectangle",
                    "colorInfo": {
                        "hex": "#FF5733",
                        "rgb": {"r": 255, "g": 87, "b": 51},
                        "hsl": {"h": 11, "s": 100, "l": 60},
                    },
                }
            ],
            "layout": {"preferredPanelSide": "left", "showSegmentHints": True},
        }
    )

    result = ColorInspectionPipeline().run_segment(
        config, "jacket", None, container=Rect.from_size(800, 600)
    )

    assert (result.pixel.x, result.pixel.y) == (40, 20)
    assert result.pixel.color.hex == config.segment("jacket").color.hex
    assert result.region.to_dict() == pytest.approx(
        {"x": 80, "y": 60, "width": 160, "height": 120}
    )
    # 80px of room on the left is not enough, so the preferred side is ignored
    assert result.placement.side == "right"
