from __future__ import annotations

import numpy as np
import pytest
from PIL import Image

from refsheet.src.color_probe.io import DecodeFailure
from refsheet.src.color_probe.palette import (
    extract_palette,
    extract_palette_from_source,
    generate_color_segments,
    redmean_distance,
)


def _bicolor() -> np.ndarray:
    image = np.zeros((10, 10, 3), dtype=np.uint8)
    image[:, :7] = [200, 30, 30]
    image[:, 7:] = [30, 60, 200]
    return image


def test_extract_palette_orders_by_frequency():
    palette = extract_palette(_bicolor(), quality=10)

    assert [entry.color.hex for entry in palette] == ["#C81E1E", "#1E3CC8"]
    assert [entry.frequency for entry in palette] == [70, 30]


def test_quality_controls_sampling_step():
    palette = extract_palette(_bicolor(), quality=5)

    assert sum(entry.frequency for entry in palette) == 50


def test_white_black_and_transparent_pixels_are_skipped():
    image = np.zeros((4, 4, 4), dtype=np.uint8)
    image[:, :] = [255, 255, 255, 255]
    image[0, :] = [0, 0, 0, 255]
    image[1, :] = [10, 200, 10, 40]
    image[2, 0] = [40, 90, 160, 255]

    palette = extract_palette(image, quality=10)

    assert [entry.color.hex for entry in palette] == ["#285AA0"]


def test_white_and_black_can_be_kept():
    image = np.zeros((2, 4, 3), dtype=np.uint8)
    image[0, :] = [255, 255, 255]

    palette = extract_palette(image, quality=10, ignore_white=False, ignore_black=False)

    assert {entry.color.hex for entry in palette} == {"#FFFFFF", "#000000"}


def test_similar_colors_are_merged():
    image = np.zeros((2, 5, 3), dtype=np.uint8)
    image[:, :3] = [200, 30, 30]
    image[:, 3:] = [203, 31, 30]

    palette = extract_palette(image, quality=10)

    assert len(palette) == 1
    assert palette[0].color.hex == "#C81E1E"


def test_min_color_difference_zero_keeps_near_duplicates():
    image = np.zeros((2, 5, 3), dtype=np.uint8)
    image[:, :3] = [200, 30, 30]
    image[:, 3:] = [203, 31, 30]

    palette = extract_palette(image, quality=10, min_color_difference=0)

    assert len(palette) == 2


def test_ties_keep_first_appearance_order():
    image = np.zeros((1, 4, 3), dtype=np.uint8)
    image[0, :2] = [30, 60, 200]
    image[0, 2:] = [200, 30, 30]

    palette = extract_palette(image, quality=10)

    assert [entry.color.hex for entry in palette] == ["#1E3CC8", "#C81E1E"]


def test_max_colors_caps_palette():
    image = np.zeros((1, 6, 3), dtype=np.uint8)
    image[0] = [
        [200, 30, 30],
        [30, 200, 30],
        [30, 30, 200],
        [200, 200, 30],
        [30, 200, 200],
        [200, 30, 200],
    ]

    assert len(extract_palette(image, quality=10, max_colors=3)) == 3
    assert extract_palette(image, max_colors=0) == []


def test_ciede2000_metric_separates_distinct_colors():
    palette = extract_palette(_bicolor(), quality=10, metric="ciede2000", min_color_difference=5)

    assert [entry.color.hex for entry in palette] == ["#C81E1E", "#1E3CC8"]


def test_unknown_metric_raises():
    with pytest.raises(ValueError):
        extract_palette(_bicolor(), metric="euclid")


def test_fully_filtered_image_returns_empty_palette():
    image = np.full((5, 5, 3), 250, dtype=np.uint8)

    assert extract_palette(image) == []


def test_redmean_distance_is_zero_for_identical_colors():
    red = np.array([200.0, 30.0, 30.0])

    assert redmean_distance(red, red) == 0
    assert redmean_distance(red, np.array([30.0, 60.0, 200.0])) > 30


def test_extract_palette_from_source_respects_alpha(tmp_path):
    image = np.zeros((10, 10, 4), dtype=np.uint8)
    image[:, :] = [30, 120, 210, 255]
    image[:5, :] = [200, 30, 30, 0]
    path = tmp_path / "alpha.png"
    Image.fromarray(image).save(path)

    palette = extract_palette_from_source(str(path), quality=10)

    assert [entry.color.hex for entry in palette] == ["#1E78D2"]
    assert palette[0].to_dict()["frequency"] == 50


def test_generate_color_segments_lays_out_grid():
    palette = extract_palette(
        np.array(
            [[[200, 30, 30], [200, 30, 30], [200, 30, 30], [30, 60, 200], [30, 60, 200], [30, 200, 30]]],
            dtype=np.uint8,
        ),
        quality=10,
    )

    segments = generate_color_segments(palette)

    assert [segment.id for segment in segments] == ["color-1", "color-2", "color-3"]
    assert segments[0].name == "Red"
    assert segments[0].shape == "rectangle"
    assert (segments[0].x, segments[0].y) == pytest.approx((10, 20))
    assert (segments[1].x, segments[1].y) == pytest.approx((50, 20))
    assert (segments[2].x, segments[2].y) == pytest.approx((10, 50))
    assert (segments[0].width, segments[0].height) == pytest.approx((32, 24))
    assert segments[0].to_dict()["colorInfo"]["hex"] == "#C81E1E"


def test_generate_color_segments_empty():
    assert generate_color_segments([]) == []


def test_extract_palette_from_missing_source_is_decode_failure(tmp_path):
    with pytest.raises(DecodeFailure, match="Failed to decode image") as excinfo:
        extract_palette_from_source(str(tmp_path / "missing.png"))

    assert isinstance(excinfo.value.cause, FileNotFoundError)
