from __future__ import annotations

import math
from pathlib import Path
from typing import Literal

import numpy as np
from skimage import color as skcolor
from skimage.color import deltaE_ciede2000

from .conversion import color_from_rgb
from .io import as_rgba_surface, read_surface
from .models import ColorSegment, PaletteColor
from .naming import generate_color_name

DistanceMetric = Literal["redmean", "ciede2000"]


def extract_palette(
    pixels: np.ndarray,
    max_colors: int = 8,
    quality: int = 5,
    ignore_white: bool = True,
    ignore_black: bool = True,
    min_color_difference: float = 30.0,
    metric: DistanceMetric = "redmean",
) -> list[PaletteColor]:
    if metric not in ("redmean", "ciede2000"):
        raise ValueError(f"unsupported distance metric '{metric}'")
    if max_colors < 1:
        return []

    rgba = as_rgba_surface(pixels).reshape(-1, 4)
    step = max(1, 10 // max(1, int(quality)))
    sampled = rgba[::step]

    keep = sampled[:, 3] >= 128
    rgb = sampled[:, :3]
    if ignore_white:
        keep &= ~np.all(rgb > 240, axis=1)
    if ignore_black:
        keep &= ~np.all(rgb < 15, axis=1)
    rgb = rgb[keep]
    if rgb.shape[0] == 0:
        return []

    unique, first_index, counts = np.unique(
        rgb, axis=0, return_index=True, return_counts=True
    )
    # most frequent first, first appearance breaks ties
    order = np.lexsort((first_index, -counts))

    kept_rgb: list[np.ndarray] = []
    palette: list[PaletteColor] = []
    for idx in order:
        candidate = unique[idx].astype(np.float64)
        if any(
            _distance(candidate, existing, metric) < min_color_difference
            for existing in kept_rgb
        ):
            continue
        kept_rgb.append(candidate)
        channels = (int(unique[idx][0]), int(unique[idx][1]), int(unique[idx][2]))
        palette.append(
            PaletteColor(color=color_from_rgb(channels), frequency=int(counts[idx]))
        )
        if len(palette) >= max_colors:
            break
    return palette


def extract_palette_from_source(
    source: str | Path, **options: object
) -> list[PaletteColor]:
    return extract_palette(read_surface(source, mode="RGBA"), **options)


def redmean_distance(rgb_a: np.ndarray, rgb_b: np.ndarray) -> float:
    r_mean = (rgb_a[0] + rgb_b[0]) / 2.0
    delta = rgb_a - rgb_b
    weight_r = 2.0 + r_mean / 256.0
    weight_g = 4.0
    weight_b = 2.0 + (255.0 - r_mean) / 256.0
    return math.sqrt(
        weight_r * delta[0] ** 2 + weight_g * delta[1] ** 2 + weight_b * delta[2] ** 2
    )


def generate_color_segments(colors: list[PaletteColor]) -> list[ColorSegment]:
    if not colors:
        return []

    cols = math.ceil(math.sqrt(len(colors)))
    rows = math.ceil(len(colors) / cols)
    cell_width = 80.0 / cols
    cell_height = 60.0 / rows

    segments: list[ColorSegment] = []
    for index, entry in enumerate(colors):
        col = index % cols
        row = index // cols
        segments.append(
            ColorSegment(
                id=f"color-{index + 1}",
                name=entry.color.name or generate_color_name(entry.color.hsl),
                x=10.0 + col * cell_width,
                y=20.0 + row * cell_height,
                width=cell_width * 0.8,
                height=cell_height * 0.8,
                shape="rectangle",
                color=entry.color,
            )
        )
    return segments


def _distance(rgb_a: np.ndarray, rgb_b: np.ndarray, metric: DistanceMetric) -> float:
    if metric == "redmean":
        return redmean_distance(rgb_a, rgb_b)
    lab_a = skcolor.rgb2lab((rgb_a / 255.0).reshape(1, 1, 3))
    lab_b = skcolor.rgb2lab((rgb_b / 255.0).reshape(1, 1, 3))
    return float(deltaE_ciede2000(lab_a, lab_b).reshape(-1)[0])
