from __future__ import annotations

import json
import logging
import numbers
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from .conversion import color_from_rgb
from .models import Color, ColorSegment, RefSheetConfig, ValidationResult

logger = logging.getLogger(__name__)

_HEX_PATTERN = re.compile(r"#(?:[A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})")
PANEL_SIDES = ("left", "right", "auto")
SHAPES = ("rectangle", "circle")


class ConfigValidationError(ValueError):
    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


def load_refsheet_config(source: Mapping[str, Any] | str | Path) -> RefSheetConfig:
    payload = _read_payload(source)
    if not isinstance(payload, Mapping):
        raise ConfigValidationError("Configuration must be a valid object")

    result = validate_refsheet_config(payload)
    if not result.is_valid:
        raise ConfigValidationError(
            "Configuration validation failed:\n" + "\n".join(result.errors)
        )
    for warning in result.warnings:
        logger.warning("configuration warning: %s", warning)

    return _build_config(payload)


def validate_config_json(text: str) -> ValidationResult:
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        return ValidationResult(False, [f"Invalid JSON: {exc.msg}"], [])
    return validate_refsheet_config(payload)


def validate_refsheet_config(payload: object) -> ValidationResult:
    errors: list[str] = []
    warnings: list[str] = []

    if not isinstance(payload, Mapping) or not payload:
        return ValidationResult(False, ["Configuration is required"], warnings)

    errors.extend(_image_errors(payload.get("image")))

    segments = payload.get("colorSegments")
    if not isinstance(segments, list):
        errors.append("colorSegments must be an array")
    else:
        if not segments:
            warnings.append(
                "No color segments defined - the reference sheet will not be interactive"
            )
        for index, segment in enumerate(segments):
            errors.extend(_segment_errors(segment, f"Segment {index + 1}"))

        ids = [s.get("id") for s in segments if isinstance(s, Mapping)]
        if len(ids) != len(set(map(str, ids))):
            errors.append("All color segment IDs must be unique")

        overlaps = _overlapping_segments(segments)
        if overlaps:
            warnings.append(f"Overlapping segments detected: {', '.join(overlaps)}")

    layout = payload.get("layout")
    if not isinstance(layout, Mapping):
        errors.append("Layout configuration is required")
    else:
        if layout.get("preferredPanelSide") not in PANEL_SIDES:
            errors.append(f"preferredPanelSide must be one of: {', '.join(PANEL_SIDES)}")
        if not isinstance(layout.get("showSegmentHints"), bool):
            errors.append("showSegmentHints must be a boolean value")

    return ValidationResult(not errors, errors, warnings)


def _read_payload(source: Mapping[str, Any] | str | Path) -> object:
    if isinstance(source, Mapping):
        return source

    path = Path(source)
    if not path.exists():
        raise ConfigValidationError(f"configuration file does not exist: {path}")
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigValidationError(f"Invalid JSON in {path}: {exc.msg}") from exc


def _image_errors(image: object) -> list[str]:
    if not isinstance(image, Mapping):
        return ["Image configuration is required"]

    errors: list[str] = []
    if not _is_text(image.get("src")):
        errors.append("Image source (src) must be a non-empty string")
    if not _is_text(image.get("alt")):
        errors.append("Image alt text must be a non-empty string")

    dimensions = image.get("originalDimensions")
    if not isinstance(dimensions, Mapping):
        errors.append("Image originalDimensions are required")
    else:
        if not _number_in(dimensions.get("width"), 0, None, low_inclusive=False):
            errors.append("Image width must be a positive number")
        if not _number_in(dimensions.get("height"), 0, None, low_inclusive=False):
            errors.append("Image height must be a positive number")
    return errors


def _segment_errors(segment: object, prefix: str) -> list[str]:
    if not isinstance(segment, Mapping):
        return [f"{prefix}: Segment must be an object"]

    errors: list[str] = []
    if not _is_text(segment.get("id")):
        errors.append(f"{prefix}: ID must be a non-empty string")
    if not _is_text(segment.get("name")):
        errors.append(f"{prefix}: Name must be a non-empty string")

    coordinates = segment.get("coordinates")
    if not isinstance(coordinates, Mapping):
        errors.append(f"{prefix}: Coordinates are required")
    else:
        for axis in ("x", "y"):
            if not _number_in(coordinates.get(axis), 0, 100):
                errors.append(
                    f"{prefix}: {axis.upper()} coordinate must be a number between 0 and 100"
                )

    dimensions = segment.get("dimensions")
    if not isinstance(dimensions, Mapping):
        errors.append(f"{prefix}: Dimensions are required")
    else:
        for key in ("width", "height"):
            if not _number_in(dimensions.get(key), 0, 100, low_inclusive=False):
                errors.append(
                    f"{prefix}: {key.capitalize()} must be a positive number between 0 and 100"
                )

    if segment.get("shape") not in SHAPES:
        errors.append(f"{prefix}: Shape must be either 'rectangle' or 'circle'")

    if _has_box(segment) and not _within_image(segment):
        errors.append(
            f"{prefix}: Segment extends beyond image boundaries "
            f"(x: {coordinates['x']}%, y: {coordinates['y']}%, "
            f"width: {dimensions['width']}%, height: {dimensions['height']}%)"
        )

    color_info = segment.get("colorInfo")
    if not isinstance(color_info, Mapping):
        errors.append(f"{prefix}: Color information is required")
    else:
        errors.extend(_color_info_errors(color_info, prefix))
    return errors


def _color_info_errors(color_info: Mapping[str, Any], prefix: str) -> list[str]:
    errors: list[str] = []

    hex_value = color_info.get("hex")
    if not _is_text(hex_value):
        errors.append(f"{prefix}: Hex color must be a non-empty string")
    elif not _HEX_PATTERN.fullmatch(hex_value):
        errors.append(
            f"{prefix}: Hex color must be in format #RRGGBB or #RGB (got: {hex_value})"
        )

    rgb = color_info.get("rgb")
    if not isinstance(rgb, Mapping):
        errors.append(f"{prefix}: RGB color values are required")
    else:
        for key, label in (("r", "red"), ("g", "green"), ("b", "blue")):
            if not _number_in(rgb.get(key), 0, 255):
                errors.append(f"{prefix}: RGB {label} value must be between 0 and 255")

    hsl = color_info.get("hsl")
    if not isinstance(hsl, Mapping):
        errors.append(f"{prefix}: HSL color values are required")
    else:
        for key, label, limit in (
            ("h", "hue", 360),
            ("s", "saturation", 100),
            ("l", "lightness", 100),
        ):
            if not _number_in(hsl.get(key), 0, limit):
                errors.append(f"{prefix}: HSL {label} must be between 0 and {limit}")

    name = color_info.get("name")
    if name is not None and not isinstance(name, str):
        errors.append(f"{prefix}: Color name must be a string")
    return errors


def _overlapping_segments(segments: list[object]) -> list[str]:
    boxed = [s for s in segments if isinstance(s, Mapping) and _has_box(s)]
    overlaps: list[str] = []
    for i, first in enumerate(boxed):
        for second in boxed[i + 1 :]:
            if _boxes_overlap(first, second):
                overlaps.append(f'"{first.get("name")}" and "{second.get("name")}"')
    return overlaps


def _boxes_overlap(first: Mapping[str, Any], second: Mapping[str, Any]) -> bool:
    a, ad = first["coordinates"], first["dimensions"]
    b, bd = second["coordinates"], second["dimensions"]
    return not (
        a["x"] + ad["width"] < b["x"]
        or b["x"] + bd["width"] < a["x"]
        or a["y"] + ad["height"] < b["y"]
        or b["y"] + bd["height"] < a["y"]
    )


def _has_box(segment: Mapping[str, Any]) -> bool:
    coordinates = segment.get("coordinates")
    dimensions = segment.get("dimensions")
    return (
        isinstance(coordinates, Mapping)
        and isinstance(dimensions, Mapping)
        and all(_is_number(coordinates.get(axis)) for axis in ("x", "y"))
        and all(_is_number(dimensions.get(key)) for key in ("width", "height"))
    )


def _within_image(segment: Mapping[str, Any]) -> bool:
    coordinates = segment["coordinates"]
    dimensions = segment["dimensions"]
    return (
        coordinates["x"] + dimensions["width"] <= 100
        and coordinates["y"] + dimensions["height"] <= 100
    )


def _build_config(payload: Mapping[str, Any]) -> RefSheetConfig:
    image = payload["image"]
    layout = payload["layout"]
    return RefSheetConfig(
        image_src=image["src"],
        image_alt=image["alt"],
        image_width=int(image["originalDimensions"]["width"]),
        image_height=int(image["originalDimensions"]["height"]),
        segments=[_build_segment(raw) for raw in payload["colorSegments"]],
        preferred_panel_side=layout["preferredPanelSide"],
        show_segment_hints=layout["showSegmentHints"],
    )


def _build_segment(raw: Mapping[str, Any]) -> ColorSegment:
    info = raw["colorInfo"]
    rgb = info["rgb"]
    # stored hex/hsl are derived again from rgb so all three agree
    color: Color = color_from_rgb((rgb["r"], rgb["g"], rgb["b"]), name=info.get("name"))
    return ColorSegment(
        id=raw["id"],
        name=raw["name"],
        x=float(raw["coordinates"]["x"]),
        y=float(raw["coordinates"]["y"]),
        width=float(raw["dimensions"]["width"]),
        height=float(raw["dimensions"]["height"]),
        shape=raw["shape"],
        color=color,
    )


def _is_text(value: object) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _is_number(value: object) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def _number_in(
    value: object,
    low: float,
    high: float | None,
    low_inclusive: bool = True,
) -> bool:
    if not _is_number(value):
        return False
    if value < low or (value == low and not low_inclusive):
        return False
    return high is None or value <= high
