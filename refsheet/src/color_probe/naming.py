from __future__ import annotations

from collections.abc import Sequence

_HUE_BANDS: tuple[tuple[float, str], ...] = (
    (15, "Red"),
    (45, "Orange"),
    (75, "Yellow"),
    (150, "Green"),
    (210, "Cyan"),
    (270, "Blue"),
    (330, "Purple"),
)


def generate_color_name(hsl: Sequence[float]) -> str:
    hue, saturation, lightness = hsl

    if saturation < 20:
        if lightness < 30:
            return "Dark Gray"
        if lightness > 70:
            return "Light Gray"
        return "Gray"

    base_name = _hue_name(hue)
    if lightness < 20:
        return f"Dark {base_name}"
    if lightness > 80:
        return f"Light {base_name}"
    if saturation < 40:
        return f"Muted {base_name}"
    return base_name


def _hue_name(hue: float) -> str:
    if hue < 0:
        return "Red"
    for upper, name in _HUE_BANDS:
        if hue < upper:
            return name
    # 330-360 wraps back to red
    return "Red"
