from __future__ import annotations

import math
import numbers
import re
from collections.abc import Sequence

from .models import HSL, RGB, Color

_HEX_PATTERN = re.compile(r"#?(?:[0-9A-Fa-f]{3}|[0-9A-Fa-f]{6})")


class InvalidColor(ValueError):
    pass


def is_valid_hex(value: object) -> bool:
    if not isinstance(value, str):
        return False
    return _HEX_PATTERN.fullmatch(value) is not None


def is_valid_rgb(rgb: object) -> bool:
    return _channels_in_range(rgb, (255.0, 255.0, 255.0))


def is_valid_hsl(hsl: object) -> bool:
    return _channels_in_range(hsl, (360.0, 100.0, 100.0))


def normalize_hex(value: str) -> str:
    if not is_valid_hex(value):
        raise InvalidColor(f"Invalid hex color: {value!r}")

    digits = value[1:] if value.startswith("#") else value
    if len(digits) == 3:
        digits = "".join(char * 2 for char in digits)
    return f"#{digits.upper()}"


def hex_to_rgb(value: str) -> RGB:
    digits = normalize_hex(value)[1:]
    return (
        int(digits[0:2], 16),
        int(digits[2:4], 16),
        int(digits[4:6], 16),
    )


def rgb_to_hex(rgb: Sequence[float]) -> str:
    if not is_valid_rgb(rgb):
        raise InvalidColor(f"Invalid RGB values: {rgb!r}")

    r, g, b = (_round_half_up(channel) for channel in rgb)
    return f"#{r:02X}{g:02X}{b:02X}"


def rgb_to_hsl(rgb: Sequence[float]) -> HSL:
    if not is_valid_rgb(rgb):
        raise InvalidColor(f"Invalid RGB values: {rgb!r}")

    r, g, b = (float(channel) / 255.0 for channel in rgb)
    high = max(r, g, b)
    low = min(r, g, b)
    diff = high - low
    lightness = (high + low) / 2.0

    hue = 0.0
    saturation = 0.0
    if diff != 0:
        if lightness > 0.5:
            saturation = diff / (2.0 - high - low)
        else:
            saturation = diff / (high + low)

        if high == r:
            hue = ((g - b) / diff + (6.0 if g < b else 0.0)) / 6.0
        elif high == g:
            hue = ((b - r) / diff + 2.0) / 6.0
        else:
            hue = ((r - g) / diff + 4.0) / 6.0

    return (
        _round_half_up(hue * 360.0),
        _round_half_up(saturation * 100.0),
        _round_half_up(lightness * 100.0),
    )


def hsl_to_rgb(hsl: Sequence[float]) -> RGB:
    if not is_valid_hsl(hsl):
        raise InvalidColor(f"Invalid HSL values: {hsl!r}")

    h, s, l = (float(component) for component in hsl)
    hue = h / 360.0
    saturation = s / 100.0
    lightness = l / 100.0

    if saturation == 0:
        r = g = b = lightness
    else:
        if lightness < 0.5:
            q = lightness * (1.0 + saturation)
        else:
            q = lightness + saturation - lightness * saturation
        p = 2.0 * lightness - q
        r = _hue_to_channel(p, q, hue + 1.0 / 3.0)
        g = _hue_to_channel(p, q, hue)
        b = _hue_to_channel(p, q, hue - 1.0 / 3.0)

    return (
        _round_half_up(r * 255.0),
        _round_half_up(g * 255.0),
        _round_half_up(b * 255.0),
    )


def format_color_value(value: float, decimals: int = 0) -> str:
    return f"{value:.{decimals}f}"


def format_rgb_string(rgb: Sequence[float]) -> str:
    if not is_valid_rgb(rgb):
        raise InvalidColor(f"Invalid RGB values: {rgb!r}")
    r, g, b = (_round_half_up(channel) for channel in rgb)
    return f"rgb({r}, {g}, {b})"


def format_hsl_string(hsl: Sequence[float]) -> str:
    if not is_valid_hsl(hsl):
        raise InvalidColor(f"Invalid HSL values: {hsl!r}")
    h, s, l = (_round_half_up(component) for component in hsl)
    return f"hsl({h}, {s}%, {l}%)"


def color_from_rgb(rgb: Sequence[float], name: str | None = None) -> Color:
    hex_value = rgb_to_hex(rgb)
    channels = hex_to_rgb(hex_value)
    return Color(
        hex=hex_value,
        rgb=channels,
        hsl=rgb_to_hsl(channels),
        name=name,
    )


def color_from_hex(value: str, name: str | None = None) -> Color:
    return color_from_rgb(hex_to_rgb(value), name=name)


def _hue_to_channel(p: float, q: float, t: float) -> float:
    if t < 0:
        t += 1.0
    if t > 1:
        t -= 1.0
    if t < 1.0 / 6.0:
        return p + (q - p) * 6.0 * t
    if t < 1.0 / 2.0:
        return q
    if t < 2.0 / 3.0:
        return p + (q - p) * (2.0 / 3.0 - t) * 6.0
    return p


def _round_half_up(value: float) -> int:
    # builtin round() is half-to-even; channels are nonnegative here
    return int(math.floor(value + 0.5))


def _channels_in_range(values: object, limits: tuple[float, float, float]) -> bool:
    if isinstance(values, (str, bytes)) or not isinstance(values, Sequence):
        return False
    if len(values) != 3:
        return False
    for value, limit in zip(values, limits):
        if isinstance(value, bool) or not isinstance(value, numbers.Real):
            return False
        if math.isnan(value) or value < 0 or value > limit:
            return False
    return True
