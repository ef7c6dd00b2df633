import re
from collections.abc import Iterable

from harmonia.core.exceptions import InvalidColorError

HEX_FULL_PATTERN = re.compile(r"^#?[0-9a-fA-F]{6}$")
HEX_SHORT_PATTERN = re.compile(r"^#?[0-9a-fA-F]{3}$")

RGB = tuple[float, float, float]


def coerce_hex_color(candidate: object) -> str | None:
    """
    Coerce '#rgb' / '#rrggbb' (with or without '#') into '#RRGGBB'.

    Returns None for anything else.
    """
    if not isinstance(candidate, str):
        return None

    trimmed = candidate.strip()
    if not trimmed:
        return None

    digits = trimmed[1:] if trimmed.startswith("#") else trimmed
    if HEX_FULL_PATTERN.match(trimmed):
        return f"#{digits.upper()}"
    if HEX_SHORT_PATTERN.match(trimmed):
        return "#" + "".join(char * 2 for char in digits).upper()
    return None


def normalize_hex_color(value: object, fallback: object = None, default: str | None = None) -> str | None:
    """First valid color out of value, fallback, default."""
    return coerce_hex_color(value) or coerce_hex_color(fallback) or coerce_hex_color(default)


def parse_hex_color(value: object) -> str:
    """Strict variant of coerce_hex_color used at the HTTP boundary."""
    color = coerce_hex_color(value)
    if color is None:
        raise InvalidColorError(value)
    return color


def same_color(a: str | None, b: str | None) -> bool:
    """Compare two colors regardless of case or shorthand."""
    return coerce_hex_color(a) == coerce_hex_color(b)


def hex_to_rgb(color: str) -> RGB:
    """'#RRGGBB' -> (r, g, b) with channels in [0, 1]."""
    normalized = parse_hex_color(color)[1:]
    return (
        int(normalized[0:2], 16) / 255.0,
        int(normalized[2:4], 16) / 255.0,
        int(normalized[4:6], 16) / 255.0,
    )


def rgb_to_hex(rgb: RGB) -> str:
    """(r, g, b) in [0, 1] -> '#rrggbb'."""
    channels = (round(max(0.0, min(1.0, channel)) * 255) for channel in rgb)
    return "#" + "".join(f"{channel:02x}" for channel in channels)


def lerp_color(start: str, end: str, fraction: float) -> str:
    """Linear interpolation between two colors in RGB space."""
    r1, g1, b1 = hex_to_rgb(start)
    r2, g2, b2 = hex_to_rgb(end)
    return rgb_to_hex(
        (
            r1 + (r2 - r1) * fraction,
            g1 + (g2 - g1) * fraction,
            b1 + (b2 - b1) * fraction,
        )
    )


def blend_colors(weighted: Iterable[tuple[str, float]]) -> str | None:
    """
    Weighted average of (color, weight) pairs.

    Non-positive weights contribute nothing. Returns None when nothing contributes.
    """
    total = 0.0
    red = green = blue = 0.0
    for color, weight in weighted:
        if not weight or weight <= 0:
            continue
        r, g, b = hex_to_rgb(color)
        red += r * weight
        green += g * weight
        blue += b * weight
        total += weight

    if total == 0:
        return None
    return rgb_to_hex((red / total, green / total, blue / total))
