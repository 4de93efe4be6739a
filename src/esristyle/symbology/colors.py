"""
Color and scale conversions shared by the symbol reader and the runtime.

ESRI colors are ``[r, g, b, a]`` arrays where every channel, alpha included,
is on a 0-255 scale. Map scales are converted to resolutions (map units per
pixel) assuming the OGC standard rendering pixel of 0.28 mm.
"""

import math
from typing import Optional, Sequence, Union

from loguru import logger

INCHES_PER_METER = 39.37
DOTS_PER_INCH = 25.4 / 0.28

# Meters per projection unit, same table the common web mapping libraries use
METERS_PER_UNIT = {
    "m": 1.0,
    "ft": 0.3048,
    "us-ft": 1200 / 3937,
    "degrees": (2 * math.pi * 6370997) / 360,
    "radians": 6370997 / (2 * math.pi),
}

Number = Union[int, float]


def format_number(value: Number) -> str:
    """Render a number without a trailing ``.0`` for integral values."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, float):
        return f"{value:g}"
    return str(value)


def esri_color_to_rgba(color: Optional[Sequence[Number]]) -> Optional[tuple]:
    """
    Normalize an ESRI color array to an ``(r, g, b, alpha)`` tuple.

    Args:
        color: ``[r, g, b]`` or ``[r, g, b, a]`` with alpha on a 0-255 scale

    Returns:
        Tuple with alpha clamped to [0, 255] and normalized to [0, 1],
        or None if no color was given
    """
    if not color:
        return None

    if len(color) < 3:
        logger.debug(f"Ignoring malformed color {color!r}")
        return None

    r, g, b = (int(channel) for channel in color[:3])
    alpha = color[3] if len(color) > 3 and color[3] is not None else 255
    alpha = min(max(alpha, 0), 255) / 255

    return (r, g, b, alpha)


def color_to_string(color: Optional[Sequence[Number]]) -> Optional[str]:
    """
    Convert an ESRI color array to a CSS ``rgba()`` string.

    Examples:
        [255, 0, 0, 255] -> "rgba(255,0,0,1)"
        [0, 0, 0] -> "rgba(0,0,0,1)"
    """
    rgba = esri_color_to_rgba(color)
    if rgba is None:
        return None

    return "rgba({})".format(",".join(format_number(channel) for channel in rgba))


def meters_per_unit_for(unit: Optional[str]) -> Optional[float]:
    """Look up the meters-per-unit factor of a projection unit name."""
    if unit is None:
        return None

    factor = METERS_PER_UNIT.get(unit.lower())
    if factor is None:
        logger.warning(f"Unknown projection unit '{unit}', scales stay unconverted")
    return factor


def scale_to_resolution(scale: Number, meters_per_unit: Optional[float] = None) -> float:
    """
    Convert a map scale denominator to a resolution.

    Args:
        scale: Scale denominator (e.g. 24000 for 1:24000)
        meters_per_unit: Meters per unit of the target projection; the scale is
            converted as if the projection were metric when unknown

    Returns:
        Resolution in projection units per pixel
    """
    mpu = meters_per_unit or 1.0
    return scale / (mpu * INCHES_PER_METER * DOTS_PER_INCH)
