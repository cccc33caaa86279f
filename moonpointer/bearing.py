"""
MOONPOINTER Bearing Reconciler

Turns the Moon's astronomical azimuth and the device heading into the signed
rotation that swings a forward-pointing arrow onto the Moon.

Conventions:
    azimuth   radians, 0 = south, increasing westward (ephemeris output)
    bearing   degrees, 0 = north, clockwise, [0, 360)
    heading   degrees, 0 = north, clockwise (compass sensor)
    rotation  degrees, (-180, 180], positive = clockwise, shortest path

A Moon at bearing 350 seen with heading 10 gives -20: the arrow turns left
across north rather than 340 degrees the long way round.
"""

import math
from numbers import Real

from moonpointer.constants import DEGREES_PER_TURN, HALF_TURN_DEG
from moonpointer.exceptions import InvalidAngle

__all__ = [
    "azimuth_to_bearing",
    "signed_delta",
    "compute_rotation",
    "normalize_degrees",
    "require_finite_angle",
]


def require_finite_angle(value, name: str = "angle") -> float:
    """Return ``value`` as a float, raising InvalidAngle unless it is a finite number."""
    if isinstance(value, bool) or not isinstance(value, Real):
        raise InvalidAngle(f"{name} must be a number, got {type(value).__name__}", value)
    value = float(value)
    if not math.isfinite(value):
        raise InvalidAngle(f"{name} must be finite, got {value}", value)
    return value


def normalize_degrees(angle: float) -> float:
    """Wrap an angle into [0, 360)."""
    wrapped = angle % DEGREES_PER_TURN
    # -1e-17 % 360 rounds to 360.0
    if wrapped >= DEGREES_PER_TURN:
        wrapped -= DEGREES_PER_TURN
    return wrapped


def azimuth_to_bearing(azimuth_rad: float) -> float:
    """Convert a south-based astronomical azimuth to a north-based compass bearing.

    Azimuth 0 (south) maps to 180 degrees, azimuth pi (north) to 0 degrees.

    Raises:
        InvalidAngle: If the azimuth is not a finite number
    """
    azimuth_rad = require_finite_angle(azimuth_rad, "azimuth")
    return normalize_degrees(math.degrees(azimuth_rad) + HALF_TURN_DEG)


def signed_delta(bearing_deg: float, heading_deg: float) -> float:
    """Shortest signed turn from ``heading_deg`` to ``bearing_deg``.

    The result lies in (-180, 180]; a half turn is always reported as +180.

    Raises:
        InvalidAngle: If either angle is not a finite number
    """
    bearing_deg = require_finite_angle(bearing_deg, "bearing")
    heading_deg = require_finite_angle(heading_deg, "heading")

    delta = normalize_degrees(bearing_deg - heading_deg + HALF_TURN_DEG) - HALF_TURN_DEG
    if delta <= -HALF_TURN_DEG:
        delta = HALF_TURN_DEG
    return delta


def compute_rotation(moon_azimuth_rad: float, heading_deg: float) -> float:
    """Signed rotation (degrees) that points the arrow at the Moon.

    Args:
        moon_azimuth_rad: Moon azimuth from the ephemeris (0 = south)
        heading_deg: Device heading (0 = north, clockwise)

    Returns:
        Rotation in (-180, 180]; positive turns the arrow clockwise.

    Raises:
        InvalidAngle: If either input is not a finite number
    """
    bearing = azimuth_to_bearing(moon_azimuth_rad)
    return signed_delta(bearing, heading_deg)
