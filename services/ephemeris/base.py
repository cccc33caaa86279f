"""
Ephemeris engine interface and the input checks every engine shares.
"""

import math
from datetime import datetime, timedelta, timezone
from numbers import Real
from typing import Protocol, Tuple

from moonpointer.exceptions import InvalidCoordinate
from moonpointer.models import MoonPosition, VisibilityWindow


class EphemerisEngine(Protocol):
    """Anything that can place the Moon for an observer."""

    def compute_position(
        self, when: datetime, latitude: float, longitude: float
    ) -> MoonPosition:
        """Moon azimuth (0 = south) and altitude at ``when``."""
        ...

    def compute_visibility(
        self, when: datetime, latitude: float, longitude: float
    ) -> VisibilityWindow:
        """Moonrise/moonset within the local day containing ``when``."""
        ...


def validate_coordinate(latitude, longitude) -> Tuple[float, float]:
    """Check an observer position, returning it as floats.

    Raises:
        InvalidCoordinate: On non-numeric, non-finite or out-of-range input
    """
    for name, value in (("latitude", latitude), ("longitude", longitude)):
        if isinstance(value, bool) or not isinstance(value, Real):
            raise InvalidCoordinate(
                f"{name} must be a number, got {type(value).__name__}",
                latitude, longitude,
            )
        if not math.isfinite(value):
            raise InvalidCoordinate(f"{name} must be finite, got {value}", latitude, longitude)

    if not -90.0 <= latitude <= 90.0:
        raise InvalidCoordinate(f"latitude {latitude} outside [-90, 90]", latitude, longitude)
    if not -180.0 <= longitude <= 180.0:
        raise InvalidCoordinate(f"longitude {longitude} outside [-180, 180]", latitude, longitude)

    return float(latitude), float(longitude)


def as_aware(when: datetime) -> datetime:
    """Attach UTC to naive datetimes; aware ones pass through."""
    if when.tzinfo is None:
        return when.replace(tzinfo=timezone.utc)
    return when


def local_day_bounds(when: datetime) -> Tuple[datetime, datetime]:
    """Start and end of the calendar day containing ``when``, in its own timezone."""
    when = as_aware(when)
    start = when.replace(hour=0, minute=0, second=0, microsecond=0)
    return start, start + timedelta(days=1)
