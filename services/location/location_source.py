"""
MOONPOINTER Location Results

Boundary types for the positioning subsystem. A reading is either a
GeoCoordinate or a LocationFailure; the controller treats every failure as
"no coordinate" and leaves the classification to the presentation layer.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from moonpointer.models import GeoCoordinate


class LocationErrorKind(Enum):
    """Why a position fix failed."""
    PERMISSION_DENIED = "permission_denied"
    POSITION_UNAVAILABLE = "position_unavailable"
    TIMEOUT = "timeout"
    OTHER = "other"


# W3C Geolocation API GeolocationPositionError codes
_ERROR_CODES = {
    1: LocationErrorKind.PERMISSION_DENIED,
    2: LocationErrorKind.POSITION_UNAVAILABLE,
    3: LocationErrorKind.TIMEOUT,
}


@dataclass(frozen=True)
class LocationFailure:
    """A failed position fix."""
    kind: LocationErrorKind
    message: str = ""

    @classmethod
    def from_code(cls, code: int, message: str = "") -> "LocationFailure":
        """Map a geolocation error code (1/2/3) onto a failure; anything else is OTHER."""
        return cls(kind=_ERROR_CODES.get(code, LocationErrorKind.OTHER), message=message)

    def to_user_message(self) -> str:
        """Short text for the presentation layer."""
        if self.kind == LocationErrorKind.PERMISSION_DENIED:
            return "Enable location access to continue"
        if self.kind == LocationErrorKind.POSITION_UNAVAILABLE:
            return "Position unavailable"
        if self.kind == LocationErrorKind.TIMEOUT:
            return "Timed out waiting for a position fix"
        return self.message or "Location error"


LocationReading = Union[GeoCoordinate, LocationFailure, None]


def coordinate_from_reading(reading: LocationReading) -> Optional[GeoCoordinate]:
    """The coordinate carried by a reading, or None for failures and absence."""
    if isinstance(reading, GeoCoordinate):
        return reading
    return None
