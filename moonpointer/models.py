"""Data model shared by the ephemeris, the reconciler and the controller."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class GeoCoordinate:
    """A position fix from the location provider. Replaced wholesale on each fix."""

    latitude: float  # Decimal degrees, positive = North
    longitude: float  # Decimal degrees, positive = East


@dataclass(frozen=True)
class MoonPosition:
    """Topocentric Moon position.

    Azimuth follows the astronomical convention: 0 = south, increasing
    westward, normalized into [0, 2*pi). Both angles are radians.
    """

    azimuth: float
    altitude: float
    distance_km: Optional[float] = None

    @property
    def is_above_horizon(self) -> bool:
        return self.altitude > 0


@dataclass(frozen=True)
class VisibilityWindow:
    """Moonrise and moonset within one local day.

    ``rise is None``: already up when the day starts.
    ``set is None``: still up when the day ends.
    Both ``None``: no horizon crossing that day; ``always_up`` tells
    whether the Moon stayed above the horizon throughout.
    """

    rise: Optional[datetime] = None
    set: Optional[datetime] = None
    always_up: bool = False
