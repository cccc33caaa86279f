"""
MOONPOINTER Analytic Lunar Ephemeris

Low-precision lunar theory, good to a fraction of a degree, which is far
below what a handheld compass resolves. No data files, no network, pure
arithmetic, so it is the default engine.

Pipeline:
- Mean lunar elements (longitude L, anomaly M, argument of latitude F)
- Principal periodic terms -> geocentric ecliptic longitude/latitude
- Ecliptic -> equatorial (right ascension, declination) via the obliquity
- Equatorial -> horizontal via local sidereal time and observer latitude
- Optional atmospheric refraction on the altitude

Rise/set times come from hourly altitude samples over the local day with a
quadratic fitted through each three-sample window.

Reference: J. Meeus, Astronomical Algorithms (2nd ed.), ch. 12, 13, 15, 47.
"""

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from moonpointer.constants import (
    JULIAN_DAY_1970,
    JULIAN_DAY_2000,
    MOON_DISTANCE_AMPLITUDE_KM,
    MOON_EQUATION_OF_CENTER_DEG,
    MOON_HORIZON_OFFSET_DEG,
    MOON_LATITUDE_AMPLITUDE_DEG,
    MOON_MEAN_ANOMALY_DEG,
    MOON_MEAN_ANOMALY_RATE,
    MOON_MEAN_DISTANCE_ARG_DEG,
    MOON_MEAN_DISTANCE_ARG_RATE,
    MOON_MEAN_DISTANCE_KM,
    MOON_MEAN_LONGITUDE_DEG,
    MOON_MEAN_LONGITUDE_RATE,
    OBLIQUITY_DEG,
    RAD,
    SECONDS_PER_DAY,
    SIDEREAL_ANGLE_J2000_DEG,
    SIDEREAL_RATE_DEG_PER_DAY,
    TAU,
)
from moonpointer.logging_config import get_logger
from moonpointer.models import MoonPosition, VisibilityWindow
from services.ephemeris.base import as_aware, local_day_bounds, validate_coordinate

logger = get_logger(__name__)

_OBLIQUITY = OBLIQUITY_DEG * RAD
_SECONDS_PER_HOUR = 3600.0


@dataclass(frozen=True)
class EquatorialPosition:
    """Geocentric equatorial coordinates (radians) and distance."""
    right_ascension: float
    declination: float
    distance_km: float


# =============================================================================
# Time and coordinate helpers
# =============================================================================


def days_since_j2000(when: datetime) -> float:
    """Days (fractional) from J2000.0 to ``when``. Naive datetimes are UTC."""
    unix_days = as_aware(when).timestamp() / SECONDS_PER_DAY
    return unix_days - 0.5 + JULIAN_DAY_1970 - JULIAN_DAY_2000


def right_ascension(lon: float, lat: float) -> float:
    return math.atan2(
        math.sin(lon) * math.cos(_OBLIQUITY) - math.tan(lat) * math.sin(_OBLIQUITY),
        math.cos(lon),
    )


def declination(lon: float, lat: float) -> float:
    return math.asin(
        math.sin(lat) * math.cos(_OBLIQUITY)
        + math.cos(lat) * math.sin(_OBLIQUITY) * math.sin(lon)
    )


def sidereal_time(days: float, west_longitude: float) -> float:
    """Local sidereal angle (radians); ``west_longitude`` is positive west."""
    return RAD * (SIDEREAL_ANGLE_J2000_DEG + SIDEREAL_RATE_DEG_PER_DAY * days) - west_longitude


def horizontal_azimuth(hour_angle: float, phi: float, dec: float) -> float:
    """Azimuth measured from south, westward positive, in (-pi, pi]."""
    return math.atan2(
        math.sin(hour_angle),
        math.cos(hour_angle) * math.sin(phi) - math.tan(dec) * math.cos(phi),
    )


def horizontal_altitude(hour_angle: float, phi: float, dec: float) -> float:
    return math.asin(
        math.sin(phi) * math.sin(dec)
        + math.cos(phi) * math.cos(dec) * math.cos(hour_angle)
    )


def refraction(altitude: float) -> float:
    """Atmospheric refraction (radians) for a true altitude (radians).

    Saemundsson's formula; altitudes below the horizon use the horizon value.
    """
    altitude = max(altitude, 0.0)
    return 0.0002967 / math.tan(altitude + 0.00312536 / (altitude + 0.08901179))


def moon_coordinates(days: float) -> EquatorialPosition:
    """Geocentric equatorial position of the Moon ``days`` after J2000."""
    mean_longitude = RAD * (MOON_MEAN_LONGITUDE_DEG + MOON_MEAN_LONGITUDE_RATE * days)
    mean_anomaly = RAD * (MOON_MEAN_ANOMALY_DEG + MOON_MEAN_ANOMALY_RATE * days)
    distance_arg = RAD * (MOON_MEAN_DISTANCE_ARG_DEG + MOON_MEAN_DISTANCE_ARG_RATE * days)

    ecliptic_lon = mean_longitude + RAD * MOON_EQUATION_OF_CENTER_DEG * math.sin(mean_anomaly)
    ecliptic_lat = RAD * MOON_LATITUDE_AMPLITUDE_DEG * math.sin(distance_arg)
    distance_km = MOON_MEAN_DISTANCE_KM - MOON_DISTANCE_AMPLITUDE_KM * math.cos(mean_anomaly)

    return EquatorialPosition(
        right_ascension=right_ascension(ecliptic_lon, ecliptic_lat),
        declination=declination(ecliptic_lon, ecliptic_lat),
        distance_km=distance_km,
    )


# =============================================================================
# Engine
# =============================================================================


class LunarEphemerisService:
    """
    Analytic Moon ephemeris.

    Stateless apart from its two tuning knobs; every call recomputes from
    scratch.
    """

    def __init__(
        self,
        apply_refraction: bool = True,
        horizon_offset_deg: float = MOON_HORIZON_OFFSET_DEG,
    ):
        """
        Initialize the engine.

        Args:
            apply_refraction: Add atmospheric refraction to altitudes
            horizon_offset_deg: Altitude of the Moon's centre at rise/set
        """
        self.apply_refraction = apply_refraction
        self.horizon_offset = horizon_offset_deg * RAD

    def compute_position(
        self, when: datetime, latitude: float, longitude: float
    ) -> MoonPosition:
        """
        Topocentric Moon position.

        Args:
            when: Instant of observation (naive = UTC)
            latitude: Observer latitude, degrees
            longitude: Observer longitude, degrees (negative = West)

        Returns:
            MoonPosition with azimuth in [0, 2*pi) measured from south

        Raises:
            InvalidCoordinate: If latitude/longitude are invalid
        """
        latitude, longitude = validate_coordinate(latitude, longitude)
        return self._position(days_since_j2000(when), latitude, longitude)

    def compute_visibility(
        self, when: datetime, latitude: float, longitude: float
    ) -> VisibilityWindow:
        """
        Moonrise and moonset for the local day containing ``when``.

        Args:
            when: Any instant of the day; its timezone defines the day
            latitude: Observer latitude, degrees
            longitude: Observer longitude, degrees

        Returns:
            VisibilityWindow; an edge is None when it does not occur that day

        Raises:
            InvalidCoordinate: If latitude/longitude are invalid
        """
        latitude, longitude = validate_coordinate(latitude, longitude)
        day_start, day_end = local_day_bounds(when)
        t0 = day_start.timestamp()
        # 23 or 25 hours on daylight-saving changeover days
        day_hours = (day_end.timestamp() - t0) / _SECONDS_PER_HOUR

        def height(hours: float) -> float:
            instant = datetime.fromtimestamp(t0 + hours * _SECONDS_PER_HOUR, tz=timezone.utc)
            position = self._position(days_since_j2000(instant), latitude, longitude)
            return position.altitude - self.horizon_offset

        rise: Optional[float] = None
        set_: Optional[float] = None
        vertex_height = 0.0

        h0 = height(0)
        for hour in range(1, math.ceil(day_hours) + 1, 2):
            h1 = height(hour)
            h2 = height(hour + 1)

            # Parabola through (-1, h0), (0, h1), (1, h2)
            a = (h0 + h2) / 2 - h1
            b = (h2 - h0) / 2
            roots = 0
            x1 = x2 = 0.0

            if a == 0:
                vertex_height = h1
                if b != 0:
                    x1 = -h1 / b
                    if abs(x1) <= 1:
                        roots = 1
            else:
                xe = -b / (2 * a)
                vertex_height = (a * xe + b) * xe + h1
                discriminant = b * b - 4 * a * h1
                if discriminant >= 0:
                    dx = math.sqrt(discriminant) / (abs(a) * 2)
                    x1 = xe - dx
                    x2 = xe + dx
                    if abs(x1) <= 1:
                        roots += 1
                    if abs(x2) <= 1:
                        roots += 1
                    if x1 < -1:
                        x1 = x2

            # (offset in hours, is_rise)
            crossings = []
            if roots == 1:
                crossings.append((hour + x1, h0 < 0))
            elif roots == 2:
                crossings.append((hour + x1, vertex_height >= 0))
                crossings.append((hour + x2, vertex_height < 0))

            for offset, is_rise in crossings:
                # The last window can reach past the end of a short day
                if offset >= day_hours:
                    continue
                if is_rise:
                    rise = offset
                else:
                    set_ = offset

            if rise is not None and set_ is not None:
                break
            h0 = h2

        def to_datetime(hours: Optional[float]) -> Optional[datetime]:
            if hours is None:
                return None
            return datetime.fromtimestamp(t0 + hours * _SECONDS_PER_HOUR, tz=day_start.tzinfo)

        always_up = rise is None and set_ is None and vertex_height > 0
        window = VisibilityWindow(rise=to_datetime(rise), set=to_datetime(set_), always_up=always_up)

        logger.debug(
            f"Visibility for {day_start.date()} at ({latitude:.3f}, {longitude:.3f}): "
            f"rise={window.rise} set={window.set} always_up={window.always_up}"
        )
        return window

    def _position(self, days: float, latitude: float, longitude: float) -> MoonPosition:
        west_longitude = RAD * -longitude
        phi = RAD * latitude

        moon = moon_coordinates(days)
        hour_angle = sidereal_time(days, west_longitude) - moon.right_ascension

        altitude = horizontal_altitude(hour_angle, phi, moon.declination)
        if self.apply_refraction:
            altitude += refraction(altitude)
        altitude = min(max(altitude, -math.pi / 2), math.pi / 2)

        azimuth = horizontal_azimuth(hour_angle, phi, moon.declination) % TAU
        if azimuth >= TAU:
            azimuth -= TAU

        return MoonPosition(azimuth=azimuth, altitude=altitude, distance_km=moon.distance_km)
