"""
MOONPOINTER Ephemeris Service
Skyfield-based Moon Position and Rise/Set

High-precision alternative to the analytic engine, using the Skyfield library
with a JPL DE440 ephemeris (downloaded on first use, then cached in the data
directory).

Provides:
- Apparent topocentric Moon altitude/azimuth
- Moonrise/moonset within the observer's local day

Skyfield reports azimuth from north; it is rotated by 180 degrees so that
callers receive the same south-based convention as the analytic engine.
"""

import math
from datetime import datetime
from pathlib import Path
from typing import Optional

from skyfield import almanac
from skyfield.api import Loader, wgs84

from moonpointer.constants import DEFAULT_EPHEMERIS_FILE, TAU
from moonpointer.exceptions import EphemerisUnavailable
from moonpointer.logging_config import get_logger, log_timing
from moonpointer.models import MoonPosition, VisibilityWindow
from services.ephemeris.base import as_aware, local_day_bounds, validate_coordinate

logger = get_logger(__name__)

# Skyfield almanac event codes for risings_and_settings
_EVENT_SET = 0
_EVENT_RISE = 1


class SkyfieldEphemerisService:
    """
    Skyfield-backed Moon ephemeris.

    Data loading is lazy: the first computation calls initialize() unless
    the caller already did so at startup.
    """

    DATA_DIR = Path(__file__).parent / "data"

    def __init__(
        self,
        ephemeris_file: str = DEFAULT_EPHEMERIS_FILE,
        data_dir: Optional[str | Path] = None,
    ):
        """
        Initialize ephemeris service.

        Args:
            ephemeris_file: JPL kernel name (e.g. de440s.bsp, de421.bsp)
            data_dir: Download/cache directory (defaults to DATA_DIR)
        """
        self.ephemeris_file = ephemeris_file
        self.data_dir = Path(data_dir) if data_dir else self.DATA_DIR
        self._ts = None
        self._eph = None
        self._earth = None
        self._moon = None
        self._initialized = False

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def initialize(self):
        """Load timescale and ephemeris (can be slow on first run)."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        loader = Loader(str(self.data_dir))

        try:
            with log_timing(logger, f"load {self.ephemeris_file}"):
                self._ts = loader.timescale()
                self._eph = loader(self.ephemeris_file)
        except (OSError, ValueError) as e:
            raise EphemerisUnavailable(
                f"Cannot load ephemeris {self.ephemeris_file} from {self.data_dir}: {e}"
            ) from e

        self._earth = self._eph["earth"]
        self._moon = self._eph["moon"]
        self._initialized = True
        logger.info(f"Skyfield ephemeris ready ({self.ephemeris_file})")

    def _ensure_initialized(self):
        if not self._initialized:
            self.initialize()

    def _get_time(self, when: datetime):
        return self._ts.from_datetime(as_aware(when))

    def compute_position(
        self, when: datetime, latitude: float, longitude: float
    ) -> MoonPosition:
        """
        Apparent Moon position for an observer.

        Args:
            when: Instant of observation (naive = UTC)
            latitude: Observer latitude, degrees
            longitude: Observer longitude, degrees

        Returns:
            MoonPosition with azimuth in [0, 2*pi) measured from south

        Raises:
            InvalidCoordinate: If latitude/longitude are invalid
            EphemerisUnavailable: If the ephemeris cannot be loaded
        """
        latitude, longitude = validate_coordinate(latitude, longitude)
        self._ensure_initialized()
        t = self._get_time(when)

        observer = self._earth + wgs84.latlon(latitude, longitude)
        apparent = observer.at(t).observe(self._moon).apparent()
        alt, az, distance = apparent.altaz()

        azimuth = (az.radians - math.pi) % TAU
        if azimuth >= TAU:
            azimuth -= TAU

        return MoonPosition(
            azimuth=azimuth,
            altitude=alt.radians,
            distance_km=distance.km,
        )

    def compute_visibility(
        self, when: datetime, latitude: float, longitude: float
    ) -> VisibilityWindow:
        """
        Moonrise and moonset for the local day containing ``when``.

        Only the first rise and first set of the day are reported; the Moon
        rises at most once per day except on rare lunar-day boundaries.

        Raises:
            InvalidCoordinate: If latitude/longitude are invalid
            EphemerisUnavailable: If the ephemeris cannot be loaded
        """
        latitude, longitude = validate_coordinate(latitude, longitude)
        self._ensure_initialized()

        day_start, day_end = local_day_bounds(when)
        t0 = self._get_time(day_start)
        t1 = self._get_time(day_end)

        is_up = almanac.risings_and_settings(
            self._eph, self._moon, wgs84.latlon(latitude, longitude)
        )
        times, events = almanac.find_discrete(t0, t1, is_up)

        rise: Optional[datetime] = None
        set_: Optional[datetime] = None
        for t, event in zip(times, events):
            local = t.utc_datetime().astimezone(day_start.tzinfo)
            if event == _EVENT_RISE and rise is None:
                rise = local
            elif event == _EVENT_SET and set_ is None:
                set_ = local

        always_up = False
        if rise is None and set_ is None:
            always_up = bool(is_up(t0))

        return VisibilityWindow(rise=rise, set=set_, always_up=always_up)
