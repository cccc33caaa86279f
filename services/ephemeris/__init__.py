"""
MOONPOINTER Ephemeris Service

Moon position and rise/set engines:
- LunarEphemerisService: analytic series, no data files (default)
- SkyfieldEphemerisService: Skyfield with a JPL ephemeris
"""

from moonpointer.config import EphemerisConfig
from moonpointer.logging_config import get_logger

from .base import EphemerisEngine, as_aware, local_day_bounds, validate_coordinate
from .lunar_service import LunarEphemerisService
from .skyfield_service import SkyfieldEphemerisService

logger = get_logger(__name__)

__all__ = [
    "EphemerisEngine",
    "LunarEphemerisService",
    "SkyfieldEphemerisService",
    "as_aware",
    "create_ephemeris",
    "local_day_bounds",
    "validate_coordinate",
]


def create_ephemeris(config: EphemerisConfig) -> EphemerisEngine:
    """Build the engine selected by ``config.backend``."""
    logger.info(f"Using {config.backend} ephemeris backend")
    if config.backend == "skyfield":
        return SkyfieldEphemerisService(
            ephemeris_file=config.ephemeris_file,
            data_dir=config.data_dir,
        )
    return LunarEphemerisService(
        apply_refraction=config.apply_refraction,
        horizon_offset_deg=config.horizon_offset_deg,
    )
