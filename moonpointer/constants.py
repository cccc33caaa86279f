"""
MOONPOINTER Shared Constants

Single source of truth for the numbers used by the ephemeris, the bearing
reconciler and the configuration layer.

Constants are organized by category:
    - Version and identity
    - Time scales
    - Lunar theory
    - Angles
    - Orientation input
    - Files and configuration
"""

import math
from typing import Final

# =============================================================================
# Version and Identity
# =============================================================================

MOONPOINTER_VERSION: Final[str] = "0.1.0"

# =============================================================================
# Time Scales
# =============================================================================

SECONDS_PER_DAY: Final[float] = 86400.0

# Julian day of the Unix epoch (1970-01-01T12:00Z) and of J2000.0
JULIAN_DAY_1970: Final[float] = 2440588.0
JULIAN_DAY_2000: Final[float] = 2451545.0

# =============================================================================
# Lunar Theory
# =============================================================================

RAD: Final[float] = math.pi / 180.0

# Mean obliquity of the ecliptic (degrees, J2000)
OBLIQUITY_DEG: Final[float] = 23.4397

# Mean lunar elements at J2000 and their daily rates (degrees, degrees/day)
MOON_MEAN_LONGITUDE_DEG: Final[float] = 218.316
MOON_MEAN_LONGITUDE_RATE: Final[float] = 13.176396
MOON_MEAN_ANOMALY_DEG: Final[float] = 134.963
MOON_MEAN_ANOMALY_RATE: Final[float] = 13.064993
MOON_MEAN_DISTANCE_ARG_DEG: Final[float] = 93.272
MOON_MEAN_DISTANCE_ARG_RATE: Final[float] = 13.229350

# Principal periodic terms (degrees / km)
MOON_EQUATION_OF_CENTER_DEG: Final[float] = 6.289
MOON_LATITUDE_AMPLITUDE_DEG: Final[float] = 5.128
MOON_MEAN_DISTANCE_KM: Final[float] = 385001.0
MOON_DISTANCE_AMPLITUDE_KM: Final[float] = 20905.0

# Greenwich sidereal angle at J2000 and its daily rate (degrees, degrees/day)
SIDEREAL_ANGLE_J2000_DEG: Final[float] = 280.16
SIDEREAL_RATE_DEG_PER_DAY: Final[float] = 360.9856235

# Altitude of the Moon's centre at rise/set, relative to the geometric horizon
MOON_HORIZON_OFFSET_DEG: Final[float] = 0.133

# =============================================================================
# Angles
# =============================================================================

DEGREES_PER_TURN: Final[float] = 360.0
HALF_TURN_DEG: Final[float] = 180.0
TAU: Final[float] = 2.0 * math.pi

# =============================================================================
# Orientation Input
# =============================================================================

# Manual heading slider range (degrees)
SLIDER_MIN_DEG: Final[float] = 0.0
SLIDER_MAX_DEG: Final[float] = 359.0

# =============================================================================
# Files and Configuration
# =============================================================================

DEFAULT_EPHEMERIS_FILE: Final[str] = "de440s.bsp"
CONFIG_ENV_PREFIX: Final[str] = "MOONPOINTER_"
