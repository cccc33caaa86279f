"""
MOONPOINTER Exceptions

Error taxonomy for the bearing pipeline. Contract violations from upstream
collaborators fail fast with one of these; a missing input is never an error.
"""

__all__ = [
    "MoonPointerError",
    "ConfigurationError",
    "InvalidCoordinate",
    "InvalidAngle",
    "EphemerisUnavailable",
]


class MoonPointerError(Exception):
    """Base class for all MOONPOINTER errors."""


class ConfigurationError(MoonPointerError):
    """Configuration file missing, unreadable or invalid."""


class InvalidCoordinate(MoonPointerError, ValueError):
    """Latitude/longitude out of range or not a finite number."""

    def __init__(self, message: str, latitude=None, longitude=None):
        super().__init__(message)
        self.latitude = latitude
        self.longitude = longitude


class InvalidAngle(MoonPointerError, ValueError):
    """Heading or azimuth is not a finite number."""

    def __init__(self, message: str, value=None):
        super().__init__(message)
        self.value = value


class EphemerisUnavailable(MoonPointerError):
    """Ephemeris data could not be loaded."""
