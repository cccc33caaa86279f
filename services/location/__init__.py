"""
MOONPOINTER Location Service

Result and error classification for position fixes.
"""

from .location_source import (
    LocationErrorKind,
    LocationFailure,
    LocationReading,
    coordinate_from_reading,
)

__all__ = [
    "LocationErrorKind",
    "LocationFailure",
    "LocationReading",
    "coordinate_from_reading",
]
