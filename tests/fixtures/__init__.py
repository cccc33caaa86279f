"""
MOONPOINTER Test Fixtures Package.

Fakes for the collaborators around the bearing pipeline, so tests run
without sensors, positioning or ephemeris downloads.

Available fixtures:
- MockClock: controllable "now" (starts at J2000.0)
- MockEphemeris: scripted engine that records its calls
- MockLocationProvider: emits fixes and classified failures

Usage:
    from tests.fixtures import MockClock, MockEphemeris

    controller = RecomputationController(MockEphemeris(), clock=MockClock())
"""

from tests.fixtures.mock_clock import J2000, MockClock
from tests.fixtures.mock_ephemeris import EngineCall, MockEphemeris
from tests.fixtures.mock_location import MockLocationProvider

__all__ = [
    "J2000",
    "MockClock",
    "EngineCall",
    "MockEphemeris",
    "MockLocationProvider",
]
