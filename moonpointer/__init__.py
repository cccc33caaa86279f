"""
MOONPOINTER - points an on-screen arrow at the Moon.

Core pipeline:
- Ephemeris engines (services.ephemeris): Moon azimuth/altitude and rise/set
- Bearing reconciler (moonpointer.bearing): azimuth + heading -> rotation
- Visibility narrator (moonpointer.visibility): rise/set -> message
- Recomputation controller (moonpointer.controller): when to recompute
"""

from moonpointer.constants import MOONPOINTER_VERSION

__version__ = MOONPOINTER_VERSION
