"""
MOONPOINTER Orientation Service

Heading samples from the compass sensor or a manual override, behind one
HeadingSource interface.
"""

from typing import Optional

from moonpointer.config import OrientationConfig

from .heading_sources import (
    HeadingCallback,
    HeadingSelector,
    HeadingSource,
    ManualHeadingOverride,
    SensorHeadingSource,
)

__all__ = [
    "HeadingCallback",
    "HeadingSelector",
    "HeadingSource",
    "ManualHeadingOverride",
    "SensorHeadingSource",
    "create_heading_selector",
]


def create_heading_selector(
    config: OrientationConfig,
    sensor: Optional[SensorHeadingSource] = None,
) -> HeadingSelector:
    """Sensor plus, when allowed, a manual slider with the configured range."""
    sensor = sensor or SensorHeadingSource()
    override = None
    if config.allow_manual_override:
        override = ManualHeadingOverride(config.slider_min, config.slider_max)
    return HeadingSelector(sensor, override)
