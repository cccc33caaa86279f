"""
MOONPOINTER Heading Sources

A single capability, "something that supplies heading samples", with three
implementations:

- SensorHeadingSource: continuous compass readings from the orientation
  provider (permission prompts happen outside, before readings arrive)
- ManualHeadingOverride: a user-controlled slider for devices without a
  compass
- HeadingSelector: forwards the sensor until the override is engaged, then
  the override only, until released

Consumers never need to know which one they are attached to.
"""

from typing import Callable, List, Optional, Protocol

from moonpointer.bearing import require_finite_angle
from moonpointer.constants import SLIDER_MAX_DEG, SLIDER_MIN_DEG
from moonpointer.exceptions import InvalidAngle
from moonpointer.logging_config import get_logger

logger = get_logger(__name__)

HeadingCallback = Callable[[float], None]


class HeadingSource(Protocol):
    """Supplies heading samples (degrees clockwise from north)."""

    def subscribe(self, callback: HeadingCallback) -> None:
        ...

    def unsubscribe(self, callback: HeadingCallback) -> None:
        ...

    @property
    def latest(self) -> Optional[float]:
        ...


class _BroadcastingSource:
    """Callback bookkeeping shared by the concrete sources."""

    def __init__(self):
        self._callbacks: List[HeadingCallback] = []
        self._latest: Optional[float] = None

    @property
    def latest(self) -> Optional[float]:
        """Most recent sample, or None before the first one."""
        return self._latest

    def subscribe(self, callback: HeadingCallback) -> None:
        if callback not in self._callbacks:
            self._callbacks.append(callback)

    def unsubscribe(self, callback: HeadingCallback) -> None:
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def _emit(self, heading: float) -> None:
        self._latest = heading
        for callback in list(self._callbacks):
            callback(heading)


class SensorHeadingSource(_BroadcastingSource):
    """
    Compass readings from the device orientation sensor.

    The platform layer calls push() for every orientation event. Events
    without a heading (sensor not yet calibrated) are dropped.
    """

    def push(self, alpha: Optional[float]) -> None:
        """Deliver one raw sensor reading."""
        if alpha is None:
            return
        try:
            heading = require_finite_angle(alpha, "compass reading")
        except InvalidAngle as e:
            logger.warning(f"Dropping compass reading: {e}")
            return
        self._emit(heading)


class ManualHeadingOverride(_BroadcastingSource):
    """
    Slider that stands in for the compass.

    Values are clamped to the slider range, matching what a range input
    can produce.
    """

    def __init__(self, minimum: float = SLIDER_MIN_DEG, maximum: float = SLIDER_MAX_DEG):
        super().__init__()
        if minimum >= maximum:
            raise ValueError(f"Slider minimum {minimum} must be below maximum {maximum}")
        self.minimum = minimum
        self.maximum = maximum

    def set_heading(self, heading: float) -> None:
        """Move the slider."""
        clamped = min(max(float(heading), self.minimum), self.maximum)
        self._emit(clamped)


class HeadingSelector(_BroadcastingSource):
    """
    Routes either the sensor or the manual override to subscribers.

    Until the override is first moved, sensor samples pass through. Moving
    the slider engages the override, and from then on sensor samples are
    ignored until release() is called.
    """

    def __init__(
        self,
        sensor: SensorHeadingSource,
        override: Optional[ManualHeadingOverride] = None,
    ):
        super().__init__()
        self.sensor = sensor
        self.override = override
        self._override_engaged = False

        sensor.subscribe(self._on_sensor)
        if override is not None:
            override.subscribe(self._on_override)

    @property
    def override_engaged(self) -> bool:
        return self._override_engaged

    def release(self) -> None:
        """Hand control back to the sensor."""
        if self._override_engaged:
            logger.info("Manual heading override released")
        self._override_engaged = False

    def _on_sensor(self, heading: float) -> None:
        if self._override_engaged:
            return
        self._emit(heading)

    def _on_override(self, heading: float) -> None:
        if not self._override_engaged:
            logger.info("Manual heading override engaged")
            self._override_engaged = True
        self._emit(heading)
