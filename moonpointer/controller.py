"""
MOONPOINTER Recomputation Controller

Decides when the ephemeris and the bearing reconciler run, given a stream of
upstream events, and never computes on incomplete input.

State graph:

    +--------+  location   +---------+
    |  IDLE  |------------>| LOCATED |
    +--------+             +---------+
        | heading               | heading
        v                       v
    +--------------+ location +----------+
    | HEADING_ONLY |--------->| TRACKING |  <- rotation defined only here
    +--------------+          +----------+

Losing the location falls back to IDLE or HEADING_ONLY. There is no
terminal state; the controller lives as long as the session.

Transitions:
    on_location(reading)   new fix or failure; recompute position + visibility
    on_heading(sample)     new heading; recompute rotation if position known
    refresh_visibility()   one-shot visibility recompute
    on_clock_tick()        recompute position; visibility only on a new day

Every transition recomputes its downstream values from scratch and commits a
new immutable ControllerState. Engine/reconciler errors propagate and leave
the previous state in place.

Usage:
    controller = RecomputationController(LunarEphemerisService())
    controller.subscribe(lambda state, transition: render(state))
    controller.attach_heading_source(selector)
    controller.on_location(GeoCoordinate(38.9, -77.0))
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from enum import Enum
from typing import Callable, List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from moonpointer.bearing import (
    azimuth_to_bearing,
    compute_rotation,
    normalize_degrees,
    require_finite_angle,
)
from moonpointer.exceptions import ConfigurationError
from moonpointer.logging_config import correlation_context, get_logger, log_exception
from moonpointer.models import GeoCoordinate, MoonPosition, VisibilityWindow
from services.ephemeris.base import EphemerisEngine, as_aware
from services.location.location_source import LocationReading, coordinate_from_reading
from services.orientation.heading_sources import HeadingSource

logger = get_logger(__name__)

__all__ = [
    "ControllerPhase",
    "ControllerState",
    "Transition",
    "RecomputationController",
    "system_clock",
]

Clock = Callable[[], datetime]


class ControllerPhase(Enum):
    """Which inputs are currently known."""
    IDLE = "idle"
    LOCATED = "located"
    HEADING_ONLY = "heading_only"
    TRACKING = "tracking"


class Transition(Enum):
    """Named controller transitions."""
    LOCATION = "location"
    HEADING = "heading"
    REFRESH_VISIBILITY = "refresh_visibility"
    CLOCK_TICK = "clock_tick"


@dataclass(frozen=True)
class ControllerState:
    """Snapshot of everything the controller knows. Replaced, never mutated."""

    coordinate: Optional[GeoCoordinate] = None
    heading: Optional[float] = None
    moon_position: Optional[MoonPosition] = None
    visibility: Optional[VisibilityWindow] = None
    rotation: Optional[float] = None

    # Instant the position was evaluated and local day of the visibility window
    evaluated_at: Optional[datetime] = None
    visibility_day: Optional[date] = None

    @property
    def phase(self) -> ControllerPhase:
        if self.coordinate is None:
            return ControllerPhase.IDLE if self.heading is None else ControllerPhase.HEADING_ONLY
        return ControllerPhase.LOCATED if self.heading is None else ControllerPhase.TRACKING

    @property
    def bearing(self) -> Optional[float]:
        """Moon compass bearing in degrees, when the position is known."""
        if self.moon_position is None:
            return None
        return azimuth_to_bearing(self.moon_position.azimuth)


StateListener = Callable[[ControllerState, Transition], None]


def system_clock(timezone_name: Optional[str] = None) -> Clock:
    """A clock returning aware "now" in ``timezone_name``.

    With no timezone the clock follows the host's local time zone, so
    "today" is the calendar day the user sees.

    Raises:
        ConfigurationError: If the timezone is unknown
    """
    if timezone_name is None:
        def local_now() -> datetime:
            return datetime.now().astimezone()

        return local_now

    try:
        tz = ZoneInfo(timezone_name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ConfigurationError(f"Unknown timezone: {timezone_name}") from e

    def now() -> datetime:
        return datetime.now(tz)

    return now


class RecomputationController:
    """
    Reactive core of the pointer.

    Owns the latest inputs and the values derived from them; each public
    method is one named transition of the state machine.
    """

    def __init__(self, engine: EphemerisEngine, clock: Optional[Clock] = None):
        """
        Initialize the controller in the IDLE state.

        Args:
            engine: Ephemeris engine used for position and visibility
            clock: Source of "now" (defaults to the UTC system clock)
        """
        self.engine = engine
        self.clock = clock or system_clock()
        self._state = ControllerState()
        self._listeners: List[StateListener] = []
        self._heading_sources: List[HeadingSource] = []

        logger.info("Recomputation controller initialized")

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def state(self) -> ControllerState:
        return self._state

    @property
    def phase(self) -> ControllerPhase:
        return self._state.phase

    @property
    def rotation(self) -> Optional[float]:
        """Current pointer rotation in degrees, or None while undefined."""
        return self._state.rotation

    # =========================================================================
    # Wiring
    # =========================================================================

    def subscribe(self, listener: StateListener) -> None:
        """Call ``listener(state, transition)`` after every state change."""
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: StateListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def attach_heading_source(self, source: HeadingSource) -> None:
        """Feed every sample from ``source`` into on_heading()."""
        source.subscribe(self.on_heading)
        self._heading_sources.append(source)

    def detach_heading_sources(self) -> None:
        for source in self._heading_sources:
            source.unsubscribe(self.on_heading)
        self._heading_sources.clear()

    # =========================================================================
    # Transitions
    # =========================================================================

    def on_location(self, reading: LocationReading) -> ControllerState:
        """
        A new position fix, or the loss of one.

        A valid coordinate triggers position and visibility against "now",
        then rotation if a heading is known. A failure or None clears the
        coordinate and everything derived from it.

        Raises:
            InvalidCoordinate: If the coordinate is out of range
        """
        with correlation_context(prefix=Transition.LOCATION.value):
            coordinate = coordinate_from_reading(reading)
            if coordinate is None:
                logger.info("Location unavailable; pointer idle")
                state = replace(
                    self._state,
                    coordinate=None,
                    moon_position=None,
                    visibility=None,
                    rotation=None,
                    evaluated_at=None,
                    visibility_day=None,
                )
                return self._commit(state, Transition.LOCATION)

            now = as_aware(self.clock())
            position = self.engine.compute_position(now, coordinate.latitude, coordinate.longitude)
            visibility = self.engine.compute_visibility(now, coordinate.latitude, coordinate.longitude)
            logger.info(
                f"Location ({coordinate.latitude:.4f}, {coordinate.longitude:.4f}): "
                f"moon azimuth {position.azimuth:.4f} rad, altitude {position.altitude:.4f} rad"
            )

            state = replace(
                self._state,
                coordinate=coordinate,
                moon_position=position,
                visibility=visibility,
                evaluated_at=now,
                visibility_day=now.date(),
            )
            return self._commit(self._with_rotation(state), Transition.LOCATION)

    def on_heading(self, sample: float) -> ControllerState:
        """
        A new heading sample, from the sensor or the manual override alike.

        Raises:
            InvalidAngle: If the sample is not a finite number
        """
        with correlation_context(prefix=Transition.HEADING.value):
            heading = normalize_degrees(require_finite_angle(sample, "heading"))
            state = replace(self._state, heading=heading)
            return self._commit(self._with_rotation(state), Transition.HEADING)

    def refresh_visibility(self) -> ControllerState:
        """Recompute today's visibility window; no-op without a coordinate."""
        with correlation_context(prefix=Transition.REFRESH_VISIBILITY.value):
            coordinate = self._state.coordinate
            if coordinate is None:
                logger.debug("Visibility refresh skipped: no coordinate")
                return self._state

            now = as_aware(self.clock())
            visibility = self.engine.compute_visibility(now, coordinate.latitude, coordinate.longitude)
            state = replace(self._state, visibility=visibility, visibility_day=now.date())
            return self._commit(state, Transition.REFRESH_VISIBILITY)

    def on_clock_tick(self) -> ControllerState:
        """
        Re-evaluate the Moon against "now" for the current coordinate.

        Visibility is recomputed only when the local day has changed since it
        was last computed. No-op without a coordinate.
        """
        with correlation_context(prefix=Transition.CLOCK_TICK.value):
            coordinate = self._state.coordinate
            if coordinate is None:
                return self._state

            now = as_aware(self.clock())
            position = self.engine.compute_position(now, coordinate.latitude, coordinate.longitude)
            state = replace(self._state, moon_position=position, evaluated_at=now)

            if now.date() != self._state.visibility_day:
                logger.info(f"New local day {now.date()}; recomputing visibility")
                visibility = self.engine.compute_visibility(
                    now, coordinate.latitude, coordinate.longitude
                )
                state = replace(state, visibility=visibility, visibility_day=now.date())

            return self._commit(self._with_rotation(state), Transition.CLOCK_TICK)

    # =========================================================================
    # Internals
    # =========================================================================

    @staticmethod
    def _with_rotation(state: ControllerState) -> ControllerState:
        """Derive rotation from scratch, or clear it if a prerequisite is missing."""
        if state.moon_position is None or state.heading is None:
            return replace(state, rotation=None)
        rotation = compute_rotation(state.moon_position.azimuth, state.heading)
        return replace(state, rotation=rotation)

    def _commit(self, state: ControllerState, transition: Transition) -> ControllerState:
        if state == self._state:
            return state

        previous_phase = self._state.phase
        self._state = state
        if state.phase != previous_phase:
            logger.info(f"Phase {previous_phase.value} -> {state.phase.value}")
        logger.debug(f"{transition.value}: rotation={state.rotation}")

        for listener in list(self._listeners):
            try:
                listener(state, transition)
            except Exception as e:
                log_exception(logger, f"State listener failed on {transition.value}", e)
        return state
