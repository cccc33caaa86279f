"""
MOONPOINTER command line.

Feeds one location and one heading through the controller and prints where
the arrow points:

    moonpointer --lat 38.9 --lon -77.0 --heading 90
    moonpointer --lat 38.9 --lon -77.0 --heading 90 --at 2024-05-01T21:30:00-04:00
"""

import argparse
import math
from datetime import datetime
from typing import List, Optional
from zoneinfo import ZoneInfo

from moonpointer.config import MoonPointerConfig, load_config
from moonpointer.controller import RecomputationController, system_clock
from moonpointer.exceptions import ConfigurationError, MoonPointerError
from moonpointer.logging_config import get_logger, log_exception, set_service_level, setup_logging
from moonpointer.models import GeoCoordinate
from moonpointer.visibility import describe
from services.ephemeris import create_ephemeris

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="moonpointer",
        description="Point an arrow at the Moon from a location and compass heading",
    )
    parser.add_argument("--lat", type=float, help="Observer latitude (degrees, +N)")
    parser.add_argument("--lon", type=float, help="Observer longitude (degrees, +E)")
    parser.add_argument(
        "--heading", type=float, default=None,
        help="Device compass heading (degrees clockwise from north)",
    )
    parser.add_argument(
        "--at", type=datetime.fromisoformat, default=None,
        help="ISO-8601 instant to evaluate instead of now",
    )
    parser.add_argument("--config", default=None, help="Path to a YAML config file")
    parser.add_argument(
        "--backend", choices=("analytic", "skyfield"), default=None,
        help="Override the configured ephemeris backend",
    )
    parser.add_argument(
        "--log-level", default=None,
        choices=("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"),
        help="Override the configured log level",
    )
    return parser


def render(controller: RecomputationController, config: MoonPointerConfig) -> List[str]:
    """Text lines describing the controller state."""
    state = controller.state
    # None renders edges in their own (host local) offset
    tz = ZoneInfo(config.observer.timezone) if config.observer.timezone else None
    lines = []

    if state.moon_position is None:
        lines.append("Moon position unknown (no location)")
    else:
        position = state.moon_position
        lines.append(f"Moon azimuth:  {position.azimuth:.4f} rad (from south)")
        lines.append(f"Moon altitude: {math.degrees(position.altitude):+.1f} deg")
        lines.append(f"Moon bearing:  {state.bearing:.1f} deg")

    if state.rotation is None:
        lines.append("Rotation:      undefined (waiting for heading)")
    else:
        lines.append(f"Rotation:      {state.rotation:+.1f} deg")

    if state.visibility is not None:
        lines.append(describe(state.visibility).message(tz))

    return lines


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
        if args.backend:
            config.ephemeris.backend = args.backend
        if args.log_level:
            config.log_level = args.log_level
        setup_logging(log_level=config.log_level, log_file=config.log_file)
        for service_name, level in config.service_log_levels.items():
            set_service_level(service_name, level)
        clock = system_clock(config.observer.timezone)
    except ConfigurationError as e:
        print(f"Configuration error: {e}")
        return 2

    latitude = args.lat if args.lat is not None else config.observer.latitude
    longitude = args.lon if args.lon is not None else config.observer.longitude
    if latitude is None or longitude is None:
        parser.print_usage()
        print("moonpointer: error: --lat and --lon are required (or set observer.latitude/longitude)")
        return 2

    if args.at is not None:
        fixed = args.at

        def clock():
            return fixed

    controller = RecomputationController(create_ephemeris(config.ephemeris), clock=clock)

    try:
        controller.on_location(GeoCoordinate(latitude, longitude))
        if args.heading is not None:
            controller.on_heading(args.heading)
    except MoonPointerError as e:
        log_exception(logger, "Pointer computation failed", e, include_traceback=False)
        print(f"Error: {e}")
        return 1

    for line in render(controller, config):
        print(line)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
