"""
MOONPOINTER Visibility Narrator

Maps a VisibilityWindow onto one of four categories, each carrying the
timestamps a presentation layer needs:

    rise  set   ->  category
    yes   yes       FullWindow   "Visible from <rise> to <set>"
    yes   no        RiseOnly     "Visible starting at <rise>"
    no    yes       SetOnly      "Visible now through <set>"
    no    no        NotVisible   "Not visible today"
"""

from dataclasses import dataclass
from datetime import datetime, tzinfo
from enum import Enum
from typing import Optional, Union

from moonpointer.models import VisibilityWindow

__all__ = [
    "VisibilityKind",
    "FullWindow",
    "RiseOnly",
    "SetOnly",
    "NotVisible",
    "VisibilityDescription",
    "describe",
    "format_time",
]


class VisibilityKind(Enum):
    """Visibility categories."""
    FULL_WINDOW = "full_window"
    RISE_ONLY = "rise_only"
    SET_ONLY = "set_only"
    NOT_VISIBLE = "not_visible"


def format_time(when: datetime, tz: Optional[tzinfo] = None) -> str:
    """Render a timestamp as HH:MM, converted to ``tz`` when given."""
    if tz is not None:
        when = when.astimezone(tz)
    return when.strftime("%H:%M")


@dataclass(frozen=True)
class FullWindow:
    """Rises and sets within the day."""
    rise: datetime
    set: datetime

    kind = VisibilityKind.FULL_WINDOW

    def message(self, tz: Optional[tzinfo] = None) -> str:
        return f"Visible from {format_time(self.rise, tz)} to {format_time(self.set, tz)}"


@dataclass(frozen=True)
class RiseOnly:
    """Rises during the day and is still up when it ends."""
    rise: datetime

    kind = VisibilityKind.RISE_ONLY

    def message(self, tz: Optional[tzinfo] = None) -> str:
        return f"Visible starting at {format_time(self.rise, tz)}"


@dataclass(frozen=True)
class SetOnly:
    """Already up when the day starts, sets during it."""
    set: datetime

    kind = VisibilityKind.SET_ONLY

    def message(self, tz: Optional[tzinfo] = None) -> str:
        return f"Visible now through {format_time(self.set, tz)}"


@dataclass(frozen=True)
class NotVisible:
    """No rise and no set within the day."""

    kind = VisibilityKind.NOT_VISIBLE

    def message(self, tz: Optional[tzinfo] = None) -> str:
        return "Not visible today"


VisibilityDescription = Union[FullWindow, RiseOnly, SetOnly, NotVisible]


def describe(window: VisibilityWindow) -> VisibilityDescription:
    """Categorize a visibility window. Total: every window maps to one category."""
    if window.rise is not None and window.set is not None:
        return FullWindow(rise=window.rise, set=window.set)
    if window.rise is not None:
        return RiseOnly(rise=window.rise)
    if window.set is not None:
        return SetOnly(set=window.set)
    return NotVisible()
