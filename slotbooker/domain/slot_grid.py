"""
Slot grid generation.

Pure domain logic: turns a meeting duration into the ordered sequence of
12-hour labels a visitor can pick from. No I/O.
"""

import re
from typing import Iterator

# Offerable window, in minutes after midnight
WINDOW_OPEN_MINUTE = 8 * 60  # 08:00 AM
WINDOW_CLOSE_MINUTE = 22 * 60  # 10:00 PM

_LABEL_PATTERN = re.compile(r"^(0[1-9]|1[0-2]):([0-5][0-9]) (AM|PM)$")


def format_slot_label(minute_of_day: int) -> str:
    """
    Format an absolute minute offset as a zero-padded 12-hour label.

    Example: 720 -> "12:00 PM", 30 -> "12:30 AM"
    """
    hours, minutes = divmod(minute_of_day, 60)
    display_hour = hours % 12 or 12
    period = "PM" if hours >= 12 else "AM"
    return f"{display_hour:02d}:{minutes:02d} {period}"


def parse_slot_label(label: str) -> int:
    """
    Convert a 12-hour label back to its minute offset.

    Raises:
        ValueError: If the label is not in ``HH:MM AM/PM`` form
    """
    match = _LABEL_PATTERN.match(label or "")
    if not match:
        raise ValueError(f"Not a time slot label: {label!r}")

    hour, minute, period = int(match.group(1)), int(match.group(2)), match.group(3)
    hour = hour % 12
    if period == "PM":
        hour += 12
    return hour * 60 + minute


class SlotGrid:
    """
    Lazy, restartable sequence of slot labels for one meeting duration.

    Labels are computed on iteration; iterating twice yields the same
    sequence. A trailing part of the window shorter than the duration is
    dropped.
    """

    def __init__(self, duration_minutes: int):
        if isinstance(duration_minutes, bool) or not isinstance(duration_minutes, int):
            raise ValueError(
                f"duration_minutes must be an integer, got {duration_minutes!r}"
            )
        if duration_minutes <= 0:
            raise ValueError(
                f"duration_minutes must be greater than zero, got {duration_minutes}"
            )
        self.duration_minutes = duration_minutes

    def __len__(self) -> int:
        return (WINDOW_CLOSE_MINUTE - WINDOW_OPEN_MINUTE) // self.duration_minutes

    def __iter__(self) -> Iterator[str]:
        for i in range(len(self)):
            yield format_slot_label(WINDOW_OPEN_MINUTE + i * self.duration_minutes)

    def __contains__(self, label: object) -> bool:
        if not isinstance(label, str):
            return False
        try:
            minute = parse_slot_label(label)
        except ValueError:
            return False
        offset = minute - WINDOW_OPEN_MINUTE
        return (
            0 <= offset
            and offset % self.duration_minutes == 0
            and offset // self.duration_minutes < len(self)
        )

    def index(self, label: str) -> int:
        """Return the position of ``label`` in the grid."""
        if label not in self:
            raise ValueError(f"{label!r} is not on the {self.duration_minutes}-minute grid")
        return (parse_slot_label(label) - WINDOW_OPEN_MINUTE) // self.duration_minutes

    def __repr__(self) -> str:
        return f"SlotGrid(duration_minutes={self.duration_minutes})"


def generate_slots(duration_minutes: int) -> SlotGrid:
    """Return the slot grid for a meeting of ``duration_minutes``."""
    return SlotGrid(duration_minutes)
