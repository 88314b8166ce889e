"""
Slot generation.

Expands a working window into fixed-length candidate slots. A slot is only
produced when it fits entirely inside the window, so a 4 hour window split
into 45 minute slots yields five slots and leaves the last 15 minutes unused.
"""

from datetime import date, datetime, timedelta
from typing import Iterable, Iterator

from pytz.tzinfo import BaseTzInfo

from backend.scheduling.domain import WorkingHourTemplate

Window = tuple[datetime, datetime]


class SlotWindow:
    """Restartable sequence of ``(start, end)`` slots inside one window."""

    __slots__ = ('window_start', 'window_end', 'duration')

    def __init__(self, window_start: datetime, window_end: datetime, duration_minutes: int) -> None:
        if duration_minutes <= 0:
            raise ValueError('Slot duration must be a positive number of minutes.')

        self.window_start = normalize(window_start)
        self.window_end = normalize(window_end)
        self.duration = timedelta(minutes=duration_minutes)

    def __iter__(self) -> Iterator[Window]:
        current = self.window_start

        while current + self.duration <= self.window_end:
            slot_end = normalize(current + self.duration)
            yield current, slot_end
            current = slot_end

    def __len__(self) -> int:
        if self.window_end <= self.window_start:
            return 0
        return (self.window_end - self.window_start) // self.duration

    def __repr__(self) -> str:
        return (
            f'SlotWindow({self.window_start.isoformat()}, {self.window_end.isoformat()}, '
            f'{int(self.duration.total_seconds() // 60)}m)'
        )


def generate_slots(window_start: datetime, window_end: datetime, duration_minutes: int) -> SlotWindow:
    return SlotWindow(window_start, window_end, duration_minutes)


def normalize(value: datetime) -> datetime:
    """Fix the UTC offset of a pytz-aware datetime after arithmetic crossed a DST change."""
    tz_normalize = getattr(value.tzinfo, 'normalize', None)
    if tz_normalize is None:
        return value
    return tz_normalize(value)


def localize(value: datetime, tz: BaseTzInfo | None) -> datetime:
    if tz is None or value.tzinfo is not None:
        return value
    return tz.localize(value)


def template_window(template: WorkingHourTemplate, on_date: date, tz: BaseTzInfo | None = None) -> Window:
    start = localize(datetime.combine(on_date, template.start_time), tz)
    end = localize(datetime.combine(on_date, template.end_time), tz)
    return start, end


def merge_windows(windows: Iterable[Window]) -> list[Window]:
    """Union overlapping or touching windows, ordered by start."""
    ordered = sorted(windows)
    if not ordered:
        return []

    merged = [ordered[0]]
    for start, end in ordered[1:]:
        last_start, last_end = merged[-1]
        if start <= last_end:
            if end > last_end:
                merged[-1] = (last_start, end)
        else:
            merged.append((start, end))

    return merged
