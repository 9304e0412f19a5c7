"""
Day snapshot: the mutually consistent inputs for resolving chains on one date.

The caller assembles one ``DaySnapshot`` per query (and again at commit
time) from the roster, the day's bookings and the opening hours. Resolvers
never fetch or mutate anything; they only read the snapshot.
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from functools import cached_property
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence, Union

from booking_chain.config import settings
from booking_chain.logging_context import TraceEvent, log_trace
from booking_chain.schemas.booking_schema import BookingRecord, normalize_booking
from booking_chain.schemas.worker_schema import (
    WEEKDAY_KEYS,
    BreakRange,
    DayAvailability,
    TimeWindow,
    Worker,
)
from booking_chain.scheduling.availability import BusyInterval, busy_intervals_by_worker
from booking_chain.utils import at_time, parse_date

logger = logging.getLogger(__name__)

TraceObserver = Callable[[TraceEvent], None]


@dataclass(frozen=True)
class DaySnapshot:
    """Roster, bookings, windows and breaks for a single day.

    ``worker_windows`` maps a worker id to their window that day. A missing
    entry or a None value means unrestricted; an empty window means the
    worker is off. ``business_window`` None means no business-level limit.
    """

    day: date
    workers: tuple[Worker, ...] = ()
    bookings: tuple[BookingRecord, ...] = ()
    worker_windows: Mapping[str, Optional[TimeWindow]] = field(default_factory=dict)
    business_window: Optional[TimeWindow] = None
    breaks: tuple[BreakRange, ...] = ()
    worker_breaks: Mapping[str, tuple[BreakRange, ...]] = field(default_factory=dict)
    trace: Optional[TraceObserver] = None

    def __post_init__(self):
        object.__setattr__(self, "workers", tuple(self.workers))
        object.__setattr__(self, "bookings", tuple(self.bookings))
        object.__setattr__(self, "breaks", tuple(self.breaks))

    @property
    def day_start(self) -> datetime:
        return datetime(self.day.year, self.day.month, self.day.day)

    def minutes_of(self, moment: datetime) -> int:
        """Minutes since midnight of the snapshot day (may exceed a day)."""
        return int((moment - self.day_start).total_seconds() // 60)

    def at(self, hhmm: str) -> datetime:
        return at_time(self.day, hhmm)

    @cached_property
    def _busy_by_worker(self) -> dict[str, list[BusyInterval]]:
        return busy_intervals_by_worker(self.bookings, self.day)

    def busy_intervals(self, worker_id: str) -> list[BusyInterval]:
        return self._busy_by_worker.get(worker_id, [])

    def worker_by_id(self, worker_id: Optional[str]) -> Optional[Worker]:
        if not worker_id:
            return None
        for worker in self.workers:
            if worker.id == worker_id:
                return worker
        return None

    def worker_window(self, worker_id: str) -> Optional[TimeWindow]:
        return self.worker_windows.get(worker_id)

    def breaks_for(self, worker_id: str) -> tuple[BreakRange, ...]:
        return tuple(self.worker_breaks.get(worker_id, ()))

    def without_bookings(self, booking_ids: Iterable[str]) -> "DaySnapshot":
        """Copy of the snapshot that ignores the given bookings (e.g. the ones being edited)."""
        excluded = {str(b) for b in booking_ids}
        if not excluded:
            return self
        return replace(self, bookings=tuple(b for b in self.bookings if b.id not in excluded))

    def emit(self, name: str, **fields: Any) -> None:
        """Send a decision event to the trace observer, if one is attached."""
        if self.trace is not None:
            self.trace(TraceEvent(name=name, fields=fields))


def _window_for(entry: Optional[DayAvailability]) -> TimeWindow:
    if entry is None:
        return TimeWindow(start_min=0, end_min=0)
    return entry.window()


def build_day_snapshot(
    day: Union[str, date, datetime],
    workers: Sequence[Worker],
    bookings: Iterable[Union[BookingRecord, Mapping[str, Any]]],
    business_hours: Optional[Sequence[DayAvailability]] = None,
    breaks: Optional[Sequence[BreakRange]] = None,
    trace: Optional[TraceObserver] = None,
) -> DaySnapshot:
    """Derive a ``DaySnapshot`` from weekly schedules.

    Args:
        day: The date being booked.
        workers: Full roster in display order.
        bookings: Canonical records or raw booking documents (normalized here).
        business_hours: Weekly opening hours; None means no business limit.
        breaks: Extra business-wide breaks for the day.
        trace: Decision observer; defaults to ``log_trace`` when
            TRACE_DECISIONS is on.
    """
    snapshot_day = parse_date(day)
    weekday = WEEKDAY_KEYS[snapshot_day.weekday()]

    business_window: Optional[TimeWindow] = None
    business_breaks: list[BreakRange] = list(breaks or [])
    if business_hours is not None:
        entry = next((e for e in business_hours if e.day == weekday), None)
        business_window = _window_for(entry)
        if entry is not None:
            business_breaks = list(entry.breaks) + business_breaks

    worker_windows: dict[str, Optional[TimeWindow]] = {}
    worker_breaks: dict[str, tuple[BreakRange, ...]] = {}
    for worker in workers:
        if not worker.availability:
            worker_windows[worker.id] = None
            continue
        entry = worker.availability_for(weekday)
        worker_windows[worker.id] = _window_for(entry)
        if entry is not None and entry.breaks:
            worker_breaks[worker.id] = tuple(entry.breaks)

    records = [
        b if isinstance(b, BookingRecord) else normalize_booking(b) for b in bookings
    ]

    if trace is None and settings.trace_decisions:
        trace = log_trace

    logger.debug(
        "Built snapshot for %s (%s): %d worker(s), %d booking(s)",
        snapshot_day.isoformat(), weekday, len(workers), len(records),
    )
    return DaySnapshot(
        day=snapshot_day,
        workers=tuple(workers),
        bookings=tuple(records),
        worker_windows=worker_windows,
        business_window=business_window,
        breaks=tuple(business_breaks),
        worker_breaks=worker_breaks,
        trace=trace,
    )
