"""
Availability checks for one worker over one time span.

A worker is available for [start, end) when none of their busy intervals
that day overlap it and it fits inside their working window intersected with
the business window. Worker breaks are checked separately so callers can
report them as their own reason.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime
from typing import TYPE_CHECKING, Iterable, Optional

from booking_chain.schemas.booking_schema import BookingRecord
from booking_chain.schemas.worker_schema import TimeWindow
from booking_chain.scheduling.breaks import slot_overlaps_breaks
from booking_chain.utils import format_hhmm, parse_hhmm

if TYPE_CHECKING:
    from booking_chain.scheduling.snapshot import DaySnapshot

logger = logging.getLogger(__name__)

# Unavailability reasons, in the order they are checked.
CONFLICT = "conflict"
OUTSIDE_WINDOW = "outside_window"
ON_BREAK = "on_break"


@dataclass(frozen=True)
class BusyInterval:
    """A blocked span for one worker, in minutes since midnight."""

    start_min: int
    end_min: int
    booking_id: Optional[str] = None


@dataclass(frozen=True)
class ConflictResult:
    """Outcome of a direct conflict check against existing bookings."""

    has_conflict: bool
    booking_id: Optional[str] = None
    start_min: Optional[int] = None
    end_min: Optional[int] = None

    @property
    def time_range(self) -> Optional[str]:
        if not self.has_conflict:
            return None
        return f"{format_hhmm(self.start_min)}–{format_hhmm(self.end_min)}"


def overlaps(a_start: float, a_end: float, b_start: float, b_end: float) -> bool:
    """Half-open overlap: touching intervals do not overlap."""
    return a_start < b_end and a_end > b_start


def busy_intervals_by_worker(
    bookings: Iterable[BookingRecord], day: date
) -> dict[str, list[BusyInterval]]:
    """Group the busy intervals of every worker on ``day``.

    Phase 1 and phase 2 blocks are busy; the wait gap between them never is.
    """
    by_worker: dict[str, list[BusyInterval]] = defaultdict(list)
    for booking in bookings:
        if booking.is_cancelled or booking.day != day:
            continue
        start = booking.start_min
        primary_end = start + booking.duration_min
        if booking.worker_id:
            by_worker[booking.worker_id].append(BusyInterval(start, primary_end, booking.id))

        if booking.secondary_duration_min <= 0:
            continue
        secondary_worker = booking.secondary_worker_id or booking.worker_id
        if not secondary_worker:
            continue
        if booking.secondary_start and booking.secondary_end:
            secondary_start = parse_hhmm(booking.secondary_start)
            secondary_end = parse_hhmm(booking.secondary_end)
        else:
            secondary_start = primary_end + booking.wait_min
            secondary_end = secondary_start + booking.secondary_duration_min
        by_worker[secondary_worker].append(
            BusyInterval(secondary_start, secondary_end, booking.id)
        )
    return dict(by_worker)


def get_worker_busy_intervals(
    bookings: Iterable[BookingRecord], worker_id: str, day: date
) -> list[BusyInterval]:
    """Busy intervals for one worker on ``day``."""
    return busy_intervals_by_worker(bookings, day).get(worker_id, [])


def get_conflicting_busy_interval(
    snapshot: "DaySnapshot", worker_id: str, start_min: int, end_min: int
) -> Optional[BusyInterval]:
    """First busy interval overlapping the span, for diagnostics."""
    for interval in snapshot.busy_intervals(worker_id):
        if overlaps(start_min, end_min, interval.start_min, interval.end_min):
            return interval
    return None


def fits_window(
    start_min: int,
    end_min: int,
    worker_window: Optional[TimeWindow],
    business_window: Optional[TimeWindow],
) -> bool:
    """True if the span fits the worker window (if any) and the business window (if any)."""
    for window in (worker_window, business_window):
        if window is None:
            continue
        if window.is_empty or start_min < window.start_min or end_min > window.end_min:
            return False
    return True


def unavailability_reason(
    snapshot: "DaySnapshot", worker_id: str, start_min: int, end_min: int
) -> Optional[str]:
    """Why the worker cannot take the span, or None if they can."""
    if get_conflicting_busy_interval(snapshot, worker_id, start_min, end_min) is not None:
        return CONFLICT
    if not fits_window(
        start_min, end_min, snapshot.worker_window(worker_id), snapshot.business_window
    ):
        return OUTSIDE_WINDOW
    if slot_overlaps_breaks(start_min, end_min, snapshot.breaks_for(worker_id)):
        return ON_BREAK
    return None


def is_worker_available_in_slot(
    snapshot: "DaySnapshot", worker_id: str, start_min: int, end_min: int
) -> bool:
    """No booking conflict and inside the working window. Breaks are not checked."""
    return unavailability_reason(snapshot, worker_id, start_min, end_min) in (None, ON_BREAK)


def is_worker_free_for_segment(
    snapshot: "DaySnapshot", worker_id: str, start_min: int, end_min: int
) -> bool:
    """Available and not on their own break for the span."""
    return unavailability_reason(snapshot, worker_id, start_min, end_min) is None


def find_worker_conflict(
    snapshot: "DaySnapshot",
    worker_id: str,
    start_at: datetime,
    end_at: datetime,
    exclude_booking_ids: Iterable[str] = (),
) -> ConflictResult:
    """Check a proposed block for one worker against existing bookings.

    Used by manual create/edit flows; the bookings being edited are excluded.
    """
    scoped = snapshot.without_bookings(exclude_booking_ids)
    start_min = scoped.minutes_of(start_at)
    end_min = scoped.minutes_of(end_at)
    interval = get_conflicting_busy_interval(scoped, worker_id, start_min, end_min)
    if interval is None:
        return ConflictResult(has_conflict=False)
    logger.debug(
        "Worker %s conflicts with booking %s at %s-%s",
        worker_id, interval.booking_id, format_hhmm(interval.start_min), format_hhmm(interval.end_min),
    )
    return ConflictResult(
        has_conflict=True,
        booking_id=interval.booking_id,
        start_min=interval.start_min,
        end_min=interval.end_min,
    )
