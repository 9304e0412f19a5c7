"""
Break helpers. Intervals are half-open: a segment ending exactly when a
break starts does not overlap it.

Only work segments are ever tested against breaks. The wait gap between a
phase 1 and its follow-up may span a break.
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from booking_chain.schemas.worker_schema import BreakRange
from booking_chain.utils import parse_hhmm


@dataclass(frozen=True)
class ServiceSegment:
    """A span of actual work, in minutes since midnight."""

    start_min: int
    end_min: int


def slot_overlaps_breaks(
    start_min: int, end_min: int, breaks: Optional[Iterable[BreakRange]]
) -> bool:
    """True if [start_min, end_min) overlaps any break."""
    if not breaks:
        return False
    return any(start_min < b.end_min and end_min > b.start_min for b in breaks)


def first_overlapping_break(
    start_min: int, end_min: int, breaks: Optional[Iterable[BreakRange]]
) -> Optional[BreakRange]:
    for b in breaks or ():
        if start_min < b.end_min and end_min > b.start_min:
            return b
    return None


def any_service_segment_overlaps_breaks(
    segments: Sequence[ServiceSegment], breaks: Optional[Sequence[BreakRange]]
) -> bool:
    """True if any work segment overlaps any break."""
    if not breaks or not segments:
        return False
    return any(slot_overlaps_breaks(s.start_min, s.end_min, breaks) for s in segments)


def filter_times_by_breaks(
    times: Sequence[str], duration_min: int, breaks: Optional[Sequence[BreakRange]]
) -> list[str]:
    """Keep "HH:mm" start times whose [t, t + duration_min) misses every break."""
    if not breaks:
        return list(times)
    kept = []
    for t in times:
        start = parse_hhmm(t)
        if not slot_overlaps_breaks(start, start + duration_min, breaks):
            kept.append(t)
    return kept
