"""
"Any qualified worker" validity of a single start time.

Every segment only needs some eligible worker who is free for it; segments
may end up with different workers. Nothing is assigned here.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from booking_chain.schemas.chain_schema import ChainSlot
from booking_chain.schemas.service_schema import ChainServiceInput
from booking_chain.schemas.worker_schema import BreakRange
from booking_chain.scheduling.assignment import RejectReason, first_free_worker
from booking_chain.scheduling.availability import BusyInterval, get_conflicting_busy_interval
from booking_chain.scheduling.breaks import ServiceSegment, first_overlapping_break
from booking_chain.scheduling.eligibility import eligible_workers_for
from booking_chain.scheduling.snapshot import DaySnapshot
from booking_chain.scheduling.timing import compute_chain_slots


@dataclass(frozen=True)
class WorkItem:
    """A primary or follow-up segment flattened to minutes, in chain order."""

    service_name: str
    service_id: Optional[str]
    start_min: int
    end_min: int
    worker_id: Optional[str] = None

    @property
    def segment(self) -> ServiceSegment:
        return ServiceSegment(self.start_min, self.end_min)


def work_items(slots: Sequence[ChainSlot], snapshot: DaySnapshot) -> list[WorkItem]:
    """Flatten slots and their nested follow-ups. Wait gaps are not work."""
    items = []
    for slot in slots:
        start = snapshot.minutes_of(slot.start_at)
        items.append(WorkItem(
            service_name=(slot.service_name or "").strip(),
            service_id=(slot.service_id or "").strip() or None,
            start_min=start,
            end_min=start + slot.duration_min,
            worker_id=slot.worker_id,
        ))
        follow_up = slot.follow_up
        if follow_up is not None and follow_up.service_name:
            fu_start = snapshot.minutes_of(follow_up.start_at)
            items.append(WorkItem(
                service_name=follow_up.service_name.strip(),
                service_id=(follow_up.service_id or "").strip() or None,
                start_min=fu_start,
                end_min=fu_start + follow_up.duration_min,
                worker_id=follow_up.worker_id,
            ))
    return items


@dataclass(frozen=True)
class SlotValidity:
    valid: bool
    reject_index: Optional[int] = None
    reject_reason: Optional[RejectReason] = None
    reject_service_name: Optional[str] = None
    # For no_available: the first eligible worker's overlapping booking.
    overlapping_worker_id: Optional[str] = None
    overlapping_booking: Optional[BusyInterval] = None
    # For break: the business break the segment runs into.
    overlapping_break: Optional[BreakRange] = None


def slot_is_valid_for_no_preference(
    chain: Sequence[ChainServiceInput], start_at: datetime, snapshot: DaySnapshot
) -> SlotValidity:
    """Check one candidate start time in no-preference mode."""
    items = work_items(compute_chain_slots(chain, start_at), snapshot)

    for index, item in enumerate(items):
        hit = first_overlapping_break(item.start_min, item.end_min, snapshot.breaks)
        if hit is not None:
            return SlotValidity(
                valid=False,
                reject_index=index,
                reject_reason=RejectReason.BREAK,
                reject_service_name=item.service_name or item.service_id,
                overlapping_break=hit,
            )

    for index, item in enumerate(items):
        eligible = eligible_workers_for(snapshot.workers, item.service_name, item.service_id)
        if not eligible:
            return SlotValidity(
                valid=False,
                reject_index=index,
                reject_reason=RejectReason.NO_ELIGIBLE,
                reject_service_name=item.service_name or item.service_id,
            )
        worker, _ = first_free_worker(snapshot, eligible, item.start_min, item.end_min)
        if worker is None:
            first = eligible[0]
            return SlotValidity(
                valid=False,
                reject_index=index,
                reject_reason=RejectReason.NO_AVAILABLE,
                reject_service_name=item.service_name or item.service_id,
                overlapping_worker_id=first.id,
                overlapping_booking=get_conflicting_busy_interval(
                    snapshot, first.id, item.start_min, item.end_min
                ),
            )

    return SlotValidity(valid=True)
