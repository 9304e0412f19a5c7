"""
Bookable start times for a chain.

Filters caller-supplied "HH:mm" candidates. Without a preference a time is
kept when every segment has some free qualified worker. With a preferred
worker it is kept when the full assignment succeeds and the resolved work
segments clear both the business breaks and each assigned worker's breaks.
"""

from typing import Optional, Sequence

from booking_chain.logging_context import get_request_logger
from booking_chain.schemas.chain_schema import ChainSlot
from booking_chain.schemas.service_schema import ChainServiceInput
from booking_chain.scheduling.assignment import resolve_chain_workers_detailed
from booking_chain.scheduling.breaks import any_service_segment_overlaps_breaks, slot_overlaps_breaks
from booking_chain.scheduling.no_preference import slot_is_valid_for_no_preference, work_items
from booking_chain.scheduling.snapshot import DaySnapshot

logger = get_request_logger(__name__)


def resolved_slots_clear_breaks(slots: Sequence[ChainSlot], snapshot: DaySnapshot) -> bool:
    """Re-check resolved work segments against business and assigned-worker breaks."""
    items = work_items(slots, snapshot)
    if any_service_segment_overlaps_breaks([i.segment for i in items], snapshot.breaks):
        return False
    for item in items:
        if item.worker_id and slot_overlaps_breaks(
            item.start_min, item.end_min, snapshot.breaks_for(item.worker_id)
        ):
            return False
    return True


def compute_available_slots(
    chain: Sequence[ChainServiceInput],
    candidate_times: Sequence[str],
    snapshot: DaySnapshot,
    preferred_worker_id: Optional[str] = None,
) -> list[str]:
    """Subset of ``candidate_times`` that can be offered, in input order.

    Raises:
        InvalidTimeError: If a candidate is not a valid "HH:mm" string.
    """
    if not chain or not candidate_times:
        return []

    preferred_id = (preferred_worker_id or "").strip() or None
    kept = []
    for time in candidate_times:
        start_at = snapshot.at(time)
        if preferred_id is None:
            validity = slot_is_valid_for_no_preference(chain, start_at, snapshot)
            if validity.valid:
                kept.append(time)
            else:
                snapshot.emit(
                    "slot.rejected", time=time, mode="no_preference",
                    reason=validity.reject_reason.value, index=validity.reject_index,
                    service=validity.reject_service_name,
                    overlapping_break=validity.overlapping_break,
                )
            continue

        resolution = resolve_chain_workers_detailed(chain, start_at, snapshot, preferred_id)
        if not resolution.ok:
            snapshot.emit(
                "slot.rejected", time=time, mode="preferred",
                reason=resolution.reason.value, index=resolution.failed_index,
            )
            continue
        if not resolved_slots_clear_breaks(resolution.slots, snapshot):
            snapshot.emit("slot.rejected", time=time, mode="preferred", reason="break")
            continue
        kept.append(time)

    logger.debug(
        "Slot mode %s: %d of %d candidate(s) bookable on %s",
        "preferred-worker" if preferred_id else "all-workers",
        len(kept), len(candidate_times), snapshot.day.isoformat(),
    )
    return kept
