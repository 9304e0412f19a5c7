"""
Follow-up (phase 2) worker assignment.

Phase 2 is placed after the primary's end plus the wait and may be done by a
different worker. Preference order: the customer's preferred worker, then
the phase 1 worker for continuity, then a deterministic pick among everyone
else who is eligible and free.
"""

import logging
from typing import Optional, Sequence

from booking_chain.schemas.worker_schema import Worker
from booking_chain.scheduling.availability import is_worker_free_for_segment
from booking_chain.scheduling.eligibility import eligible_workers_for
from booking_chain.scheduling.snapshot import DaySnapshot

logger = logging.getLogger(__name__)


def get_eligible_phase2_workers(
    snapshot: DaySnapshot,
    phase1_start_min: int,
    phase1_duration_min: int,
    wait_min: int,
    phase2_duration_min: int,
    service_name: str,
    service_id: Optional[str] = None,
) -> list[Worker]:
    """Workers who can perform the follow-up and are free for its whole span."""
    start = phase1_start_min + phase1_duration_min + max(0, wait_min)
    end = start + phase2_duration_min
    return [
        w for w in eligible_workers_for(snapshot.workers, service_name, service_id)
        if is_worker_free_for_segment(snapshot, w.id, start, end)
    ]


def auto_assign_phase2_worker(
    candidates: Sequence[Worker], snapshot: DaySnapshot
) -> Optional[Worker]:
    """Least busy candidate that day; ties go to the smallest worker id."""
    if not candidates:
        return None
    return min(candidates, key=lambda w: (len(snapshot.busy_intervals(w.id)), w.id))


def resolve_phase2_worker(
    snapshot: DaySnapshot,
    phase1_worker: Optional[Worker],
    phase1_start_min: int,
    phase1_duration_min: int,
    wait_min: int,
    phase2_duration_min: int,
    service_name: str,
    service_id: Optional[str] = None,
    preferred_worker_id: Optional[str] = None,
) -> Optional[Worker]:
    """Pick the follow-up worker, or None if nobody can take it."""
    eligible = get_eligible_phase2_workers(
        snapshot, phase1_start_min, phase1_duration_min, wait_min,
        phase2_duration_min, service_name, service_id,
    )
    if not eligible:
        snapshot.emit("phase2.unassignable", service=service_name, service_id=service_id)
        return None

    by_id = {w.id: w for w in eligible}
    if preferred_worker_id and preferred_worker_id in by_id:
        chosen, rule = by_id[preferred_worker_id], "preferred"
    elif phase1_worker is not None and phase1_worker.id in by_id:
        chosen, rule = by_id[phase1_worker.id], "phase1_worker"
    else:
        chosen, rule = auto_assign_phase2_worker(eligible, snapshot), "auto"

    snapshot.emit(
        "phase2.assigned", service=service_name, worker_id=chosen.id, rule=rule,
        candidates=[w.id for w in eligible],
    )
    return chosen
