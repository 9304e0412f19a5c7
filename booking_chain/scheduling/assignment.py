"""
Worker assignment for a whole chain at one start time.

Segments are resolved strictly in order. A preferred worker takes every
segment they are eligible and free for; the first segment is never handed
to anyone else when a preference was given. Other segments fall back to the
first free eligible worker in roster order, and nested follow-ups go through
the phase 2 resolver. One unassignable segment fails the whole chain.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Sequence

from booking_chain.logging_context import get_request_logger
from booking_chain.schemas.chain_schema import ChainSlot
from booking_chain.schemas.service_schema import ChainServiceInput
from booking_chain.schemas.worker_schema import Worker
from booking_chain.scheduling.availability import ON_BREAK, unavailability_reason
from booking_chain.scheduling.eligibility import eligible_workers_for, worker_can_do
from booking_chain.scheduling.phase2 import resolve_phase2_worker
from booking_chain.scheduling.snapshot import DaySnapshot
from booking_chain.scheduling.timing import compute_chain_slots

logger = get_request_logger(__name__)


class RejectReason(str, Enum):
    NO_ELIGIBLE = "no_eligible"
    NO_AVAILABLE = "no_available"
    BREAK = "break"
    PREFERRED_UNAVAILABLE = "preferred_unavailable"


@dataclass(frozen=True)
class ChainResolution:
    """Either the fully assigned slots or where and why assignment stopped."""

    slots: Optional[list[ChainSlot]] = None
    failed_index: Optional[int] = None
    reason: Optional[RejectReason] = None
    service_name: Optional[str] = None
    follow_up: bool = False
    blocked_workers: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.slots is not None


def first_free_worker(
    snapshot: DaySnapshot, candidates: Sequence[Worker], start_min: int, end_min: int
) -> tuple[Optional[Worker], dict[str, str]]:
    """First candidate free for the span, plus why each earlier one was skipped."""
    blocked: dict[str, str] = {}
    for worker in candidates:
        reason = unavailability_reason(snapshot, worker.id, start_min, end_min)
        if reason is None:
            return worker, blocked
        blocked[worker.id] = reason
    return None, blocked


def _reject(
    snapshot: DaySnapshot,
    index: int,
    slot: ChainSlot,
    reason: RejectReason,
    follow_up: bool = False,
    blocked: Optional[dict[str, str]] = None,
) -> ChainResolution:
    service_name = slot.follow_up.service_name if follow_up and slot.follow_up else slot.service_name
    logger.debug(
        "Chain rejected at segment %d%s (%s): %s",
        index + 1, " follow-up" if follow_up else "", service_name, reason.value,
    )
    snapshot.emit(
        "chain.rejected", index=index, reason=reason.value, service=service_name,
        follow_up=follow_up, blocked=blocked or {},
    )
    return ChainResolution(
        failed_index=index,
        reason=reason,
        service_name=service_name,
        follow_up=follow_up,
        blocked_workers=blocked or {},
    )


def resolve_chain_workers_detailed(
    chain: Sequence[ChainServiceInput],
    start_at: datetime,
    snapshot: DaySnapshot,
    preferred_worker_id: Optional[str] = None,
) -> ChainResolution:
    """Resolve every segment, reporting the first failure instead of just None."""
    preferred_id = (preferred_worker_id or "").strip() or None
    preferred = snapshot.worker_by_id(preferred_id)

    resolved: list[ChainSlot] = []
    for index, slot in enumerate(compute_chain_slots(chain, start_at)):
        service_name = (slot.service_name or "").strip()
        service_id = (slot.service_id or "").strip() or None

        eligible = eligible_workers_for(snapshot.workers, service_name, service_id)
        if not eligible:
            return _reject(snapshot, index, slot, RejectReason.NO_ELIGIBLE)

        start_min = snapshot.minutes_of(slot.start_at)
        end_min = start_min + slot.duration_min

        worker = None
        if preferred is not None and worker_can_do(preferred, service_name, service_id):
            if unavailability_reason(snapshot, preferred.id, start_min, end_min) is None:
                worker = preferred

        if worker is None and preferred_id and index == 0:
            return _reject(snapshot, index, slot, RejectReason.PREFERRED_UNAVAILABLE)

        if worker is None:
            worker, blocked = first_free_worker(snapshot, eligible, start_min, end_min)
            if worker is None:
                reason = RejectReason.BREAK if ON_BREAK in blocked.values() else RejectReason.NO_AVAILABLE
                return _reject(snapshot, index, slot, reason, blocked=blocked)

        follow_up = slot.follow_up
        if follow_up is not None:
            follow_up_worker = resolve_phase2_worker(
                snapshot,
                phase1_worker=worker,
                phase1_start_min=start_min,
                phase1_duration_min=slot.duration_min,
                wait_min=follow_up.wait_min,
                phase2_duration_min=follow_up.duration_min,
                service_name=follow_up.service_name,
                service_id=follow_up.service_id,
                preferred_worker_id=preferred_id,
            )
            if follow_up_worker is None:
                return _reject(snapshot, index, slot, RejectReason.NO_AVAILABLE, follow_up=True)
            follow_up = follow_up.model_copy(
                update={"worker_id": follow_up_worker.id, "worker_name": follow_up_worker.name}
            )

        snapshot.emit("chain.assigned", index=index, service=service_name, worker_id=worker.id)
        resolved.append(slot.model_copy(
            update={"worker_id": worker.id, "worker_name": worker.name, "follow_up": follow_up}
        ))

    return ChainResolution(slots=resolved)


def resolve_chain_workers(
    chain: Sequence[ChainServiceInput],
    start_at: datetime,
    snapshot: DaySnapshot,
    preferred_worker_id: Optional[str] = None,
) -> Optional[list[ChainSlot]]:
    """Fully assigned slots for the chain at ``start_at``, or None if any segment fails."""
    return resolve_chain_workers_detailed(chain, start_at, snapshot, preferred_worker_id).slots


def can_chain_be_assigned(
    chain: Sequence[ChainServiceInput],
    start_at: datetime,
    snapshot: DaySnapshot,
    preferred_worker_id: Optional[str] = None,
) -> bool:
    return resolve_chain_workers(chain, start_at, snapshot, preferred_worker_id) is not None
