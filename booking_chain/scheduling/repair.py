"""
Edit-flow helpers: repair stale worker assignments and validate before commit.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Sequence

from booking_chain.schemas.chain_schema import ChainSlot
from booking_chain.schemas.worker_schema import Worker
from booking_chain.scheduling.assignment import first_free_worker
from booking_chain.scheduling.availability import is_worker_free_for_segment
from booking_chain.scheduling.eligibility import eligible_workers_for, worker_can_do
from booking_chain.scheduling.snapshot import DaySnapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    errors: list[str] = field(default_factory=list)


def _assignment_holds(
    snapshot: DaySnapshot,
    worker_id: Optional[str],
    service_name: str,
    service_id: Optional[str],
    start_at: datetime,
    end_at: datetime,
) -> bool:
    worker = snapshot.worker_by_id(worker_id)
    if worker is None or not worker_can_do(worker, service_name, service_id):
        return False
    return is_worker_free_for_segment(
        snapshot, worker.id, snapshot.minutes_of(start_at), snapshot.minutes_of(end_at)
    )


def _find_replacement(
    snapshot: DaySnapshot,
    service_name: str,
    service_id: Optional[str],
    start_at: datetime,
    end_at: datetime,
) -> Optional[Worker]:
    eligible = eligible_workers_for(snapshot.workers, service_name, service_id)
    worker, _ = first_free_worker(
        snapshot, eligible, snapshot.minutes_of(start_at), snapshot.minutes_of(end_at)
    )
    return worker


def repair_invalid_assignments(
    chain_slots: Sequence[ChainSlot], snapshot: DaySnapshot
) -> Optional[list[ChainSlot]]:
    """Keep assignments that still hold and replace the ones that don't.

    An assignment holds when the worker still exists, can perform the service
    and is free for the segment. Returns None if any segment or follow-up has
    no replacement. Pass ``snapshot.without_bookings(...)`` so the bookings
    being edited do not conflict with themselves.
    """
    repaired = []
    for index, slot in enumerate(chain_slots):
        updates = {}
        if not _assignment_holds(
            snapshot, slot.worker_id, slot.service_name, slot.service_id, slot.start_at, slot.end_at
        ):
            replacement = _find_replacement(
                snapshot, slot.service_name, slot.service_id, slot.start_at, slot.end_at
            )
            if replacement is None:
                logger.info("Repair failed: no worker for slot %d (%s)", index + 1, slot.service_name)
                return None
            snapshot.emit(
                "repair.reassigned", index=index, service=slot.service_name,
                previous=slot.worker_id, worker_id=replacement.id,
            )
            updates.update(worker_id=replacement.id, worker_name=replacement.name)

        follow_up = slot.follow_up
        if follow_up is not None and follow_up.service_name and follow_up.duration_min >= 1:
            if not _assignment_holds(
                snapshot, follow_up.worker_id, follow_up.service_name, follow_up.service_id,
                follow_up.start_at, follow_up.end_at,
            ):
                replacement = _find_replacement(
                    snapshot, follow_up.service_name, follow_up.service_id,
                    follow_up.start_at, follow_up.end_at,
                )
                if replacement is None:
                    logger.info(
                        "Repair failed: no worker for slot %d follow-up (%s)",
                        index + 1, follow_up.service_name,
                    )
                    return None
                snapshot.emit(
                    "repair.reassigned", index=index, service=follow_up.service_name,
                    previous=follow_up.worker_id, worker_id=replacement.id, follow_up=True,
                )
                updates["follow_up"] = follow_up.model_copy(
                    update={"worker_id": replacement.id, "worker_name": replacement.name}
                )

        repaired.append(slot.model_copy(update=updates) if updates else slot)
    return repaired


def _check_worker(
    label: str,
    worker_id: Optional[str],
    service_name: str,
    service_id: Optional[str],
    workers_by_id: dict[str, Worker],
) -> Optional[str]:
    if not worker_id:
        return f"{label} ({service_name}): no worker assigned"
    worker = workers_by_id.get(worker_id)
    if worker is None:
        return f"{label} ({service_name}): assigned worker not found"
    if not worker_can_do(worker, service_name, service_id):
        return f'{label} ({service_name}): worker "{worker.name or worker_id}" cannot perform this service'
    return None


def validate_chain_assignments(
    chain_slots: Sequence[ChainSlot], workers: Sequence[Worker]
) -> ValidationResult:
    """Final pre-commit check; collects every problem instead of stopping at the first."""
    workers_by_id = {w.id: w for w in workers}
    errors = []
    for index, slot in enumerate(chain_slots):
        service_name = (slot.service_name or "").strip()
        if not service_name:
            errors.append(f"Slot {index + 1}: missing service name")
            continue
        error = _check_worker(
            f"Slot {index + 1}", slot.worker_id, service_name, slot.service_id, workers_by_id
        )
        if error:
            errors.append(error)

        follow_up = slot.follow_up
        if follow_up is not None and follow_up.service_name and follow_up.duration_min >= 1:
            error = _check_worker(
                f"Slot {index + 1} follow-up",
                follow_up.worker_id,
                follow_up.service_name.strip(),
                follow_up.service_id,
                workers_by_id,
            )
            if error:
                errors.append(error)

    return ValidationResult(valid=not errors, errors=errors)
