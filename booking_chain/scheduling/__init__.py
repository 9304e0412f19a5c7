from booking_chain.scheduling.assignment import (
    ChainResolution,
    RejectReason,
    can_chain_be_assigned,
    resolve_chain_workers,
    resolve_chain_workers_detailed,
)
from booking_chain.scheduling.availability import find_worker_conflict, is_worker_available_in_slot
from booking_chain.scheduling.eligibility import can_worker_perform_service, workers_who_can_perform_service
from booking_chain.scheduling.no_preference import slot_is_valid_for_no_preference
from booking_chain.scheduling.repair import repair_invalid_assignments, validate_chain_assignments
from booking_chain.scheduling.slots import compute_available_slots
from booking_chain.scheduling.snapshot import DaySnapshot, build_day_snapshot
from booking_chain.scheduling.timing import (
    build_chain_with_finishing_service,
    compute_chain_slots,
    get_chain_total_duration,
)

__all__ = [
    "DaySnapshot", "build_day_snapshot",
    "can_worker_perform_service", "workers_who_can_perform_service",
    "is_worker_available_in_slot", "find_worker_conflict",
    "compute_chain_slots", "build_chain_with_finishing_service", "get_chain_total_duration",
    "resolve_chain_workers", "resolve_chain_workers_detailed", "can_chain_be_assigned",
    "ChainResolution", "RejectReason",
    "slot_is_valid_for_no_preference", "compute_available_slots",
    "repair_invalid_assignments", "validate_chain_assignments",
]
