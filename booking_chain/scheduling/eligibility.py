"""
Worker-service compatibility: the single answer to "can this worker perform
this service?" used by every resolver.

Workers list the service identifiers (names or ids) they may perform. An
empty list means no services; only ``all_services_allowed`` grants everything.
"""

from typing import Optional, Sequence

from booking_chain.schemas.worker_schema import Worker


def can_worker_perform_service(worker: Worker, service_identifier: Optional[str]) -> bool:
    """Return True iff the worker is active and allowed to perform the service."""
    if not worker.active:
        return False
    if service_identifier is None or not str(service_identifier).strip():
        return False
    if worker.all_services_allowed:
        return True
    return str(service_identifier).strip() in worker.services


def workers_who_can_perform_service(
    workers: Sequence[Worker], service_identifier: Optional[str]
) -> list[Worker]:
    """Filter workers to those who can perform the service, preserving order."""
    if service_identifier is None or not str(service_identifier).strip():
        return []
    return [w for w in workers if can_worker_perform_service(w, service_identifier)]


def worker_can_do(worker: Worker, service_name: Optional[str], service_id: Optional[str]) -> bool:
    """Eligibility by service name or, failing that, by service id."""
    if can_worker_perform_service(worker, service_name):
        return True
    return bool(service_id) and can_worker_perform_service(worker, service_id)


def eligible_workers_for(
    workers: Sequence[Worker], service_name: Optional[str], service_id: Optional[str] = None
) -> list[Worker]:
    """Workers eligible for a segment: match by name, fall back to id when nobody matches."""
    name = (service_name or "").strip()
    sid = (service_id or "").strip()
    eligible = workers_who_can_perform_service(workers, name)
    if not eligible and sid and sid != name:
        eligible = workers_who_can_perform_service(workers, sid)
    return eligible
