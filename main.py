"""
CLI entry point: evaluate an availability request file.

Prints the bookable start times for the requested chain and the worker
assignment for the first of them.

Usage:
    python main.py request.json
    python main.py request.json --preferred-worker w1 --trace
"""

import argparse
import json
import logging
import sys
import uuid
from pathlib import Path

from pydantic import ValidationError

from booking_chain.config import settings
from booking_chain.exceptions import BookingEngineError
from booking_chain.logging_context import log_trace, set_request_id
from booking_chain.schemas.request_schema import AvailabilityRequest
from booking_chain.scheduling import (
    build_chain_with_finishing_service,
    build_day_snapshot,
    compute_available_slots,
    get_chain_total_duration,
    resolve_chain_workers_detailed,
)
from booking_chain.utils import format_hhmm

logger = logging.getLogger(__name__)


def load_request(path: Path) -> AvailabilityRequest:
    with path.open(encoding="utf-8") as fh:
        return AvailabilityRequest.model_validate(json.load(fh))


def format_report(request: AvailabilityRequest, times: list[str], resolution) -> str:
    lines = [f"Date: {request.date}", f"Bookable times: {', '.join(times) or '(none)'}"]
    if resolution is None:
        return "\n".join(lines)
    if not resolution.ok:
        lines.append(
            f"Assignment failed at segment {resolution.failed_index + 1} "
            f"({resolution.service_name}): {resolution.reason.value}"
        )
        return "\n".join(lines)
    lines.append(f"Chain at {times[0]}:")
    for slot in resolution.slots:
        lines.append(
            f"  {slot.order + 1}. {slot.start_at:%H:%M}-{slot.end_at:%H:%M} "
            f"{slot.service_name} -> {slot.worker_name} ({slot.worker_id})"
        )
        if slot.follow_up is not None:
            fu = slot.follow_up
            lines.append(
                f"     follow-up {fu.start_at:%H:%M}-{fu.end_at:%H:%M} "
                f"{fu.service_name} -> {fu.worker_name} ({fu.worker_id})"
            )
    return "\n".join(lines)


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Compute bookable times and worker assignment for a service chain."
    )
    parser.add_argument("request", type=str, help="Path to the availability request JSON file.")
    parser.add_argument(
        "--preferred-worker",
        type=str,
        default=None,
        help="Preferred worker id (overrides preferredWorkerId in the file).",
    )
    parser.add_argument(
        "--trace",
        action="store_true",
        help="Log every resolver decision at DEBUG level.",
    )
    args = parser.parse_args()

    if args.trace:
        logging.getLogger().setLevel(logging.DEBUG)
    set_request_id(f"CLI-{uuid.uuid4().hex[:8]}")

    request_path = Path(args.request)
    if not request_path.exists():
        logger.error("Request file not found: %s", request_path)
        sys.exit(1)

    try:
        request = load_request(request_path)
        chain = build_chain_with_finishing_service(
            request.build_chain(), request.services, request.pricing_items
        )
        snapshot = build_day_snapshot(
            request.date,
            request.workers,
            request.bookings,
            business_hours=request.business_hours,
            breaks=request.breaks,
            trace=log_trace if args.trace or settings.trace_decisions else None,
        )
    except (ValidationError, BookingEngineError, json.JSONDecodeError) as exc:
        logger.error("Invalid request %s: %s", request_path, exc)
        sys.exit(1)

    preferred = args.preferred_worker or request.preferred_worker_id
    logger.info(
        "Resolving %d-service chain (%s total) over %d candidate(s)",
        len(chain), format_hhmm(get_chain_total_duration(chain)), len(request.candidate_times),
    )
    try:
        times = compute_available_slots(chain, request.candidate_times, snapshot, preferred)
    except BookingEngineError as exc:
        logger.error("Invalid candidate time: %s", exc)
        sys.exit(1)

    resolution = None
    if times:
        resolution = resolve_chain_workers_detailed(chain, snapshot.at(times[0]), snapshot, preferred)
    sys.stdout.write(format_report(request, times, resolution) + "\n")


if __name__ == "__main__":
    main()
