"""Existing-booking data model and the ingestion-time normalizer.

Booking documents arrive with years of accumulated field variants
(``time`` vs ``timeHHmm``, ``date`` vs ``dateISO``, ``secondary*`` vs
``followUp*``, a stored ``phases`` array, datetime vs string instants).
``normalize_booking`` collapses them once into ``BookingRecord``; the
resolver only ever sees that shape.

Precedence follows how the documents were written over time:

1. ``startAt``/``endAt`` plus a worker: the document is exactly one block.
   Phase 1 and phase 2 are separate documents in this shape.
2. A ``phases`` array: each phase 1 or phase 2 entry is its own block with
   its own worker, start and end.
3. Otherwise the flat fields, with phase 2 derived from ``secondary*`` /
   ``followUp*`` fields or from the wait after phase 1.
"""

import logging
from datetime import date, datetime
from typing import Any, Iterable, Literal, Mapping, Optional

from pydantic import BaseModel, ValidationError, field_validator

from booking_chain.config import settings
from booking_chain.exceptions import BookingDataError, InvalidTimeError
from booking_chain.utils import format_hhmm, parse_date, parse_hhmm

logger = logging.getLogger(__name__)

CANCELLED_STATUSES = {"cancelled", "canceled"}
PHASE_KINDS = {"primary": 1, "secondary": 2}


class BookingRecord(BaseModel):
    """Canonical booked block: one phase 1 or phase 2 booking for one worker."""

    id: str
    worker_id: Optional[str] = None
    day: date
    time: str
    duration_min: int
    phase: Literal[1, 2] = 1
    parent_booking_id: Optional[str] = None
    status: str = "confirmed"
    wait_min: int = 0
    # Legacy single-document two-phase bookings keep phase 2 on the same record.
    secondary_duration_min: int = 0
    secondary_worker_id: Optional[str] = None
    secondary_start: Optional[str] = None
    secondary_end: Optional[str] = None

    @field_validator("time", "secondary_start", "secondary_end")
    @classmethod
    def validate_hhmm(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        parse_hhmm(v)
        return v.strip()

    @property
    def is_cancelled(self) -> bool:
        return self.status.strip().lower() in CANCELLED_STATUSES

    @property
    def start_min(self) -> int:
        return parse_hhmm(self.time)


def _first(raw: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = raw.get(key)
        if value is not None and value != "":
            return value
    return None


def _to_datetime(value: Any, field_name: str) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.strip())
        except ValueError:
            raise BookingDataError(f"{field_name} is not an ISO datetime: {value!r}") from None
    # Firestore-style timestamps expose to_datetime()
    converter = getattr(value, "to_datetime", None)
    if callable(converter):
        return converter()
    raise BookingDataError(f"{field_name} has unsupported type {type(value).__name__}")


def _to_minutes(value: Any, field_name: str) -> Optional[int]:
    if value is None:
        return None
    try:
        minutes = int(value)
    except (TypeError, ValueError):
        raise BookingDataError(f"{field_name} must be a number of minutes, got {value!r}") from None
    return max(0, minutes)


def _span_minutes(start: datetime, end: datetime) -> int:
    return max(0, int((end - start).total_seconds() // 60))


def _phase_number(entry: Mapping[str, Any]) -> Optional[int]:
    number = entry.get("phase")
    if number is None:
        return PHASE_KINDS.get(str(entry.get("kind") or "").strip().lower())
    try:
        number = int(number)
    except (TypeError, ValueError):
        return None
    return number if number in (1, 2) else None


def stored_phases(
    raw: Mapping[str, Any], default_worker_id: Optional[str]
) -> dict[int, tuple[str, datetime, datetime]]:
    """Blocks from a stored ``phases`` array, keyed by phase number.

    Entries without a phase 1/2 marker, a worker, or both instants are skipped;
    the first usable entry per phase wins.
    """
    entries = raw.get("phases")
    if not isinstance(entries, (list, tuple)):
        return {}
    blocks: dict[int, tuple[str, datetime, datetime]] = {}
    for position, entry in enumerate(entries):
        if not isinstance(entry, Mapping):
            continue
        number = _phase_number(entry)
        worker_id = _first(entry, "workerId") or default_worker_id
        if number is None or number in blocks or not worker_id:
            continue
        start = _to_datetime(_first(entry, "startAt"), f"phases[{position}].startAt")
        end = _to_datetime(_first(entry, "endAt"), f"phases[{position}].endAt")
        if start is None or end is None:
            continue
        blocks[number] = (str(worker_id), start, end)
    return blocks


def _hhmm_of(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return format_hhmm(value.hour * 60 + value.minute)


def normalize_booking(raw: Mapping[str, Any]) -> BookingRecord:
    """Collapse a raw booking document into a ``BookingRecord``.

    Raises:
        BookingDataError: If the id, day or start time is missing or malformed.
    """
    booking_id = _first(raw, "id")
    if booking_id is None:
        raise BookingDataError("Booking is missing its id")
    booking_id = str(booking_id)

    worker_id = _first(raw, "workerId")
    start_at = _to_datetime(_first(raw, "startAt", "start"), "startAt")
    end_at = _to_datetime(_first(raw, "endAt", "end"), "endAt")

    single_block = bool(start_at and end_at and worker_id)
    phases = {} if single_block else stored_phases(raw, worker_id)
    if 1 in phases:
        worker_id, start_at, end_at = phases[1]
        day, time_str = start_at.date(), start_at.strftime("%H:%M")
    else:
        try:
            raw_day = _first(raw, "dateISO", "date", "dateStr")
            day = parse_date(raw_day) if raw_day is not None else (start_at.date() if start_at else None)
            raw_time = _first(raw, "timeHHmm", "time")
            time_str = str(raw_time).strip() if raw_time is not None else (
                start_at.strftime("%H:%M") if start_at else None
            )
            if time_str is not None:
                parse_hhmm(time_str)
        except InvalidTimeError as exc:
            raise BookingDataError(f"Booking {booking_id}: {exc}") from exc

    if day is None or time_str is None:
        raise BookingDataError(f"Booking {booking_id} has no date or start time")

    if start_at and end_at:
        duration_min = _span_minutes(start_at, end_at)
    else:
        duration_min = _to_minutes(
            _first(raw, "primaryDurationMin", "durationMin", "duration"), "durationMin"
        )
        if duration_min is None:
            duration_min = settings.scheduling.legacy_booking_duration_min

    if single_block:
        secondary_worker_id, secondary_start_at, secondary_end_at = None, None, None
        secondary_duration = 0
    elif 2 in phases:
        secondary_worker_id, secondary_start_at, secondary_end_at = phases[2]
        secondary_duration = _span_minutes(secondary_start_at, secondary_end_at)
    else:
        secondary_worker_id = _first(raw, "secondaryWorkerId", "followUpWorkerId")
        secondary_start_at = _to_datetime(
            _first(raw, "secondaryStartAt", "followUpStartAt"), "secondaryStartAt"
        )
        secondary_end_at = _to_datetime(
            _first(raw, "secondaryEndAt", "followUpEndAt"), "secondaryEndAt"
        )
        secondary_duration = _to_minutes(
            _first(raw, "secondaryDurationMin", "followUpDurationMinutes"), "secondaryDurationMin"
        ) or 0
        if secondary_start_at and secondary_end_at and secondary_duration == 0:
            secondary_duration = _span_minutes(secondary_start_at, secondary_end_at)

    wait_min = _to_minutes(_first(raw, "waitMin", "waitMinutes"), "waitMin") or 0
    phase = _first(raw, "phase") or 1
    status = str(_first(raw, "status") or "confirmed").strip().lower()

    try:
        return BookingRecord(
            id=booking_id,
            worker_id=worker_id,
            day=day,
            time=time_str,
            duration_min=duration_min,
            phase=int(phase),
            parent_booking_id=_first(raw, "parentBookingId"),
            status=status,
            wait_min=wait_min,
            secondary_duration_min=secondary_duration,
            secondary_worker_id=secondary_worker_id,
            secondary_start=_hhmm_of(secondary_start_at),
            secondary_end=_hhmm_of(secondary_end_at),
        )
    except (ValidationError, ValueError) as exc:
        raise BookingDataError(f"Booking {booking_id} is malformed: {exc}") from exc


def normalize_bookings(raws: Iterable[Mapping[str, Any]]) -> list[BookingRecord]:
    """Normalize a batch of raw booking documents."""
    records = [normalize_booking(raw) for raw in raws]
    logger.debug("Normalized %d booking(s)", len(records))
    return records
