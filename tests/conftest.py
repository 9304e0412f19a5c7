"""Shared test fixtures and helpers."""

from datetime import date, datetime
from typing import Optional

import pytest

from booking_chain.logging_context import TraceEvent
from booking_chain.schemas.booking_schema import BookingRecord
from booking_chain.schemas.service_schema import (
    ChainServiceInput,
    FollowUpConfig,
    PricingItem,
    Service,
)
from booking_chain.schemas.worker_schema import BreakRange, DayAvailability, Worker
from booking_chain.scheduling.snapshot import DaySnapshot, build_day_snapshot

# A Monday.
DAY = date(2025, 3, 10)


def at(hhmm: str) -> datetime:
    """Datetime for ``hhmm`` on the test day."""
    hours, minutes = hhmm.split(":")
    return datetime(DAY.year, DAY.month, DAY.day, int(hours), int(minutes))


def make_worker(
    worker_id: str,
    services: Optional[list[str]] = None,
    name: Optional[str] = None,
    active: bool = True,
    all_services_allowed: bool = False,
    availability: Optional[list[DayAvailability]] = None,
) -> Worker:
    """Helper to create a Worker; the name defaults to the capitalized id."""
    return Worker(
        id=worker_id,
        name=name or worker_id.upper(),
        active=active,
        services=services or [],
        all_services_allowed=all_services_allowed,
        availability=availability or [],
    )


def make_item(
    name: str,
    duration: int = 30,
    service_id: Optional[str] = None,
    follow_up: Optional[FollowUpConfig] = None,
    requires_finish: bool = False,
    finish_gap_minutes: Optional[int] = None,
    item_type: Optional[str] = None,
) -> ChainServiceInput:
    """Helper to create a chain entry for a service with a fixed duration."""
    sid = service_id or f"svc-{name.lower()}"
    return ChainServiceInput(
        service=Service(
            id=sid,
            name=name,
            duration=duration,
            requires_finish=requires_finish,
            finish_gap_minutes=finish_gap_minutes,
        ),
        pricing_item=PricingItem(
            id=f"price-{sid}",
            service_id=sid,
            duration_min_minutes=duration,
            duration_max_minutes=duration,
            type=item_type,
            has_follow_up=follow_up is not None,
            follow_up=follow_up,
        ),
    )


def make_follow_up(
    name: str, duration: int = 20, wait: int = 10, service_id: Optional[str] = None
) -> FollowUpConfig:
    return FollowUpConfig(
        name=name, service_id=service_id, duration_minutes=duration, wait_minutes=wait
    )


def make_booking(
    booking_id: str,
    worker_id: str,
    time: str,
    duration: int = 30,
    status: str = "confirmed",
    day: date = DAY,
    **extra,
) -> BookingRecord:
    """Helper to create a canonical booking on the test day."""
    return BookingRecord(
        id=booking_id,
        worker_id=worker_id,
        day=day,
        time=time,
        duration_min=duration,
        status=status,
        **extra,
    )


def make_hours(
    open_: str = "08:00",
    close: str = "20:00",
    breaks: Optional[list[tuple[str, str]]] = None,
    day: str = "mon",
) -> list[DayAvailability]:
    """One-day weekly schedule (Monday by default)."""
    return [
        DayAvailability(
            day=day,
            open=open_,
            close=close,
            breaks=[BreakRange(start=s, end=e) for s, e in breaks or []],
        )
    ]


def make_snapshot(
    workers: list[Worker],
    bookings: Optional[list[BookingRecord]] = None,
    business_hours: Optional[list[DayAvailability]] = None,
    breaks: Optional[list[tuple[str, str]]] = None,
    trace=None,
) -> DaySnapshot:
    return build_day_snapshot(
        DAY,
        workers,
        bookings or [],
        business_hours=business_hours,
        breaks=[BreakRange(start=s, end=e) for s, e in breaks or []],
        trace=trace,
    )


class TraceRecorder:
    """Collects trace events for assertions."""

    def __init__(self):
        self.events: list[TraceEvent] = []

    def __call__(self, event: TraceEvent) -> None:
        self.events.append(event)

    def names(self) -> list[str]:
        return [e.name for e in self.events]


@pytest.fixture
def recorder():
    return TraceRecorder()


@pytest.fixture
def two_stylists():
    return [make_worker("w1", ["Haircut"]), make_worker("w2", ["Haircut"])]
