"""Tests for booking normalization and the contract schemas."""

from datetime import date, datetime

import pytest
from pydantic import ValidationError

from booking_chain.exceptions import BookingDataError
from booking_chain.schemas.booking_schema import normalize_booking, normalize_bookings
from booking_chain.schemas.service_schema import ChainServiceInput, FollowUpConfig, PricingItem
from booking_chain.schemas.worker_schema import BreakRange, DayAvailability, Worker


class FakeTimestamp:
    """Stands in for a datastore timestamp exposing to_datetime()."""

    def __init__(self, value: datetime):
        self._value = value

    def to_datetime(self) -> datetime:
        return self._value


class TestNormalizeBooking:
    def test_canonical_fields(self):
        record = normalize_booking({
            "id": "b1", "workerId": "w1", "dateISO": "2025-03-10", "timeHHmm": "09:30",
            "durationMin": 45, "status": "Confirmed",
        })
        assert record.day == date(2025, 3, 10)
        assert record.time == "09:30"
        assert record.duration_min == 45
        assert record.status == "confirmed"
        assert record.phase == 1

    def test_legacy_date_and_time_keys(self):
        record = normalize_booking({"id": "b1", "workerId": "w1", "date": "2025-03-10", "time": "14:00"})
        assert record.day == date(2025, 3, 10)
        assert record.start_min == 14 * 60

    def test_missing_duration_uses_legacy_default(self):
        record = normalize_booking({"id": "b1", "dateStr": "2025-03-10", "time": "14:00"})
        assert record.duration_min == 60

    def test_start_and_end_instants(self):
        record = normalize_booking({
            "id": "b1", "workerId": "w1",
            "startAt": "2025-03-10T10:00:00", "endAt": FakeTimestamp(datetime(2025, 3, 10, 11, 15)),
        })
        assert record.day == date(2025, 3, 10)
        assert record.time == "10:00"
        assert record.duration_min == 75

    def test_follow_up_fields_collapse_into_secondary(self):
        record = normalize_booking({
            "id": "b1", "workerId": "w1", "date": "2025-03-10", "time": "10:00", "durationMin": 60,
            "waitMinutes": 10, "followUpWorkerId": "w2",
            "followUpStartAt": datetime(2025, 3, 10, 11, 10),
            "followUpEndAt": datetime(2025, 3, 10, 11, 30),
        })
        assert record.wait_min == 10
        assert record.secondary_worker_id == "w2"
        assert (record.secondary_start, record.secondary_end) == ("11:10", "11:30")
        assert record.secondary_duration_min == 20

    def test_start_and_end_document_is_one_block(self):
        record = normalize_booking({
            "id": "b1", "workerId": "w1",
            "startAt": "2025-03-10T10:00:00", "endAt": "2025-03-10T11:00:00",
            "waitMin": 10, "secondaryDurationMin": 30, "secondaryWorkerId": "w2",
            "phases": [{"phase": 2, "workerId": "w2",
                        "startAt": "2025-03-10T11:10:00", "endAt": "2025-03-10T11:40:00"}],
        })
        assert record.duration_min == 60
        assert record.secondary_duration_min == 0
        assert record.secondary_worker_id is None
        assert record.secondary_start is None

    def test_phases_array_gives_each_phase_its_own_block(self):
        record = normalize_booking({
            "id": "b1", "workerId": "w1", "date": "2025-03-10", "time": "09:00", "durationMin": 15,
            "phases": [
                {"phase": 1, "workerId": "w1",
                 "startAt": "2025-03-10T10:00:00", "endAt": "2025-03-10T11:00:00"},
                {"phase": 2, "workerId": "w2",
                 "startAt": datetime(2025, 3, 10, 11, 10), "endAt": FakeTimestamp(datetime(2025, 3, 10, 11, 40))},
            ],
        })
        assert (record.worker_id, record.time, record.duration_min) == ("w1", "10:00", 60)
        assert record.secondary_worker_id == "w2"
        assert (record.secondary_start, record.secondary_end) == ("11:10", "11:40")
        assert record.secondary_duration_min == 30

    def test_phases_array_legacy_kind_and_worker_fallback(self):
        record = normalize_booking({
            "id": "b1", "workerId": "w1",
            "phases": [
                {"kind": "primary", "startAt": "2025-03-10T10:00:00", "endAt": "2025-03-10T10:45:00"},
                {"kind": "wait", "startAt": "2025-03-10T10:45:00", "endAt": "2025-03-10T11:00:00"},
                {"kind": "secondary", "startAt": "2025-03-10T11:00:00", "endAt": "2025-03-10T11:20:00"},
            ],
        })
        assert record.day == date(2025, 3, 10)
        assert record.duration_min == 45
        assert record.secondary_worker_id == "w1"
        assert (record.secondary_start, record.secondary_end) == ("11:00", "11:20")

    def test_phases_array_used_when_document_has_no_worker(self):
        record = normalize_booking({
            "id": "b1", "startAt": "2025-03-10T10:00:00", "endAt": "2025-03-10T11:00:00",
            "phases": [{"phase": 1, "workerId": "w3",
                        "startAt": "2025-03-10T10:00:00", "endAt": "2025-03-10T11:00:00"}],
        })
        assert record.worker_id == "w3"
        assert record.secondary_duration_min == 0

    def test_unusable_phase_entries_are_skipped(self):
        record = normalize_booking({
            "id": "b1", "workerId": "w1", "date": "2025-03-10", "time": "10:00", "durationMin": 30,
            "phases": [{"phase": 2, "workerId": "w2", "startAt": "2025-03-10T11:00:00"}, "junk"],
        })
        assert record.time == "10:00"
        assert record.secondary_duration_min == 0

    def test_negative_wait_clamps_to_zero(self):
        record = normalize_booking({"id": "b1", "date": "2025-03-10", "time": "10:00", "waitMin": -5})
        assert record.wait_min == 0

    def test_cancelled_spellings(self):
        for status in ("cancelled", "CANCELED"):
            record = normalize_booking({"id": "b", "date": "2025-03-10", "time": "10:00", "status": status})
            assert record.is_cancelled

    @pytest.mark.parametrize("raw", [
        {"date": "2025-03-10", "time": "10:00"},
        {"id": "b1", "time": "10:00"},
        {"id": "b1", "date": "2025-03-10"},
        {"id": "b1", "date": "10/03/2025", "time": "10:00"},
        {"id": "b1", "date": "2025-03-10", "time": "25:00"},
        {"id": "b1", "date": "2025-03-10", "time": "10:00", "durationMin": "long"},
        {"id": "b1", "startAt": "yesterday"},
    ])
    def test_malformed_input_raises(self, raw):
        with pytest.raises(BookingDataError):
            normalize_booking(raw)

    def test_normalize_batch(self):
        records = normalize_bookings([
            {"id": "b1", "date": "2025-03-10", "time": "09:00"},
            {"id": 2, "date": "2025-03-10", "time": "10:00"},
        ])
        assert [r.id for r in records] == ["b1", "2"]


class TestContractSchemas:
    def test_worker_accepts_camel_case(self):
        worker = Worker.model_validate({
            "id": "w1", "name": "Dana", "allServicesAllowed": True,
            "availability": [{"day": "mon", "open": "09:00", "close": "17:00"}],
        })
        assert worker.all_services_allowed
        assert worker.availability_for("mon").window().end_min == 17 * 60
        assert worker.availability_for("tue") is None

    def test_worker_requires_id(self):
        with pytest.raises(ValidationError):
            Worker(id=" ", name="Nobody")

    def test_closed_day_has_empty_window(self):
        closed = DayAvailability(day="sun", open=None, close="")
        assert closed.is_closed
        assert closed.window().is_empty

    def test_break_range_validates_times(self):
        with pytest.raises(ValidationError):
            BreakRange(start="12:00", end="1pm")

    def test_pricing_duration_fallbacks(self):
        assert PricingItem(id="p", service_id="s", duration_min_minutes=20, duration_max_minutes=40).duration == 40
        assert PricingItem(id="p", service_id="s", duration_min_minutes=20).duration == 20
        assert PricingItem(id="p", service_id="s").duration == 30

    def test_active_follow_up_requires_flag_name_and_duration(self):
        follow_up = FollowUpConfig(name="Wash", duration_minutes=20)
        assert PricingItem(id="p", service_id="s", follow_up=follow_up).active_follow_up is None
        assert PricingItem(
            id="p", service_id="s", has_follow_up=True, follow_up=follow_up
        ).active_follow_up == follow_up
        blank = FollowUpConfig(name="  ", duration_minutes=20)
        assert PricingItem(id="p", service_id="s", has_follow_up=True, follow_up=blank).active_follow_up is None

    def test_follow_up_key(self):
        assert FollowUpConfig(name=" Wash ", service_id=" svc-wash ").key == "svc-wash"
        assert FollowUpConfig(name=" Wash ").key == "wash"

    def test_chain_input_from_json(self):
        item = ChainServiceInput.model_validate({
            "service": {"id": "s1", "name": "Color", "requiresFinish": True},
            "pricingItem": {
                "id": "p1", "serviceId": "s1", "durationMaxMinutes": 60, "hasFollowUp": True,
                "followUp": {"name": "Wash", "durationMinutes": 20, "waitMinutes": -3},
            },
        })
        assert item.service.requires_finish
        assert item.pricing_item.follow_up.wait_minutes == 0
        assert item.finish_gap_before is None
