"""Tests for import chains and module integrity.

Ensures all public modules can be imported without errors and
that re-exports from __init__.py files work correctly.
"""


class TestSchemaImports:
    def test_import_service_schema(self):
        from booking_chain.schemas.service_schema import ChainServiceInput, PricingItem, Service
        assert ChainServiceInput is not None

    def test_import_worker_schema(self):
        from booking_chain.schemas.worker_schema import WEEKDAY_KEYS, Worker
        assert WEEKDAY_KEYS[0] == "mon"
        assert Worker(id="w1", name="Dana").services == []

    def test_import_chain_schema(self):
        from booking_chain.schemas.chain_schema import ChainSlot, FollowUpSlot
        assert ChainSlot.model_config["frozen"] is True

    def test_import_request_schema(self):
        from booking_chain.schemas.request_schema import AvailabilityRequest
        assert AvailabilityRequest(date="2025-03-10").candidate_times == []


class TestSchedulingImports:
    def test_reexports(self):
        from booking_chain.scheduling import (
            DaySnapshot,
            RejectReason,
            build_day_snapshot,
            compute_available_slots,
            repair_invalid_assignments,
            resolve_chain_workers,
            validate_chain_assignments,
        )
        assert RejectReason.NO_ELIGIBLE == "no_eligible"

    def test_all_is_consistent(self):
        import booking_chain.scheduling as scheduling

        for name in scheduling.__all__:
            assert hasattr(scheduling, name), name


class TestAmbientImports:
    def test_config_singleton(self):
        from booking_chain.config import settings
        assert settings.scheduling.default_service_duration_min >= 1

    def test_exceptions_are_value_errors(self):
        from booking_chain.exceptions import BookingDataError, BookingEngineError, InvalidTimeError
        assert issubclass(InvalidTimeError, BookingEngineError)
        assert issubclass(BookingDataError, ValueError)

    def test_cli_entry_point(self):
        import main
        assert callable(main.main)
