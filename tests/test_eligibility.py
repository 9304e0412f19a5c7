"""Tests for worker-service eligibility."""

import pytest

from booking_chain.scheduling.eligibility import (
    can_worker_perform_service,
    eligible_workers_for,
    worker_can_do,
    workers_who_can_perform_service,
)
from tests.conftest import make_worker


class TestCanWorkerPerformService:
    def test_listed_service_is_allowed(self):
        assert can_worker_perform_service(make_worker("w1", ["Haircut"]), "Haircut")

    def test_identifier_is_trimmed(self):
        assert can_worker_perform_service(make_worker("w1", ["Haircut"]), "  Haircut ")

    def test_match_is_exact(self):
        assert not can_worker_perform_service(make_worker("w1", ["Haircut"]), "haircut")

    def test_unlisted_service_is_denied(self):
        assert not can_worker_perform_service(make_worker("w1", ["Haircut"]), "Color")

    def test_empty_services_means_nothing(self):
        assert not can_worker_perform_service(make_worker("w1", []), "Haircut")

    @pytest.mark.parametrize("identifier", ["", "   ", None])
    def test_blank_identifier_is_denied(self, identifier):
        worker = make_worker("w1", all_services_allowed=True)
        assert not can_worker_perform_service(worker, identifier)

    @pytest.mark.parametrize("service", ["Haircut", "Color", "anything"])
    def test_inactive_worker_can_do_nothing(self, service):
        worker = make_worker("w1", ["Haircut", "Color"], active=False, all_services_allowed=True)
        assert not can_worker_perform_service(worker, service)

    @pytest.mark.parametrize("service", ["Haircut", "Color", "svc-42"])
    def test_all_services_allowed_grants_everything(self, service):
        worker = make_worker("w1", [], all_services_allowed=True)
        assert can_worker_perform_service(worker, service)

    def test_numeric_service_ids_are_coerced(self):
        worker = make_worker("w1", [42])
        assert worker.services == ["42"]
        assert can_worker_perform_service(worker, "42")


class TestWorkersWhoCanPerformService:
    def test_preserves_roster_order(self):
        workers = [
            make_worker("w3", ["Haircut"]),
            make_worker("w1", ["Color"]),
            make_worker("w2", ["Haircut"]),
        ]
        result = workers_who_can_perform_service(workers, "Haircut")
        assert [w.id for w in result] == ["w3", "w2"]

    def test_blank_identifier_returns_empty(self):
        assert workers_who_can_perform_service([make_worker("w1", ["Haircut"])], " ") == []


class TestEligibleWorkersFor:
    def setup_method(self):
        self.by_name = make_worker("w1", ["Haircut"])
        self.by_id = make_worker("w2", ["svc-haircut"])

    def test_name_match_wins(self):
        result = eligible_workers_for([self.by_name, self.by_id], "Haircut", "svc-haircut")
        assert [w.id for w in result] == ["w1"]

    def test_falls_back_to_service_id(self):
        result = eligible_workers_for([self.by_id], "Haircut", "svc-haircut")
        assert [w.id for w in result] == ["w2"]

    def test_no_match_returns_empty(self):
        assert eligible_workers_for([self.by_name], "Color", "svc-color") == []

    def test_worker_can_do_by_name_or_id(self):
        assert worker_can_do(self.by_name, "Haircut", None)
        assert worker_can_do(self.by_id, "Haircut", "svc-haircut")
        assert not worker_can_do(self.by_id, "Haircut", None)
