"""Availability request document: catalog, roster, bookings and the requested chain for one day."""

from typing import Any, Optional

from pydantic import Field

from booking_chain.exceptions import BookingDataError
from booking_chain.schemas.contract_model import ContractModel
from booking_chain.schemas.service_schema import ChainServiceInput, PricingItem, Service
from booking_chain.schemas.worker_schema import BreakRange, DayAvailability, Worker


class ChainItemRef(ContractModel):
    """A requested service, by catalog id, with an optional pricing variant."""

    service_id: str
    pricing_item_id: Optional[str] = None


class AvailabilityRequest(ContractModel):
    date: str
    services: list[Service] = Field(default_factory=list)
    pricing_items: list[PricingItem] = Field(default_factory=list)
    workers: list[Worker] = Field(default_factory=list)
    # Raw booking documents, normalized when the snapshot is built.
    bookings: list[dict[str, Any]] = Field(default_factory=list)
    business_hours: Optional[list[DayAvailability]] = None
    breaks: list[BreakRange] = Field(default_factory=list)
    chain: list[ChainItemRef] = Field(default_factory=list)
    candidate_times: list[str] = Field(default_factory=list)
    preferred_worker_id: Optional[str] = None

    def build_chain(self) -> list[ChainServiceInput]:
        """Resolve chain references against the catalog.

        Raises:
            BookingDataError: If a referenced service or pricing item is unknown.
        """
        services = {s.id: s for s in self.services}
        chain = []
        for ref in self.chain:
            service = services.get(ref.service_id)
            if service is None:
                raise BookingDataError(f"Unknown service id: {ref.service_id!r}")
            pricing_item = self._pricing_item_for(ref, service)
            chain.append(ChainServiceInput(service=service, pricing_item=pricing_item))
        return chain

    def _pricing_item_for(self, ref: ChainItemRef, service: Service) -> PricingItem:
        if ref.pricing_item_id:
            for item in self.pricing_items:
                if item.id == ref.pricing_item_id:
                    return item
            raise BookingDataError(f"Unknown pricing item id: {ref.pricing_item_id!r}")
        for item in self.pricing_items:
            if item.service_id == service.id:
                return item
        # No pricing configured: book the catalog duration.
        return PricingItem(
            id=f"default-{service.id}",
            service_id=service.id,
            duration_min_minutes=service.duration,
            duration_max_minutes=service.duration,
        )
