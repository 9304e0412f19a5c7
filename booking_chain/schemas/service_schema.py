"""Service catalog and pricing data models."""

from typing import Optional

from pydantic import Field, field_validator

from booking_chain.config import settings
from booking_chain.schemas.contract_model import ContractModel


class Service(ContractModel):
    """A bookable service from the business catalog."""

    id: str
    name: str
    duration: Optional[int] = None
    enabled: bool = True
    requires_finish: bool = False
    finish_gap_minutes: Optional[int] = None
    color: Optional[str] = None


class FollowUpConfig(ContractModel):
    """Phase 2 of a two-part service: runs ``wait_minutes`` after phase 1 ends."""

    name: str
    service_id: Optional[str] = None
    duration_minutes: int = 0
    wait_minutes: int = 0

    @field_validator("wait_minutes", mode="before")
    @classmethod
    def clamp_wait(cls, v: Optional[int]) -> int:
        if v is None:
            return 0
        return max(0, int(v))

    @property
    def key(self) -> str:
        """Deduplication key: service id if present, else the normalized name."""
        service_id = (self.service_id or "").strip()
        if service_id:
            return service_id
        return self.name.strip().lower()


class PricingItem(ContractModel):
    """Priced variation of a service, carrying its duration and optional follow-up."""

    id: str
    service_id: str
    duration_min_minutes: Optional[int] = None
    duration_max_minutes: Optional[int] = None
    type: Optional[str] = None
    has_follow_up: bool = False
    follow_up: Optional[FollowUpConfig] = None

    @property
    def duration(self) -> int:
        """Booked duration: the top of the range, falling back to the configured default."""
        if self.duration_max_minutes is not None:
            return self.duration_max_minutes
        if self.duration_min_minutes is not None:
            return self.duration_min_minutes
        return settings.scheduling.default_service_duration_min

    @property
    def active_follow_up(self) -> Optional[FollowUpConfig]:
        """The follow-up, if it is switched on, named and at least a minute long."""
        follow_up = self.follow_up if self.has_follow_up else None
        if follow_up is None or not follow_up.name.strip() or follow_up.duration_minutes < 1:
            return None
        return follow_up


class ChainServiceInput(ContractModel):
    """One requested service in a chain."""

    service: Service
    pricing_item: PricingItem
    # Only set on an appended finishing service.
    finish_gap_before: Optional[int] = Field(default=None, ge=0)
