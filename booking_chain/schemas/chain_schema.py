"""Resolved chain output models, ready for persistence by the caller."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class FollowUpSlot(BaseModel):
    """Phase 2 segment nested under its primary segment."""

    model_config = ConfigDict(frozen=True)

    service_name: str
    service_id: Optional[str] = None
    duration_min: int
    wait_min: int
    start_at: datetime
    end_at: datetime
    worker_id: Optional[str] = None
    worker_name: Optional[str] = None


class ChainSlot(BaseModel):
    """One service occurrence of a chain with its absolute time range and worker."""

    model_config = ConfigDict(frozen=True)

    order: int
    service_name: str
    service_id: Optional[str] = None
    service_type: Optional[str] = None
    duration_min: int
    start_at: datetime
    end_at: datetime
    worker_id: Optional[str] = None
    worker_name: Optional[str] = None
    pricing_item_id: Optional[str] = None
    service_color: Optional[str] = None
    follow_up: Optional[FollowUpSlot] = None
