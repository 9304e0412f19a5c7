"""
Timing compiler: turns a requested chain into timed segments.

Segment times derive only from chain order, durations and gaps. Workers are
left unset here and filled in by the assignment resolver.

    Single service:  [primary][--wait--][follow-up]
    Multi-service:   [p1][p2][gap][finish]           (finishing service appended)
                     [p1][p2][--wait--][fu1][wait][fu2]   (deduplicated follow-ups)
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from booking_chain.config import settings
from booking_chain.schemas.chain_schema import ChainSlot, FollowUpSlot
from booking_chain.schemas.service_schema import (
    ChainServiceInput,
    FollowUpConfig,
    PricingItem,
    Service,
)
from booking_chain.utils import add_minutes

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Phases:
    """Absolute timing of a primary segment and its follow-up."""

    phase1_start_at: datetime
    phase1_end_at: datetime
    phase2_start_at: datetime
    phase2_end_at: datetime

    @property
    def gap_minutes(self) -> int:
        return int((self.phase2_start_at - self.phase1_end_at).total_seconds() // 60)


def compute_phases(
    start_at: datetime,
    duration_minutes: int,
    wait_minutes: Optional[int],
    follow_up_duration_minutes: int,
) -> Phases:
    """Phase 2 starts exactly ``wait_minutes`` after phase 1 ends.

    Example: phase 1 at 10:00 for 30 min with a 60 min wait puts phase 2 at
    11:30, not 12:00.
    """
    duration = max(0, duration_minutes)
    wait = max(0, wait_minutes or 0)
    follow_up = max(0, follow_up_duration_minutes)
    phase1_end = add_minutes(start_at, duration)
    phase2_start = add_minutes(phase1_end, wait)
    return Phases(
        phase1_start_at=start_at,
        phase1_end_at=phase1_end,
        phase2_start_at=phase2_start,
        phase2_end_at=add_minutes(phase2_start, follow_up),
    )


def has_finishing_service(chain: Sequence[ChainServiceInput]) -> bool:
    return any(item.finish_gap_before is not None for item in chain)


def primary_matches_follow_up(service: Service, follow_up: FollowUpConfig) -> bool:
    """True if the customer already picked the follow-up's service as a primary."""
    service_name = (service.name or "").strip().lower()
    service_id = (service.id or "").strip()
    key = follow_up.key
    if service_id and key == service_id:
        return True
    if service_name and key == service_name:
        return True
    return follow_up.name.strip().lower() == service_name


def collect_deduped_follow_ups(chain: Sequence[ChainServiceInput]) -> list[FollowUpConfig]:
    """Active follow-ups of a multi-service chain, one per key, in first-seen order.

    Follow-ups matching a primary service in the chain are dropped.
    """
    primaries = [item.service for item in chain]
    seen: dict[str, FollowUpConfig] = {}
    for item in chain:
        follow_up = item.pricing_item.active_follow_up
        if follow_up is None:
            continue
        if any(primary_matches_follow_up(p, follow_up) for p in primaries):
            continue
        if follow_up.key not in seen:
            seen[follow_up.key] = follow_up.model_copy(update={"name": follow_up.name.strip()})
    return list(seen.values())


def _primary_slot(order: int, item: ChainServiceInput, start_at: datetime,
                  follow_up: Optional[FollowUpSlot] = None) -> ChainSlot:
    duration = item.pricing_item.duration
    return ChainSlot(
        order=order,
        service_name=item.service.name,
        service_id=item.service.id or None,
        service_type=item.pricing_item.type,
        duration_min=duration,
        start_at=start_at,
        end_at=add_minutes(start_at, duration),
        pricing_item_id=item.pricing_item.id,
        service_color=item.service.color,
        follow_up=follow_up,
    )


def _compute_single(item: ChainServiceInput, start_at: datetime) -> list[ChainSlot]:
    follow_up = item.pricing_item.active_follow_up
    nested = None
    if follow_up is not None:
        phases = compute_phases(
            start_at, item.pricing_item.duration, follow_up.wait_minutes, follow_up.duration_minutes
        )
        nested = FollowUpSlot(
            service_name=follow_up.name.strip(),
            service_id=follow_up.service_id,
            duration_min=follow_up.duration_minutes,
            wait_min=follow_up.wait_minutes,
            start_at=phases.phase2_start_at,
            end_at=phases.phase2_end_at,
        )
    return [_primary_slot(0, item, start_at, nested)]


def _compute_multi(chain: Sequence[ChainServiceInput], start_at: datetime) -> list[ChainSlot]:
    slots = []
    cursor = start_at
    for order, item in enumerate(chain):
        cursor = add_minutes(cursor, item.finish_gap_before or 0)
        slot = _primary_slot(order, item, cursor)
        slots.append(slot)
        cursor = slot.end_at

    # The finishing service replaces the trailing follow-ups.
    if has_finishing_service(chain):
        return slots

    for index, follow_up in enumerate(collect_deduped_follow_ups(chain)):
        cursor = add_minutes(cursor, follow_up.wait_minutes)
        end_at = add_minutes(cursor, follow_up.duration_minutes)
        slots.append(ChainSlot(
            order=len(chain) + index,
            service_name=follow_up.name,
            service_id=follow_up.service_id,
            duration_min=follow_up.duration_minutes,
            start_at=cursor,
            end_at=end_at,
        ))
        cursor = end_at
    return slots


def compute_chain_slots(chain: Sequence[ChainServiceInput], start_at: datetime) -> list[ChainSlot]:
    """Timed segments for the chain starting at ``start_at``, workers unset."""
    if not chain:
        return []
    if len(chain) == 1:
        return _compute_single(chain[0], start_at)
    return _compute_multi(chain, start_at)


def _finishing_service_matches(service: Service, finishing_name: str) -> bool:
    return (service.name or "").strip() == finishing_name or service.id == finishing_name


def build_chain_with_finishing_service(
    chain: Sequence[ChainServiceInput],
    services: Sequence[Service],
    pricing_items: Sequence[PricingItem],
    finishing_service_name: Optional[str] = None,
) -> list[ChainServiceInput]:
    """Append the finishing service once if any chain service requires it.

    The gap before it is the last service's ``finish_gap_minutes``, else its
    follow-up wait, else 0. The chain is returned unchanged when nothing
    requires finishing, the finishing service is already selected, or the
    catalog has no such service.
    """
    chain = list(chain)
    if not chain or not any(item.service.requires_finish for item in chain):
        return chain

    finishing_name = (finishing_service_name or settings.scheduling.finishing_service_name).strip()
    if any(_finishing_service_matches(item.service, finishing_name) for item in chain):
        return chain

    finishing_service = next(
        (s for s in services if _finishing_service_matches(s, finishing_name)), None
    )
    if finishing_service is None:
        logger.warning("Finishing service '%s' not found in catalog; chain left as is", finishing_name)
        return chain

    last = chain[-1]
    gap = last.service.finish_gap_minutes
    if gap is None:
        follow_up = last.pricing_item.follow_up if last.pricing_item.has_follow_up else None
        gap = follow_up.wait_minutes if follow_up is not None else 0

    pricing_item = next((p for p in pricing_items if p.service_id == finishing_service.id), None)
    if pricing_item is None:
        duration = finishing_service.duration or settings.scheduling.default_service_duration_min
        pricing_item = PricingItem(
            id=f"finish-{finishing_service.id}",
            service_id=finishing_service.id,
            duration_min_minutes=duration,
            duration_max_minutes=duration,
        )

    chain.append(ChainServiceInput(
        service=finishing_service,
        pricing_item=pricing_item,
        finish_gap_before=max(0, gap),
    ))
    return chain


def get_chain_total_duration(chain: Sequence[ChainServiceInput]) -> int:
    """Minutes from the first segment's start to the last segment's end."""
    if not chain:
        return 0
    if len(chain) == 1:
        item = chain[0]
        total = item.pricing_item.duration
        follow_up = item.pricing_item.active_follow_up
        if follow_up is not None:
            total += follow_up.wait_minutes + follow_up.duration_minutes
        return total

    total = sum((item.finish_gap_before or 0) + item.pricing_item.duration for item in chain)
    if not has_finishing_service(chain):
        total += sum(fu.wait_minutes + fu.duration_minutes for fu in collect_deduped_follow_ups(chain))
    return total
