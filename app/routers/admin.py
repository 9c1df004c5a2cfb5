import os
import uuid
import logging
from typing import Dict, Literal, Optional
from datetime import datetime, timedelta, timezone
from fastapi import APIRouter, Depends, Query
from sqlmodel import Session, select, func
from pydantic import BaseModel, Field

from app.db.db import get_session
from app.models.claim import Claim, ClaimStatus
from app.models.item import Item, ItemStatus
from app.models.principal import Principal
from app.repositories.claims import ClaimRepository
from app.repositories.items import ItemRepository
from app.services import policy
from app.services.claim_registry import ClaimRegistry
from app.services.item_registry import ItemFilter, ItemRegistry
from app.utils.auth_helper import get_current_principal
from app.utils.deps import get_claim_registry, get_item_registry

logger = logging.getLogger(__name__)

router = APIRouter()

DEFAULT_EXPIRY_DAYS = 90


# Response Models
class OverviewStats(BaseModel):
    total_items: int
    items_current_month: int
    items_by_status: Dict[str, int]
    claims_by_status: Dict[str, int]
    claims_approved_current_month: int
    claims_rejected_current_month: int


# Request Models
class ItemStatusRequest(BaseModel):
    status: ItemStatus


class ReviewClaimRequest(BaseModel):
    decision: Literal["approved", "rejected"]


class ExpireItemsRequest(BaseModel):
    older_than_days: Optional[int] = Field(default=None, ge=1)


def require_admin(principal: Principal = Depends(get_current_principal)):
    policy.ensure(policy.can_list_all(principal))
    return principal


@router.get("/stats", response_model=OverviewStats)
def get_overview_stats(
    session: Session = Depends(get_session),
    admin: Principal = Depends(require_admin),
):
    """Get overview statistics for the admin dashboard"""
    now = datetime.now(timezone.utc)
    month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)

    items_by_status = ItemRepository(session).count_by_status()
    claims_by_status = ClaimRepository(session).count_by_status()

    # Items this month
    items_current = session.exec(
        select(func.count(Item.id)).where(Item.created_at >= month_start)
    ).one()

    # Claims reviewed this month
    def reviewed_this_month(status: ClaimStatus) -> int:
        return session.exec(
            select(func.count(Claim.id)).where(
                Claim.reviewed_at >= month_start,
                Claim.status == status,
            )
        ).one()

    return OverviewStats(
        total_items=sum(items_by_status.values()),
        items_current_month=items_current,
        items_by_status={status.value: items_by_status.get(status, 0) for status in ItemStatus},
        claims_by_status={status.value: claims_by_status.get(status, 0) for status in ClaimStatus},
        claims_approved_current_month=reviewed_this_month(ClaimStatus.APPROVED),
        claims_rejected_current_month=reviewed_this_month(ClaimStatus.REJECTED),
    )


@router.get("/items")
def get_items_for_moderation(
    status: Optional[ItemStatus] = None,
    category: Optional[str] = None,
    search: Optional[str] = None,
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    registry: ItemRegistry = Depends(get_item_registry),
    admin: Principal = Depends(require_admin),
):
    """Every item regardless of status"""
    filters = ItemFilter(status=status, category=category, search=search, limit=limit, offset=offset)
    return {"items": registry.list(filters)}


@router.get("/claims")
def get_claims_for_moderation(
    status: Optional[ClaimStatus] = None,
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    registry: ClaimRegistry = Depends(get_claim_registry),
    admin: Principal = Depends(require_admin),
):
    """Get claims for moderation"""
    return {"claims": registry.list_all(admin, status=status, limit=limit, offset=offset)}


@router.post("/items/{item_id}/status")
def set_item_status(
    item_id: uuid.UUID,
    payload: ItemStatusRequest,
    registry: ItemRegistry = Depends(get_item_registry),
    admin: Principal = Depends(require_admin),
):
    item = registry.update_status(admin, item_id, payload.status)
    return {"ok": True, "item": item}


@router.post("/claims/{claim_id}/review")
def review_claim(
    claim_id: uuid.UUID,
    payload: ReviewClaimRequest,
    registry: ClaimRegistry = Depends(get_claim_registry),
    admin: Principal = Depends(require_admin),
):
    claim = registry.review(admin, claim_id, ClaimStatus(payload.decision))
    return {"ok": True, "claim": claim}


@router.post("/items/expire")
def expire_stale_items(
    payload: ExpireItemsRequest,
    registry: ItemRegistry = Depends(get_item_registry),
    admin: Principal = Depends(require_admin),
):
    """Sweep run by an external scheduler"""
    days = payload.older_than_days
    if days is None:
        days = expiry_days_default()

    cutoff = datetime.now(timezone.utc).date() - timedelta(days=days)
    expired = registry.expire_stale(admin, cutoff)

    return {
        "ok": True,
        "expired": expired,
        "cutoff": cutoff,
    }


def expiry_days_default() -> int:
    raw = os.getenv("ITEM_EXPIRY_DAYS")
    if not raw:
        return DEFAULT_EXPIRY_DAYS

    try:
        days = int(raw)
    except ValueError:
        days = 0

    if days < 1:
        logger.error("Ignoring invalid ITEM_EXPIRY_DAYS=%r, using %d", raw, DEFAULT_EXPIRY_DAYS)
        return DEFAULT_EXPIRY_DAYS

    return days
