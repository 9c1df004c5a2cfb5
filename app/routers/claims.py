import uuid
from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from app.models.principal import Principal
from app.services.claim_registry import ClaimRegistry
from app.utils.auth_helper import get_current_principal
from app.utils.deps import get_claim_registry


router = APIRouter()


class ClaimCreateRequest(BaseModel):
    item_id: uuid.UUID
    proof_details: str = Field(max_length=2000)


@router.post("/create")
def create_claim(
    payload: ClaimCreateRequest,
    registry: ClaimRegistry = Depends(get_claim_registry),
    principal: Principal = Depends(get_current_principal),
):
    claim = registry.create(principal, payload.item_id, payload.proof_details)

    return {
        "ok": True,
        "claim": claim,
    }


@router.get("/item/{item_id}")
def get_claims_for_item(
    item_id: uuid.UUID,
    registry: ClaimRegistry = Depends(get_claim_registry),
    principal: Principal = Depends(get_current_principal),
):
    """
    Claims filed against an item - accessible by the item's owner and admins.
    """
    return {"claims": registry.list_for_item(principal, item_id)}


@router.get("/{claim_id}")
def get_claim(
    claim_id: uuid.UUID,
    registry: ClaimRegistry = Depends(get_claim_registry),
    principal: Principal = Depends(get_current_principal),
):
    """
    Get claim by ID - accessible by the claimant and admins.
    """
    claim = registry.get(principal, claim_id)

    # item is None once it has been deleted
    return {
        "claim": claim,
        "item": registry.item_for(claim),
    }
