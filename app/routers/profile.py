from fastapi import APIRouter, Depends

from app.models.principal import Principal
from app.services.claim_registry import ClaimRegistry
from app.services.item_registry import ItemRegistry
from app.utils.auth_helper import get_current_principal
from app.utils.deps import get_claim_registry, get_item_registry


router = APIRouter()


@router.get("/me")
def get_me(principal: Principal = Depends(get_current_principal)):
    return {"id": principal.id, "role": principal.role}


@router.get("/items")
def get_my_items(
    registry: ItemRegistry = Depends(get_item_registry),
    principal: Principal = Depends(get_current_principal),
):
    return {"items": registry.list_mine(principal)}


@router.get("/claims")
def get_my_claims(
    registry: ClaimRegistry = Depends(get_claim_registry),
    principal: Principal = Depends(get_current_principal),
):
    return {"claims": registry.list_mine(principal)}
