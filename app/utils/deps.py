from fastapi import Depends
from sqlmodel import Session

from app.db.db import get_session
from app.services.catalog import CategoryCatalog
from app.services.claim_registry import ClaimRegistry
from app.services.item_registry import ItemRegistry


def get_catalog(session: Session = Depends(get_session)) -> CategoryCatalog:
    return CategoryCatalog(session)


def get_item_registry(session: Session = Depends(get_session)) -> ItemRegistry:
    return ItemRegistry(session)


def get_claim_registry(session: Session = Depends(get_session)) -> ClaimRegistry:
    return ClaimRegistry(session)
