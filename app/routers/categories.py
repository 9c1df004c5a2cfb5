from fastapi import APIRouter, Depends

from app.services.catalog import CategoryCatalog
from app.utils.deps import get_catalog


router = APIRouter()


@router.get("/")
def get_categories(catalog: CategoryCatalog = Depends(get_catalog)):
    return {"categories": catalog.list()}
