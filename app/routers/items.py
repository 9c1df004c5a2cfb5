import os
import uuid
from typing import Optional
from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from fastapi.concurrency import run_in_threadpool

from app.models.item import ItemStatus
from app.models.principal import Principal
from app.services.errors import RegistryError, ValidationError
from app.services.item_registry import ItemFilter, ItemRegistry
from app.utils.auth_helper import get_current_principal
from app.utils.deps import get_item_registry
from app.utils.s3_service import delete_image, upload_image


router = APIRouter()

MAX_UPLOAD_SIZE_MB = int(os.getenv("MAX_UPLOAD_SIZE_MB", "5"))
MAX_UPLOAD_BYTES = MAX_UPLOAD_SIZE_MB * 1024 * 1024


@router.post("/create")
async def add_item(
    title: str = Form(...),
    category: str = Form(...),
    location_found: str = Form(...),
    date_found: str = Form(...),
    description: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    registry: ItemRegistry = Depends(get_item_registry),
    principal: Principal = Depends(get_current_principal),
):
    image_url = None

    # read image into memory and hand it to blob storage untouched
    if image is not None and image.filename:
        raw_bytes = await image.read()

        if len(raw_bytes) > MAX_UPLOAD_BYTES:
            raise HTTPException(status_code=400, detail=f"Image exceeds {MAX_UPLOAD_SIZE_MB}MB limit")

        image_url = await run_in_threadpool(upload_image, raw_bytes, image.filename, image.content_type)

    draft = {
        "title": title,
        "description": description,
        "category": category,
        "location_found": location_found,
        "date_found": date_found,
        "image_url": image_url,
    }

    try:
        item = registry.create(principal, draft)
    except RegistryError:
        if image_url:
            await run_in_threadpool(delete_image, image_url)
        raise

    return {"ok": True, "item": item}


@router.get("/all")
def get_all_items(
    category: Optional[str] = None,
    status: str = ItemStatus.UNCLAIMED.value,
    location: Optional[str] = None,
    search: Optional[str] = None,
    owner_id: Optional[str] = None,
    limit: Optional[int] = Query(None, ge=1, le=100),
    offset: Optional[int] = Query(None, ge=0),
    registry: ItemRegistry = Depends(get_item_registry),
):
    # public surface only shows unclaimed items unless asked otherwise
    if status == "all":
        status_filter = None
    else:
        try:
            status_filter = ItemStatus(status)
        except ValueError:
            raise ValidationError(f"Unknown item status '{status}'")

    filters = ItemFilter(
        category=category,
        status=status_filter,
        location=location,
        search=search,
        owner_id=owner_id,
        limit=limit,
        offset=offset,
    )

    return {"items": registry.list(filters)}


@router.get("/{item_id}")
def get_item(
    item_id: uuid.UUID,
    registry: ItemRegistry = Depends(get_item_registry),
):
    return {"item": registry.get(item_id)}


@router.patch("/{item_id}")
def update_item(
    item_id: uuid.UUID,
    updates: dict,
    registry: ItemRegistry = Depends(get_item_registry),
    principal: Principal = Depends(get_current_principal),
):
    return {"item": registry.update_fields(principal, item_id, updates)}


@router.delete("/{item_id}")
def delete_item(
    item_id: uuid.UUID,
    registry: ItemRegistry = Depends(get_item_registry),
    principal: Principal = Depends(get_current_principal),
):
    image_url = registry.get(item_id).image_url

    deletion = registry.delete(principal, item_id)

    if image_url:
        delete_image(image_url)

    return {
        "ok": True,
        "orphaned_claims": deletion.orphaned_claim_ids,
    }
