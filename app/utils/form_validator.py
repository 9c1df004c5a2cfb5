from datetime import date, datetime, timezone
from typing import Any, Mapping, Optional
from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator

from app.services.errors import ValidationError

EDITABLE_ITEM_FIELDS = {
    "title",
    "description",
    "category",
    "location_found",
    "date_found",
    "image_url",
}


def _today() -> date:
    return datetime.now(timezone.utc).date()


def _strip(value):
    return value.strip() if isinstance(value, str) else value


class ItemDraft(BaseModel):
    title: str = Field(min_length=1, max_length=120)
    description: Optional[str] = Field(default=None, max_length=2000)
    category: str = Field(min_length=1)
    location_found: str = Field(min_length=1, max_length=120)
    date_found: date
    image_url: Optional[str] = None

    @field_validator("title", "category", "location_found", "description", mode="before")
    @classmethod
    def strip_strings(cls, value):
        return _strip(value)

    @field_validator("description", mode="after")
    @classmethod
    def blank_description_is_none(cls, value):
        return value or None

    @field_validator("date_found")
    @classmethod
    def not_in_future(cls, value: date):
        if value > _today():
            raise ValueError("date_found cannot be in the future")
        return value


class ItemPatch(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=120)
    description: Optional[str] = Field(default=None, max_length=2000)
    category: Optional[str] = Field(default=None, min_length=1)
    location_found: Optional[str] = Field(default=None, min_length=1, max_length=120)
    date_found: Optional[date] = None
    image_url: Optional[str] = None

    @field_validator("title", "category", "location_found", "description", mode="before")
    @classmethod
    def strip_strings(cls, value):
        return _strip(value)

    @field_validator("date_found")
    @classmethod
    def not_in_future(cls, value: Optional[date]):
        if value is not None and value > _today():
            raise ValueError("date_found cannot be in the future")
        return value


def _error_detail(e: PydanticValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in err['loc']) or 'input'}: {err['msg']}"
        for err in e.errors()
    )


def validate_item_draft(draft: Any) -> ItemDraft:
    if isinstance(draft, ItemDraft):
        draft = draft.model_dump()

    try:
        return ItemDraft.model_validate(draft)
    except PydanticValidationError as e:
        raise ValidationError(_error_detail(e))


def validate_item_patch(patch: Mapping[str, Any]) -> dict:
    """Validate a partial update, returning only the keys that were sent."""
    if not patch:
        raise ValidationError("No fields to update")

    for field in patch:
        if field not in EDITABLE_ITEM_FIELDS:
            raise ValidationError(f"Field '{field}' cannot be updated")

    for field in ("title", "category", "location_found", "date_found"):
        if field in patch and patch[field] is None:
            raise ValidationError(f"Field '{field}' cannot be empty")

    try:
        validated = ItemPatch.model_validate(patch)
    except PydanticValidationError as e:
        raise ValidationError(_error_detail(e))

    changes = validated.model_dump(include=set(patch))

    if "description" in changes and not changes["description"]:
        changes["description"] = None

    return changes


def validate_proof_details(proof_details: Optional[str]) -> str:
    proof_details = (proof_details or "").strip()

    if not proof_details:
        raise ValidationError("proof_details: must not be empty")

    return proof_details
