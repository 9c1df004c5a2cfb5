import uuid
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Callable, List, Mapping, Optional
from pydantic import BaseModel, Field
from sqlmodel import Session

from app.models.item import ITEM_TRANSITIONS, Item, ItemStatus
from app.models.principal import Principal
from app.repositories.base import unit_of_work
from app.repositories.claims import ClaimRepository
from app.repositories.items import ItemRepository
from app.services import policy
from app.services.catalog import CategoryCatalog
from app.services.errors import ConflictError, InvalidTransitionError, NotFoundError, ValidationError
from app.utils.form_validator import validate_item_draft, validate_item_patch

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ItemFilter(BaseModel):
    """Conjunctive filter for listing items. Unset keys do not filter."""

    category: Optional[str] = None
    status: Optional[ItemStatus] = None
    location: Optional[str] = None
    search: Optional[str] = None
    owner_id: Optional[str] = None
    limit: Optional[int] = Field(default=None, ge=1)
    offset: Optional[int] = Field(default=None, ge=0)


@dataclass
class ItemDeletion:
    item_id: uuid.UUID
    orphaned_claim_ids: List[uuid.UUID] = field(default_factory=list)

    @property
    def has_orphans(self) -> bool:
        return bool(self.orphaned_claim_ids)


class ItemRegistry:
    """Owns every item state transition."""

    def __init__(self, session: Session, clock: Callable[[], datetime] = utcnow):
        self.session = session
        self.clock = clock
        self.items = ItemRepository(session)
        self.claims = ClaimRepository(session)
        self.catalog = CategoryCatalog(session)

    def _load(self, item_id: uuid.UUID) -> Item:
        item = self.items.get_by_id(item_id)

        if not item:
            raise NotFoundError("Item not found")

        return item

    def create(self, principal: Optional[Principal], draft: Any) -> Item:
        policy.ensure(policy.can_create_item(principal))

        data = validate_item_draft(draft)
        self.catalog.require(data.category)

        now = self.clock()

        with unit_of_work(self.session):
            item = self.items.insert(
                Item(
                    **data.model_dump(),
                    owner_id=principal.id,
                    status=ItemStatus.UNCLAIMED,
                    created_at=now,
                    updated_at=now,
                )
            )

        self.session.refresh(item)

        logger.info("Item %s reported by %s", item.id, principal.id)
        return item

    def get(self, item_id: uuid.UUID) -> Item:
        return self._load(item_id)

    def list(self, filters: Optional[ItemFilter] = None) -> List[Item]:
        filters = filters or ItemFilter()

        return self.items.search(
            category=filters.category,
            status=filters.status,
            location=filters.location,
            owner_id=filters.owner_id,
            search=filters.search,
            limit=filters.limit,
            offset=filters.offset,
        )

    def list_mine(self, principal: Optional[Principal]) -> List[Item]:
        owner_id = principal.id if principal else None
        policy.ensure(policy.can_list_own(principal, owner_id))

        return self.list(ItemFilter(owner_id=principal.id))

    def update_status(
        self,
        principal: Optional[Principal],
        item_id: uuid.UUID,
        new_status: ItemStatus,
    ) -> Item:
        policy.ensure(policy.can_change_item_status(principal))

        try:
            new_status = ItemStatus(new_status)
        except ValueError:
            raise ValidationError(f"Unknown item status '{new_status}'")

        item = self._load(item_id)
        current = item.status

        if new_status not in ITEM_TRANSITIONS[current]:
            raise InvalidTransitionError(
                f"Cannot move item from '{current.value}' to '{new_status.value}'"
            )

        with unit_of_work(self.session):
            moved = self.items.update_where(
                item.id,
                current,
                {"status": new_status, "updated_at": self.clock()},
            )

            if not moved:
                raise ConflictError("Item status changed concurrently, re-fetch and retry")

        logger.info(
            "Item %s moved %s -> %s by %s",
            item.id, current.value, new_status.value, principal.id,
        )
        return self._load(item.id)

    def update_fields(
        self,
        principal: Optional[Principal],
        item_id: uuid.UUID,
        patch: Mapping[str, Any],
    ) -> Item:
        item = self._load(item_id)
        policy.ensure(policy.can_edit_item(principal, item))

        if item.is_terminal:
            raise ConflictError(f"Item is {item.status.value} and can no longer be edited")

        changes = validate_item_patch(patch)

        if "category" in changes:
            self.catalog.require(changes["category"])

        changes["updated_at"] = self.clock()

        with unit_of_work(self.session):
            if not self.items.update_where(item.id, item.status, changes):
                raise ConflictError("Item changed concurrently, re-fetch and retry")

        logger.info("Item %s edited by %s (%s)", item.id, principal.id, ", ".join(sorted(patch)))
        return self._load(item.id)

    def delete(self, principal: Optional[Principal], item_id: uuid.UUID) -> ItemDeletion:
        item = self._load(item_id)
        policy.ensure(policy.can_delete_item(principal, item))

        deleted_id = item.id
        orphaned = [claim.id for claim in self.claims.by_item(deleted_id)]

        with unit_of_work(self.session):
            self.items.delete(item)

        if orphaned:
            logger.warning(
                "Item %s deleted by %s with %d claim(s) left orphaned: %s",
                deleted_id, principal.id, len(orphaned),
                ", ".join(str(claim_id) for claim_id in orphaned),
            )
        else:
            logger.info("Item %s deleted by %s", deleted_id, principal.id)

        return ItemDeletion(item_id=deleted_id, orphaned_claim_ids=orphaned)

    def expire_stale(self, principal: Optional[Principal], found_before: date) -> List[uuid.UUID]:
        """Move unclaimed items found before ``found_before`` to expired.

        Safe to run repeatedly: items that were claimed or expired in the
        meantime are skipped by the conditional write.
        """
        policy.ensure(policy.can_change_item_status(principal))

        if found_before > utcnow().date():
            raise ValidationError("Expiry cutoff cannot be in the future")

        expired = []

        with unit_of_work(self.session):
            for item in self.items.stale_unclaimed(found_before):
                if self.items.update_where(
                    item.id,
                    ItemStatus.UNCLAIMED,
                    {"status": ItemStatus.EXPIRED, "updated_at": self.clock()},
                ):
                    expired.append(item.id)

        if expired:
            logger.info("Expired %d stale item(s) found before %s", len(expired), found_before)

        return expired
