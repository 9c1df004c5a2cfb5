import uuid
from enum import Enum
from typing import Optional
from sqlmodel import Field, SQLModel
from datetime import date, datetime, timezone


class ItemStatus(str, Enum):
    UNCLAIMED = "unclaimed"
    CLAIMED = "claimed"
    RETURNED = "returned"
    EXPIRED = "expired"


# Directed edges of the item lifecycle. Anything missing here is not a transition.
ITEM_TRANSITIONS = {
    ItemStatus.UNCLAIMED: {ItemStatus.CLAIMED, ItemStatus.EXPIRED},
    ItemStatus.CLAIMED: {ItemStatus.RETURNED, ItemStatus.EXPIRED},
    ItemStatus.RETURNED: set(),
    ItemStatus.EXPIRED: set(),
}

TERMINAL_ITEM_STATUSES = {ItemStatus.RETURNED, ItemStatus.EXPIRED}


class Item(SQLModel, table=True):
    __tablename__ = "items"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), index=True)
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    # Reporter info
    owner_id: str = Field(index=True)

    # Item fields
    title: str
    description: Optional[str] = None
    category: str = Field(index=True)
    location_found: str = Field(index=True)
    date_found: date
    image_url: Optional[str] = None

    status: ItemStatus = Field(default=ItemStatus.UNCLAIMED, index=True)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_ITEM_STATUSES
