import uuid
from enum import Enum
from typing import Optional
from sqlmodel import Field, SQLModel
from datetime import datetime, timezone


class ClaimStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Claim(SQLModel, table=True):
    __tablename__ = "claims"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), index=True)

    # No foreign key: claims outlive a deleted item
    item_id: uuid.UUID = Field(index=True)

    # Claimant
    claimant_id: str = Field(index=True)
    claim_date: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    status: ClaimStatus = Field(default=ClaimStatus.PENDING, index=True)

    # Content
    proof_details: str

    # Set together, once, by the reviewing admin
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None

    @property
    def is_terminal(self) -> bool:
        return self.status != ClaimStatus.PENDING
