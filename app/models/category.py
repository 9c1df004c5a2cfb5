from typing import Optional
from sqlmodel import Field, SQLModel
from datetime import datetime, timezone


class Category(SQLModel, table=True):
    __tablename__ = "categories"

    id: Optional[int] = Field(default=None, primary_key=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    name: str = Field(index=True, unique=True)
    description: Optional[str] = None
    icon: Optional[str] = None
