from datetime import date
from typing import List, Optional
from sqlmodel import func, or_, select

from app.models.item import Item, ItemStatus
from app.repositories.base import SQLModelRepository


class ItemRepository(SQLModelRepository[Item]):
    model = Item

    def search(
        self,
        category: Optional[str] = None,
        status: Optional[ItemStatus] = None,
        location: Optional[str] = None,
        owner_id: Optional[str] = None,
        search: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[Item]:
        conditions = []

        if category:
            conditions.append(Item.category == category)
        if status:
            conditions.append(Item.status == status)
        if location:
            conditions.append(Item.location_found == location)
        if owner_id:
            conditions.append(Item.owner_id == owner_id)
        if search:
            term = search.lower()
            conditions.append(
                or_(
                    func.lower(Item.title).contains(term, autoescape=True),
                    func.lower(Item.description).contains(term, autoescape=True),
                )
            )

        return self.query(
            conditions,
            order_by=(Item.created_at.desc(),),
            limit=limit,
            offset=offset,
        )

    def stale_unclaimed(self, found_before: date) -> List[Item]:
        return self.query(
            (Item.status == ItemStatus.UNCLAIMED, Item.date_found < found_before),
            order_by=(Item.date_found,),
        )

    def count_by_status(self):
        rows = self.session.exec(
            select(Item.status, func.count(Item.id)).group_by(Item.status)
        ).all()
        return {status: count for status, count in rows}
