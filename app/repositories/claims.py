import uuid
from typing import List, Optional
from sqlmodel import func, select

from app.models.claim import Claim, ClaimStatus
from app.repositories.base import SQLModelRepository


class ClaimRepository(SQLModelRepository[Claim]):
    model = Claim

    def by_claimant(self, claimant_id: str) -> List[Claim]:
        return self.query(
            (Claim.claimant_id == claimant_id,),
            order_by=(Claim.created_at.desc(),),
        )

    def by_item(self, item_id: uuid.UUID) -> List[Claim]:
        return self.query(
            (Claim.item_id == item_id,),
            order_by=(Claim.created_at.desc(),),
        )

    def every(
        self,
        status: Optional[ClaimStatus] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[Claim]:
        conditions = [Claim.status == status] if status else []

        return self.query(
            conditions,
            order_by=(Claim.created_at.desc(),),
            limit=limit,
            offset=offset,
        )

    def count_by_status(self):
        rows = self.session.exec(
            select(Claim.status, func.count(Claim.id)).group_by(Claim.status)
        ).all()
        return {status: count for status, count in rows}
