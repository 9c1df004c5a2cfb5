import uuid
import logging
from datetime import datetime
from typing import Callable, List, Optional
from sqlmodel import Session

from app.models.claim import Claim, ClaimStatus
from app.models.item import Item, ItemStatus
from app.models.principal import Principal
from app.repositories.base import unit_of_work
from app.repositories.claims import ClaimRepository
from app.repositories.items import ItemRepository
from app.services import policy
from app.services.errors import ConflictError, InvalidTransitionError, NotFoundError, ValidationError
from app.services.item_registry import utcnow
from app.utils.form_validator import validate_proof_details

logger = logging.getLogger(__name__)

REVIEW_DECISIONS = {ClaimStatus.APPROVED, ClaimStatus.REJECTED}


class ClaimRegistry:
    """Owns every claim state transition.

    Items are only read here, except for the approval cascade which moves
    the claimed item from unclaimed to claimed in the same transaction.
    """

    def __init__(self, session: Session, clock: Callable[[], datetime] = utcnow):
        self.session = session
        self.clock = clock
        self.claims = ClaimRepository(session)
        self.items = ItemRepository(session)

    def _load(self, claim_id: uuid.UUID) -> Claim:
        claim = self.claims.get_by_id(claim_id)

        if not claim:
            raise NotFoundError("Claim not found")

        return claim

    def create(self, principal: Optional[Principal], item_id: uuid.UUID, proof_details: str) -> Claim:
        item = self.items.get_by_id(item_id)
        if not item:
            raise NotFoundError("Item not found")

        # Owners are refused before the item state is looked at
        policy.ensure(policy.is_authenticated(principal) and not policy.is_owner(principal, item))

        if item.status != ItemStatus.UNCLAIMED:
            raise ConflictError(f"Item is {item.status.value} and no longer accepts claims")

        policy.ensure(policy.can_create_claim(principal, item))

        proof_details = validate_proof_details(proof_details)
        now = self.clock()

        with unit_of_work(self.session):
            claim = self.claims.insert(
                Claim(
                    item_id=item.id,
                    claimant_id=principal.id,
                    claim_date=now,
                    created_at=now,
                    status=ClaimStatus.PENDING,
                    proof_details=proof_details,
                )
            )

        self.session.refresh(claim)

        logger.info("Claim %s filed by %s on item %s", claim.id, principal.id, item.id)
        return claim

    def get(self, principal: Optional[Principal], claim_id: uuid.UUID) -> Claim:
        claim = self._load(claim_id)
        policy.ensure(policy.can_view_claim(principal, claim))
        return claim

    def item_for(self, claim: Claim) -> Optional[Item]:
        """The claimed item, or None once the item has been deleted."""
        return self.items.get_by_id(claim.item_id)

    def list_mine(self, principal: Optional[Principal]) -> List[Claim]:
        claimant_id = principal.id if principal else None
        policy.ensure(policy.can_list_own(principal, claimant_id))

        return self.claims.by_claimant(claimant_id)

    def list_all(
        self,
        principal: Optional[Principal],
        status: Optional[ClaimStatus] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[Claim]:
        policy.ensure(policy.can_list_all(principal))

        return self.claims.every(status=status, limit=limit, offset=offset)

    def list_for_item(self, principal: Optional[Principal], item_id: uuid.UUID) -> List[Claim]:
        item = self.items.get_by_id(item_id)
        policy.ensure(policy.can_list_claims_for_item(principal, item))

        return self.claims.by_item(item_id)

    def review(self, principal: Optional[Principal], claim_id: uuid.UUID, decision: ClaimStatus) -> Claim:
        policy.ensure(policy.can_review_claim(principal))

        try:
            decision = ClaimStatus(decision)
        except ValueError:
            raise ValidationError(f"Unknown decision '{decision}'")

        if decision not in REVIEW_DECISIONS:
            raise ValidationError("Decision must be 'approved' or 'rejected'")

        claim = self._load(claim_id)

        if claim.is_terminal:
            raise InvalidTransitionError(f"Claim has already been {claim.status.value}")

        item = None
        if decision == ClaimStatus.APPROVED:
            item = self.items.get_by_id(claim.item_id)

            if not item:
                raise NotFoundError("Claimed item no longer exists")

            if item.status != ItemStatus.UNCLAIMED:
                raise ConflictError(f"Item is already {item.status.value}")

        now = self.clock()

        with unit_of_work(self.session):
            reviewed = self.claims.update_where(
                claim.id,
                ClaimStatus.PENDING,
                {"status": decision, "reviewed_by": principal.id, "reviewed_at": now},
            )

            if not reviewed:
                raise ConflictError("Claim was reviewed concurrently")

            if item is not None:
                # At most one approved claim per item: only one approval can
                # win the unclaimed -> claimed write, the loser rolls back
                claimed = self.items.update_where(
                    item.id,
                    ItemStatus.UNCLAIMED,
                    {"status": ItemStatus.CLAIMED, "updated_at": now},
                )

                if not claimed:
                    raise ConflictError("Item was claimed concurrently")

        logger.info("Claim %s %s by %s", claim.id, decision.value, principal.id)

        if item is not None:
            logger.info("Item %s moved unclaimed -> claimed via claim %s", item.id, claim.id)

        return self._load(claim.id)
