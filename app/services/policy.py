"""Access control decisions.

Every function here is pure: it looks only at the principal and the
resource handed in, and answers whether the action is permitted. Registries
call ``ensure`` with the answer before they compute any new state.
"""

from typing import Optional

from app.models.claim import Claim
from app.models.item import Item, ItemStatus
from app.models.principal import Principal
from app.services.errors import AuthorizationError


def is_authenticated(principal: Optional[Principal]) -> bool:
    return principal is not None and bool(principal.id)


def is_admin(principal: Optional[Principal]) -> bool:
    return is_authenticated(principal) and principal.is_admin


def is_owner(principal: Optional[Principal], item: Item) -> bool:
    return is_authenticated(principal) and principal.id == item.owner_id


def can_create_item(principal: Optional[Principal]) -> bool:
    return is_authenticated(principal)


def can_edit_item(principal: Optional[Principal], item: Item) -> bool:
    return is_owner(principal, item) or is_admin(principal)


can_delete_item = can_edit_item


def can_change_item_status(principal: Optional[Principal]) -> bool:
    return is_admin(principal)


def can_create_claim(principal: Optional[Principal], item: Item) -> bool:
    return (
        is_authenticated(principal)
        and not is_owner(principal, item)
        and item.status == ItemStatus.UNCLAIMED
    )


def can_review_claim(principal: Optional[Principal]) -> bool:
    return is_admin(principal)


def can_view_claim(principal: Optional[Principal], claim: Claim) -> bool:
    return is_admin(principal) or (
        is_authenticated(principal) and principal.id == claim.claimant_id
    )


def can_list_claims_for_item(principal: Optional[Principal], item: Optional[Item]) -> bool:
    if item is None:
        return is_admin(principal)
    return is_owner(principal, item) or is_admin(principal)


def can_list_own(principal: Optional[Principal], resource_owner_id: str) -> bool:
    return is_authenticated(principal) and principal.id == resource_owner_id


def can_list_all(principal: Optional[Principal]) -> bool:
    return is_admin(principal)


def ensure(allowed: bool) -> None:
    if not allowed:
        raise AuthorizationError()
