"""Races are simulated by handing a registry a stale snapshot of a record
that another writer has already moved on."""

import pytest

from app.models.claim import Claim, ClaimStatus
from app.models.item import Item, ItemStatus
from app.repositories.claims import ClaimRepository
from app.repositories.items import ItemRepository
from app.services.claim_registry import ClaimRegistry
from app.services.errors import ConflictError
from app.services.item_registry import ItemRegistry


def stale_item(item, status):
    return Item(
        id=item.id,
        owner_id=item.owner_id,
        title=item.title,
        category=item.category,
        location_found=item.location_found,
        date_found=item.date_found,
        status=status,
    )


def stale_claim(claim):
    return Claim(
        id=claim.id,
        item_id=claim.item_id,
        claimant_id=claim.claimant_id,
        proof_details=claim.proof_details,
        status=ClaimStatus.PENDING,
    )


def test_update_where_matches_expected_status_only(session, backpack):
    repo = ItemRepository(session)

    assert not repo.update_where(backpack.id, ItemStatus.CLAIMED, {"title": "nope"})
    assert repo.update_where(backpack.id, ItemStatus.UNCLAIMED, {"status": ItemStatus.CLAIMED})
    session.commit()

    assert repo.get_by_id(backpack.id).status == ItemStatus.CLAIMED


def test_update_where_on_missing_row(session):
    import uuid

    assert not ClaimRepository(session).update_where(uuid.uuid4(), None, {"proof_details": "x"})


def test_concurrent_review_of_same_claim(session, clock, claims, bob, admin, backpack, monkeypatch):
    claim = claims.create(bob, backpack.id, "serial 12345")
    snapshot = stale_claim(claim)

    slow = ClaimRegistry(session, clock=clock)
    monkeypatch.setattr(slow.claims, "get_by_id", lambda claim_id: snapshot)

    # another admin gets there first
    claims.review(admin, claim.id, ClaimStatus.REJECTED)

    with pytest.raises(ConflictError):
        slow.review(admin, claim.id, ClaimStatus.APPROVED)

    final = claims.get(admin, claim.id)
    assert final.status == ClaimStatus.REJECTED
    assert claims.items.get_by_id(backpack.id).status == ItemStatus.UNCLAIMED


def test_concurrent_approvals_for_same_item(session, clock, items, claims, bob, carol, admin, backpack, monkeypatch):
    first = claims.create(bob, backpack.id, "serial 12345")
    second = claims.create(carol, backpack.id, "my name inside")
    snapshot = stale_item(backpack, ItemStatus.UNCLAIMED)

    slow = ClaimRegistry(session, clock=clock)
    monkeypatch.setattr(slow.items, "get_by_id", lambda item_id: snapshot)

    claims.review(admin, first.id, ClaimStatus.APPROVED)

    # the slow approval passes its read, wins the claim row, loses the item row
    with pytest.raises(ConflictError):
        slow.review(admin, second.id, ClaimStatus.APPROVED)

    assert items.get(backpack.id).status == ItemStatus.CLAIMED

    # and its claim write was rolled back with it
    rolled_back = claims.get(admin, second.id)
    assert rolled_back.status == ClaimStatus.PENDING
    assert rolled_back.reviewed_by is None
    assert rolled_back.reviewed_at is None

    approved = [c for c in claims.list_for_item(admin, backpack.id) if c.status == ClaimStatus.APPROVED]
    assert [c.id for c in approved] == [first.id]


def test_concurrent_status_change(session, clock, items, admin, backpack, monkeypatch):
    snapshot = stale_item(backpack, ItemStatus.UNCLAIMED)

    slow = ItemRegistry(session, clock=clock)
    monkeypatch.setattr(slow.items, "get_by_id", lambda item_id: snapshot)

    items.update_status(admin, backpack.id, ItemStatus.EXPIRED)

    with pytest.raises(ConflictError):
        slow.update_status(admin, backpack.id, ItemStatus.CLAIMED)

    assert items.get(backpack.id).status == ItemStatus.EXPIRED


def test_edit_racing_with_expiry(session, clock, items, alice, admin, backpack, monkeypatch):
    snapshot = stale_item(backpack, ItemStatus.UNCLAIMED)

    slow = ItemRegistry(session, clock=clock)
    monkeypatch.setattr(slow.items, "get_by_id", lambda item_id: snapshot)

    items.update_status(admin, backpack.id, ItemStatus.EXPIRED)

    with pytest.raises(ConflictError):
        slow.update_fields(alice, backpack.id, {"title": "Renamed"})

    assert items.get(backpack.id).title == "Blue Backpack"
