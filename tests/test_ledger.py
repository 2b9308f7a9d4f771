"""
Tests for the ledger repository and pair balance model.

Covers:
- Pair ordering and counter selection
- Idempotent pair creation
- Balance increments in both directions
- Missing pair detection
"""

import pytest
from bson import ObjectId

from app.core.exceptions import LedgerIntegrityError
from app.models.ledger import PairBalance, debt_field, order_pair
from app.repositories.ledger_repo import LedgerRepository


def test_order_pair_is_direction_independent():
    low, high = sorted([ObjectId(), ObjectId()])

    assert order_pair(low, high) == (low, high)
    assert order_pair(high, low) == (low, high)


def test_order_pair_rejects_same_user():
    user = ObjectId()
    with pytest.raises(ValueError):
        order_pair(user, user)


def test_debt_field_picks_direction():
    low, high = sorted([ObjectId(), ObjectId()])

    assert debt_field(low, high) == (low, high, "a_owes_b")
    assert debt_field(high, low) == (low, high, "b_owes_a")


def test_pair_views_mirror_each_other():
    low, high = sorted([ObjectId(), ObjectId()])
    pair = PairBalance(
        room=ObjectId(),
        user_a=low,
        user_b=high,
        user_a_name="Alice",
        user_b_name="Bob",
        a_owes_b=15,
        b_owes_a=40
    )

    assert pair.payable_for(low) == 15
    assert pair.receivable_for(high) == 15
    assert pair.receivable_for(low) == 40
    assert pair.payable_for(high) == 40
    assert pair.counterpart(low) == (high, "Bob")
    assert pair.counterpart(high) == (low, "Alice")
    with pytest.raises(ValueError):
        pair.payable_for(ObjectId())


@pytest.mark.asyncio
async def test_ensure_pair_is_idempotent(fake_db):
    repo = LedgerRepository(fake_db)
    room_id = ObjectId()
    alice = (ObjectId(), "Alice")
    bob = (ObjectId(), "Bob")

    await repo.ensure_pair(room_id, alice, bob)
    await repo.add_debt(room_id, bob[0], alice[0], 25)
    key = await repo.ensure_pair(room_id, bob, alice)

    assert key == order_pair(alice[0], bob[0])
    assert await repo.collection.count_documents({}) == 1
    pair = await repo.get_pair(room_id, alice[0], bob[0])
    assert pair.receivable_for(alice[0]) == 25


@pytest.mark.asyncio
async def test_ensure_pair_keeps_names_with_users(fake_db):
    repo = LedgerRepository(fake_db)
    room_id = ObjectId()
    low, high = sorted([ObjectId(), ObjectId()])

    await repo.ensure_pair(room_id, (high, "High"), (low, "Low"))
    pair = await repo.get_pair(room_id, low, high)

    assert pair.user_a_name == "Low"
    assert pair.user_b_name == "High"
    assert pair.a_owes_b == 0
    assert pair.b_owes_a == 0


@pytest.mark.asyncio
async def test_add_debt_both_directions(fake_db):
    repo = LedgerRepository(fake_db)
    room_id = ObjectId()
    alice, bob = ObjectId(), ObjectId()
    await repo.ensure_pair(room_id, (alice, "Alice"), (bob, "Bob"))

    await repo.add_debt(room_id, bob, alice, 100)
    await repo.add_debt(room_id, alice, bob, 30)
    pair = await repo.add_debt(room_id, bob, alice, -20)

    assert pair.payable_for(bob) == 80
    assert pair.receivable_for(bob) == 30
    assert pair.payable_for(alice) == 30
    assert pair.receivable_for(alice) == 80


@pytest.mark.asyncio
async def test_pairs_are_scoped_to_room(fake_db):
    repo = LedgerRepository(fake_db)
    alice, bob = ObjectId(), ObjectId()
    room_one, room_two = ObjectId(), ObjectId()
    await repo.ensure_pair(room_one, (alice, "Alice"), (bob, "Bob"))

    with pytest.raises(LedgerIntegrityError):
        await repo.add_debt(room_two, bob, alice, 10)

    assert await repo.get_pair(room_two, alice, bob) is None
    assert len(await repo.list_for_user(room_one, alice)) == 1
    assert await repo.list_for_user(room_two, alice) == []
