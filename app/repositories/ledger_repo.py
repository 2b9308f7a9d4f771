"""
LedgerRepository - pair balance records.

Each record holds both directions of debt between two users of a room.
ensure_pair() guarantees the record exists; add_debt() moves one counter.
Existence and mutation are kept apart so that a missing record on
add_debt() is always an integrity fault.
"""

from typing import List, Optional, Tuple
from datetime import datetime, timezone
from motor.motor_asyncio import AsyncIOMotorDatabase
from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from app.core.exceptions import LedgerIntegrityError
from app.models.ledger import PairBalance, order_pair, debt_field


class LedgerRepository:
    """Repository for pair balances."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["ledgers"]

    async def ensure_pair(
        self,
        room_id: ObjectId,
        first: Tuple[ObjectId, str],
        second: Tuple[ObjectId, str],
        session=None
    ) -> Tuple[ObjectId, ObjectId]:
        """
        Create the pair record with zero balances if it does not exist.

        first/second are (user_id, user_name). Idempotent; an existing
        record is left untouched. Returns the (user_a, user_b) key.
        """
        names = {first[0]: first[1], second[0]: second[1]}
        user_a, user_b = order_pair(first[0], second[0])
        now = datetime.now(timezone.utc)

        try:
            await self.collection.update_one(
                {"room": room_id, "user_a": user_a, "user_b": user_b},
                {
                    "$setOnInsert": {
                        "user_a_name": names[user_a],
                        "user_b_name": names[user_b],
                        "a_owes_b": 0,
                        "b_owes_a": 0,
                        "created_at": now,
                        "updated_at": now
                    }
                },
                upsert=True,
                session=session
            )
        except DuplicateKeyError:
            # Concurrent upsert created it first
            if session is not None:
                raise
        return user_a, user_b

    async def add_debt(
        self,
        room_id: ObjectId,
        debtor_id: ObjectId,
        creditor_id: ObjectId,
        delta: int,
        session=None
    ) -> PairBalance:
        """
        Add delta (may be negative) to what debtor owes creditor.

        Raises LedgerIntegrityError if the pair was never initialized.
        """
        user_a, user_b, field = debt_field(debtor_id, creditor_id)

        doc = await self.collection.find_one_and_update(
            {"room": room_id, "user_a": user_a, "user_b": user_b},
            {
                "$inc": {field: delta},
                "$set": {"updated_at": datetime.now(timezone.utc)}
            },
            return_document=ReturnDocument.AFTER,
            session=session
        )
        if doc is None:
            raise LedgerIntegrityError(
                f"No ledger record for {debtor_id} -> {creditor_id} in room {room_id}"
            )
        return PairBalance(**doc)

    async def get_pair(
        self,
        room_id: ObjectId,
        first_id: ObjectId,
        second_id: ObjectId
    ) -> Optional[PairBalance]:
        """Get the pair record for two users, if any."""
        user_a, user_b = order_pair(first_id, second_id)
        doc = await self.collection.find_one(
            {"room": room_id, "user_a": user_a, "user_b": user_b}
        )
        if doc:
            return PairBalance(**doc)
        return None

    async def list_for_user(self, room_id: ObjectId, user_id: ObjectId) -> List[PairBalance]:
        """All pair records in a room that involve the user."""
        docs = await self.collection.find({
            "room": room_id,
            "$or": [{"user_a": user_id}, {"user_b": user_id}]
        }).to_list(None)
        return [PairBalance(**doc) for doc in docs]
