from typing import List, Optional, Tuple
from motor.motor_asyncio import AsyncIOMotorDatabase
from bson import ObjectId
from pymongo import ReturnDocument

from app.models.entry import Entry


class EntryRepository:
    """Entry database operations."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["entries"]

    async def insert_entry(self, entry: Entry, session=None) -> Entry:
        """Insert a new entry."""
        await self.collection.insert_one(entry.to_document(), session=session)
        return entry

    async def get_entry(self, entry_id: ObjectId, room_id: ObjectId) -> Optional[Entry]:
        """Get an entry by id within a room."""
        doc = await self.collection.find_one({"_id": entry_id, "room": room_id})
        if doc:
            return Entry(**doc)
        return None

    async def mark_member_paid(
        self,
        entry_id: ObjectId,
        member_id: ObjectId,
        session=None
    ) -> Optional[Entry]:
        """
        Flip one member's paid_status False -> True.

        Returns None when the member is absent or already paid, so two
        concurrent settlements cannot both succeed.
        """
        doc = await self.collection.find_one_and_update(
            {
                "_id": entry_id,
                "members": {"$elemMatch": {"user_id": member_id, "paid_status": False}}
            },
            {
                "$set": {
                    "members.$.paid_status": True,
                    "members.$.is_pending": False
                }
            },
            return_document=ReturnDocument.AFTER,
            session=session
        )
        if doc:
            return Entry(**doc)
        return None

    async def mark_member_pending(self, entry_id: ObjectId, member_id: ObjectId) -> Optional[Entry]:
        """Flag an unpaid member as awaiting the payer's confirmation."""
        doc = await self.collection.find_one_and_update(
            {
                "_id": entry_id,
                "members": {"$elemMatch": {"user_id": member_id, "paid_status": False}}
            },
            {"$set": {"members.$.is_pending": True}},
            return_document=ReturnDocument.AFTER
        )
        if doc:
            return Entry(**doc)
        return None

    async def delete_entry(self, entry_id: ObjectId, session=None) -> bool:
        """Remove an entry."""
        result = await self.collection.delete_one({"_id": entry_id}, session=session)
        return result.deleted_count > 0

    async def list_entries(
        self,
        query: dict,
        page: int,
        limit: int
    ) -> Tuple[List[Entry], int]:
        """Page through entries newest first. Returns (entries, total)."""
        cursor = self.collection.find(query).sort("date", -1).skip((page - 1) * limit).limit(limit)
        docs = await cursor.to_list(None)
        total = await self.collection.count_documents(query)
        return [Entry(**doc) for doc in docs], total

    async def list_pending_for_payer(self, room_id: ObjectId, payer_id: ObjectId) -> List[Entry]:
        """Entries paid by payer_id with at least one member awaiting confirmation."""
        docs = await self.collection.find({
            "room": room_id,
            "paid_by": payer_id,
            "members.is_pending": True
        }).sort("date", -1).to_list(None)
        return [Entry(**doc) for doc in docs]
