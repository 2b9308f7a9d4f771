from typing import Optional
from motor.motor_asyncio import AsyncIOMotorDatabase
from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from app.core.exceptions import ConflictError
from app.models.room import Room, RoomMember


class RoomRepository:
    """Room database operations."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["rooms"]

    async def create_room(self, name: str) -> Room:
        """Create an empty room; ConflictError if the name is taken."""
        room = Room(name=name)
        try:
            await self.collection.insert_one(room.to_document())
        except DuplicateKeyError:
            raise ConflictError("Room name already taken")
        return room

    async def get_room(self, room_id: ObjectId) -> Optional[Room]:
        """Get room by ID."""
        doc = await self.collection.find_one({"_id": room_id})
        if doc:
            return Room(**doc)
        return None

    async def get_room_by_name(self, name: str) -> Optional[Room]:
        """Get room by its unique name."""
        doc = await self.collection.find_one({"name": name})
        if doc:
            return Room(**doc)
        return None

    async def add_member(self, room_id: ObjectId, member: RoomMember) -> Optional[Room]:
        """Append a member to the room roster."""
        doc = await self.collection.find_one_and_update(
            {"_id": room_id},
            {"$push": {"members": member.model_dump()}},
            return_document=True
        )
        if doc:
            return Room(**doc)
        return None

    async def remove_member(self, room_id: ObjectId, user_id: ObjectId) -> bool:
        """Drop a member from the roster."""
        result = await self.collection.update_one(
            {"_id": room_id},
            {"$pull": {"members": {"user_id": user_id}}}
        )
        return result.modified_count > 0
