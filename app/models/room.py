from typing import List, Optional
from bson import ObjectId
from pydantic import BaseModel, Field

from app.models.base import MongoModel, PyObjectId


class RoomMember(BaseModel):
    user_id: PyObjectId
    user_name: str
    user_email: str
    active: bool = True

    model_config = {"arbitrary_types_allowed": True}


class Room(MongoModel):
    name: str = Field(..., min_length=2, max_length=100)
    members: List[RoomMember] = Field(default_factory=list)

    def find_member(self, user_id: ObjectId) -> Optional[RoomMember]:
        for member in self.members:
            if member.user_id == user_id:
                return member
        return None

    def active_members(self) -> List[RoomMember]:
        return [m for m in self.members if m.active]
