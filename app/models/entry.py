"""
Entry model - one shared expense in a room.

Invariants:
- members contains the payer exactly once
- the payer's paid_status is True from creation
- paid_status only ever flips False -> True
"""

from datetime import datetime
from typing import List, Optional
from bson import ObjectId
from pydantic import BaseModel, Field

from app.models.base import MongoModel, PyObjectId


class EntryMember(BaseModel):
    """A participant in an entry and whether their share is paid."""
    user_id: PyObjectId
    user_name: str
    paid_status: bool = False
    is_pending: bool = False  # reported paid, awaiting payer confirmation

    model_config = {"arbitrary_types_allowed": True}


class Entry(MongoModel):
    room: PyObjectId
    date: datetime
    description: str
    amount: int = Field(..., gt=0)  # integer currency units
    paid_by: PyObjectId
    members: List[EntryMember] = Field(..., min_length=1)

    def find_member(self, user_id: ObjectId) -> Optional[EntryMember]:
        for member in self.members:
            if member.user_id == user_id:
                return member
        return None

    def non_payers(self) -> List[EntryMember]:
        return [m for m in self.members if m.user_id != self.paid_by]

    def has_pending(self) -> bool:
        return any(m.is_pending for m in self.members)
