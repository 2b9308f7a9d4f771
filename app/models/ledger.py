"""
Ledger model - running balance between two users in a room.

Design principles:
- One document per unordered pair (user_a < user_b) per room
- Both directions of debt live in the same document, so one user's
  payable is by construction the other user's receivable
- Every balance change is a single $inc on one document
- All amounts in integer currency units
"""

from datetime import datetime
from typing import Optional, Tuple
from bson import ObjectId
from pydantic import BaseModel, Field, ConfigDict

from app.models.base import PyObjectId, _utcnow


def order_pair(first: ObjectId, second: ObjectId) -> Tuple[ObjectId, ObjectId]:
    """Return the pair in storage order (user_a, user_b)."""
    if first == second:
        raise ValueError("A ledger pair needs two distinct users")
    return (first, second) if first < second else (second, first)


def debt_field(debtor_id: ObjectId, creditor_id: ObjectId) -> Tuple[ObjectId, ObjectId, str]:
    """Locate the counter holding what debtor owes creditor."""
    user_a, user_b = order_pair(debtor_id, creditor_id)
    field = "a_owes_b" if debtor_id == user_a else "b_owes_a"
    return user_a, user_b, field


class PairBalance(BaseModel):
    """
    Balance between user_a and user_b in one room.

    a_owes_b: what user_a owes user_b
    b_owes_a: what user_b owes user_a
    """
    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    id: Optional[PyObjectId] = Field(default=None, alias="_id")
    room: PyObjectId
    user_a: PyObjectId
    user_b: PyObjectId
    user_a_name: str = ""
    user_b_name: str = ""
    a_owes_b: int = 0
    b_owes_a: int = 0
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    def involves(self, user_id: ObjectId) -> bool:
        return user_id in (self.user_a, self.user_b)

    def counterpart(self, user_id: ObjectId) -> Tuple[ObjectId, str]:
        """The other user of the pair and their name."""
        if user_id == self.user_a:
            return self.user_b, self.user_b_name
        if user_id == self.user_b:
            return self.user_a, self.user_a_name
        raise ValueError(f"User {user_id} is not part of this pair")

    def payable_for(self, user_id: ObjectId) -> int:
        """What user_id owes the counterpart."""
        if user_id == self.user_a:
            return self.a_owes_b
        if user_id == self.user_b:
            return self.b_owes_a
        raise ValueError(f"User {user_id} is not part of this pair")

    def receivable_for(self, user_id: ObjectId) -> int:
        """What the counterpart owes user_id."""
        if user_id == self.user_a:
            return self.b_owes_a
        if user_id == self.user_b:
            return self.a_owes_b
        raise ValueError(f"User {user_id} is not part of this pair")
