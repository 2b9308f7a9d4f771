from datetime import datetime
from typing import List
from pydantic import BaseModel, Field

from app.models.entry import Entry


class EntryCreate(BaseModel):
    """Request body for a new entry; the caller is the payer."""
    date: datetime
    description: str = Field(..., min_length=1, max_length=200)
    amount: int = Field(..., gt=0)
    selected_members: List[str] = Field(..., min_length=1)


class EntryMemberResponse(BaseModel):
    user_id: str
    user_name: str
    paid_status: bool
    is_pending: bool


class EntryResponse(BaseModel):
    id: str
    room: str
    date: datetime
    description: str
    amount: int
    paid_by: str
    share: int
    members: List[EntryMemberResponse]
    created_at: datetime

    @classmethod
    def from_entry(cls, entry: Entry, share: int) -> "EntryResponse":
        return cls(
            id=str(entry.id),
            room=str(entry.room),
            date=entry.date,
            description=entry.description,
            amount=entry.amount,
            paid_by=str(entry.paid_by),
            share=share,
            members=[
                EntryMemberResponse(
                    user_id=str(m.user_id),
                    user_name=m.user_name,
                    paid_status=m.paid_status,
                    is_pending=m.is_pending
                )
                for m in entry.members
            ],
            created_at=entry.created_at
        )


class Pagination(BaseModel):
    page: int
    limit: int
    total_pages: int
    total_entries: int


class EntryPage(BaseModel):
    entries: List[EntryResponse]
    pagination: Pagination


class MessageResponse(BaseModel):
    success: bool = True
    message: str
