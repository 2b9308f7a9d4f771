from typing import List
from pydantic import BaseModel, Field


class RoomCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)


class RoomMemberResponse(BaseModel):
    user_id: str
    user_name: str


class RoomResponse(BaseModel):
    id: str
    name: str
    members: List[RoomMemberResponse]
