from pydantic import BaseModel, EmailStr, Field, ConfigDict
from datetime import datetime
from typing import Optional
from bson import ObjectId

class UserCreate(BaseModel):
    """User registration schema; room is joined by name."""
    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=100)
    room: str = Field(..., min_length=2, max_length=100)

class UserResponse(BaseModel):
    """User response schema."""
    id: str
    name: str
    email: str
    room_id: str
    is_verified: bool

class SessionUser(BaseModel):
    """Identity decoded from the session token."""
    user_id: str
    room_id: str
    name: str = ""
    email: str = ""

    @property
    def user_oid(self) -> ObjectId:
        return ObjectId(self.user_id)

    @property
    def room_oid(self) -> ObjectId:
        return ObjectId(self.room_id)

class UserInDB(BaseModel):
    """User database schema."""
    id: ObjectId = Field(alias="_id")
    name: str
    email: str
    password_hash: str
    room: ObjectId
    is_verified: bool = False
    verification_token: Optional[str] = None
    verification_expires: Optional[datetime] = None
    reset_password_token: Optional[str] = None
    reset_password_expires: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    
    model_config = ConfigDict(
        populate_by_name=True,
        from_attributes=True,
        arbitrary_types_allowed=True
    )
    
    @property
    def _id(self) -> ObjectId:
        """Alias for id to match MongoDB naming."""
        return self.id

    def to_response(self) -> UserResponse:
        return UserResponse(
            id=str(self.id),
            name=self.name,
            email=self.email,
            room_id=str(self.room),
            is_verified=self.is_verified
        )
