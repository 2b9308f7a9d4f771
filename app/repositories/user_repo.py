from motor.motor_asyncio import AsyncIOMotorDatabase
from bson import ObjectId
from datetime import datetime, timedelta, timezone
from pymongo.errors import DuplicateKeyError
from app.core.exceptions import ConflictError
from app.models.user import UserCreate, UserInDB
from app.core.config import settings
from app.core.security import hash_password, generate_account_token

class UserRepository:
    """User database operations."""
    
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["users"]
    
    async def create_user(self, user_data: UserCreate, room_id: ObjectId) -> UserInDB:
        """
        Create an unverified user with a fresh verification token.

        Raises ConflictError when the email is already registered.
        """
        now = datetime.now(timezone.utc)
        user_dict = {
            "name": user_data.name,
            "email": user_data.email,
            "password_hash": hash_password(user_data.password),
            "room": room_id,
            "is_verified": False,
            "verification_token": generate_account_token(),
            "verification_expires": now + timedelta(hours=settings.VERIFICATION_TOKEN_EXPIRE_HOURS),
            "created_at": now,
            "updated_at": now
        }
        
        try:
            result = await self.collection.insert_one(user_dict)
        except DuplicateKeyError:
            raise ConflictError("Email already exists")
        user_dict["_id"] = result.inserted_id
        return UserInDB(**user_dict)
    
    async def get_user_by_email(self, email: str) -> UserInDB | None:
        """Get user by email."""
        user = await self.collection.find_one({"email": email})
        if user:
            return UserInDB(**user)
        return None
    
    async def get_user_by_id(self, user_id: ObjectId) -> UserInDB | None:
        """Get user by ID."""
        user = await self.collection.find_one({"_id": user_id})
        if user:
            return UserInDB(**user)
        return None
    
    async def verify_email(self, token: str) -> UserInDB | None:
        """Mark the user holding an unexpired verification token as verified."""
        now = datetime.now(timezone.utc)
        result = await self.collection.find_one_and_update(
            {"verification_token": token, "verification_expires": {"$gt": now}},
            {
                "$set": {
                    "is_verified": True,
                    "verification_token": None,
                    "verification_expires": None,
                    "updated_at": now
                }
            },
            return_document=True
        )
        if result:
            return UserInDB(**result)
        return None
    
    async def set_reset_token(self, user_id: ObjectId) -> str:
        """Issue a password reset token."""
        now = datetime.now(timezone.utc)
        token = generate_account_token()
        await self.collection.update_one(
            {"_id": user_id},
            {"$set": {
                "reset_password_token": token,
                "reset_password_expires": now + timedelta(minutes=settings.RESET_TOKEN_EXPIRE_MINUTES),
                "updated_at": now
            }}
        )
        return token
    
    async def reset_password(self, token: str, new_password: str) -> UserInDB | None:
        """Set a new password if the reset token is valid and unexpired."""
        now = datetime.now(timezone.utc)
        result = await self.collection.find_one_and_update(
            {"reset_password_token": token, "reset_password_expires": {"$gt": now}},
            {"$set": {
                "password_hash": hash_password(new_password),
                "reset_password_token": None,
                "reset_password_expires": None,
                "updated_at": now
            }},
            return_document=True
        )
        if result:
            return UserInDB(**result)
        return None
    
    async def delete_user(self, user_id: ObjectId) -> bool:
        """Hard delete, used to undo a half-finished registration."""
        result = await self.collection.delete_one({"_id": user_id})
        return result.deleted_count > 0
