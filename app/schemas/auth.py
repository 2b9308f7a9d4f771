from pydantic import BaseModel, EmailStr, Field
from app.models.user import UserResponse


class UserLogin(BaseModel):
    """Schema for user login"""
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    """Schema for authentication token response"""
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class ForgotPassword(BaseModel):
    """Schema for requesting a password reset link"""
    email: EmailStr


class PasswordReset(BaseModel):
    """Schema for setting a new password from a reset link"""
    password: str = Field(..., min_length=8, max_length=100)
