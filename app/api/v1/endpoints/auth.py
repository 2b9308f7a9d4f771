import logging
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.concurrency import run_in_threadpool
from app.core.auth import create_access_token, get_current_user
from app.core.exceptions import ConflictError
from app.core.security import verify_password
from app.db.mongo import get_db
from app.models.room import RoomMember
from app.models.user import SessionUser, UserCreate
from app.repositories.room_repo import RoomRepository
from app.repositories.user_repo import UserRepository
from app.schemas.auth import ForgotPassword, PasswordReset, TokenResponse, UserLogin
from app.schemas.entry import MessageResponse
from app.services.email_service import (
    EmailDeliveryError,
    send_password_reset_email,
    send_verification_email,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/register", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def register(user_data: UserCreate, db = Depends(get_db)):
    """Register into an existing room and send a verification email"""
    user_repo = UserRepository(db)
    room_repo = RoomRepository(db)
    
    room = await room_repo.get_room_by_name(user_data.room)
    if not room:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Invalid Room"
        )
    
    if await user_repo.get_user_by_email(user_data.email):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already exists"
        )
    
    try:
        user = await user_repo.create_user(user_data, room.id)
    except ConflictError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    
    updated_room = await room_repo.add_member(
        room.id,
        RoomMember(user_id=user.id, user_name=user.name, user_email=user.email)
    )
    if not updated_room:
        await user_repo.delete_user(user.id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update room with new member"
        )
    
    try:
        await run_in_threadpool(send_verification_email, user.email, user.verification_token)
    except (EmailDeliveryError, OSError) as exc:
        logger.error("Registration of %s rolled back, verification email failed: %s", user.email, exc)
        await room_repo.remove_member(room.id, user.id)
        await user_repo.delete_user(user.id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error creating account. Please try again."
        )
    
    return MessageResponse(
        message="Registration successful. Please check your email to verify your account."
    )


@router.get("/verify-email/{token}", response_model=MessageResponse)
async def verify_email(token: str, db = Depends(get_db)):
    """Verify an account from the emailed link"""
    user = await UserRepository(db).verify_email(token)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid or expired verification token"
        )
    return MessageResponse(message="Email verified successfully. You can now login.")


@router.post("/login", response_model=TokenResponse)
async def login(credentials: UserLogin, db = Depends(get_db)):
    """Login with email and password"""
    user = await UserRepository(db).get_user_by_email(credentials.email)
    if not user or not verify_password(credentials.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password"
        )
    
    if not user.is_verified:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Please verify your email before logging in"
        )
    
    access_token = create_access_token(
        user_id=str(user.id),
        room_id=str(user.room),
        name=user.name,
        email=user.email
    )
    return TokenResponse(access_token=access_token, user=user.to_response())


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(payload: ForgotPassword, db = Depends(get_db)):
    """Email a password reset link"""
    user_repo = UserRepository(db)
    user = await user_repo.get_user_by_email(payload.email)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No account found with this email"
        )
    
    token = await user_repo.set_reset_token(user.id)
    try:
        await run_in_threadpool(send_password_reset_email, user.email, token)
    except (EmailDeliveryError, OSError) as exc:
        logger.error("Password reset email to %s failed: %s", user.email, exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error sending password reset email"
        )
    
    return MessageResponse(message="Password reset link has been sent to your email")


@router.post("/reset-password/{token}", response_model=MessageResponse)
async def reset_password(token: str, payload: PasswordReset, db = Depends(get_db)):
    """Set a new password from a reset link"""
    user = await UserRepository(db).reset_password(token, payload.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Password reset token is invalid or has expired"
        )
    return MessageResponse(message="Password has been reset successfully")


@router.get("/me", response_model=SessionUser)
async def get_me(current_user: SessionUser = Depends(get_current_user)):
    """Get current session identity"""
    return current_user
