from datetime import datetime, timedelta, timezone
from bson import ObjectId
from jose import JWTError, jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.core.config import settings
from app.models.user import SessionUser

security = HTTPBearer()

def create_access_token(
    user_id: str,
    room_id: str,
    name: str,
    email: str,
    expires_delta: timedelta | None = None
) -> str:
    """Create JWT access token carrying the user's room."""
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    
    now = datetime.now(timezone.utc)
    expire = now + expires_delta
    
    payload = {
        "sub": user_id,
        "room": room_id,
        "name": name,
        "email": email,
        "exp": int(expire.timestamp()),
        "iat": int(now.timestamp())
    }
    
    encoded_jwt = jwt.encode(
        payload,
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM
    )
    return encoded_jwt

def decode_access_token(token: str) -> SessionUser:
    """Decode a token into the session identity; raises JWTError or ValueError."""
    payload = jwt.decode(
        token,
        settings.SECRET_KEY,
        algorithms=[settings.ALGORITHM]
    )
    user_id = payload.get("sub")
    room_id = payload.get("room")
    if not user_id or not room_id:
        raise ValueError("Token is missing user or room")
    if not ObjectId.is_valid(user_id) or not ObjectId.is_valid(room_id):
        raise ValueError("Token carries a malformed user or room id")
    
    return SessionUser(
        user_id=user_id,
        room_id=room_id,
        name=payload.get("name", ""),
        email=payload.get("email", "")
    )

async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> SessionUser:
    """Get the session identity from the bearer token."""
    try:
        return decode_access_token(credentials.credentials)
    except (JWTError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized Access",
            headers={"WWW-Authenticate": "Bearer"},
        )
