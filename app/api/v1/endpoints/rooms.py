from fastapi import APIRouter, Depends, HTTPException, status
from app.core.auth import get_current_user
from app.core.exceptions import ConflictError
from app.db.mongo import get_db
from app.models.user import SessionUser
from app.repositories.room_repo import RoomRepository
from app.schemas.room import RoomCreate, RoomMemberResponse, RoomResponse

router = APIRouter()

@router.post("", response_model=RoomResponse, status_code=status.HTTP_201_CREATED)
async def create_room(room_in: RoomCreate, db = Depends(get_db)):
    """Create a room that new users can register into"""
    room_repo = RoomRepository(db)
    
    if await room_repo.get_room_by_name(room_in.name):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Room name already taken"
        )
    
    try:
        room = await room_repo.create_room(room_in.name)
    except ConflictError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    return RoomResponse(id=str(room.id), name=room.name, members=[])

@router.get("/me", response_model=RoomResponse)
async def get_my_room(
    current_user: SessionUser = Depends(get_current_user),
    db = Depends(get_db)
):
    """Get the current user's room and the other active members"""
    room = await RoomRepository(db).get_room(current_user.room_oid)
    if not room:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Room not found")
    
    return RoomResponse(
        id=str(room.id),
        name=room.name,
        members=[
            RoomMemberResponse(user_id=str(m.user_id), user_name=m.user_name)
            for m in room.active_members()
            if m.user_id != current_user.user_oid
        ]
    )
