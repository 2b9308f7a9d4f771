from typing import List
from fastapi import APIRouter, Depends, Query, status
from app.api.deps import domain_errors
from app.core.auth import get_current_user
from app.db.mongo import get_db
from app.models.user import SessionUser
from app.schemas.entry import EntryCreate, EntryPage, EntryResponse, MessageResponse
from app.services.entry_service import EntryService, to_response

router = APIRouter()

@router.post("", response_model=EntryResponse, status_code=status.HTTP_201_CREATED)
async def create_entry(
    entry_in: EntryCreate,
    current_user: SessionUser = Depends(get_current_user),
    db = Depends(get_db)
):
    """Create an entry paid by the current user"""
    with domain_errors():
        entry = await EntryService(db).create_entry(current_user, entry_in)
    return to_response(entry)

@router.get("", response_model=EntryPage)
async def list_room_entries(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: SessionUser = Depends(get_current_user),
    db = Depends(get_db)
):
    """List all entries in the current user's room, newest first"""
    return await EntryService(db).list_room_entries(current_user, page, limit)

@router.get("/mine", response_model=EntryPage)
async def list_my_entries(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: SessionUser = Depends(get_current_user),
    db = Depends(get_db)
):
    """List entries paid by the current user"""
    return await EntryService(db).list_my_entries(current_user, page, limit)

@router.get("/pending", response_model=List[EntryResponse])
async def list_pending_confirmations(
    current_user: SessionUser = Depends(get_current_user),
    db = Depends(get_db)
):
    """Entries paid by the current user with payments awaiting confirmation"""
    return await EntryService(db).list_pending_confirmations(current_user)

@router.post("/{entry_id}/settle", response_model=EntryResponse)
async def settle_my_share(
    entry_id: str,
    current_user: SessionUser = Depends(get_current_user),
    db = Depends(get_db)
):
    """Mark the current user's share of an entry as paid"""
    with domain_errors():
        entry = await EntryService(db).mark_member_paid(current_user, entry_id)
    return to_response(entry)

@router.post("/{entry_id}/request-confirmation", response_model=EntryResponse)
async def request_confirmation(
    entry_id: str,
    current_user: SessionUser = Depends(get_current_user),
    db = Depends(get_db)
):
    """Tell the payer the current user has paid; the payer confirms"""
    with domain_errors():
        entry = await EntryService(db).request_confirmation(current_user, entry_id)
    return to_response(entry)

@router.post("/{entry_id}/members/{member_id}/confirm", response_model=EntryResponse)
async def confirm_payment(
    entry_id: str,
    member_id: str,
    current_user: SessionUser = Depends(get_current_user),
    db = Depends(get_db)
):
    """Payer confirms a member's payment"""
    with domain_errors():
        entry = await EntryService(db).confirm_payment(current_user, entry_id, member_id)
    return to_response(entry)

@router.delete("/{entry_id}", response_model=MessageResponse)
async def delete_entry(
    entry_id: str,
    current_user: SessionUser = Depends(get_current_user),
    db = Depends(get_db)
):
    """Delete an entry paid by the current user"""
    with domain_errors():
        await EntryService(db).delete_entry(current_user, entry_id)
    return MessageResponse(message="Entry deleted successfully")
