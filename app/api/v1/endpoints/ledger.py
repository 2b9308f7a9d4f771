from fastapi import APIRouter, Depends
from app.core.auth import get_current_user
from app.db.mongo import get_db
from app.models.user import SessionUser
from app.schemas.ledger import LedgerView
from app.services.ledger_service import LedgerService

router = APIRouter()

@router.get("", response_model=LedgerView)
async def get_my_ledger(
    current_user: SessionUser = Depends(get_current_user),
    db = Depends(get_db)
):
    """Get the current user's balances against each roommate"""
    return await LedgerService(db).get_user_ledger(current_user.room_oid, current_user.user_oid)
