from fastapi import APIRouter
from app.api.v1.endpoints import auth, rooms, entries, ledger

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["authentication"])
api_router.include_router(rooms.router, prefix="/rooms", tags=["rooms"])
api_router.include_router(entries.router, prefix="/entries", tags=["entries"])
api_router.include_router(ledger.router, prefix="/ledger", tags=["ledger"])
