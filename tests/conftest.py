import pytest
import pytest_asyncio
from bson import ObjectId
from httpx import AsyncClient, ASGITransport

from app.core.auth import create_access_token
from app.db.mongo import get_db
from app.main import app
from app.models.room import Room, RoomMember
from app.models.user import SessionUser
from app.services.entry_service import EntryService
from app.services.ledger_service import LedgerService
from tests.fake_mongo import FakeDatabase


@pytest.fixture
def fake_db():
    """Fresh in-memory database for each test."""
    return FakeDatabase()


@pytest_asyncio.fixture
async def room(fake_db) -> Room:
    """A room with three active roommates."""
    room = Room(
        name="Flat 4B",
        members=[
            RoomMember(user_id=ObjectId(), user_name="Alice", user_email="alice@example.com"),
            RoomMember(user_id=ObjectId(), user_name="Bob", user_email="bob@example.com"),
            RoomMember(user_id=ObjectId(), user_name="Charlie", user_email="charlie@example.com"),
        ]
    )
    await fake_db["rooms"].insert_one(room.to_document())
    return room


def _session_user(room: Room, index: int) -> SessionUser:
    member = room.members[index]
    return SessionUser(
        user_id=str(member.user_id),
        room_id=str(room.id),
        name=member.user_name,
        email=member.user_email
    )


@pytest.fixture
def alice(room) -> SessionUser:
    return _session_user(room, 0)


@pytest.fixture
def bob(room) -> SessionUser:
    return _session_user(room, 1)


@pytest.fixture
def charlie(room) -> SessionUser:
    return _session_user(room, 2)


@pytest.fixture
def ledger_service(fake_db) -> LedgerService:
    return LedgerService(fake_db)


@pytest.fixture
def entry_service(fake_db) -> EntryService:
    return EntryService(fake_db, use_transactions=False)


def token_for(user: SessionUser) -> str:
    return create_access_token(user.user_id, user.room_id, user.name, user.email)


def auth_header(user: SessionUser) -> dict:
    return {"Authorization": f"Bearer {token_for(user)}"}


@pytest_asyncio.fixture
async def client(fake_db):
    """HTTP client against the app with the database swapped for the fake."""
    app.dependency_overrides[get_db] = lambda: fake_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def headers_for():
    """Builds bearer headers for a session user."""
    return auth_header
