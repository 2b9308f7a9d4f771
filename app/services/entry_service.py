"""
EntryService - entry lifecycle and the ledger updates it triggers.

Each mutating operation writes the entry and its ledger effect inside one
transaction when LEDGER_USE_TRANSACTIONS is on. Without it, a ledger
failure leaves the entry write in place and surfaces as an error.
"""

import logging
import math
from typing import List, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase

from app.core.config import settings
from app.core.exceptions import (
    ConflictError,
    EntryValidationError,
    NotFoundError,
    PermissionDeniedError,
)
from app.db.mongo import transaction
from app.models.base import to_object_id
from app.models.entry import Entry, EntryMember
from app.models.user import SessionUser
from app.repositories.entry_repo import EntryRepository
from app.repositories.room_repo import RoomRepository
from app.schemas.entry import EntryCreate, EntryPage, EntryResponse, Pagination
from app.services.ledger_service import LedgerService, compute_share

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100


class EntryService:
    def __init__(self, db: AsyncIOMotorDatabase, use_transactions: Optional[bool] = None):
        self.db = db
        self.entry_repo = EntryRepository(db)
        self.room_repo = RoomRepository(db)
        self.ledger = LedgerService(db)
        if use_transactions is None:
            use_transactions = settings.LEDGER_USE_TRANSACTIONS
        self.use_transactions = use_transactions

    async def create_entry(self, user: SessionUser, data: EntryCreate) -> Entry:
        """Persist a new entry paid by the caller and charge each member a share."""
        room = await self.room_repo.get_room(user.room_oid)
        if room is None:
            raise NotFoundError("Room not found")

        payer = room.find_member(user.user_oid)
        if payer is None or not payer.active:
            raise PermissionDeniedError("You are not an active member of this room")

        member_ids: List[ObjectId] = []
        for raw_id in data.selected_members:
            member_id = to_object_id(raw_id)
            if member_id is None:
                raise EntryValidationError(f"Invalid member id: {raw_id}")
            if member_id != payer.user_id and member_id not in member_ids:
                member_ids.append(member_id)

        if not member_ids:
            raise EntryValidationError("Select at least one member other than yourself")

        members = []
        for member_id in member_ids:
            room_member = room.find_member(member_id)
            if room_member is None or not room_member.active:
                raise EntryValidationError(f"User {member_id} is not a member of this room")
            members.append(EntryMember(user_id=member_id, user_name=room_member.user_name))
        members.append(EntryMember(user_id=payer.user_id, user_name=payer.user_name, paid_status=True))

        entry = Entry(
            room=room.id,
            date=data.date,
            description=data.description,
            amount=data.amount,
            paid_by=payer.user_id,
            members=members
        )

        async with transaction(self.db, self.use_transactions) as session:
            await self.entry_repo.insert_entry(entry, session=session)
            await self.ledger.apply_new_entry(entry, session=session)

        logger.info("Entry %s created in room %s by %s", entry.id, room.id, payer.user_id)
        return entry

    async def mark_member_paid(self, user: SessionUser, entry_id: str) -> Entry:
        """The caller marks their own share of an entry as paid."""
        entry = await self._get_entry(user, entry_id)
        return await self._settle(entry, user.user_oid)

    async def confirm_payment(self, user: SessionUser, entry_id: str, member_id: str) -> Entry:
        """The payer confirms that a member has paid their share."""
        entry = await self._get_entry(user, entry_id)
        if entry.paid_by != user.user_oid:
            raise PermissionDeniedError("Only the payer can confirm payments")

        member_oid = to_object_id(member_id)
        if member_oid is None:
            raise NotFoundError("Member not found in entry")
        return await self._settle(entry, member_oid)

    async def request_confirmation(self, user: SessionUser, entry_id: str) -> Entry:
        """The caller reports paying and waits for the payer to confirm."""
        entry = await self._get_entry(user, entry_id)
        self._check_settleable(entry, user.user_oid)

        updated = await self.entry_repo.mark_member_pending(entry.id, user.user_oid)
        if updated is None:
            raise ConflictError("Share already settled")
        return updated

    async def delete_entry(self, user: SessionUser, entry_id: str) -> Entry:
        """The payer deletes an entry; outstanding shares are reversed."""
        entry = await self._get_entry(user, entry_id)
        if entry.paid_by != user.user_oid:
            raise PermissionDeniedError("Only the payer can delete this entry")

        async with transaction(self.db, self.use_transactions) as session:
            await self.ledger.reverse_entry(entry, session=session)
            await self.entry_repo.delete_entry(entry.id, session=session)

        logger.info("Entry %s deleted by %s", entry.id, user.user_id)
        return entry

    async def list_room_entries(self, user: SessionUser, page: int, limit: int) -> EntryPage:
        return await self._page({"room": user.room_oid}, page, limit)

    async def list_my_entries(self, user: SessionUser, page: int, limit: int) -> EntryPage:
        return await self._page({"room": user.room_oid, "paid_by": user.user_oid}, page, limit)

    async def list_pending_confirmations(self, user: SessionUser) -> List[EntryResponse]:
        entries = await self.entry_repo.list_pending_for_payer(user.room_oid, user.user_oid)
        return [to_response(entry) for entry in entries]

    async def _page(self, query: dict, page: int, limit: int) -> EntryPage:
        page = max(page, 1)
        limit = min(max(limit, 1), MAX_PAGE_SIZE)
        entries, total = await self.entry_repo.list_entries(query, page, limit)
        return EntryPage(
            entries=[to_response(entry) for entry in entries],
            pagination=Pagination(
                page=page,
                limit=limit,
                total_pages=math.ceil(total / limit),
                total_entries=total
            )
        )

    async def _get_entry(self, user: SessionUser, entry_id: str) -> Entry:
        entry_oid = to_object_id(entry_id)
        entry = None
        if entry_oid is not None:
            entry = await self.entry_repo.get_entry(entry_oid, user.room_oid)
        if entry is None:
            raise NotFoundError("Entry not found")
        return entry

    def _check_settleable(self, entry: Entry, member_id: ObjectId) -> None:
        if member_id == entry.paid_by:
            raise EntryValidationError("The payer's share is already settled")
        member = entry.find_member(member_id)
        if member is None:
            raise NotFoundError("Member not found in entry")
        if member.paid_status:
            raise ConflictError("Share already settled")

    async def _settle(self, entry: Entry, member_id: ObjectId) -> Entry:
        self._check_settleable(entry, member_id)
        share = compute_share(entry.amount, len(entry.members))

        async with transaction(self.db, self.use_transactions) as session:
            updated = await self.entry_repo.mark_member_paid(entry.id, member_id, session=session)
            if updated is None:
                raise ConflictError("Share already settled")
            await self.ledger.settle_member(
                entry.room, entry.paid_by, member_id, share, session=session
            )
        return updated


def to_response(entry: Entry) -> EntryResponse:
    return EntryResponse.from_entry(entry, compute_share(entry.amount, len(entry.members)))
