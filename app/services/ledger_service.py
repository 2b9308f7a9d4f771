"""
LedgerService - keeps pair balances in step with entries.

Entry lifecycle -> ledger effect:
1. New entry: every non-payer owes the payer one share
2. Member settles: that member owes the payer one share less
3. Entry deleted: outstanding shares are taken back

Shares are rounded half up and applied uniformly, so an amount that
does not divide evenly is not conserved (100 over 3 members -> 33 each).
"""

import logging
from typing import List, Optional, Tuple

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase

from app.core.exceptions import EntryValidationError, PartialLedgerUpdateError
from app.models.entry import Entry
from app.models.ledger import PairBalance
from app.repositories.ledger_repo import LedgerRepository
from app.schemas.ledger import LedgerRow, LedgerView

logger = logging.getLogger(__name__)


def compute_share(amount: int, member_count: int) -> int:
    """Per-member share of an entry, rounded half up."""
    if member_count < 1:
        raise EntryValidationError("An entry needs at least one member")
    return (2 * amount + member_count) // (2 * member_count)


class LedgerService:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.ledger_repo = LedgerRepository(db)

    async def apply_new_entry(self, entry: Entry, session=None) -> int:
        """
        Record a new entry: each non-payer owes the payer one share.

        Pair records for every two members of the entry are created first,
        so a failure during the increments never meets a missing record.
        Returns the share applied.
        """
        share = compute_share(entry.amount, len(entry.members))

        members = [(m.user_id, m.user_name) for m in entry.members]
        for i, first in enumerate(members):
            for second in members[i + 1:]:
                await self.ledger_repo.ensure_pair(entry.room, first, second, session=session)

        moves = [(m.user_id, entry.paid_by) for m in entry.non_payers()]
        await self._apply_moves(entry, moves, share, session)

        logger.info(
            "Applied entry %s: amount=%s share=%s debtors=%s",
            entry.id, entry.amount, share, len(moves)
        )
        return share

    async def reverse_entry(self, entry: Entry, session=None) -> int:
        """
        Undo an entry's effect using its stored amount and members.

        Every non-payer gets one share back whether or not they settled.
        A settled member ends up owed a refund by the payer. Returns the
        share reversed.
        """
        share = compute_share(entry.amount, len(entry.members))

        moves = [
            (m.user_id, entry.paid_by)
            for m in entry.non_payers()
        ]
        await self._apply_moves(entry, moves, -share, session)

        logger.info(
            "Reversed entry %s: amount=%s share=%s debtors=%s",
            entry.id, entry.amount, share, len(moves)
        )
        return share

    async def settle_member(
        self,
        room_id: ObjectId,
        payer_id: ObjectId,
        member_id: ObjectId,
        amount: int,
        session=None
    ) -> PairBalance:
        """
        Reduce what member owes payer by amount.

        Raises LedgerIntegrityError when the pair was never initialized.
        """
        if payer_id == member_id:
            raise EntryValidationError("The payer cannot settle with themselves")
        if amount < 0:
            raise EntryValidationError("Settlement amount must not be negative")

        pair = await self.ledger_repo.add_debt(
            room_id, member_id, payer_id, -amount, session=session
        )
        logger.info(
            "Settled %s from %s to %s in room %s", amount, member_id, payer_id, room_id
        )
        return pair

    async def get_user_ledger(self, room_id: ObjectId, user_id: ObjectId) -> LedgerView:
        """The user's payable/receivable against every counterpart in the room."""
        pairs = await self.ledger_repo.list_for_user(room_id, user_id)

        rows = []
        for pair in pairs:
            counterpart_id, counterpart_name = pair.counterpart(user_id)
            rows.append(LedgerRow(
                user_id=str(counterpart_id),
                user_name=counterpart_name,
                payable=pair.payable_for(user_id),
                receivable=pair.receivable_for(user_id)
            ))
        rows.sort(key=lambda row: (row.user_name.lower(), row.user_id))

        total_payable = sum(row.payable for row in rows)
        total_receivable = sum(row.receivable for row in rows)
        return LedgerView(
            room_id=str(room_id),
            user_id=str(user_id),
            members=rows,
            total_payable=total_payable,
            total_receivable=total_receivable,
            net=total_receivable - total_payable
        )

    async def _apply_moves(
        self,
        entry: Entry,
        moves: List[Tuple[ObjectId, ObjectId]],
        delta: int,
        session: Optional[object]
    ) -> None:
        """Add delta to each (debtor, creditor) balance in order."""
        applied: List[Tuple[str, str]] = []
        for index, (debtor_id, creditor_id) in enumerate(moves):
            try:
                await self.ledger_repo.add_debt(
                    entry.room, debtor_id, creditor_id, delta, session=session
                )
            except Exception as exc:
                pending = [(str(d), str(c)) for d, c in moves[index:]]
                logger.error(
                    "Ledger update for entry %s failed at %s -> %s: %s; applied=%s pending=%s",
                    entry.id, debtor_id, creditor_id, exc, applied, pending
                )
                # Inside a transaction the abort discards the applied pairs
                if session is None and applied:
                    raise PartialLedgerUpdateError(
                        f"Ledger for entry {entry.id} partially updated",
                        applied=applied,
                        pending=pending
                    ) from exc
                raise
            applied.append((str(debtor_id), str(creditor_id)))
            logger.debug(
                "Entry %s: %s owes %s %+d", entry.id, debtor_id, creditor_id, delta
            )
