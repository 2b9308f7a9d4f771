"""Domain exceptions raised by services and translated to HTTP by endpoints."""
from typing import List, Tuple


class LedgerAppError(Exception):
    """Base class for roommate ledger errors."""
    pass


class EntryValidationError(LedgerAppError):
    """Rejected input; raised before anything is written."""
    pass


class NotFoundError(LedgerAppError):
    """Referenced entry, room, user or ledger row does not exist."""
    pass


class PermissionDeniedError(LedgerAppError):
    """Authenticated user may not perform this action."""
    pass


class ConflictError(LedgerAppError):
    """Unique value already taken (room name, email)."""
    pass


class LedgerIntegrityError(LedgerAppError):
    """Ledger store disagrees with the entry store, e.g. a missing pair record."""
    pass


class PartialLedgerUpdateError(LedgerIntegrityError):
    """
    A multi-pair ledger update failed part way without a transaction.

    applied: (debtor_id, creditor_id) pairs already written
    pending: pairs that were never written
    """

    def __init__(
        self,
        message: str,
        applied: List[Tuple[str, str]],
        pending: List[Tuple[str, str]],
    ):
        super().__init__(message)
        self.applied = applied
        self.pending = pending
