import logging
from contextlib import contextmanager

from fastapi import HTTPException, status

from app.core.exceptions import (
    ConflictError,
    EntryValidationError,
    LedgerIntegrityError,
    NotFoundError,
    PermissionDeniedError,
)

logger = logging.getLogger(__name__)


@contextmanager
def domain_errors():
    """Translate service exceptions into HTTP errors."""
    try:
        yield
    except EntryValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    except PermissionDeniedError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc))
    except ConflictError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    except LedgerIntegrityError as exc:
        logger.error("Ledger integrity fault: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Ledger update failed"
        )
