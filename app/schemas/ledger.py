from typing import List
from pydantic import BaseModel


class LedgerRow(BaseModel):
    """Balance between the ledger owner and one counterpart."""
    user_id: str
    user_name: str
    payable: int      # owner owes counterpart
    receivable: int   # counterpart owes owner


class LedgerView(BaseModel):
    """One user's view of their balances within a room."""
    room_id: str
    user_id: str
    members: List[LedgerRow]
    total_payable: int
    total_receivable: int
    net: int  # receivable - payable

    def row(self, user_id: str) -> LedgerRow | None:
        for row in self.members:
            if row.user_id == user_id:
                return row
        return None
