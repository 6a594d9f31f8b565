from dataclasses import dataclass
from typing import Optional, Protocol


@dataclass
class LedgerResult:
    ok: bool
    balance: Optional[int] = None
    error: Optional[str] = None


class BalanceLedger(Protocol):
    """Loyalty points balance. Calls happen inside the booking's unit of work."""

    def debit(self, user_id: str, points: int) -> LedgerResult:
        ...

    def credit(self, user_id: str, points: int) -> LedgerResult:
        ...
