from typing import Optional

from sqlalchemy import update
from sqlmodel import Session, select

from .....application.ports.balance_ledger import BalanceLedger, LedgerResult
from .....application.ports.clock import Clock
from .....db.models import PointsAccount
from ....clock.system_clock import SystemClock
from ..errors import translate_db_errors


class SqlBalanceLedger(BalanceLedger):
    """
    Points ledger stored next to the bookings.

    Shares the caller's session and never commits, so a debit or credit lands in
    the same transaction as the reservation or cancellation that caused it.
    """

    def __init__(self, session: Session, clock: Optional[Clock] = None):
        self.session = session
        self._clock = clock or SystemClock()

    def balance(self, user_id: str) -> Optional[int]:
        return self.session.exec(
            select(PointsAccount.balance)
            .where(PointsAccount.user_id == user_id)
            .execution_options(populate_existing=True)
        ).first()

    def debit(self, user_id: str, points: int) -> LedgerResult:
        if points <= 0:
            return LedgerResult(ok=False, error="points must be positive")
        stmt = (
            update(PointsAccount)
            .where(PointsAccount.user_id == user_id)
            .where(PointsAccount.balance >= points)
            .values(balance=PointsAccount.balance - points, updated_at=self._clock.now())
        )
        with translate_db_errors():
            changed = self.session.execute(stmt.execution_options(synchronize_session=False)).rowcount
        if changed != 1:
            if self.balance(user_id) is None:
                return LedgerResult(ok=False, error="no points account")
            return LedgerResult(ok=False, error="insufficient points balance")
        return LedgerResult(ok=True, balance=self.balance(user_id))

    def credit(self, user_id: str, points: int) -> LedgerResult:
        if points <= 0:
            return LedgerResult(ok=False, error="points must be positive")
        stmt = (
            update(PointsAccount)
            .where(PointsAccount.user_id == user_id)
            .values(balance=PointsAccount.balance + points, updated_at=self._clock.now())
        )
        with translate_db_errors():
            changed = self.session.execute(stmt.execution_options(synchronize_session=False)).rowcount
            if changed != 1:
                self.session.add(PointsAccount(user_id=user_id, balance=points, updated_at=self._clock.now()))
                self.session.flush()
        return LedgerResult(ok=True, balance=self.balance(user_id))

    def open_account(self, user_id: str, balance: int = 0) -> None:
        with translate_db_errors(conflict_detail="Points account already exists"):
            self.session.add(PointsAccount(user_id=user_id, balance=balance, updated_at=self._clock.now()))
            self.session.commit()
