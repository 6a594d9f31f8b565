# clinicbook/db/models/billing/points_account.py
from datetime import datetime
from typing import Optional

from sqlalchemy import CheckConstraint
from sqlmodel import Field, SQLModel


class PointsAccount(SQLModel, table=True):
    __tablename__ = "point_accounts"
    __table_args__ = (CheckConstraint("balance >= 0", name="ck_point_accounts_balance"),)

    user_id: str = Field(primary_key=True, max_length=64)
    balance: int = Field(default=0)
    updated_at: Optional[datetime] = None
