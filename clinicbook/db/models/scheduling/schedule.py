# clinicbook/db/models/scheduling/schedule.py
import uuid
from datetime import date, datetime, time
from typing import Optional

from sqlalchemy import CheckConstraint, UniqueConstraint
from sqlmodel import Field, SQLModel


class Schedule(SQLModel, table=True):
    __tablename__ = "schedules"
    __table_args__ = (
        UniqueConstraint("provider_id", "work_date", name="uq_schedules_provider_day"),
        CheckConstraint("end_time > start_time", name="ck_schedules_window"),
        CheckConstraint("slot_minutes > 0", name="ck_schedules_slot_minutes"),
    )

    id: str = Field(default_factory=lambda: uuid.uuid4().hex, primary_key=True, max_length=32)
    provider_id: str = Field(index=True, max_length=64)
    work_date: date = Field(index=True)
    start_time: time
    end_time: time
    slot_minutes: int = Field(default=15)
    location: Optional[str] = Field(default=None, max_length=120)
    is_published: bool = Field(default=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
