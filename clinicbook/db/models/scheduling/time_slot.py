# clinicbook/db/models/scheduling/time_slot.py
import uuid
from datetime import time

from sqlalchemy import CheckConstraint, UniqueConstraint
from sqlmodel import Field, SQLModel

from ....application.status import TimeSlotStatus


class TimeSlot(SQLModel, table=True):
    __tablename__ = "time_slots"
    __table_args__ = (
        UniqueConstraint("schedule_id", "start_time", "end_time", name="uq_time_slots_window"),
        CheckConstraint("capacity >= 1", name="ck_time_slots_capacity"),
        CheckConstraint("booked_count >= 0 AND booked_count <= capacity", name="ck_time_slots_booked"),
    )

    id: str = Field(default_factory=lambda: uuid.uuid4().hex, primary_key=True, max_length=32)
    schedule_id: str = Field(foreign_key="schedules.id", index=True, max_length=32)
    start_time: time
    end_time: time
    capacity: int = Field(default=1)
    booked_count: int = Field(default=0)
    status: str = Field(default=TimeSlotStatus.OPEN.value, max_length=16)
    # bumped on every occupancy or status change
    version: int = Field(default=0)
