# clinicbook/db/models/scheduling/appointment.py
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import CheckConstraint, Index, text
from sqlmodel import Field, SQLModel

from ....application.status import AppointmentStatus, PaymentStatus

_ACTIVE_ONLY = text("status != 'cancelled'")


class Appointment(SQLModel, table=True):
    __tablename__ = "appointments"
    __table_args__ = (
        # one live booking per patient and slot; cancelled rows remain as history
        Index(
            "uq_appointments_patient_slot_active",
            "patient_id",
            "time_slot_id",
            unique=True,
            sqlite_where=_ACTIVE_ONLY,
            postgresql_where=_ACTIVE_ONLY,
        ),
        CheckConstraint("points_used >= 0", name="ck_appointments_points"),
    )

    id: str = Field(default_factory=lambda: uuid.uuid4().hex, primary_key=True, max_length=32)
    doctor_id: str = Field(index=True, max_length=64)
    patient_id: str = Field(index=True, max_length=64)
    time_slot_id: str = Field(foreign_key="time_slots.id", index=True, max_length=32)
    status: str = Field(default=AppointmentStatus.BOOKED.value, max_length=16)
    reason: Optional[str] = Field(default=None, max_length=200)
    notes: Optional[str] = Field(default=None, max_length=2000)
    cancellation_reason: Optional[str] = Field(default=None, max_length=500)
    points_used: int = Field(default=0)
    payment_status: str = Field(default=PaymentStatus.UNPAID.value, max_length=16)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: Optional[datetime] = None
