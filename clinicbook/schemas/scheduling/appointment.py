# clinicbook/schemas/scheduling/appointment.py
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ReservationCreate(BaseModel):
    time_slot_id: str
    reason: Optional[str] = Field(default=None, max_length=200)
    points: int = Field(default=0, ge=0)


class CancellationRequest(BaseModel):
    reason: Optional[str] = Field(default=None, max_length=500)


class CompletionRequest(BaseModel):
    notes: Optional[str] = Field(default=None, max_length=2000)


class AppointmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    doctor_id: str
    patient_id: str
    time_slot_id: str
    status: str
    reason: Optional[str] = None
    notes: Optional[str] = None
    cancellation_reason: Optional[str] = None
    points_used: int
    payment_status: str
    created_at: datetime
    updated_at: Optional[datetime] = None
