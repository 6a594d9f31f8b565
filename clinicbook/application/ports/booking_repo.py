from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from .schedule_repo import TimeSlotDto


@dataclass
class SlotContext:
    slot: TimeSlotDto
    provider_id: str
    schedule_published: bool


@dataclass
class AppointmentDto:
    id: str
    doctor_id: str
    patient_id: str
    time_slot_id: str
    status: str
    reason: Optional[str]
    notes: Optional[str]
    cancellation_reason: Optional[str]
    points_used: int
    payment_status: str
    created_at: datetime
    updated_at: Optional[datetime] = None


class BookingRepository:
    """Unit of work for reservations. Mutations are flushed, never committed, until ``commit``."""

    def get_slot_context(self, slot_id: str) -> Optional[SlotContext]:
        ...

    def has_active_booking(self, patient_id: str, slot_id: str) -> bool:
        ...

    def claim_slot(self, slot_id: str) -> bool:
        """Take one unit of capacity if the slot is open and not full. False when nothing was taken."""
        ...

    def release_slot(self, slot_id: str) -> bool:
        ...

    def add_appointment(self, doctor_id: str, patient_id: str, slot_id: str, reason: Optional[str],
                        points_used: int, payment_status: str, created_at: datetime) -> AppointmentDto:
        ...

    def get_appointment(self, appointment_id: str) -> Optional[AppointmentDto]:
        ...

    def list_for_patient(self, patient_id: str) -> List[AppointmentDto]:
        ...

    def transition(self, appointment_id: str, from_status: str, to_status: str, updated_at: datetime, **fields) -> bool:
        """Move the appointment only if it is still in ``from_status``."""
        ...

    def commit(self) -> None:
        ...

    def rollback(self) -> None:
        ...
