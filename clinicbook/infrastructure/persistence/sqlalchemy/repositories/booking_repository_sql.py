from datetime import datetime
from typing import List, Optional

from sqlalchemy import case, update
from sqlmodel import Session, select

from .....application.ports.booking_repo import AppointmentDto, BookingRepository, SlotContext
from .....application.status import AppointmentStatus, TimeSlotStatus
from .....db.models import Appointment, Schedule, TimeSlot
from .....exceptions import DuplicateBookingError
from ..errors import translate_db_errors
from .mappers import appt_to_dto, slot_to_dto

OPEN = TimeSlotStatus.OPEN.value
FULL = TimeSlotStatus.FULL.value
CANCELLED = AppointmentStatus.CANCELLED.value
DUPLICATE_DETAIL = "Patient already holds a booking for this time slot"


class SqlBookingRepository(BookingRepository):
    def __init__(self, session: Session):
        self.session = session

    def get_slot_context(self, slot_id: str) -> Optional[SlotContext]:
        with translate_db_errors():
            row = self.session.exec(
                select(TimeSlot, Schedule)
                .join(Schedule, Schedule.id == TimeSlot.schedule_id)
                .where(TimeSlot.id == slot_id)
                .execution_options(populate_existing=True)
            ).first()
        if not row:
            return None
        slot, schedule = row
        return SlotContext(
            slot=slot_to_dto(slot),
            provider_id=schedule.provider_id,
            schedule_published=bool(schedule.is_published),
        )

    def has_active_booking(self, patient_id: str, slot_id: str) -> bool:
        with translate_db_errors():
            existing = self.session.exec(
                select(Appointment.id)
                .where(Appointment.patient_id == patient_id)
                .where(Appointment.time_slot_id == slot_id)
                .where(Appointment.status != CANCELLED)
            ).first()
        return existing is not None

    def claim_slot(self, slot_id: str) -> bool:
        # SET expressions read the pre-update row, so booked_count + 1 is the new count
        stmt = (
            update(TimeSlot)
            .where(TimeSlot.id == slot_id)
            .where(TimeSlot.status == OPEN)
            .where(TimeSlot.booked_count < TimeSlot.capacity)
            .values(
                booked_count=TimeSlot.booked_count + 1,
                status=case((TimeSlot.booked_count + 1 >= TimeSlot.capacity, FULL), else_=OPEN),
                version=TimeSlot.version + 1,
            )
        )
        return self._execute(stmt) == 1

    def release_slot(self, slot_id: str) -> bool:
        stmt = (
            update(TimeSlot)
            .where(TimeSlot.id == slot_id)
            .where(TimeSlot.booked_count > 0)
            .values(
                booked_count=TimeSlot.booked_count - 1,
                status=case((TimeSlot.status == FULL, OPEN), else_=TimeSlot.status),
                version=TimeSlot.version + 1,
            )
        )
        return self._execute(stmt) == 1

    def add_appointment(self, doctor_id: str, patient_id: str, slot_id: str, reason: Optional[str],
                        points_used: int, payment_status: str, created_at: datetime) -> AppointmentDto:
        appt = Appointment(
            doctor_id=doctor_id,
            patient_id=patient_id,
            time_slot_id=slot_id,
            status=AppointmentStatus.BOOKED.value,
            reason=reason,
            points_used=points_used,
            payment_status=payment_status,
            created_at=created_at,
        )
        with translate_db_errors(DuplicateBookingError, DUPLICATE_DETAIL):
            self.session.add(appt)
            self.session.flush()
        return appt_to_dto(appt)

    def get_appointment(self, appointment_id: str) -> Optional[AppointmentDto]:
        a = self.session.exec(
            select(Appointment)
            .where(Appointment.id == appointment_id)
            .execution_options(populate_existing=True)
        ).first()
        return appt_to_dto(a) if a else None

    def list_for_patient(self, patient_id: str) -> List[AppointmentDto]:
        rows = self.session.exec(
            select(Appointment)
            .where(Appointment.patient_id == patient_id)
            .order_by(Appointment.created_at.desc())
        ).all()
        return [appt_to_dto(r) for r in rows]

    def transition(self, appointment_id: str, from_status: str, to_status: str, updated_at: datetime, **fields) -> bool:
        stmt = (
            update(Appointment)
            .where(Appointment.id == appointment_id)
            .where(Appointment.status == from_status)
            .values(status=to_status, updated_at=updated_at, **fields)
        )
        return self._execute(stmt) == 1

    def commit(self) -> None:
        with translate_db_errors(DuplicateBookingError, DUPLICATE_DETAIL):
            self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()

    def _execute(self, stmt) -> int:
        with translate_db_errors():
            result = self.session.execute(stmt.execution_options(synchronize_session=False))
        return result.rowcount
