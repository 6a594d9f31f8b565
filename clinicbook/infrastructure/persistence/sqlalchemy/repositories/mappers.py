from .....application.ports.booking_repo import AppointmentDto
from .....application.ports.schedule_repo import ScheduleDto, TimeSlotDto
from .....db.models import Appointment, Schedule, TimeSlot


def schedule_to_dto(s: Schedule) -> ScheduleDto:
    return ScheduleDto(
        id=s.id,
        provider_id=s.provider_id,
        work_date=s.work_date,
        start_time=s.start_time,
        end_time=s.end_time,
        slot_minutes=s.slot_minutes,
        location=s.location,
        is_published=bool(s.is_published),
        created_at=s.created_at,
    )


def slot_to_dto(t: TimeSlot) -> TimeSlotDto:
    return TimeSlotDto(
        id=t.id,
        schedule_id=t.schedule_id,
        start_time=t.start_time,
        end_time=t.end_time,
        capacity=t.capacity,
        booked_count=t.booked_count,
        status=t.status,
    )


def appt_to_dto(a: Appointment) -> AppointmentDto:
    return AppointmentDto(
        id=a.id,
        doctor_id=a.doctor_id,
        patient_id=a.patient_id,
        time_slot_id=a.time_slot_id,
        status=a.status,
        reason=a.reason,
        notes=a.notes,
        cancellation_reason=a.cancellation_reason,
        points_used=a.points_used,
        payment_status=a.payment_status,
        created_at=a.created_at,
        updated_at=a.updated_at,
    )
