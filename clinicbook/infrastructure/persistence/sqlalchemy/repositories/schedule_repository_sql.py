from datetime import date
from typing import List, Optional

from sqlalchemy import case, update
from sqlmodel import Session, select

from .....application.ports.schedule_repo import (
    ScheduleDetailDto,
    ScheduleDto,
    ScheduleRepository,
    SlotDraft,
    TimeSlotDto,
)
from .....application.status import ACTIVE_STATUSES, TimeSlotStatus
from .....db.models import Appointment, Schedule, TimeSlot
from ..errors import translate_db_errors
from .mappers import schedule_to_dto, slot_to_dto

OPEN = TimeSlotStatus.OPEN.value
FULL = TimeSlotStatus.FULL.value
CLOSED = TimeSlotStatus.CLOSED.value


class SqlScheduleRepository(ScheduleRepository):
    def __init__(self, session: Session):
        self.session = session

    def exists_for_day(self, provider_id: str, work_date: date) -> bool:
        existing = self.session.exec(
            select(Schedule.id)
            .where(Schedule.provider_id == provider_id)
            .where(Schedule.work_date == work_date)
        ).first()
        return existing is not None

    def create_with_slots(self, schedule: ScheduleDto, slots: List[SlotDraft]) -> ScheduleDetailDto:
        row = Schedule(
            id=schedule.id,
            provider_id=schedule.provider_id,
            work_date=schedule.work_date,
            start_time=schedule.start_time,
            end_time=schedule.end_time,
            slot_minutes=schedule.slot_minutes,
            location=schedule.location,
            is_published=schedule.is_published,
        )
        if schedule.created_at is not None:
            row.created_at = schedule.created_at
        slot_rows = [
            TimeSlot(
                schedule_id=row.id,
                start_time=d.start_time,
                end_time=d.end_time,
                capacity=d.capacity,
                booked_count=d.booked_count,
                status=d.status,
            )
            for d in slots
        ]
        try:
            with translate_db_errors(conflict_detail="Schedule already exists for this provider on this date"):
                self.session.add(row)
                # parent row first so the slots' foreign key resolves
                self.session.flush()
                self.session.add_all(slot_rows)
                self.session.flush()
                detail = ScheduleDetailDto(**vars(schedule_to_dto(row)))
                detail.time_slots = sorted((slot_to_dto(t) for t in slot_rows), key=lambda t: t.start_time)
                self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        return detail

    def get(self, schedule_id: str) -> Optional[ScheduleDto]:
        s = self.session.exec(select(Schedule).where(Schedule.id == schedule_id)).first()
        return schedule_to_dto(s) if s else None

    def get_with_slots(self, schedule_id: str) -> Optional[ScheduleDetailDto]:
        s = self.session.exec(select(Schedule).where(Schedule.id == schedule_id)).first()
        if not s:
            return None
        slots = self.session.exec(
            select(TimeSlot)
            .where(TimeSlot.schedule_id == schedule_id)
            .order_by(TimeSlot.start_time)
        ).all()
        detail = ScheduleDetailDto(**vars(schedule_to_dto(s)))
        detail.time_slots = [slot_to_dto(t) for t in slots]
        return detail

    def list_for_provider(self, provider_id: str, date_from: Optional[date], date_to: Optional[date]) -> List[ScheduleDto]:
        q = select(Schedule).where(Schedule.provider_id == provider_id)
        if date_from:
            q = q.where(Schedule.work_date >= date_from)
        if date_to:
            q = q.where(Schedule.work_date <= date_to)
        rows = self.session.exec(q.order_by(Schedule.work_date)).all()
        return [schedule_to_dto(r) for r in rows]

    def set_published(self, schedule_id: str, published: bool) -> None:
        s = self.session.exec(select(Schedule).where(Schedule.id == schedule_id)).first()
        if not s:
            return
        s.is_published = published
        self.session.add(s)
        self._commit()

    def list_active_appointment_ids(self, schedule_id: str) -> List[str]:
        return list(self.session.exec(
            select(Appointment.id)
            .join(TimeSlot, TimeSlot.id == Appointment.time_slot_id)
            .where(TimeSlot.schedule_id == schedule_id)
            .where(Appointment.status.in_([s.value for s in ACTIVE_STATUSES]))
        ).all())

    def delete_cascade(self, schedule_id: str) -> List[str]:
        try:
            with translate_db_errors():
                slots = self.session.exec(select(TimeSlot).where(TimeSlot.schedule_id == schedule_id)).all()
                slot_ids = [t.id for t in slots]
                appts = []
                if slot_ids:
                    appts = self.session.exec(
                        select(Appointment).where(Appointment.time_slot_id.in_(slot_ids))
                    ).all()
                removed = [a.id for a in appts]

                # children before parents, flushed step by step
                for a in appts:
                    self.session.delete(a)
                self.session.flush()
                for t in slots:
                    self.session.delete(t)
                self.session.flush()
                s = self.session.exec(select(Schedule).where(Schedule.id == schedule_id)).first()
                if s:
                    self.session.delete(s)
                self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        return removed

    def get_slot(self, slot_id: str) -> Optional[TimeSlotDto]:
        t = self.session.exec(
            select(TimeSlot)
            .where(TimeSlot.id == slot_id)
            .execution_options(populate_existing=True)
        ).first()
        return slot_to_dto(t) if t else None

    def set_slot_closed(self, slot_id: str, closed: bool) -> Optional[TimeSlotDto]:
        if closed:
            stmt = (
                update(TimeSlot)
                .where(TimeSlot.id == slot_id)
                .values(status=CLOSED, version=TimeSlot.version + 1)
            )
        else:
            stmt = (
                update(TimeSlot)
                .where(TimeSlot.id == slot_id)
                .where(TimeSlot.status == CLOSED)
                .values(
                    status=case((TimeSlot.booked_count >= TimeSlot.capacity, FULL), else_=OPEN),
                    version=TimeSlot.version + 1,
                )
            )
        self._execute(stmt)
        self._commit()
        return self.get_slot(slot_id)

    def set_slot_capacity(self, slot_id: str, capacity: int) -> Optional[TimeSlotDto]:
        stmt = (
            update(TimeSlot)
            .where(TimeSlot.id == slot_id)
            .where(TimeSlot.booked_count <= capacity)
            .values(
                capacity=capacity,
                status=case(
                    (TimeSlot.status == CLOSED, CLOSED),
                    (TimeSlot.booked_count >= capacity, FULL),
                    else_=OPEN,
                ),
                version=TimeSlot.version + 1,
            )
        )
        changed = self._execute(stmt)
        self._commit()
        return self.get_slot(slot_id) if changed else None

    def _execute(self, stmt) -> int:
        try:
            with translate_db_errors():
                result = self.session.execute(stmt.execution_options(synchronize_session=False))
        except Exception:
            self.session.rollback()
            raise
        return result.rowcount

    def _commit(self) -> None:
        try:
            with translate_db_errors():
                self.session.commit()
        except Exception:
            self.session.rollback()
            raise
