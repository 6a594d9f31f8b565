from datetime import date
from typing import List

from sqlmodel import Session, select

from .....application.ports.availability_repo import AvailabilityRepository
from .....application.ports.schedule_repo import TimeSlotDto
from .....application.status import TimeSlotStatus
from .....db.models import Schedule, TimeSlot
from .mappers import slot_to_dto


class SqlAvailabilityRepository(AvailabilityRepository):
    def __init__(self, session: Session):
        self.session = session

    def _published_day(self, provider_id: str, work_date: date):
        return (
            select(TimeSlot)
            .join(Schedule, Schedule.id == TimeSlot.schedule_id)
            .where(Schedule.provider_id == provider_id)
            .where(Schedule.work_date == work_date)
            .where(Schedule.is_published == True)  # noqa: E712
        )

    def open_slots(self, provider_id: str, work_date: date) -> List[TimeSlotDto]:
        rows = self.session.exec(
            self._published_day(provider_id, work_date)
            .where(TimeSlot.status == TimeSlotStatus.OPEN.value)
            .where(TimeSlot.booked_count < TimeSlot.capacity)
            .order_by(TimeSlot.start_time)
        ).all()
        return [slot_to_dto(t) for t in rows]

    def published_slots(self, provider_id: str, work_date: date) -> List[TimeSlotDto]:
        rows = self.session.exec(
            self._published_day(provider_id, work_date).order_by(TimeSlot.start_time)
        ).all()
        return [slot_to_dto(t) for t in rows]

    def providers_with_open_slots(self, work_date: date) -> List[str]:
        rows = self.session.exec(
            select(Schedule.provider_id)
            .join(TimeSlot, TimeSlot.schedule_id == Schedule.id)
            .where(Schedule.work_date == work_date)
            .where(Schedule.is_published == True)  # noqa: E712
            .where(TimeSlot.status == TimeSlotStatus.OPEN.value)
            .where(TimeSlot.booked_count < TimeSlot.capacity)
            .distinct()
            .order_by(Schedule.provider_id)
        ).all()
        return list(rows)
