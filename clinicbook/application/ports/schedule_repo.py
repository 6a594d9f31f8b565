from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import List, Optional


@dataclass
class SlotDraft:
    schedule_id: str
    start_time: time
    end_time: time
    capacity: int = 1
    booked_count: int = 0
    status: str = "open"


@dataclass
class TimeSlotDto:
    id: str
    schedule_id: str
    start_time: time
    end_time: time
    capacity: int
    booked_count: int
    status: str


@dataclass
class ScheduleDto:
    id: str
    provider_id: str
    work_date: date
    start_time: time
    end_time: time
    slot_minutes: int
    location: Optional[str]
    is_published: bool
    created_at: Optional[datetime] = None


@dataclass
class ScheduleDetailDto(ScheduleDto):
    time_slots: List[TimeSlotDto] = field(default_factory=list)


class ScheduleRepository:
    def exists_for_day(self, provider_id: str, work_date: date) -> bool:
        ...

    def create_with_slots(self, schedule: ScheduleDto, slots: List[SlotDraft]) -> ScheduleDetailDto:
        """Persist the schedule and all of its slots in one transaction."""
        ...

    def get(self, schedule_id: str) -> Optional[ScheduleDto]:
        ...

    def get_with_slots(self, schedule_id: str) -> Optional[ScheduleDetailDto]:
        ...

    def list_for_provider(self, provider_id: str, date_from: Optional[date], date_to: Optional[date]) -> List[ScheduleDto]:
        ...

    def set_published(self, schedule_id: str, published: bool) -> None:
        ...

    def list_active_appointment_ids(self, schedule_id: str) -> List[str]:
        ...

    def delete_cascade(self, schedule_id: str) -> List[str]:
        """Delete appointments, slots and the schedule. Returns the removed appointment ids."""
        ...

    def get_slot(self, slot_id: str) -> Optional[TimeSlotDto]:
        ...

    def set_slot_closed(self, slot_id: str, closed: bool) -> Optional[TimeSlotDto]:
        ...

    def set_slot_capacity(self, slot_id: str, capacity: int) -> Optional[TimeSlotDto]:
        """Apply the new capacity only if it still covers the booked count; None otherwise."""
        ...
