from datetime import date
from typing import List, Protocol

from .schedule_repo import TimeSlotDto


class AvailabilityRepository(Protocol):
    def open_slots(self, provider_id: str, work_date: date) -> List[TimeSlotDto]:
        ...

    def published_slots(self, provider_id: str, work_date: date) -> List[TimeSlotDto]:
        ...

    def providers_with_open_slots(self, work_date: date) -> List[str]:
        ...
