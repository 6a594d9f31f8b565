from dataclasses import dataclass
from datetime import date
from typing import List

from ..ports.availability_repo import AvailabilityRepository
from ..ports.schedule_repo import TimeSlotDto


@dataclass
class AvailabilityService:
    """Read-only views over published schedules."""

    repo: AvailabilityRepository

    def open_slots(self, provider_id: str, work_date: date) -> List[TimeSlotDto]:
        return self.repo.open_slots(provider_id, work_date)

    def published_slots(self, provider_id: str, work_date: date) -> List[TimeSlotDto]:
        return self.repo.published_slots(provider_id, work_date)

    def providers_with_open_slots(self, work_date: date) -> List[str]:
        return self.repo.providers_with_open_slots(work_date)
