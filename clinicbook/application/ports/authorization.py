from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol

from .booking_repo import AppointmentDto
from .schedule_repo import ScheduleDto


class Role(str, Enum):
    ADMIN = "admin"
    DOCTOR = "doctor"
    PATIENT = "patient"


@dataclass(frozen=True)
class Actor:
    user_id: str
    role: Role = Role.PATIENT
    provider_id: Optional[str] = None
    patient_id: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


class AuthorizationGuard(Protocol):
    def can_manage_schedule(self, actor: Actor, schedule: ScheduleDto) -> bool:
        ...

    def can_manage_appointment(self, actor: Actor, appointment: AppointmentDto) -> bool:
        ...
