from .appointment import AppointmentResponse, CancellationRequest, CompletionRequest, ReservationCreate
from .schedule import (
    ScheduleCreate,
    ScheduleDetailResponse,
    ScheduleResponse,
    SlotCapacityUpdate,
    SlotPreview,
    TimeSlotResponse,
)

__all__ = [
    "AppointmentResponse",
    "CancellationRequest",
    "CompletionRequest",
    "ReservationCreate",
    "ScheduleCreate",
    "ScheduleDetailResponse",
    "ScheduleResponse",
    "SlotCapacityUpdate",
    "SlotPreview",
    "TimeSlotResponse",
]
