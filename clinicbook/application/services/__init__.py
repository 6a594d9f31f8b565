# Application services (re-export for stable imports)
from .availability_service import AvailabilityService
from .booking_service import BookingService
from .schedule_service import ScheduleService
from .slot_generator import generate_slots

__all__ = [
    "AvailabilityService",
    "BookingService",
    "ScheduleService",
    "generate_slots",
]
