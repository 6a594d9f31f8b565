# Models package (re-export feature modules for stable imports)
from .scheduling.schedule import Schedule
from .scheduling.time_slot import TimeSlot
from .scheduling.appointment import Appointment
from .billing.points_account import PointsAccount

__all__ = [
    "Schedule",
    "TimeSlot",
    "Appointment",
    "PointsAccount",
]
