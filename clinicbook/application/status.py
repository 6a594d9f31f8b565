from enum import Enum
from typing import Dict, FrozenSet, Optional

from ..exceptions import InvalidParameterError, InvalidTransitionError


class TimeSlotStatus(str, Enum):
    OPEN = "open"
    FULL = "full"
    CLOSED = "closed"


class AppointmentStatus(str, Enum):
    BOOKED = "booked"
    CHECKED_IN = "checked_in"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"


class PaymentStatus(str, Enum):
    UNPAID = "unpaid"
    PENDING = "pending"
    PAID = "paid"
    REFUNDED = "refunded"
    FAILED = "failed"


TRANSITIONS: Dict[AppointmentStatus, FrozenSet[AppointmentStatus]] = {
    AppointmentStatus.BOOKED: frozenset(
        {AppointmentStatus.CHECKED_IN, AppointmentStatus.CANCELLED, AppointmentStatus.NO_SHOW}
    ),
    AppointmentStatus.CHECKED_IN: frozenset(
        {AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED}
    ),
    AppointmentStatus.COMPLETED: frozenset(),
    AppointmentStatus.CANCELLED: frozenset(),
    AppointmentStatus.NO_SHOW: frozenset(),
}

TERMINAL_STATUSES = frozenset(s for s, targets in TRANSITIONS.items() if not targets)
ACTIVE_STATUSES = frozenset({AppointmentStatus.BOOKED, AppointmentStatus.CHECKED_IN})

REASON_MAX_LENGTH = 200
NOTES_MAX_LENGTH = 2000
CANCELLATION_REASON_MAX_LENGTH = 500
LOCATION_MAX_LENGTH = 120


def ensure_transition(current: str, target: AppointmentStatus) -> None:
    """Raise InvalidTransitionError unless ``current -> target`` is in the transition table."""
    source = AppointmentStatus(current)
    if target not in TRANSITIONS[source]:
        if source in TERMINAL_STATUSES:
            raise InvalidTransitionError(
                f"Appointment is already {source.value}; no further transitions are allowed"
            )
        raise InvalidTransitionError(f"Cannot move appointment from {source.value} to {target.value}")


def clean_text(value: Optional[str], field: str, max_length: int) -> Optional[str]:
    """Trim free text, map blank to None and enforce the column length."""
    if value is None:
        return None
    value = value.strip()
    if value == "":
        return None
    if len(value) > max_length:
        raise InvalidParameterError(f"{field} must be at most {max_length} characters")
    return value
