"""
Slot generation.

Turns one availability window into the ordered grid of bookable slots. Pure: no
storage access, so callers may use it for previews as often as they like.
"""

from datetime import date, datetime, time, timedelta
from typing import List

from ...exceptions import InvalidParameterError, InvalidRangeError
from ..ports.schedule_repo import SlotDraft
from ..status import TimeSlotStatus


def generate_slots(schedule_id: str, start_time: time, end_time: time, slot_minutes: int) -> List[SlotDraft]:
    """
    Split ``[start_time, end_time)`` into consecutive slots of ``slot_minutes``.

    A trailing remainder shorter than one slot is dropped, so the result always
    holds ``floor((end - start) / slot_minutes)`` slots.
    """
    if isinstance(slot_minutes, bool) or not isinstance(slot_minutes, int) or slot_minutes <= 0:
        raise InvalidParameterError("slot_minutes must be a positive integer")
    if end_time <= start_time:
        raise InvalidRangeError("end_time must be after start_time")

    # anchor on a fixed day so time-of-day arithmetic can use timedelta
    cursor = datetime.combine(date.min, start_time)
    window_end = datetime.combine(date.min, end_time)
    step = timedelta(minutes=slot_minutes)

    slots: List[SlotDraft] = []
    while window_end - cursor >= step:
        slot_end = cursor + step
        slots.append(
            SlotDraft(
                schedule_id=schedule_id,
                start_time=cursor.time(),
                end_time=slot_end.time(),
                capacity=1,
                booked_count=0,
                status=TimeSlotStatus.OPEN.value,
            )
        )
        cursor = slot_end

    return slots
