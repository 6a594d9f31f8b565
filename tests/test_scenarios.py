from datetime import date, time

import pytest

from clinicbook.exceptions import NotFoundError, SlotUnavailableError

from conftest import ADMIN, patient

PROVIDER = "prov-p"


@pytest.fixture
def morning(schedules):
    return schedules.create_schedule(ADMIN, PROVIDER, date(2025, 6, 1), time(9, 0), time(9, 45), slot_minutes=15)


def test_schedule_is_carved_into_three_quarter_hours(morning):
    assert [(t.start_time, t.end_time) for t in morning.time_slots] == [
        (time(9, 0), time(9, 15)),
        (time(9, 15), time(9, 30)),
        (time(9, 30), time(9, 45)),
    ]


def test_book_cancel_rebook_then_delete(morning, schedules, bookings):
    slot_id = morning.time_slots[1].id

    x = bookings.reserve("x", slot_id)
    assert schedules.get_time_slot(slot_id).status == "full"
    with pytest.raises(SlotUnavailableError):
        bookings.reserve("y", slot_id)

    bookings.cancel(x.id, None, patient("x"))
    slot = schedules.get_time_slot(slot_id)
    assert (slot.status, slot.booked_count) == ("open", 0)
    y = bookings.reserve("y", slot_id)
    assert y.status == "booked"

    schedules.delete_schedule(ADMIN, morning.id)
    with pytest.raises(NotFoundError):
        schedules.get_schedule(morning.id)
    for t in morning.time_slots:
        with pytest.raises(NotFoundError):
            schedules.get_time_slot(t.id)
    for appt_id in (x.id, y.id):
        with pytest.raises(NotFoundError):
            bookings.get_appointment(appt_id, ADMIN)
