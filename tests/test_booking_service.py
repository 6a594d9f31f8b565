from datetime import date, time

import pytest

from clinicbook.application.ports.authorization import Actor, Role
from clinicbook.application.ports.balance_ledger import LedgerResult
from clinicbook.db.models import PointsAccount
from clinicbook.exceptions import (
    DependencyFailureError,
    DuplicateBookingError,
    ForbiddenError,
    InvalidParameterError,
    InvalidTransitionError,
    NotFoundError,
    SlotUnavailableError,
)
from clinicbook.infrastructure.persistence.sqlalchemy.repositories.ledger_repository_sql import SqlBalanceLedger

from conftest import ADMIN, DOCTOR, OTHER_DOCTOR, patient


@pytest.fixture
def slot_ids(schedules):
    created = schedules.create_schedule(DOCTOR, "doc-1", date(2025, 6, 1), time(9, 0), time(10, 0), slot_minutes=20)
    return [t.id for t in created.time_slots]


def test_reserve_books_slot_and_fills_it(bookings, schedules, slot_ids):
    appt = bookings.reserve("p1", slot_ids[0], reason="  follow-up ")
    assert appt.status == "booked"
    assert appt.doctor_id == "doc-1"
    assert appt.patient_id == "p1"
    assert appt.reason == "follow-up"
    assert appt.payment_status == "unpaid"

    slot = schedules.get_time_slot(slot_ids[0])
    assert (slot.booked_count, slot.status) == (1, "full")


def test_full_slot_rejects_next_patient(bookings, schedules, slot_ids):
    bookings.reserve("p1", slot_ids[0])
    with pytest.raises(SlotUnavailableError):
        bookings.reserve("p2", slot_ids[0])
    assert schedules.get_time_slot(slot_ids[0]).booked_count == 1


def test_same_patient_cannot_double_book(bookings, schedules, slot_ids):
    schedules.set_slot_capacity(DOCTOR, slot_ids[0], 2)
    bookings.reserve("p1", slot_ids[0])
    with pytest.raises(DuplicateBookingError):
        bookings.reserve("p1", slot_ids[0])
    assert schedules.get_time_slot(slot_ids[0]).booked_count == 1


def test_unknown_slot_is_not_found(bookings):
    with pytest.raises(NotFoundError):
        bookings.reserve("p1", "missing")


def test_unpublished_schedule_rejects_bookings(bookings, schedules, slot_ids):
    schedule_id = schedules.get_time_slot(slot_ids[0]).schedule_id
    schedules.unpublish(DOCTOR, schedule_id)
    with pytest.raises(SlotUnavailableError):
        bookings.reserve("p1", slot_ids[0])


def test_closed_slot_rejects_bookings_regardless_of_count(bookings, schedules, slot_ids):
    schedules.set_slot_capacity(DOCTOR, slot_ids[0], 5)
    schedules.close_slot(DOCTOR, slot_ids[0])
    with pytest.raises(SlotUnavailableError):
        bookings.reserve("p1", slot_ids[0])


def test_reserve_validates_input(bookings, slot_ids):
    with pytest.raises(InvalidParameterError):
        bookings.reserve("p1", slot_ids[0], points=-1)
    with pytest.raises(InvalidParameterError):
        bookings.reserve("p1", slot_ids[0], reason="x" * 201)


def test_cancel_frees_exactly_one_unit(bookings, schedules, slot_ids):
    appt = bookings.reserve("p1", slot_ids[0])
    cancelled = bookings.cancel(appt.id, "feeling better", patient("p1"))
    assert cancelled.status == "cancelled"
    assert cancelled.cancellation_reason == "feeling better"

    slot = schedules.get_time_slot(slot_ids[0])
    assert (slot.booked_count, slot.status) == (0, "open")

    bookings.reserve("p2", slot_ids[0])
    with pytest.raises(SlotUnavailableError):
        bookings.reserve("p3", slot_ids[0])


def test_patient_may_rebook_after_cancelling(bookings, slot_ids):
    first = bookings.reserve("p1", slot_ids[0])
    bookings.cancel(first.id, None, patient("p1"))
    second = bookings.reserve("p1", slot_ids[0])
    assert second.id != first.id
    assert [a.status for a in bookings.list_for_patient("p1")].count("cancelled") == 1


def test_cancel_is_rejected_twice_and_keeps_count_at_zero(bookings, schedules, slot_ids):
    appt = bookings.reserve("p1", slot_ids[0])
    bookings.cancel(appt.id, None, patient("p1"))
    with pytest.raises(InvalidTransitionError):
        bookings.cancel(appt.id, None, patient("p1"))
    assert schedules.get_time_slot(slot_ids[0]).booked_count == 0


def test_cancel_of_closed_slot_keeps_it_closed(bookings, schedules, slot_ids):
    appt = bookings.reserve("p1", slot_ids[0])
    schedules.close_slot(DOCTOR, slot_ids[0])
    bookings.cancel(appt.id, None, DOCTOR)
    slot = schedules.get_time_slot(slot_ids[0])
    assert (slot.booked_count, slot.status) == (0, "closed")


def test_cancel_authorization(bookings, slot_ids):
    appt = bookings.reserve("p1", slot_ids[0])
    with pytest.raises(ForbiddenError):
        bookings.cancel(appt.id, None, patient("p2"))
    with pytest.raises(ForbiddenError):
        bookings.cancel(appt.id, None, OTHER_DOCTOR)
    with pytest.raises(NotFoundError):
        bookings.cancel("missing", None, ADMIN)
    assert bookings.cancel(appt.id, None, DOCTOR).status == "cancelled"


def test_lifecycle_check_in_then_complete(bookings, slot_ids):
    appt = bookings.reserve("p1", slot_ids[0])
    assert bookings.check_in(appt.id, DOCTOR).status == "checked_in"
    done = bookings.complete(appt.id, DOCTOR, notes="BP normal")
    assert done.status == "completed"
    assert done.notes == "BP normal"
    assert done.updated_at is not None


def test_complete_without_check_in_is_invalid(bookings, slot_ids):
    appt = bookings.reserve("p1", slot_ids[0])
    with pytest.raises(InvalidTransitionError):
        bookings.complete(appt.id, DOCTOR)


def test_terminal_states_reject_further_transitions(bookings, slot_ids):
    no_show = bookings.reserve("p1", slot_ids[0])
    bookings.mark_no_show(no_show.id, DOCTOR)
    for move in (bookings.check_in, bookings.mark_no_show, bookings.complete):
        with pytest.raises(InvalidTransitionError):
            move(no_show.id, DOCTOR)
    with pytest.raises(InvalidTransitionError):
        bookings.cancel(no_show.id, None, DOCTOR)

    done = bookings.reserve("p2", slot_ids[1])
    bookings.check_in(done.id, DOCTOR)
    bookings.complete(done.id, DOCTOR)
    with pytest.raises(InvalidTransitionError):
        bookings.cancel(done.id, None, patient("p2"))


def test_checked_in_appointment_can_still_be_cancelled(bookings, schedules, slot_ids):
    appt = bookings.reserve("p1", slot_ids[0])
    bookings.check_in(appt.id, DOCTOR)
    assert bookings.cancel(appt.id, "emergency", DOCTOR).status == "cancelled"
    assert schedules.get_time_slot(slot_ids[0]).booked_count == 0


def test_patients_cannot_drive_provider_transitions(bookings, slot_ids):
    appt = bookings.reserve("p1", slot_ids[0])
    with pytest.raises(ForbiddenError):
        bookings.check_in(appt.id, patient("p1"))
    with pytest.raises(ForbiddenError):
        bookings.mark_no_show(appt.id, OTHER_DOCTOR)


def test_get_appointment_hides_other_patients_bookings(bookings, slot_ids):
    appt = bookings.reserve("p1", slot_ids[0])
    assert bookings.get_appointment(appt.id, patient("p1")).id == appt.id
    assert bookings.get_appointment(appt.id, DOCTOR).id == appt.id
    with pytest.raises(NotFoundError):
        bookings.get_appointment(appt.id, patient("p2"))


def test_points_are_debited_and_refunded(session, bookings, slot_ids):
    ledger = SqlBalanceLedger(session)
    ledger.open_account("p1", 100)

    appt = bookings.reserve("p1", slot_ids[0], points=30)
    assert (appt.points_used, appt.payment_status) == (30, "paid")
    assert ledger.balance("p1") == 70

    cancelled = bookings.cancel(appt.id, None, patient("p1"))
    assert cancelled.payment_status == "refunded"
    assert ledger.balance("p1") == 100


def test_insufficient_points_roll_back_the_reservation(session, bookings, schedules, slot_ids, audit):
    ledger = SqlBalanceLedger(session)
    ledger.open_account("p1", 10)

    with pytest.raises(DependencyFailureError):
        bookings.reserve("p1", slot_ids[0], points=50)

    slot = schedules.get_time_slot(slot_ids[0])
    assert (slot.booked_count, slot.status) == (0, "open")
    assert bookings.list_for_patient("p1") == []
    assert ledger.balance("p1") == 10
    assert audit.entries[-1]["success"] is False


def test_missing_points_account_fails_the_booking(bookings, schedules, slot_ids):
    with pytest.raises(DependencyFailureError):
        bookings.reserve("p1", slot_ids[0], points=5)
    assert schedules.get_time_slot(slot_ids[0]).booked_count == 0


class ExplodingLedger:
    def debit(self, user_id, points):
        raise RuntimeError("ledger unreachable")

    def credit(self, user_id, points):
        raise RuntimeError("ledger unreachable")


class RefusingCreditLedger:
    def __init__(self):
        self.debits = []

    def debit(self, user_id, points):
        self.debits.append((user_id, points))
        return LedgerResult(ok=True, balance=0)

    def credit(self, user_id, points):
        return LedgerResult(ok=False, error="account frozen")


def test_ledger_exception_becomes_dependency_failure(session, make_booking_service, schedules, slot_ids):
    svc = make_booking_service(session, ledger=ExplodingLedger())
    with pytest.raises(DependencyFailureError):
        svc.reserve("p1", slot_ids[0], points=5)
    assert schedules.get_time_slot(slot_ids[0]).booked_count == 0


def test_failed_refund_keeps_the_appointment_booked(session, make_booking_service, schedules, slot_ids):
    svc = make_booking_service(session, ledger=RefusingCreditLedger())
    appt = svc.reserve("p1", slot_ids[0], points=5)

    with pytest.raises(DependencyFailureError):
        svc.cancel(appt.id, None, patient("p1"))

    assert svc.get_appointment(appt.id, ADMIN).status == "booked"
    slot = schedules.get_time_slot(slot_ids[0])
    assert (slot.booked_count, slot.status) == (1, "full")


def test_ledger_and_appointment_timestamps_use_the_clock(session, bookings, clock, slot_ids):
    ledger = SqlBalanceLedger(session, clock)
    ledger.open_account("p1", 50)

    appt = bookings.reserve("p1", slot_ids[0], points=20)
    assert appt.created_at == clock.now()

    account = session.get(PointsAccount, "p1", populate_existing=True)
    assert (account.balance, account.updated_at) == (30, clock.now())


def test_patient_role_with_provider_id_cannot_manage_appointments(bookings, slot_ids):
    appt = bookings.reserve("p1", slot_ids[0])
    impostor = Actor(user_id="user-p2", role=Role.PATIENT, provider_id="doc-1", patient_id="p2")
    with pytest.raises(ForbiddenError):
        bookings.check_in(appt.id, impostor)
    with pytest.raises(ForbiddenError):
        bookings.cancel(appt.id, None, impostor)
