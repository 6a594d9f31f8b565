import logging
from dataclasses import dataclass
from typing import List, Optional

from ...exceptions import (
    DependencyFailureError,
    DuplicateBookingError,
    ForbiddenError,
    InvalidParameterError,
    InvalidTransitionError,
    NotFoundError,
    SchedulingError,
    SlotUnavailableError,
)
from ..ports.audit_logger import AuditLogger
from ..ports.authorization import Actor, AuthorizationGuard
from ..ports.balance_ledger import BalanceLedger, LedgerResult
from ..ports.booking_repo import AppointmentDto, BookingRepository
from ..ports.clock import Clock
from ..status import (
    CANCELLATION_REASON_MAX_LENGTH,
    NOTES_MAX_LENGTH,
    REASON_MAX_LENGTH,
    AppointmentStatus,
    PaymentStatus,
    TimeSlotStatus,
    clean_text,
    ensure_transition,
)

logger = logging.getLogger(__name__)


@dataclass
class BookingService:
    """
    Reserves slots and drives the appointment lifecycle.

    Every mutating call is one unit of work on ``repo``: the slot counter, the
    appointment row and the ledger movement commit together or not at all.
    """

    repo: BookingRepository
    ledger: BalanceLedger
    guard: AuthorizationGuard
    clock: Clock
    audit: AuditLogger

    def reserve(self, patient_id: str, time_slot_id: str, reason: Optional[str] = None, points: int = 0) -> AppointmentDto:
        if points < 0:
            raise InvalidParameterError("points must not be negative")
        reason = clean_text(reason, "reason", REASON_MAX_LENGTH)

        ctx = self.repo.get_slot_context(time_slot_id)
        if not ctx:
            raise NotFoundError("Time slot not found")
        if not ctx.schedule_published:
            raise SlotUnavailableError("Schedule is not published")
        if ctx.slot.status == TimeSlotStatus.CLOSED.value:
            raise SlotUnavailableError("Time slot is closed")
        if ctx.slot.status == TimeSlotStatus.FULL.value:
            raise SlotUnavailableError("Time slot is full")
        if self.repo.has_active_booking(patient_id, time_slot_id):
            raise DuplicateBookingError("Patient already holds a booking for this time slot")

        try:
            # the conditional update re-checks status and capacity under the store's lock
            if not self.repo.claim_slot(time_slot_id):
                raise SlotUnavailableError("Time slot is no longer available")

            appt = self.repo.add_appointment(
                doctor_id=ctx.provider_id,
                patient_id=patient_id,
                slot_id=time_slot_id,
                reason=reason,
                points_used=points,
                payment_status=(PaymentStatus.PAID if points else PaymentStatus.UNPAID).value,
                created_at=self.clock.now(),
            )

            if points:
                self._move_points(self.ledger.debit, patient_id, points, "debit")

            self.repo.commit()
        except SchedulingError as e:
            self.repo.rollback()
            self.audit.log(
                "appointment.reserve",
                patient_id,
                time_slot_id,
                success=False,
                details={"error": type(e).__name__, "detail": e.detail},
            )
            raise

        logger.info(f"Slot {time_slot_id} reserved by patient {patient_id}")
        self.audit.log("appointment.reserve", patient_id, appt.id, details={"time_slot_id": time_slot_id, "points": points})
        return appt

    def cancel(self, appointment_id: str, reason: Optional[str], actor: Actor) -> AppointmentDto:
        appt = self._get_or_404(appointment_id)
        is_own = actor.patient_id is not None and actor.patient_id == appt.patient_id
        if not is_own and not self.guard.can_manage_appointment(actor, appt):
            raise ForbiddenError("Not allowed to cancel this appointment")
        ensure_transition(appt.status, AppointmentStatus.CANCELLED)
        reason = clean_text(reason, "cancellation_reason", CANCELLATION_REASON_MAX_LENGTH)

        fields = {"cancellation_reason": reason}
        if appt.points_used:
            fields["payment_status"] = PaymentStatus.REFUNDED.value

        try:
            self._transition(appt, AppointmentStatus.CANCELLED, **fields)
            self.repo.release_slot(appt.time_slot_id)
            if appt.points_used:
                self._move_points(self.ledger.credit, appt.patient_id, appt.points_used, "credit")
            self.repo.commit()
        except SchedulingError:
            self.repo.rollback()
            raise

        self.audit.log(
            "appointment.cancel",
            actor.user_id,
            appointment_id,
            details={"time_slot_id": appt.time_slot_id, "refunded_points": appt.points_used},
        )
        return self._get_or_404(appointment_id)

    def check_in(self, appointment_id: str, actor: Actor) -> AppointmentDto:
        return self._advance(appointment_id, actor, AppointmentStatus.CHECKED_IN)

    def complete(self, appointment_id: str, actor: Actor, notes: Optional[str] = None) -> AppointmentDto:
        notes = clean_text(notes, "notes", NOTES_MAX_LENGTH)
        if notes is None:
            return self._advance(appointment_id, actor, AppointmentStatus.COMPLETED)
        return self._advance(appointment_id, actor, AppointmentStatus.COMPLETED, notes=notes)

    def mark_no_show(self, appointment_id: str, actor: Actor) -> AppointmentDto:
        return self._advance(appointment_id, actor, AppointmentStatus.NO_SHOW)

    def get_appointment(self, appointment_id: str, actor: Actor) -> AppointmentDto:
        appt = self._get_or_404(appointment_id)
        is_own = actor.patient_id is not None and actor.patient_id == appt.patient_id
        if not is_own and not self.guard.can_manage_appointment(actor, appt):
            # do not reveal other patients' bookings
            raise NotFoundError("Appointment not found")
        return appt

    def list_for_patient(self, patient_id: str) -> List[AppointmentDto]:
        return self.repo.list_for_patient(patient_id)

    def _advance(self, appointment_id: str, actor: Actor, target: AppointmentStatus, **fields) -> AppointmentDto:
        appt = self._get_or_404(appointment_id)
        if not self.guard.can_manage_appointment(actor, appt):
            raise ForbiddenError("Not allowed to manage this appointment")
        ensure_transition(appt.status, target)
        try:
            self._transition(appt, target, **fields)
            self.repo.commit()
        except SchedulingError:
            self.repo.rollback()
            raise
        self.audit.log(f"appointment.{target.value}", actor.user_id, appointment_id)
        return self._get_or_404(appointment_id)

    def _transition(self, appt: AppointmentDto, target: AppointmentStatus, **fields) -> None:
        if not self.repo.transition(appt.id, appt.status, target.value, self.clock.now(), **fields):
            raise InvalidTransitionError(f"Appointment changed concurrently; it is no longer {appt.status}")

    def _move_points(self, operation, user_id: str, points: int, label: str) -> None:
        try:
            result: LedgerResult = operation(user_id, points)
        except SchedulingError:
            raise
        except Exception as e:
            logger.error(f"Points {label} of {points} for {user_id} raised: {e}")
            raise DependencyFailureError(f"Points {label} failed") from e
        if not result.ok:
            raise DependencyFailureError(f"Points {label} failed: {result.error or 'rejected by ledger'}")

    def _get_or_404(self, appointment_id: str) -> AppointmentDto:
        appt = self.repo.get_appointment(appointment_id)
        if not appt:
            raise NotFoundError("Appointment not found")
        return appt
