import logging
import uuid
from dataclasses import dataclass
from datetime import date, time
from typing import List, Optional

from ...exceptions import ConflictError, ForbiddenError, InvalidParameterError, NotFoundError
from ..ports.audit_logger import AuditLogger
from ..ports.authorization import Actor, AuthorizationGuard
from ..ports.clock import Clock
from ..ports.schedule_repo import (
    ScheduleDetailDto,
    ScheduleDto,
    ScheduleRepository,
    SlotDraft,
    TimeSlotDto,
)
from ..status import LOCATION_MAX_LENGTH, clean_text
from .slot_generator import generate_slots

logger = logging.getLogger(__name__)


@dataclass
class ScheduleService:
    repo: ScheduleRepository
    guard: AuthorizationGuard
    clock: Clock
    audit: AuditLogger
    default_slot_minutes: int = 15
    strict_delete: bool = False

    def create_schedule(
        self,
        actor: Actor,
        provider_id: str,
        work_date: date,
        start_time: time,
        end_time: time,
        slot_minutes: Optional[int] = None,
        location: Optional[str] = None,
        published: Optional[bool] = None,
    ) -> ScheduleDetailDto:
        if slot_minutes is None:
            slot_minutes = self.default_slot_minutes

        schedule = ScheduleDto(
            id=uuid.uuid4().hex,
            provider_id=provider_id,
            work_date=work_date,
            start_time=start_time,
            end_time=end_time,
            slot_minutes=slot_minutes,
            location=clean_text(location, "location", LOCATION_MAX_LENGTH),
            is_published=True if published is None else published,
            created_at=self.clock.now(),
        )
        self._authorize(actor, schedule)

        # validates the window before anything touches storage
        slots = generate_slots(schedule.id, start_time, end_time, slot_minutes)

        if self.repo.exists_for_day(provider_id, work_date):
            raise ConflictError("Schedule already exists for this provider on this date")

        created = self.repo.create_with_slots(schedule, slots)
        self.audit.log(
            "schedule.create",
            actor.user_id,
            created.id,
            details={"provider_id": provider_id, "work_date": work_date.isoformat(), "slots": len(slots)},
        )
        return created

    def preview_slots(self, start_time: time, end_time: time, slot_minutes: Optional[int] = None) -> List[SlotDraft]:
        if slot_minutes is None:
            slot_minutes = self.default_slot_minutes
        return generate_slots("", start_time, end_time, slot_minutes)

    def publish(self, actor: Actor, schedule_id: str) -> None:
        self._set_published(actor, schedule_id, True)

    def unpublish(self, actor: Actor, schedule_id: str) -> None:
        self._set_published(actor, schedule_id, False)

    def delete_schedule(self, actor: Actor, schedule_id: str) -> None:
        """
        Delete a schedule together with its slots and their appointments.

        The booking history of that day goes with it; the removed appointment ids are
        written to the audit log. With ``strict_delete`` the call is refused while any
        appointment is still booked or checked in.
        """
        schedule = self._get_or_404(schedule_id)
        self._authorize(actor, schedule)

        if self.strict_delete:
            active = self.repo.list_active_appointment_ids(schedule_id)
            if active:
                raise ConflictError(
                    f"Schedule has {len(active)} active appointment(s); cancel them before deleting"
                )

        removed = self.repo.delete_cascade(schedule_id)
        if removed:
            logger.warning(f"Schedule {schedule_id} deleted with {len(removed)} appointment(s)")
        self.audit.log(
            "schedule.delete",
            actor.user_id,
            schedule_id,
            details={"provider_id": schedule.provider_id, "discarded_appointments": removed},
        )

    def list_schedules(self, provider_id: str, date_from: Optional[date] = None, date_to: Optional[date] = None) -> List[ScheduleDto]:
        if date_from and date_to and date_from > date_to:
            raise InvalidParameterError("date_from must not be after date_to")
        return self.repo.list_for_provider(provider_id, date_from, date_to)

    def get_schedule(self, schedule_id: str) -> ScheduleDetailDto:
        schedule = self.repo.get_with_slots(schedule_id)
        if not schedule:
            raise NotFoundError("Schedule not found")
        return schedule

    def get_time_slot(self, slot_id: str) -> TimeSlotDto:
        slot = self.repo.get_slot(slot_id)
        if not slot:
            raise NotFoundError("Time slot not found")
        return slot

    def close_slot(self, actor: Actor, slot_id: str) -> TimeSlotDto:
        return self._set_slot_closed(actor, slot_id, True)

    def reopen_slot(self, actor: Actor, slot_id: str) -> TimeSlotDto:
        return self._set_slot_closed(actor, slot_id, False)

    def set_slot_capacity(self, actor: Actor, slot_id: str, capacity: int) -> TimeSlotDto:
        slot = self.get_time_slot(slot_id)
        self._authorize(actor, self._get_or_404(slot.schedule_id))

        if capacity < 1:
            raise InvalidParameterError("capacity must be at least 1")
        if capacity < slot.booked_count:
            raise InvalidParameterError(f"capacity cannot drop below the {slot.booked_count} existing booking(s)")

        updated = self.repo.set_slot_capacity(slot_id, capacity)
        if updated is None:
            # a reservation landed between the read and the update
            raise ConflictError("Slot bookings changed; capacity no longer covers them")
        self.audit.log("slot.capacity", actor.user_id, slot_id, details={"capacity": capacity})
        return updated

    def _set_slot_closed(self, actor: Actor, slot_id: str, closed: bool) -> TimeSlotDto:
        slot = self.get_time_slot(slot_id)
        self._authorize(actor, self._get_or_404(slot.schedule_id))
        updated = self.repo.set_slot_closed(slot_id, closed)
        if updated is None:
            raise NotFoundError("Time slot not found")
        self.audit.log("slot.close" if closed else "slot.reopen", actor.user_id, slot_id)
        return updated

    def _set_published(self, actor: Actor, schedule_id: str, published: bool) -> None:
        schedule = self._get_or_404(schedule_id)
        self._authorize(actor, schedule)
        if schedule.is_published != published:
            self.repo.set_published(schedule_id, published)
        self.audit.log("schedule.publish" if published else "schedule.unpublish", actor.user_id, schedule_id)

    def _get_or_404(self, schedule_id: str) -> ScheduleDto:
        schedule = self.repo.get(schedule_id)
        if not schedule:
            raise NotFoundError("Schedule not found")
        return schedule

    def _authorize(self, actor: Actor, schedule: ScheduleDto) -> None:
        if not self.guard.can_manage_schedule(actor, schedule):
            raise ForbiddenError("Not allowed to manage this schedule")
