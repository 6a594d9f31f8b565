from ...application.ports.authorization import Actor, AuthorizationGuard, Role
from ...application.ports.booking_repo import AppointmentDto
from ...application.ports.schedule_repo import ScheduleDto


class RoleAuthorizationGuard(AuthorizationGuard):
    """Administrators manage everything; a doctor manages its own schedules and appointments."""

    def can_manage_schedule(self, actor: Actor, schedule: ScheduleDto) -> bool:
        if actor.is_admin:
            return True
        return self._is_provider(actor, schedule.provider_id)

    def can_manage_appointment(self, actor: Actor, appointment: AppointmentDto) -> bool:
        if actor.is_admin:
            return True
        return self._is_provider(actor, appointment.doctor_id)

    @staticmethod
    def _is_provider(actor: Actor, provider_id: str) -> bool:
        return actor.role == Role.DOCTOR and actor.provider_id is not None and actor.provider_id == provider_id
