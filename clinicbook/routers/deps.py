import logging
from typing import Optional

from fastapi import Depends, Header, HTTPException
from sqlmodel import Session

from ..application.ports.authorization import Actor, Role
from ..application.services import AvailabilityService, BookingService, ScheduleService
from ..config import settings
from ..database import get_session
from ..infrastructure.audit.std_logger import StdAuditLogger
from ..infrastructure.auth.role_guard import RoleAuthorizationGuard
from ..infrastructure.clock.system_clock import SystemClock
from ..infrastructure.persistence.sqlalchemy.repositories.availability_repository_sql import SqlAvailabilityRepository
from ..infrastructure.persistence.sqlalchemy.repositories.booking_repository_sql import SqlBookingRepository
from ..infrastructure.persistence.sqlalchemy.repositories.ledger_repository_sql import SqlBalanceLedger
from ..infrastructure.persistence.sqlalchemy.repositories.schedule_repository_sql import SqlScheduleRepository

logger = logging.getLogger(__name__)

_guard = RoleAuthorizationGuard()
_clock = SystemClock()
_audit = StdAuditLogger(_clock)


def get_current_actor(
    x_user_id: Optional[str] = Header(default=None),
    x_user_role: str = Header(default=Role.PATIENT.value),
    x_provider_id: Optional[str] = Header(default=None),
    x_patient_id: Optional[str] = Header(default=None),
) -> Actor:
    """Identity headers are set by the upstream gateway after it has authenticated the caller."""
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Authentication required")
    try:
        role = Role(x_user_role.lower())
    except ValueError:
        logger.warning(f"Rejected unknown role header: {x_user_role}")
        raise HTTPException(status_code=401, detail="Invalid role")
    return Actor(user_id=x_user_id, role=role, provider_id=x_provider_id, patient_id=x_patient_id)


def get_schedule_service(session: Session = Depends(get_session)) -> ScheduleService:
    return ScheduleService(
        repo=SqlScheduleRepository(session),
        guard=_guard,
        clock=_clock,
        audit=_audit,
        default_slot_minutes=settings.DEFAULT_SLOT_MINUTES,
        strict_delete=settings.STRICT_SCHEDULE_DELETE,
    )


def get_booking_service(session: Session = Depends(get_session)) -> BookingService:
    return BookingService(
        repo=SqlBookingRepository(session),
        ledger=SqlBalanceLedger(session, _clock),
        guard=_guard,
        clock=_clock,
        audit=_audit,
    )


def get_availability_service(session: Session = Depends(get_session)) -> AvailabilityService:
    return AvailabilityService(repo=SqlAvailabilityRepository(session))
