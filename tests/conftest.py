from datetime import datetime

import pytest
from sqlmodel import Session

from clinicbook.application.ports.authorization import Actor, Role
from clinicbook.application.services import AvailabilityService, BookingService, ScheduleService
from clinicbook.database import build_engine, create_db_and_tables
from clinicbook.infrastructure.auth.role_guard import RoleAuthorizationGuard
from clinicbook.infrastructure.persistence.sqlalchemy.repositories.availability_repository_sql import SqlAvailabilityRepository
from clinicbook.infrastructure.persistence.sqlalchemy.repositories.booking_repository_sql import SqlBookingRepository
from clinicbook.infrastructure.persistence.sqlalchemy.repositories.ledger_repository_sql import SqlBalanceLedger
from clinicbook.infrastructure.persistence.sqlalchemy.repositories.schedule_repository_sql import SqlScheduleRepository

ADMIN = Actor(user_id="admin-1", role=Role.ADMIN)
DOCTOR = Actor(user_id="user-doc-1", role=Role.DOCTOR, provider_id="doc-1")
OTHER_DOCTOR = Actor(user_id="user-doc-2", role=Role.DOCTOR, provider_id="doc-2")


def patient(patient_id: str) -> Actor:
    return Actor(user_id=f"user-{patient_id}", role=Role.PATIENT, patient_id=patient_id)


class FixedClock:
    def __init__(self, now: datetime = datetime(2025, 5, 30, 8, 0)):
        self._now = now

    def now(self) -> datetime:
        return self._now


class RecordingAudit:
    def __init__(self):
        self.entries = []

    def log(self, action, actor_id, subject_id, success=True, details=None):
        self.entries.append({
            "action": action,
            "actor_id": actor_id,
            "subject_id": subject_id,
            "success": success,
            "details": details or {},
        })

    def actions(self):
        return [e["action"] for e in self.entries]


@pytest.fixture
def engine(tmp_path):
    eng = build_engine(f"sqlite:///{tmp_path / 'clinicbook-test.db'}", lock_timeout_seconds=30)
    create_db_and_tables(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as s:
        yield s


@pytest.fixture
def audit():
    return RecordingAudit()


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def make_schedule_service(audit, clock):
    def _make(session: Session, strict_delete: bool = False) -> ScheduleService:
        return ScheduleService(
            repo=SqlScheduleRepository(session),
            guard=RoleAuthorizationGuard(),
            clock=clock,
            audit=audit,
            strict_delete=strict_delete,
        )
    return _make


@pytest.fixture
def make_booking_service(audit, clock):
    def _make(session: Session, ledger=None) -> BookingService:
        return BookingService(
            repo=SqlBookingRepository(session),
            ledger=ledger if ledger is not None else SqlBalanceLedger(session, clock),
            guard=RoleAuthorizationGuard(),
            clock=clock,
            audit=audit,
        )
    return _make


@pytest.fixture
def schedules(session, make_schedule_service):
    return make_schedule_service(session)


@pytest.fixture
def bookings(session, make_booking_service):
    return make_booking_service(session)


@pytest.fixture
def availability(session):
    return AvailabilityService(repo=SqlAvailabilityRepository(session))
