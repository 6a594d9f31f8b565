from contextlib import contextmanager
from typing import Type

from sqlalchemy.exc import IntegrityError, OperationalError

from ....exceptions import BusyError, ConflictError

# lock_not_available, deadlock_detected, serialization_failure
_PG_CONTENTION_CODES = {"55P03", "40P01", "40001"}
_SQLITE_CONTENTION_MESSAGES = ("database is locked", "database table is locked", "database is busy")


def is_lock_contention(exc: OperationalError) -> bool:
    code = getattr(exc.orig, "pgcode", None)
    if code in _PG_CONTENTION_CODES:
        return True
    message = str(exc.orig).lower()
    return any(m in message for m in _SQLITE_CONTENTION_MESSAGES) or "lock timeout" in message


@contextmanager
def translate_db_errors(conflict: Type[ConflictError] = ConflictError, conflict_detail: str = "Conflicting record already exists"):
    """Map driver errors onto the scheduling error kinds callers understand."""
    try:
        yield
    except IntegrityError as e:
        raise conflict(conflict_detail) from e
    except OperationalError as e:
        if is_lock_contention(e):
            raise BusyError("Storage is busy, retry the request") from e
        raise
