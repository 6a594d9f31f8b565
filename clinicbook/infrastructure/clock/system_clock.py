from datetime import datetime

from ...application.ports.clock import Clock


class SystemClock(Clock):
    def now(self) -> datetime:
        return datetime.utcnow()
