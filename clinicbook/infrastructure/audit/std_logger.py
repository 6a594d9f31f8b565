import json
import logging
from datetime import datetime
from typing import Any, Dict, Optional

from ...application.ports.audit_logger import AuditLogger
from ...application.ports.clock import Clock
from ..clock.system_clock import SystemClock


class StdAuditLogger(AuditLogger):
    def __init__(self, clock: Optional[Clock] = None) -> None:
        self._logger = logging.getLogger(__name__)
        self._clock = clock or SystemClock()

    def log(self, action: str, actor_id: Optional[str], subject_id: Optional[str], success: bool = True, details: Optional[Dict[str, Any]] = None) -> None:
        now: datetime = self._clock.now()
        entry = {
            "timestamp": now.isoformat(),
            "action": action,
            "actor_id": actor_id,
            "subject_id": subject_id,
            "success": success,
            "details": details or {},
        }
        self._logger.info(f"AUDIT: {json.dumps(entry, default=str)}")
