from typing import Any, Dict, Optional, Protocol


class AuditLogger(Protocol):
    def log(self, action: str, actor_id: Optional[str], subject_id: Optional[str], success: bool = True, details: Optional[Dict[str, Any]] = None) -> None:
        ...
