import json
import logging
from datetime import datetime, timezone
from typing import Optional, Dict, Any

from ...application.ports.audit_logger import AuditLogger


class StdAuditLogger(AuditLogger):
    def __init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def log(self, action: str, user_id: str, resource_id: Optional[str] = None, success: bool = True, details: Optional[Dict[str, Any]] = None) -> None:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "action": action,
            "user_id": user_id,
            "resource_id": resource_id,
            "success": success,
            "details": details or {},
        }
        self._logger.info(f"AUDIT: {json.dumps(entry, default=str)}")
