from typing import Optional, Dict, Any, Protocol


class AuditLogger(Protocol):
    def log(self, action: str, user_id: str, resource_id: Optional[str] = None, success: bool = True, details: Optional[Dict[str, Any]] = None) -> None:
        ...
