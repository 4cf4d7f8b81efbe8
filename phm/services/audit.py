# phm/services/audit.py
from typing import Any, Dict, Optional

from fastapi import Request
from sqlalchemy.orm import Session

from phm.models.audit_log import AuditLog


def record_audit(
    db: Session,
    *,
    action: str,
    account_id: int,
    entity_type: str,
    entity_id: Optional[int] = None,
    user_id: Optional[int] = None,
    changes: Optional[Dict[str, Any]] = None,
    request: Optional[Request] = None,
) -> AuditLog:
    """Append an audit row in the caller's transaction (the caller commits)."""
    entry = AuditLog(
        account_id=account_id,
        user_id=user_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        changes=changes,
    )
    if request is not None:
        entry.ip_address = request.client.host if request.client else None
        ua = request.headers.get("user-agent")
        entry.user_agent = ua[:500] if ua else None
    db.add(entry)
    return entry
