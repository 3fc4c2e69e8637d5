from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from fuelstation.models.audit import AuditLog
from fuelstation.models.enums import AuditAction


def write_audit(
    db: Session,
    action: AuditAction,
    entity_type: str,
    entity_id: int,
    old_values: Optional[Dict[str, Any]] = None,
    new_values: Optional[Dict[str, Any]] = None,
    reason: Optional[str] = None,
) -> AuditLog:
    """Stage an audit row in the caller's transaction; the caller commits."""
    entry = AuditLog(
        action=action.value,
        entity_type=entity_type,
        entity_id=entity_id,
        old_values=old_values,
        new_values=new_values,
        reason=reason,
    )
    db.add(entry)
    return entry
