"""
Audit service: records caller actions to the audit_logs table.
Uses affected_entity_type / affected_entity_id for the record that was affected by the action.
"""
from datetime import date, datetime
from typing import Any, Optional
from sqlalchemy.ext.asyncio import AsyncSession  # type: ignore

from leave_portal.models import AuditLog
from leave_portal.utils.access import CallerContext


def _json_safe(obj: Any) -> Any:
    """Convert values to JSON-serializable form for the JSON columns."""
    if obj is None:
        return None
    if isinstance(obj, dict):
        return {k: _json_safe(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple, set, frozenset)):
        return [_json_safe(v) for v in obj]
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if hasattr(obj, "value"):  # enum
        return obj.value
    if isinstance(obj, (str, int, float, bool)):
        return obj
    return str(obj)


async def log_action(
    db: AsyncSession,
    action: str,
    affected_entity_type: str,
    *,
    caller: Optional[CallerContext] = None,
    affected_entity_id: Optional[int] = None,
    old_values: Optional[dict[str, Any]] = None,
    new_values: Optional[dict[str, Any]] = None,
    summary: Optional[str] = None,
) -> None:
    """
    Write an audit log entry. Call before commit (same transaction).
    affected_entity_type = kind of record affected (EMPLOYEE, LEAVE, HOLIDAY, BALANCE).
    """
    entry = AuditLog(
        actor_id=caller.caller_id if caller else None,
        actor_email=caller.caller_email if caller else None,
        actor_role=caller.caller_role.value if caller else None,
        action=action,
        affected_entity_type=affected_entity_type,
        affected_entity_id=affected_entity_id,
        old_values=_json_safe(old_values) if old_values is not None else None,
        new_values=_json_safe(new_values) if new_values is not None else None,
        summary=summary,
    )
    db.add(entry)
