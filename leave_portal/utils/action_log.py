"""
User-action logging: writes who did what to the application log (file + console).
Use this so logs show e.g. "employee X submitted leave" and "admin Y approved leave 5".
"""
import logging
from typing import Any, Optional

ACTION_LOGGER = logging.getLogger("leave_portal.actions")


def _user_context(
    user_id: Optional[int] = None,
    email: Optional[str] = None,
    role: Optional[str] = None,
) -> str:
    parts = []
    if user_id is not None:
        parts.append(f"user_id={user_id}")
    if email:
        parts.append(f"email={email}")
    if role:
        parts.append(f"role={role}")
    return " | ".join(parts) if parts else "anonymous"


def log_user_action(
    action: str,
    *,
    user_id: Optional[int] = None,
    email: Optional[str] = None,
    role: Optional[str] = None,
    **details: Any,
) -> None:
    """
    Log a user action to the application log.

    Example:
        log_user_action("LOGIN", user_id=5, email="a@b.com", role="employee")
        log_user_action("SUBMITTED_LEAVE", user_id=5, leave_id=12, leave_type="annual")
    """
    ctx = _user_context(user_id=user_id, email=email, role=role)
    extra_parts = [f"{k}={v!r}" if isinstance(v, str) else f"{k}={v}" for k, v in details.items()]
    extra = " " + " ".join(extra_parts) if extra_parts else ""
    ACTION_LOGGER.info(f"USER_ACTION | {ctx} | {action}{extra}")
