"""
Caller context and authorization rules.

Every role/ownership decision goes through `can()`, so the lifecycle, report
and employee services share one rulebook instead of re-checking role strings.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional

from leave_portal.models.enums import RoleEnum
from leave_portal.utils.exceptions import Forbidden, Unauthorized


class Operation(str, Enum):
    SUBMIT_LEAVE = "submit:leave"
    SUBMIT_FOR_OTHERS = "submit:leave:others"
    VIEW_LEAVE = "view:leave"
    VIEW_ALL_LEAVES = "view:leaves:all"
    APPROVE_LEAVE = "approve:leave"
    REJECT_LEAVE = "reject:leave"
    CANCEL_LEAVE = "cancel:leave"
    UPDATE_LEAVE = "update:leave"
    DELETE_LEAVE = "delete:leave"
    DELETE_ANY_LEAVE = "delete:leave:any"
    COMMENT_LEAVE = "comment:leave"
    MANAGE_EMPLOYEES = "manage:employees"
    RESET_BALANCES = "reset:balances"
    MANAGE_HOLIDAYS = "manage:holidays"
    VIEW_STATS = "view:stats"


# Operations any identified caller may perform on their own behalf
_SELF_SERVICE = frozenset({
    Operation.SUBMIT_LEAVE,
    Operation.VIEW_LEAVE,
    Operation.CANCEL_LEAVE,
    Operation.UPDATE_LEAVE,
    Operation.DELETE_LEAVE,
    Operation.COMMENT_LEAVE,
})

_PRIVILEGED = _SELF_SERVICE | frozenset({
    Operation.SUBMIT_FOR_OTHERS,
    Operation.VIEW_ALL_LEAVES,
    Operation.APPROVE_LEAVE,
    Operation.REJECT_LEAVE,
    Operation.DELETE_ANY_LEAVE,
    Operation.MANAGE_EMPLOYEES,
    Operation.RESET_BALANCES,
    Operation.MANAGE_HOLIDAYS,
    Operation.VIEW_STATS,
})

ROLE_OPERATIONS: Dict[RoleEnum, FrozenSet[Operation]] = {
    RoleEnum.EMPLOYEE: _SELF_SERVICE,
    RoleEnum.ADMIN: _PRIVILEGED,
    RoleEnum.MD: _PRIVILEGED,
}

# Operations that act on an existing resource and require the caller to own it
OWNER_ONLY = frozenset({
    Operation.CANCEL_LEAVE,
    Operation.UPDATE_LEAVE,
})


@dataclass(frozen=True)
class CallerContext:
    """Identity resolved for the current request."""
    caller_id: int
    caller_role: RoleEnum
    caller_email: str


def require_caller(caller: Optional[CallerContext]) -> CallerContext:
    if caller is None:
        raise Unauthorized()
    return caller


def can(operation: Operation, caller: CallerContext, resource: Optional[Any] = None) -> bool:
    """
    Decide whether `caller` may perform `operation`.

    `resource` is the record acted on (anything with an `employee_id`), when
    there is one. Cancel and update are owner-only for every role; viewing and
    deleting someone else's request needs the privileged variants. A record
    whose owner was deleted belongs to nobody.
    """
    allowed = ROLE_OPERATIONS.get(caller.caller_role, frozenset())
    if operation not in allowed:
        return False
    if resource is None:
        return True
    owner_id = getattr(resource, "employee_id", None)
    is_owner = owner_id is not None and owner_id == caller.caller_id
    if operation in OWNER_ONLY:
        return is_owner
    if operation == Operation.VIEW_LEAVE:
        return is_owner or Operation.VIEW_ALL_LEAVES in allowed
    if operation == Operation.DELETE_LEAVE:
        return is_owner or Operation.DELETE_ANY_LEAVE in allowed
    if operation == Operation.SUBMIT_LEAVE:
        return is_owner or Operation.SUBMIT_FOR_OTHERS in allowed
    return True


def authorize(operation: Operation, caller: Optional[CallerContext], resource: Optional[Any] = None, message: Optional[str] = None) -> CallerContext:
    """Raise Unauthorized without a caller, Forbidden when `can()` says no."""
    caller = require_caller(caller)
    if not can(operation, caller, resource):
        raise Forbidden(message or f"Not permitted to {operation.value}")
    return caller
