# crmhub/services/policy.py
"""Authorization policy.

Two predicates govern the whole system:

* the **role gate**, a fixed table from operation to the roles allowed to
  invoke it (``admin`` passes everywhere), and
* the **visibility predicate**, which decides from a resource's
  ``assigned_to`` / ``created_by`` references whether a principal may read or
  write it.  Managers additionally see resources owned by their direct team
  members (users whose ``manager_id`` is the manager's id).

Everything here is pure: no database access, no request state.  The same
functions back server-side enforcement and the permission hints returned to
the client, so the two can never drift apart.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Set

from crmhub.core.exceptions import Forbidden
from crmhub.models.user import UserRole

ADMIN = UserRole.ADMIN.value
MANAGER = UserRole.MANAGER.value
EMPLOYEE = UserRole.EMPLOYEE.value


class Operation(str, Enum):
    DELETE_LEAD = "delete_lead"
    DELETE_DEAL = "delete_deal"
    DELETE_TASK = "delete_task"
    CREATE_EMPLOYEE = "create_employee"
    UPDATE_EMPLOYEE = "update_employee"
    DELETE_EMPLOYEE = "delete_employee"
    VIEW_ADMIN_USERS = "view_admin_users"
    UPDATE_USER = "update_user"
    DELETE_USER = "delete_user"
    APPROVE_POST = "approve_post"
    MANAGE_ANY_SOCIAL_PROFILE = "manage_any_social_profile"
    VIEW_ALL_ATTENDANCE = "view_all_attendance"


# Roles besides admin that may invoke each operation
ROLE_GATE: Dict[Operation, FrozenSet[str]] = {
    Operation.DELETE_LEAD: frozenset({MANAGER}),
    Operation.DELETE_DEAL: frozenset({MANAGER}),
    Operation.DELETE_TASK: frozenset({MANAGER}),
    Operation.CREATE_EMPLOYEE: frozenset(),
    Operation.UPDATE_EMPLOYEE: frozenset(),
    Operation.DELETE_EMPLOYEE: frozenset(),
    Operation.VIEW_ADMIN_USERS: frozenset(),
    Operation.UPDATE_USER: frozenset(),
    Operation.DELETE_USER: frozenset(),
    Operation.APPROVE_POST: frozenset({MANAGER}),
    Operation.MANAGE_ANY_SOCIAL_PROFILE: frozenset({MANAGER}),
    Operation.VIEW_ALL_ATTENDANCE: frozenset(),
}


@dataclass(frozen=True)
class Principal:
    """The authenticated identity making a request"""

    user_id: int
    role: str
    # Only populated for managers
    team_member_ids: FrozenSet[int] = field(default_factory=frozenset)

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN


def is_permitted(role: str, operation: Operation) -> bool:
    if role == ADMIN:
        return True
    return role in ROLE_GATE.get(operation, frozenset())


def require(principal: Principal, operation: Operation) -> None:
    if not is_permitted(principal.role, operation):
        raise Forbidden()


def can_access(principal: Principal, assigned_to: Optional[int], created_by: Optional[int]) -> bool:
    """Visibility predicate over a resource's assignee and creator"""
    owners = {assigned_to, created_by} - {None}

    if principal.role == ADMIN:
        return True
    if principal.role == MANAGER:
        return principal.user_id in owners or bool(owners & principal.team_member_ids)
    if principal.role == EMPLOYEE:
        return principal.user_id in owners
    return False


def visibility_scope(principal: Principal) -> Optional[FrozenSet[int]]:
    """User ids whose resources the principal may see; None means unrestricted.

    A resource is visible iff its assignee or creator is in the returned set,
    which makes this the list-query form of ``can_access``.
    """
    if principal.role == ADMIN:
        return None
    if principal.role == MANAGER:
        return frozenset({principal.user_id}) | principal.team_member_ids
    if principal.role == EMPLOYEE:
        return frozenset({principal.user_id})
    return frozenset()


def allowed_operations(principal: Principal) -> List[str]:
    return sorted(op.value for op in Operation if is_permitted(principal.role, op))


def post_actions(principal: Principal, assigned_to: Optional[int], created_by: Optional[int]) -> Set[str]:
    """Actions the principal may take on one posting-schedule entry"""
    if not can_access(principal, assigned_to, created_by):
        return set()
    actions = {"view", "update", "delete", "clone"}
    if is_permitted(principal.role, Operation.APPROVE_POST):
        actions.add("approve")
    return actions


def can_update_task(principal: Principal, task_assigned_to: Optional[int]) -> bool:
    # Employees can only update their own tasks
    if principal.role == EMPLOYEE:
        return task_assigned_to == principal.user_id
    return principal.role in (ADMIN, MANAGER)


def can_manage_profile(principal: Principal, profile_owner_id: int) -> bool:
    if is_permitted(principal.role, Operation.MANAGE_ANY_SOCIAL_PROFILE):
        return True
    return principal.role == EMPLOYEE and profile_owner_id == principal.user_id
