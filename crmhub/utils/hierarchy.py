# crmhub/utils/hierarchy.py
from typing import List, Set

from sqlalchemy.orm import Session

from crmhub.models.user import User, UserRole
from crmhub.services.policy import Principal


class HierarchyManager:
    """Utility class for manager/team lookups on the users table"""

    def __init__(self, db: Session):
        self.db = db

    def get_team_member_ids(self, manager_id: int) -> Set[int]:
        """Direct reports only; sub-managers' teams are not included"""
        rows = self.db.query(User.id).filter(User.manager_id == manager_id).all()
        return {row[0] for row in rows}

    def get_management_chain(self, user_id: int, max_depth: int = 20) -> List[User]:
        """Managers above the user, nearest first.

        ``manager_id`` cycles are not prevented at write time, so the walk
        stops at the first repeated user or after ``max_depth`` steps.
        """
        chain = []
        seen = {user_id}
        current = self.db.get(User, user_id)

        while current and current.manager_id and len(chain) < max_depth:
            if current.manager_id in seen:
                break
            manager = self.db.get(User, current.manager_id)
            if not manager:
                break
            chain.append(manager)
            seen.add(manager.id)
            current = manager

        return chain

    def principal_for(self, user: User) -> Principal:
        team_ids = frozenset()
        if user.role == UserRole.MANAGER.value:
            team_ids = frozenset(self.get_team_member_ids(user.id))
        return Principal(user_id=user.id, role=user.role, team_member_ids=team_ids)

    def has_management_cycle(self, user_id: int) -> bool:
        """True if walking up from the user revisits someone on the way"""
        chain = self.get_management_chain(user_id)
        if not chain:
            return False
        seen = {user_id} | {manager.id for manager in chain}
        return chain[-1].manager_id in seen
