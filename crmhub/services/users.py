# crmhub/services/users.py
import logging
from typing import List

from sqlalchemy.orm import Session

from crmhub.core.exceptions import EmailAlreadyRegistered, ValidationError
from crmhub.models.user import User
from crmhub.services.activity import log_activity
from crmhub.services.policy import Principal
from crmhub.utils.hierarchy import HierarchyManager
from crmhub.utils.lookups import get_or_404, reject_nulls

logger = logging.getLogger(__name__)


def ensure_user_exists(db: Session, user_id: int) -> User:
    """Validate a user reference carried in a request body"""
    user = db.get(User, user_id)
    if not user:
        raise ValidationError(f"User {user_id} does not exist")
    return user


def list_users(db: Session) -> List[User]:
    return db.query(User).order_by(User.first_name, User.last_name, User.email).all()


def get_user(db: Session, user_id: int) -> User:
    return get_or_404(db, User, user_id, "User")


def update_user(db: Session, user_id: int, data: dict, principal: Principal) -> User:
    user = get_user(db, user_id)

    if "manager_id" in data and data["manager_id"] is not None:
        if data["manager_id"] == user.id:
            raise ValidationError("A user cannot be their own manager")
        ensure_user_exists(db, data["manager_id"])

    if "email" in data:
        if not data["email"]:
            raise ValidationError("Email cannot be empty")
        taken = db.query(User.id).filter(User.email == data["email"], User.id != user.id).first()
        if taken:
            raise EmailAlreadyRegistered()

    reject_nulls(data, "role", "status")

    for key, value in data.items():
        setattr(user, key, value)

    log_activity(
        db,
        actor_id=principal.user_id,
        activity_type="updated",
        entity_type="user",
        entity_id=user.id,
        target_user_id=user.id,
        description=f"Updated user {user.name}",
        details={"fields": sorted(data)},
    )
    db.commit()
    db.refresh(user)

    if user.manager_id is not None and HierarchyManager(db).has_management_cycle(user.id):
        logger.warning("Management chain for user %s contains a cycle", user.id)

    return user


def delete_user(db: Session, user_id: int, principal: Principal) -> None:
    user = get_user(db, user_id)
    if user.id == principal.user_id:
        raise ValidationError("You cannot delete your own account")

    name = user.name
    # Bulk delete so the database applies ON DELETE rules (team members keep
    # their rows with manager_id cleared)
    db.expunge(user)
    db.query(User).filter(User.id == user_id).delete(synchronize_session=False)
    log_activity(
        db,
        actor_id=principal.user_id,
        activity_type="deleted",
        entity_type="user",
        entity_id=user_id,
        description=f"Deleted user {name}",
    )
    db.commit()
    logger.info("User %s deleted by %s", user_id, principal.user_id)
