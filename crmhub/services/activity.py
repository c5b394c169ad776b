# crmhub/services/activity.py
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from crmhub.models.activity import Activity
from crmhub.services.policy import Principal, visibility_scope

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 20
MAX_LIMIT = 100


def log_activity(
    db: Session,
    actor_id: int,
    activity_type: str,
    entity_type: str,
    entity_id: Optional[int],
    description: str,
    target_user_id: Optional[int] = None,
    details: Optional[Dict[str, Any]] = None,
) -> Activity:
    """Stage an activity row; the caller commits it with its own change"""
    activity = Activity(
        user_id=actor_id,
        activity_type=activity_type,
        entity_type=entity_type,
        entity_id=entity_id,
        target_user_id=target_user_id,
        description=description,
        details=details,
    )
    db.add(activity)
    logger.debug("Activity %s %s#%s by user %s", activity_type, entity_type, entity_id, actor_id)
    return activity


def recent_activities(db: Session, principal: Principal, limit: int = DEFAULT_LIMIT) -> List[dict]:
    """Most recent activities the principal can see, newest first.

    Non-admins see activities they performed or that target them, plus those
    of their team when they manage one.
    """
    limit = max(1, min(limit, MAX_LIMIT))

    query = db.query(Activity).options(
        joinedload(Activity.actor),
        joinedload(Activity.target_user),
    )

    scope = visibility_scope(principal)
    if scope is not None:
        ids = list(scope)
        query = query.filter(or_(Activity.user_id.in_(ids), Activity.target_user_id.in_(ids)))

    rows = query.order_by(Activity.created_at.desc(), Activity.id.desc()).limit(limit).all()
    return [_serialize(row) for row in rows]


def _serialize(activity: Activity) -> dict:
    actor = activity.actor
    target = activity.target_user
    return {
        "id": activity.id,
        "user_id": activity.user_id,
        "activity_type": activity.activity_type,
        "entity_type": activity.entity_type,
        "entity_id": activity.entity_id,
        "target_user_id": activity.target_user_id,
        "description": activity.description,
        "details": activity.details,
        "created_at": activity.created_at,
        "user_name": actor.name if actor else "Unknown User",
        "user_email": actor.email if actor else None,
        "target_user_name": target.name if target else None,
        "target_user_email": target.email if target else None,
    }
