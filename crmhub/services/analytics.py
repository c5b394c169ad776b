# crmhub/services/analytics.py
"""Dashboard counters and posting statistics.

The ``*_metrics`` / ``*_stats`` functions are pure and work on any sequence
of rows; the ``load_*`` helpers fetch those rows for a request.
"""
from collections import Counter
from datetime import datetime, timedelta
from typing import Dict, Optional, Sequence

from sqlalchemy import or_
from sqlalchemy.orm import Session

from crmhub.models.crm import Deal, Lead, Stage
from crmhub.models.employee import Employee
from crmhub.models.social import ApprovalStatus, PostingSchedule, PostStatus, SocialProfile
from crmhub.models.task import Task
from crmhub.services.policy import Principal, visibility_scope
from crmhub.utils.datetime_utils import as_utc, utcnow

UPCOMING_WINDOW = timedelta(days=7)


def percentage(part: int, total: int) -> int:
    """``100 * part / total`` rounded half up; 0 when total is 0"""
    if total <= 0:
        return 0
    return (200 * part + total) // (2 * total)


def dashboard_metrics(
    leads: Sequence[Lead],
    deals: Sequence[Deal],
    tasks: Sequence[Task],
    employees: Sequence[Employee],
) -> Dict[str, int]:
    closed = Stage.CLOSED.value
    closed_deals = [deal for deal in deals if deal.stage == closed]

    return {
        "total_leads": len(leads),
        "active_deals": sum(1 for deal in deals if deal.stage != closed),
        "total_revenue": sum(deal.value or 0 for deal in closed_deals),
        "conversion_rate": percentage(len(closed_deals), len(leads)),
        "task_completion_rate": percentage(sum(1 for task in tasks if task.completed), len(tasks)),
        "active_employees": len(employees),
    }


def posting_stats(
    posts: Sequence[PostingSchedule],
    platform_by_profile: Dict[int, str],
    now: Optional[datetime] = None,
) -> dict:
    now = as_utc(now or utcnow())
    horizon = now + UPCOMING_WINDOW

    platforms = Counter(
        platform_by_profile[post.profile_id]
        for post in posts
        if post.profile_id in platform_by_profile
    )
    upcoming = sum(
        1
        for post in posts
        if post.status == PostStatus.SCHEDULED.value
        and now <= as_utc(post.scheduled_date_time) <= horizon
    )
    pending = sum(1 for post in posts if post.approval_status == ApprovalStatus.PENDING.value)

    return {
        "by_platform": [
            {"platform": platform, "count": count}
            for platform, count in sorted(platforms.items())
        ],
        "upcoming": upcoming,
        "pending": pending,
    }


def load_dashboard_metrics(db: Session) -> Dict[str, int]:
    return dashboard_metrics(
        db.query(Lead).all(),
        db.query(Deal).all(),
        db.query(Task).all(),
        db.query(Employee).all(),
    )


def load_posting_stats(db: Session, principal: Principal, now: Optional[datetime] = None) -> dict:
    query = db.query(PostingSchedule)
    scope = visibility_scope(principal)
    if scope is not None:
        ids = list(scope)
        query = query.filter(
            or_(PostingSchedule.assigned_to.in_(ids), PostingSchedule.created_by.in_(ids))
        )
    posts = query.all()

    profile_ids = {post.profile_id for post in posts}
    platform_by_profile = {}
    if profile_ids:
        rows = db.query(SocialProfile.id, SocialProfile.platform).filter(SocialProfile.id.in_(profile_ids)).all()
        platform_by_profile = {row[0]: row[1] for row in rows}

    return posting_stats(posts, platform_by_profile, now)
