# crmhub/services/posting.py
import logging
from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from crmhub.core.exceptions import Forbidden, NotFound, ValidationError
from crmhub.models.social import ApprovalStatus, PostingSchedule, PostStatus, SocialProfile
from crmhub.services.activity import log_activity
from crmhub.services.policy import (
    Operation,
    Principal,
    can_access,
    can_manage_profile,
    is_permitted,
    post_actions,
    visibility_scope,
)
from crmhub.services.users import ensure_user_exists
from crmhub.utils.lookups import reject_nulls

logger = logging.getLogger(__name__)

# Fields copied onto a clone; workflow state starts over
CLONED_FIELDS = ("profile_id", "post_type", "caption", "media_url", "scheduled_date_time", "assigned_to")


class PostingService:
    """Posting-schedule entries, scoped by the visibility predicate"""

    def __init__(self, db: Session):
        self.db = db

    # ---------- reads ----------

    def list_posts(
        self,
        principal: Principal,
        profile_id: Optional[int] = None,
        status: Optional[str] = None,
        assigned_to: Optional[int] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> List[PostingSchedule]:
        query = self.db.query(PostingSchedule)

        scope = visibility_scope(principal)
        if scope is not None:
            ids = list(scope)
            query = query.filter(
                or_(PostingSchedule.assigned_to.in_(ids), PostingSchedule.created_by.in_(ids))
            )

        if profile_id is not None:
            query = query.filter(PostingSchedule.profile_id == profile_id)
        if status:
            query = query.filter(PostingSchedule.status == status)
        if assigned_to is not None:
            query = query.filter(PostingSchedule.assigned_to == assigned_to)
        if start_date:
            query = query.filter(PostingSchedule.scheduled_date_time >= start_date)
        if end_date:
            query = query.filter(PostingSchedule.scheduled_date_time <= end_date)

        return query.order_by(PostingSchedule.scheduled_date_time.desc()).all()

    def get_accessible(self, post_id: int, principal: Principal) -> PostingSchedule:
        """Fetch a post, 404 if absent and 403 if not visible"""
        post = self.db.get(PostingSchedule, post_id)
        if not post:
            raise NotFound("Post not found")
        if not can_access(principal, post.assigned_to, post.created_by):
            raise Forbidden("You do not have access to this post")
        return post

    def actions_for(self, post_id: int, principal: Principal) -> List[str]:
        post = self.get_accessible(post_id, principal)
        return sorted(post_actions(principal, post.assigned_to, post.created_by))

    # ---------- writes ----------

    def create(self, data: dict, principal: Principal) -> PostingSchedule:
        self._check_references(data, principal)
        if data.get("approval_status", ApprovalStatus.PENDING.value) != ApprovalStatus.PENDING.value:
            self._require_approver(principal)

        post = PostingSchedule(**data, created_by=principal.user_id)
        self.db.add(post)
        self.db.flush()

        log_activity(
            self.db,
            actor_id=principal.user_id,
            activity_type="created",
            entity_type="post",
            entity_id=post.id,
            target_user_id=post.assigned_to,
            description="Scheduled a new post",
        )
        self.db.commit()
        self.db.refresh(post)
        return post

    def update(self, post_id: int, data: dict, principal: Principal) -> PostingSchedule:
        post = self.get_accessible(post_id, principal)
        self._check_update(post, data, principal)

        self._apply(post, data)
        log_activity(
            self.db,
            actor_id=principal.user_id,
            activity_type="updated",
            entity_type="post",
            entity_id=post.id,
            description="Updated a scheduled post",
            details={"fields": sorted(data)},
        )
        self.db.commit()
        self.db.refresh(post)
        return post

    def delete(self, post_id: int, principal: Principal) -> None:
        post = self.get_accessible(post_id, principal)
        self.db.delete(post)
        log_activity(
            self.db,
            actor_id=principal.user_id,
            activity_type="deleted",
            entity_type="post",
            entity_id=post_id,
            description="Deleted a scheduled post",
        )
        self.db.commit()

    def clone(self, post_id: int, principal: Principal) -> PostingSchedule:
        source = self.get_accessible(post_id, principal)

        copy = PostingSchedule(
            **{field: getattr(source, field) for field in CLONED_FIELDS},
            status=PostStatus.DRAFT.value,
            approval_status=ApprovalStatus.PENDING.value,
            created_by=principal.user_id,
            # Clones of clones point at the original
            clone_of=source.clone_of or source.id,
        )
        self.db.add(copy)
        self.db.flush()

        log_activity(
            self.db,
            actor_id=principal.user_id,
            activity_type="cloned",
            entity_type="post",
            entity_id=copy.id,
            description="Cloned a scheduled post",
            details={"source_id": source.id},
        )
        self.db.commit()
        self.db.refresh(copy)
        return copy

    def bulk_update(self, ids: Iterable[int], data: dict, principal: Principal) -> List[int]:
        posts = self._load_batch(ids, principal)
        for post in posts:
            self._check_update(post, data, principal)

        for post in posts:
            self._apply(post, data)

        post_ids = [post.id for post in posts]
        log_activity(
            self.db,
            actor_id=principal.user_id,
            activity_type="bulk_updated",
            entity_type="post",
            entity_id=None,
            description=f"Updated {len(post_ids)} scheduled posts",
            details={"ids": post_ids, "fields": sorted(data)},
        )
        self.db.commit()
        return post_ids

    def bulk_delete(self, ids: Iterable[int], principal: Principal) -> List[int]:
        posts = self._load_batch(ids, principal)
        post_ids = [post.id for post in posts]

        self.db.query(PostingSchedule).filter(PostingSchedule.id.in_(post_ids)).delete(synchronize_session=False)
        log_activity(
            self.db,
            actor_id=principal.user_id,
            activity_type="bulk_deleted",
            entity_type="post",
            entity_id=None,
            description=f"Deleted {len(post_ids)} scheduled posts",
            details={"ids": post_ids},
        )
        self.db.commit()
        return post_ids

    # ---------- helpers ----------

    def _load_batch(self, ids: Iterable[int], principal: Principal) -> List[PostingSchedule]:
        """Every id must exist and be visible before anything is written"""
        wanted = sorted(set(ids))
        posts = self.db.query(PostingSchedule).filter(PostingSchedule.id.in_(wanted)).all()

        found = {post.id for post in posts}
        missing = [post_id for post_id in wanted if post_id not in found]
        if missing:
            raise NotFound(f"Posts not found: {', '.join(str(i) for i in missing)}")

        denied = [post.id for post in posts if not can_access(principal, post.assigned_to, post.created_by)]
        if denied:
            logger.info("User %s refused bulk access to posts %s", principal.user_id, denied)
            raise Forbidden("You do not have access to one or more of these posts")

        return sorted(posts, key=lambda post: post.id)

    def _check_update(self, post: PostingSchedule, data: dict, principal: Principal) -> None:
        reject_nulls(data, "profile_id", "post_type", "scheduled_date_time", "status", "approval_status")
        if "approval_status" in data and data["approval_status"] != post.approval_status:
            self._require_approver(principal)
        self._check_references(data, principal, current_profile_id=post.profile_id)

    def _check_references(self, data: dict, principal: Principal, current_profile_id: Optional[int] = None) -> None:
        if data.get("profile_id") is not None and data["profile_id"] != current_profile_id:
            profile = self.db.get(SocialProfile, data["profile_id"])
            if not profile:
                raise ValidationError("Social profile does not exist")
            if not can_manage_profile(principal, profile.user_id):
                raise Forbidden("You can only schedule posts on social profiles you manage")
        if data.get("assigned_to") is not None:
            ensure_user_exists(self.db, data["assigned_to"])

    @staticmethod
    def _require_approver(principal: Principal) -> None:
        if not is_permitted(principal.role, Operation.APPROVE_POST):
            raise Forbidden("Only managers and admins can approve or reject posts")

    @staticmethod
    def _apply(post: PostingSchedule, data: dict) -> None:
        for key, value in data.items():
            setattr(post, key, value)
