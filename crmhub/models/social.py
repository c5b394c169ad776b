# crmhub/models/social.py
import enum

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from crmhub.database import Base
from crmhub.utils.datetime_utils import utcnow


class Platform(str, enum.Enum):
    LINKEDIN = "linkedin"
    TWITTER = "twitter"
    INSTAGRAM = "instagram"
    YOUTUBE = "youtube"
    REDDIT = "reddit"


class AccountType(str, enum.Enum):
    PERSONAL = "personal"
    BUSINESS = "business"


class PostType(str, enum.Enum):
    TEXT = "text"
    IMAGE = "image"
    VIDEO = "video"
    LINK = "link"
    CAROUSEL = "carousel"


class PostStatus(str, enum.Enum):
    DRAFT = "draft"
    SCHEDULED = "scheduled"
    PUBLISHED = "published"
    FAILED = "failed"


class ApprovalStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class SocialProfile(Base):
    __tablename__ = "social_profiles"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    platform = Column(String, nullable=False, index=True)
    username = Column(String, nullable=False)
    profile_url = Column(String, nullable=False)
    account_type = Column(String, nullable=False, default=AccountType.PERSONAL.value)
    followers_count = Column(Integer, nullable=True, default=0)
    bio = Column(Text, nullable=True)
    content_niche = Column(String, nullable=True)

    # youtube only
    channel_name = Column(String, nullable=True)
    subscribers_count = Column(Integer, nullable=True)
    channel_url = Column(String, nullable=True)
    # reddit only
    subreddit_moderation = Column(Text, nullable=True)

    connected_date = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    owner = relationship("User", foreign_keys=[user_id])


class PostingSchedule(Base):
    __tablename__ = "posting_schedule"

    id = Column(Integer, primary_key=True, index=True)
    profile_id = Column(Integer, ForeignKey("social_profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    post_type = Column(String, nullable=False, default=PostType.TEXT.value)
    caption = Column(Text, nullable=True)
    media_url = Column(String, nullable=True)
    scheduled_date_time = Column(DateTime(timezone=True), nullable=False, index=True)
    status = Column(String, nullable=False, default=PostStatus.DRAFT.value, index=True)
    approval_status = Column(String, nullable=False, default=ApprovalStatus.PENDING.value)
    assigned_to = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    publish_result = Column(Text, nullable=True)
    # Always points at the original post, never at another clone
    clone_of = Column(Integer, ForeignKey("posting_schedule.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    profile = relationship("SocialProfile", foreign_keys=[profile_id])
