# crmhub/schemas/social.py
from pydantic import BaseModel, Field
from datetime import datetime
from typing import List, Optional

from crmhub.models.social import AccountType, ApprovalStatus, Platform, PostStatus, PostType
from crmhub.schemas.common import OptionalId, OptionalUrl, UrlStr

YOUTUBE_ONLY_FIELDS = ("channel_name", "subscribers_count", "channel_url")
REDDIT_ONLY_FIELDS = ("subreddit_moderation",)


def strip_platform_fields(data: dict, platform: str) -> dict:
    """Clear fields that do not apply to the profile's platform"""
    if platform != Platform.YOUTUBE.value:
        for key in YOUTUBE_ONLY_FIELDS:
            data[key] = None
    if platform != Platform.REDDIT.value:
        for key in REDDIT_ONLY_FIELDS:
            data[key] = None
    return data


# ---------- Social profiles ----------

class SocialProfileCreate(BaseModel):
    platform: Platform
    username: str = Field(min_length=1)
    profile_url: UrlStr
    account_type: AccountType = AccountType.PERSONAL
    followers_count: Optional[int] = Field(default=0, ge=0)
    bio: Optional[str] = None
    content_niche: Optional[str] = None
    channel_name: Optional[str] = None
    subscribers_count: Optional[int] = Field(default=None, ge=0)
    channel_url: OptionalUrl = None
    subreddit_moderation: Optional[str] = None
    # Admins and managers may connect a profile on someone else's behalf
    user_id: OptionalId = None


class SocialProfileUpdate(BaseModel):
    platform: Optional[Platform] = None
    username: Optional[str] = Field(default=None, min_length=1)
    profile_url: Optional[UrlStr] = None
    account_type: Optional[AccountType] = None
    followers_count: Optional[int] = Field(default=None, ge=0)
    bio: Optional[str] = None
    content_niche: Optional[str] = None
    channel_name: Optional[str] = None
    subscribers_count: Optional[int] = Field(default=None, ge=0)
    channel_url: OptionalUrl = None
    subreddit_moderation: Optional[str] = None


class SocialProfileOut(BaseModel):
    id: int
    user_id: int
    platform: Platform
    username: str
    profile_url: str
    account_type: AccountType
    followers_count: Optional[int] = None
    bio: Optional[str] = None
    content_niche: Optional[str] = None
    channel_name: Optional[str] = None
    subscribers_count: Optional[int] = None
    channel_url: Optional[str] = None
    subreddit_moderation: Optional[str] = None
    connected_date: datetime
    created_at: datetime
    updated_at: datetime

    model_config = {
        "from_attributes": True
    }


# ---------- Posting schedule ----------

class PostCreate(BaseModel):
    profile_id: int
    post_type: PostType = PostType.TEXT
    caption: Optional[str] = None
    media_url: OptionalUrl = None
    scheduled_date_time: datetime
    status: PostStatus = PostStatus.DRAFT
    approval_status: ApprovalStatus = ApprovalStatus.PENDING
    assigned_to: OptionalId = None
    publish_result: Optional[str] = None


class PostUpdate(BaseModel):
    profile_id: Optional[int] = None
    post_type: Optional[PostType] = None
    caption: Optional[str] = None
    media_url: OptionalUrl = None
    scheduled_date_time: Optional[datetime] = None
    status: Optional[PostStatus] = None
    approval_status: Optional[ApprovalStatus] = None
    assigned_to: OptionalId = None
    publish_result: Optional[str] = None


class PostOut(BaseModel):
    id: int
    profile_id: int
    post_type: PostType
    caption: Optional[str] = None
    media_url: Optional[str] = None
    scheduled_date_time: datetime
    status: PostStatus
    approval_status: ApprovalStatus
    assigned_to: Optional[int] = None
    created_by: int
    publish_result: Optional[str] = None
    clone_of: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    model_config = {
        "from_attributes": True
    }


class PostActions(BaseModel):
    id: int
    actions: List[str]


class BulkUpdateRequest(BaseModel):
    ids: List[int] = Field(min_length=1)
    data: PostUpdate


class BulkDeleteRequest(BaseModel):
    ids: List[int] = Field(min_length=1)


class BulkResult(BaseModel):
    count: int
    ids: List[int]
