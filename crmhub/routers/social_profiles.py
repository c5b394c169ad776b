# crmhub/routers/social_profiles.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from crmhub.core.exceptions import Forbidden
from crmhub.database import get_db
from crmhub.models.social import Platform, SocialProfile
from crmhub.schemas.social import (
    SocialProfileCreate,
    SocialProfileOut,
    SocialProfileUpdate,
    strip_platform_fields,
)
from crmhub.services.activity import log_activity
from crmhub.services.policy import Operation, Principal, can_manage_profile, is_permitted
from crmhub.services.users import ensure_user_exists
from crmhub.utils.auth import get_principal
from crmhub.utils.lookups import get_or_404, reject_nulls

router = APIRouter(prefix="/social-profiles", tags=["social-profiles"])


def _get_manageable(db: Session, profile_id: int, principal: Principal) -> SocialProfile:
    profile = get_or_404(db, SocialProfile, profile_id, "Social profile")
    if not can_manage_profile(principal, profile.user_id):
        raise Forbidden("You can only manage your own social profiles")
    return profile


@router.get("", response_model=List[SocialProfileOut])
def list_profiles(
    platform: Optional[Platform] = None,
    user_id: Optional[int] = None,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    query = db.query(SocialProfile)
    if not is_permitted(principal.role, Operation.MANAGE_ANY_SOCIAL_PROFILE):
        query = query.filter(SocialProfile.user_id == principal.user_id)
    elif user_id is not None:
        query = query.filter(SocialProfile.user_id == user_id)
    if platform:
        query = query.filter(SocialProfile.platform == platform.value)
    return query.order_by(SocialProfile.connected_date.desc()).all()


@router.post("", response_model=SocialProfileOut, status_code=status.HTTP_201_CREATED)
def create_profile(
    payload: SocialProfileCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    data = payload.model_dump()
    owner_id = data.pop("user_id") or principal.user_id
    if not can_manage_profile(principal, owner_id):
        raise Forbidden("You can only connect profiles for yourself")
    ensure_user_exists(db, owner_id)

    profile = SocialProfile(**strip_platform_fields(data, payload.platform.value), user_id=owner_id)
    db.add(profile)
    db.flush()

    log_activity(
        db,
        actor_id=principal.user_id,
        activity_type="created",
        entity_type="social_profile",
        entity_id=profile.id,
        target_user_id=owner_id if owner_id != principal.user_id else None,
        description=f"Connected {profile.platform} profile @{profile.username}",
    )
    db.commit()
    db.refresh(profile)
    return profile


@router.get("/{profile_id}", response_model=SocialProfileOut)
def get_profile(
    profile_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    return _get_manageable(db, profile_id, principal)


@router.patch("/{profile_id}", response_model=SocialProfileOut)
def update_profile(
    profile_id: int,
    payload: SocialProfileUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    profile = _get_manageable(db, profile_id, principal)
    update_data = reject_nulls(
        payload.model_dump(exclude_unset=True), "platform", "username", "profile_url", "account_type"
    )

    platform = Platform(update_data.get("platform", profile.platform)).value
    for key, value in strip_platform_fields(update_data, platform).items():
        setattr(profile, key, value)

    log_activity(
        db,
        actor_id=principal.user_id,
        activity_type="updated",
        entity_type="social_profile",
        entity_id=profile.id,
        description=f"Updated {profile.platform} profile @{profile.username}",
    )
    db.commit()
    db.refresh(profile)
    return profile


@router.delete("/{profile_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_profile(
    profile_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    profile = _get_manageable(db, profile_id, principal)
    description = f"Disconnected {profile.platform} profile @{profile.username}"
    db.query(SocialProfile).filter(SocialProfile.id == profile_id).delete(synchronize_session=False)
    log_activity(
        db,
        actor_id=principal.user_id,
        activity_type="deleted",
        entity_type="social_profile",
        entity_id=profile_id,
        description=description,
    )
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
