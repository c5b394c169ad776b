# crmhub/routers/posting_schedule.py
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from crmhub.core.exceptions import ValidationError
from crmhub.database import get_db
from crmhub.models.social import PostStatus
from crmhub.schemas.analytics import PostingStats
from crmhub.schemas.social import (
    BulkDeleteRequest,
    BulkResult,
    BulkUpdateRequest,
    PostActions,
    PostCreate,
    PostOut,
    PostUpdate,
)
from crmhub.services.analytics import load_posting_stats
from crmhub.services.policy import Principal
from crmhub.services.posting import PostingService
from crmhub.utils.auth import get_principal

router = APIRouter(prefix="/posting-schedule", tags=["posting-schedule"])


def get_posting_service(db: Session = Depends(get_db)) -> PostingService:
    return PostingService(db)


@router.get("", response_model=List[PostOut])
def list_posts(
    profile_id: Optional[int] = None,
    post_status: Optional[PostStatus] = Query(None, alias="status"),
    assigned_to: Optional[int] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    principal: Principal = Depends(get_principal),
    service: PostingService = Depends(get_posting_service),
):
    return service.list_posts(
        principal,
        profile_id=profile_id,
        status=post_status.value if post_status else None,
        assigned_to=assigned_to,
        start_date=start_date,
        end_date=end_date,
    )


@router.post("", response_model=PostOut, status_code=status.HTTP_201_CREATED)
def create_post(
    payload: PostCreate,
    principal: Principal = Depends(get_principal),
    service: PostingService = Depends(get_posting_service),
):
    return service.create(payload.model_dump(), principal)


@router.get("/stats", response_model=PostingStats)
def posting_stats(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    """Counts over the posts the caller can see"""
    return load_posting_stats(db, principal)


@router.post("/bulk-update", response_model=BulkResult)
def bulk_update_posts(
    payload: BulkUpdateRequest,
    principal: Principal = Depends(get_principal),
    service: PostingService = Depends(get_posting_service),
):
    update_data = payload.data.model_dump(exclude_unset=True)
    if not update_data:
        raise ValidationError("No fields to update")
    ids = service.bulk_update(payload.ids, update_data, principal)
    return {"count": len(ids), "ids": ids}


@router.post("/bulk-delete", response_model=BulkResult)
def bulk_delete_posts(
    payload: BulkDeleteRequest,
    principal: Principal = Depends(get_principal),
    service: PostingService = Depends(get_posting_service),
):
    ids = service.bulk_delete(payload.ids, principal)
    return {"count": len(ids), "ids": ids}


@router.get("/{post_id}", response_model=PostOut)
def get_post(
    post_id: int,
    principal: Principal = Depends(get_principal),
    service: PostingService = Depends(get_posting_service),
):
    return service.get_accessible(post_id, principal)


@router.get("/{post_id}/actions", response_model=PostActions)
def post_actions(
    post_id: int,
    principal: Principal = Depends(get_principal),
    service: PostingService = Depends(get_posting_service),
):
    return {"id": post_id, "actions": service.actions_for(post_id, principal)}


@router.patch("/{post_id}", response_model=PostOut)
def update_post(
    post_id: int,
    payload: PostUpdate,
    principal: Principal = Depends(get_principal),
    service: PostingService = Depends(get_posting_service),
):
    return service.update(post_id, payload.model_dump(exclude_unset=True), principal)


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_post(
    post_id: int,
    principal: Principal = Depends(get_principal),
    service: PostingService = Depends(get_posting_service),
):
    service.delete(post_id, principal)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{post_id}/clone", response_model=PostOut, status_code=status.HTTP_201_CREATED)
def clone_post(
    post_id: int,
    principal: Principal = Depends(get_principal),
    service: PostingService = Depends(get_posting_service),
):
    return service.clone(post_id, principal)
