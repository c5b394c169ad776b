# crmhub/routers/deals.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from crmhub.database import get_db
from crmhub.models.crm import Deal, Stage
from crmhub.models.user import User
from crmhub.schemas.crm import DealCreate, DealOut, DealUpdate
from crmhub.services.activity import log_activity
from crmhub.services.policy import Operation, Principal
from crmhub.services.users import ensure_user_exists
from crmhub.utils.auth import get_current_user, require_operation
from crmhub.utils.lookups import get_or_404, reject_nulls

router = APIRouter(prefix="/deals", tags=["deals"])


@router.get("", response_model=List[DealOut])
def list_deals(
    stage: Optional[Stage] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = db.query(Deal)
    if stage:
        query = query.filter(Deal.stage == stage.value)
    return query.order_by(Deal.created_at.desc()).all()


@router.post("", response_model=DealOut, status_code=status.HTTP_201_CREATED)
def create_deal(
    payload: DealCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if payload.assigned_to is not None:
        ensure_user_exists(db, payload.assigned_to)

    deal = Deal(**payload.model_dump())
    db.add(deal)
    db.flush()

    log_activity(
        db,
        actor_id=current_user.id,
        activity_type="created",
        entity_type="deal",
        entity_id=deal.id,
        target_user_id=deal.assigned_to,
        description=f"Opened deal {deal.title} with {deal.company}",
        details={"value": deal.value},
    )
    db.commit()
    db.refresh(deal)
    return deal


@router.get("/{deal_id}", response_model=DealOut)
def get_deal(
    deal_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return get_or_404(db, Deal, deal_id, "Deal")


@router.patch("/{deal_id}", response_model=DealOut)
def update_deal(
    deal_id: int,
    payload: DealUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    deal = get_or_404(db, Deal, deal_id, "Deal")
    update_data = reject_nulls(payload.model_dump(exclude_unset=True), "title", "company", "value", "stage")
    if update_data.get("assigned_to") is not None:
        ensure_user_exists(db, update_data["assigned_to"])

    for key, value in update_data.items():
        setattr(deal, key, value)

    # Closing a deal is what moves revenue on the dashboard
    closed = update_data.get("stage") == Stage.CLOSED
    log_activity(
        db,
        actor_id=current_user.id,
        activity_type="closed" if closed else "updated",
        entity_type="deal",
        entity_id=deal.id,
        description=f"{'Closed' if closed else 'Updated'} deal {deal.title}",
        details={"fields": sorted(update_data)},
    )
    db.commit()
    db.refresh(deal)
    return deal


@router.delete("/{deal_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_deal(
    deal_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_operation(Operation.DELETE_DEAL)),
):
    deal = get_or_404(db, Deal, deal_id, "Deal")
    db.delete(deal)
    log_activity(
        db,
        actor_id=principal.user_id,
        activity_type="deleted",
        entity_type="deal",
        entity_id=deal_id,
        description=f"Deleted deal {deal.title}",
    )
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
