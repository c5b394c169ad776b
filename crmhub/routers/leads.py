# crmhub/routers/leads.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from crmhub.database import get_db
from crmhub.models.crm import Lead, Stage
from crmhub.models.user import User
from crmhub.schemas.crm import LeadCreate, LeadOut, LeadUpdate
from crmhub.services.activity import log_activity
from crmhub.services.policy import Operation, Principal
from crmhub.services.users import ensure_user_exists
from crmhub.utils.auth import get_current_user, require_operation
from crmhub.utils.lookups import get_or_404, reject_nulls

router = APIRouter(prefix="/leads", tags=["leads"])


@router.get("", response_model=List[LeadOut])
def list_leads(
    stage: Optional[Stage] = None,
    assigned_to: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = db.query(Lead)
    if stage:
        query = query.filter(Lead.stage == stage.value)
    if assigned_to is not None:
        query = query.filter(Lead.assigned_to == assigned_to)
    return query.order_by(Lead.created_at.desc()).all()


@router.post("", response_model=LeadOut, status_code=status.HTTP_201_CREATED)
def create_lead(
    payload: LeadCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if payload.assigned_to is not None:
        ensure_user_exists(db, payload.assigned_to)

    lead = Lead(**payload.model_dump())
    db.add(lead)
    db.flush()

    log_activity(
        db,
        actor_id=current_user.id,
        activity_type="created",
        entity_type="lead",
        entity_id=lead.id,
        target_user_id=lead.assigned_to,
        description=f"Added lead {lead.name} ({lead.company})",
    )
    db.commit()
    db.refresh(lead)
    return lead


@router.get("/{lead_id}", response_model=LeadOut)
def get_lead(
    lead_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return get_or_404(db, Lead, lead_id, "Lead")


@router.patch("/{lead_id}", response_model=LeadOut)
def update_lead(
    lead_id: int,
    payload: LeadUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    lead = get_or_404(db, Lead, lead_id, "Lead")
    update_data = reject_nulls(payload.model_dump(exclude_unset=True), "name", "company", "email", "stage")
    if update_data.get("assigned_to") is not None:
        ensure_user_exists(db, update_data["assigned_to"])

    previous_stage = lead.stage
    for key, value in update_data.items():
        setattr(lead, key, value)

    details = {"fields": sorted(update_data)}
    if "stage" in update_data and update_data["stage"] != previous_stage:
        details["stage"] = {"from": previous_stage, "to": Stage(update_data["stage"]).value}
    log_activity(
        db,
        actor_id=current_user.id,
        activity_type="updated",
        entity_type="lead",
        entity_id=lead.id,
        description=f"Updated lead {lead.name}",
        details=details,
    )
    db.commit()
    db.refresh(lead)
    return lead


@router.delete("/{lead_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_lead(
    lead_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_operation(Operation.DELETE_LEAD)),
):
    lead = get_or_404(db, Lead, lead_id, "Lead")
    db.delete(lead)
    log_activity(
        db,
        actor_id=principal.user_id,
        activity_type="deleted",
        entity_type="lead",
        entity_id=lead_id,
        description=f"Deleted lead {lead.name}",
    )
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
