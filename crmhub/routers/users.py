# crmhub/routers/users.py
from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from crmhub.database import get_db
from crmhub.models.user import User
from crmhub.schemas.user import AdminUserUpdate, UserOut
from crmhub.services import users as user_service
from crmhub.services.policy import Operation, Principal
from crmhub.utils.auth import get_current_user, require_operation

router = APIRouter(tags=["users"])


@router.get("/users", response_model=List[UserOut])
def get_all_users(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Every user, so the client can show names next to assignments"""
    return user_service.list_users(db)


@router.get("/admin/users", response_model=List[UserOut])
def admin_list_users(
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_operation(Operation.VIEW_ADMIN_USERS)),
):
    return user_service.list_users(db)


@router.patch("/admin/users/{user_id}", response_model=UserOut)
def admin_update_user(
    user_id: int,
    payload: AdminUserUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_operation(Operation.UPDATE_USER)),
):
    return user_service.update_user(db, user_id, payload.model_dump(exclude_unset=True), principal)


@router.delete("/admin/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def admin_delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_operation(Operation.DELETE_USER)),
):
    user_service.delete_user(db, user_id, principal)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
