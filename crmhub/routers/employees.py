# crmhub/routers/employees.py
from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session, joinedload

from crmhub.core.exceptions import Conflict
from crmhub.database import get_db
from crmhub.models.employee import Employee
from crmhub.models.user import User
from crmhub.schemas.employee import EmployeeCreate, EmployeeOut, EmployeeUpdate
from crmhub.services.activity import log_activity
from crmhub.services.policy import Operation, Principal
from crmhub.services.users import ensure_user_exists
from crmhub.utils.auth import get_current_user, require_operation
from crmhub.utils.lookups import get_or_404, reject_nulls

router = APIRouter(prefix="/employees", tags=["employees"])


@router.get("", response_model=List[EmployeeOut])
def list_employees(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return (
        db.query(Employee)
        .options(joinedload(Employee.user))
        .order_by(Employee.created_at.desc())
        .all()
    )


@router.post("", response_model=EmployeeOut, status_code=status.HTTP_201_CREATED)
def create_employee(
    payload: EmployeeCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_operation(Operation.CREATE_EMPLOYEE)),
):
    user = ensure_user_exists(db, payload.user_id)
    if db.query(Employee.id).filter(Employee.user_id == payload.user_id).first():
        raise Conflict("An employee record already exists for this user")

    employee = Employee(**payload.model_dump())
    db.add(employee)
    db.flush()

    log_activity(
        db,
        actor_id=principal.user_id,
        activity_type="created",
        entity_type="employee",
        entity_id=employee.id,
        target_user_id=user.id,
        description=f"Added {user.name} to {employee.department}",
    )
    db.commit()
    db.refresh(employee)
    return employee


@router.get("/{employee_id}", response_model=EmployeeOut)
def get_employee(
    employee_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return get_or_404(db, Employee, employee_id, "Employee")


@router.patch("/{employee_id}", response_model=EmployeeOut)
def update_employee(
    employee_id: int,
    payload: EmployeeUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_operation(Operation.UPDATE_EMPLOYEE)),
):
    employee = get_or_404(db, Employee, employee_id, "Employee")
    update_data = reject_nulls(payload.model_dump(exclude_unset=True), "department", "performance_score")

    for key, value in update_data.items():
        setattr(employee, key, value)

    log_activity(
        db,
        actor_id=principal.user_id,
        activity_type="updated",
        entity_type="employee",
        entity_id=employee.id,
        target_user_id=employee.user_id,
        description="Updated employee record",
        details={"fields": sorted(update_data)},
    )
    db.commit()
    db.refresh(employee)
    return employee


@router.delete("/{employee_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_employee(
    employee_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_operation(Operation.DELETE_EMPLOYEE)),
):
    employee = get_or_404(db, Employee, employee_id, "Employee")
    target_user_id = employee.user_id
    db.delete(employee)
    log_activity(
        db,
        actor_id=principal.user_id,
        activity_type="deleted",
        entity_type="employee",
        entity_id=employee_id,
        target_user_id=target_user_id,
        description="Removed employee record",
    )
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
