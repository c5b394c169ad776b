# crmhub/routers/tasks.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from crmhub.core.exceptions import Forbidden
from crmhub.database import get_db
from crmhub.models.task import Task, TaskStatus
from crmhub.models.user import User
from crmhub.schemas.task import TaskCreate, TaskOut, TaskUpdate, sync_completion
from crmhub.services.activity import log_activity
from crmhub.services.policy import Operation, Principal, can_update_task
from crmhub.services.users import ensure_user_exists
from crmhub.utils.auth import get_current_user, get_principal, require_operation
from crmhub.utils.lookups import get_or_404, reject_nulls

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.get("", response_model=List[TaskOut])
def list_tasks(
    status_filter: Optional[TaskStatus] = Query(None, alias="status"),
    assigned_to: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = db.query(Task)
    if status_filter:
        query = query.filter(Task.status == status_filter.value)
    if assigned_to is not None:
        query = query.filter(Task.assigned_to == assigned_to)
    return query.order_by(Task.created_at.desc()).all()


@router.post("", response_model=TaskOut, status_code=status.HTTP_201_CREATED)
def create_task(
    payload: TaskCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if payload.assigned_to is not None:
        ensure_user_exists(db, payload.assigned_to)

    data = payload.model_dump()
    if data["status"] == TaskStatus.DONE:
        data["completed"] = True
    elif data["completed"]:
        data["status"] = TaskStatus.DONE

    task = Task(**data)
    db.add(task)
    db.flush()

    log_activity(
        db,
        actor_id=current_user.id,
        activity_type="created",
        entity_type="task",
        entity_id=task.id,
        target_user_id=task.assigned_to if task.assigned_to != current_user.id else None,
        description=f"Created task '{task.title}'",
    )
    db.commit()
    db.refresh(task)
    return task


@router.get("/{task_id}", response_model=TaskOut)
def get_task(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return get_or_404(db, Task, task_id, "Task")


@router.patch("/{task_id}", response_model=TaskOut)
def update_task(
    task_id: int,
    payload: TaskUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    task = get_or_404(db, Task, task_id, "Task")
    if not can_update_task(principal, task.assigned_to):
        raise Forbidden("You can only update tasks assigned to you")

    update_data = reject_nulls(
        payload.model_dump(exclude_unset=True), "title", "priority", "status", "completed"
    )
    if update_data.get("assigned_to") is not None:
        ensure_user_exists(db, update_data["assigned_to"])
    sync_completion(update_data)

    for key, value in update_data.items():
        setattr(task, key, value)

    log_activity(
        db,
        actor_id=principal.user_id,
        activity_type="completed" if update_data.get("completed") else "updated",
        entity_type="task",
        entity_id=task.id,
        description=f"{'Completed' if update_data.get('completed') else 'Updated'} task '{task.title}'",
        details={"fields": sorted(update_data)},
    )
    db.commit()
    db.refresh(task)
    return task


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(
    task_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_operation(Operation.DELETE_TASK)),
):
    task = get_or_404(db, Task, task_id, "Task")
    db.delete(task)
    log_activity(
        db,
        actor_id=principal.user_id,
        activity_type="deleted",
        entity_type="task",
        entity_id=task_id,
        description=f"Deleted task '{task.title}'",
    )
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
