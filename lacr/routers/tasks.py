"""
Tasks router - per-device to-do list.
"""

from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from lacr.db.session import get_db
from lacr.schemas.task import (
    Priority,
    TaskBulkRequest,
    TaskBulkResponse,
    TaskCreate,
    TaskDeleteResponse,
    TaskListResponse,
    TaskOut,
    TaskResponse,
    TaskUpdate,
)
from lacr.services.tasks import task_service

router = APIRouter(prefix="/tasks", tags=["tasks"])


def _tasks(tasks) -> TaskListResponse:
    return TaskListResponse(tasks=[TaskOut.model_validate(t) for t in tasks])


# ---------------------------------------------------------------------------
# LISTS
# ---------------------------------------------------------------------------

@router.get("/{device_id}", response_model=TaskListResponse)
def list_tasks(
    device_id: str,
    priority: Optional[Priority] = None,
    completed: Optional[bool] = None,
    db: Session = Depends(get_db),
):
    return _tasks(task_service.list_tasks(db, device_id, priority=priority, completed=completed))


@router.get("/{device_id}/completed", response_model=TaskListResponse)
def completed_tasks(device_id: str, db: Session = Depends(get_db)):
    return _tasks(task_service.list_tasks(db, device_id, completed=True))


@router.get("/{device_id}/pending", response_model=TaskListResponse)
def pending_tasks(device_id: str, db: Session = Depends(get_db)):
    return _tasks(task_service.list_tasks(db, device_id, completed=False))


@router.get("/{device_id}/overdue", response_model=TaskListResponse)
def overdue_tasks(device_id: str, db: Session = Depends(get_db)):
    """Pending tasks whose due date has passed, earliest first."""
    return _tasks(task_service.overdue(db, device_id))


@router.get("/{device_id}/priority/{priority}", response_model=TaskListResponse)
def tasks_by_priority(device_id: str, priority: Priority, db: Session = Depends(get_db)):
    return _tasks(task_service.list_tasks(db, device_id, priority=priority))


# ---------------------------------------------------------------------------
# SINGLE TASK
# ---------------------------------------------------------------------------

@router.post("/{device_id}", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
def create_task(device_id: str, payload: TaskCreate, db: Session = Depends(get_db)):
    task = task_service.create(db, device_id, payload)
    return TaskResponse(task=TaskOut.model_validate(task))


@router.post("/{device_id}/bulk", response_model=TaskBulkResponse)
def bulk_update(device_id: str, payload: TaskBulkRequest, db: Session = Depends(get_db)):
    """
    Apply complete / uncomplete / delete to several tasks at once.

    Ids that do not belong to this device are reported in not_found_ids
    instead of failing the whole request.
    """
    updated, not_found = task_service.bulk(db, device_id, payload.action, payload.task_ids)
    processed = len(payload.task_ids) - len(not_found)
    return TaskBulkResponse(
        message=f"Bulk {payload.action} applied to {processed} tasks",
        updated_tasks=[TaskOut.model_validate(t) for t in updated],
        not_found_ids=not_found,
    )


@router.put("/{device_id}/{task_id}", response_model=TaskResponse)
def update_task(device_id: str, task_id: int, payload: TaskUpdate, db: Session = Depends(get_db)):
    task = task_service.update(db, device_id, task_id, payload)
    return TaskResponse(task=TaskOut.model_validate(task))


@router.delete("/{device_id}/{task_id}", response_model=TaskDeleteResponse)
def delete_task(device_id: str, task_id: int, db: Session = Depends(get_db)):
    task = task_service.delete(db, device_id, task_id)
    return TaskDeleteResponse(task=TaskOut.model_validate(task))


@router.patch("/{device_id}/{task_id}/toggle", response_model=TaskResponse)
def toggle_task(device_id: str, task_id: int, db: Session = Depends(get_db)):
    task = task_service.toggle(db, device_id, task_id)
    return TaskResponse(task=TaskOut.model_validate(task))
