"""
Task service - per-device to-do list backed by the tasks table.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from lacr.core.clock import as_utc, utcnow
from lacr.core.errors import NotFound, ValidationError
from lacr.models.task import Task
from lacr.schemas.task import TaskCreate, TaskUpdate

logger = logging.getLogger("lacr.services.tasks")


class TaskService:

    def _query(self, db: Session, device_id: str):
        return db.query(Task).filter(Task.device_id == device_id)

    def list_tasks(
        self,
        db: Session,
        device_id: str,
        priority: Optional[str] = None,
        completed: Optional[bool] = None,
    ) -> list[Task]:
        query = self._query(db, device_id)
        if priority is not None:
            query = query.filter(Task.priority == priority)
        if completed is not None:
            query = query.filter(Task.completed.is_(completed))
        return query.order_by(Task.created_at, Task.id).all()

    def overdue(self, db: Session, device_id: str) -> list[Task]:
        now = utcnow()
        pending = self._query(db, device_id).filter(
            Task.completed.is_(False),
            Task.due_date.is_not(None),
        ).order_by(Task.due_date).all()
        return [task for task in pending if as_utc(task.due_date) < now]

    def get_or_404(self, db: Session, device_id: str, task_id: int) -> Task:
        task = self._query(db, device_id).filter(Task.id == task_id).first()
        if task is None:
            raise NotFound("Task not found")
        return task

    def create(self, db: Session, device_id: str, payload: TaskCreate) -> Task:
        if not payload.title or not payload.title.strip():
            raise ValidationError("Task title is required")
        task = Task(
            device_id=device_id,
            title=payload.title.strip(),
            description=payload.description,
            priority=payload.priority,
            due_date=payload.due_date,
            completed=False,
        )
        db.add(task)
        db.commit()
        db.refresh(task)
        return task

    def update(self, db: Session, device_id: str, task_id: int, payload: TaskUpdate) -> Task:
        task = self.get_or_404(db, device_id, task_id)
        for field, value in payload.model_dump(exclude_unset=True).items():
            if value is None and field != "due_date":
                continue
            setattr(task, field, value)
        db.commit()
        db.refresh(task)
        return task

    def delete(self, db: Session, device_id: str, task_id: int) -> Task:
        task = self.get_or_404(db, device_id, task_id)
        db.delete(task)
        db.commit()
        return task

    def toggle(self, db: Session, device_id: str, task_id: int) -> Task:
        task = self.get_or_404(db, device_id, task_id)
        task.completed = not task.completed
        db.commit()
        db.refresh(task)
        return task

    def bulk(self, db: Session, device_id: str, action: str, task_ids: list[int]) -> tuple[list[Task], list[int]]:
        """Apply `action` to each id; returns (updated tasks, ids not found on this device)."""
        tasks = self._query(db, device_id).filter(Task.id.in_(task_ids)).all()
        found = {task.id: task for task in tasks}
        not_found = [task_id for task_id in task_ids if task_id not in found]

        updated: list[Task] = []
        for task in found.values():
            if action == "delete":
                db.delete(task)
            else:
                task.completed = action == "complete"
                updated.append(task)
        db.commit()
        for task in updated:
            db.refresh(task)

        logger.info(f"Bulk {action} on device {device_id}: {len(found)} tasks, {len(not_found)} missing")
        return updated, not_found


# Global instance
task_service = TaskService()
