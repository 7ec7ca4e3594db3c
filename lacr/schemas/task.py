"""
Task schemas - per-device to-do items.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

Priority = Literal["low", "medium", "high"]


class TaskCreate(BaseModel):
    # Optional here so a missing title gets the service's message
    title: Optional[str] = Field(None, max_length=200)
    description: str = Field("", max_length=2000)
    priority: Priority = "medium"
    due_date: Optional[datetime] = None


class TaskUpdate(BaseModel):
    """All fields optional; due_date may be sent as null to clear it."""
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    completed: Optional[bool] = None
    priority: Optional[Priority] = None
    due_date: Optional[datetime] = None


class TaskBulkRequest(BaseModel):
    action: Literal["complete", "uncomplete", "delete"]
    task_ids: list[int] = Field(..., min_length=1)


class TaskOut(BaseModel):
    id: int
    device_id: str
    title: str
    description: str
    completed: bool
    priority: str
    due_date: Optional[datetime]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TaskResponse(BaseModel):
    success: bool = True
    task: TaskOut


class TaskListResponse(BaseModel):
    success: bool = True
    tasks: list[TaskOut]


class TaskDeleteResponse(BaseModel):
    success: bool = True
    message: str = "Task deleted successfully"
    task: TaskOut


class TaskBulkResponse(BaseModel):
    success: bool = True
    message: str
    updated_tasks: list[TaskOut]
    not_found_ids: list[int]
