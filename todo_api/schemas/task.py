from datetime import datetime
from pydantic import BaseModel, validator
from typing import List, Optional

from todo_api.models.task import DEFAULT_CATEGORY, DEFAULT_PRIORITY, PRIORITIES
from todo_api.utils.dates import parse_timestamp


def _check_priority(v):
    if v is not None and v not in PRIORITIES:
        raise ValueError("priority must be one of: low, medium, high")
    return v


class TaskCreate(BaseModel):
    text: str
    due_date: Optional[datetime] = None
    priority: str = DEFAULT_PRIORITY
    category: Optional[str] = DEFAULT_CATEGORY
    description: Optional[str] = ""
    reminder_at: Optional[datetime] = None

    @validator("text")
    def text_not_empty(cls, v):
        if not v.strip():
            raise ValueError("text cannot be empty")
        return v.strip()

    @validator("priority")
    def priority_known(cls, v):
        return _check_priority(v)

    @validator("category", pre=True)
    def category_default(cls, v):
        if v is None:
            return DEFAULT_CATEGORY
        if isinstance(v, str):
            return v.strip() or DEFAULT_CATEGORY
        return v

    @validator("due_date", "reminder_at", pre=True)
    def parse_dates(cls, v):
        return parse_timestamp(v)


class TaskUpdate(BaseModel):
    """Partial update. Omitted fields are left alone; an explicit null clears
    due_date, description and reminder_at and is ignored elsewhere."""

    text: Optional[str] = None
    completed: Optional[bool] = None
    due_date: Optional[datetime] = None
    priority: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    reminder_at: Optional[datetime] = None

    @validator("text")
    def text_not_empty(cls, v):
        if v is None:
            return v
        if not v.strip():
            raise ValueError("text cannot be empty")
        return v.strip()

    @validator("priority")
    def priority_known(cls, v):
        return _check_priority(v)

    @validator("due_date", "reminder_at", pre=True)
    def parse_dates(cls, v):
        return parse_timestamp(v)


class SubtaskCreate(BaseModel):
    title: str

    @validator("title")
    def title_not_empty(cls, v):
        if not v.strip():
            raise ValueError("title cannot be empty")
        return v.strip()


class SubtaskUpdate(BaseModel):
    title: Optional[str] = None
    completed: Optional[bool] = None

    @validator("title")
    def title_not_empty(cls, v):
        if v is None:
            return v
        if not v.strip():
            raise ValueError("title cannot be empty")
        return v.strip()


class SubtaskOut(BaseModel):
    id: int
    todo_id: int
    title: str
    completed: bool
    created_at: datetime

    class Config:
        orm_mode = True


class TaskOut(BaseModel):
    id: int
    text: str
    completed: bool
    created_at: datetime
    due_date: Optional[datetime] = None
    priority: str
    category: str
    description: Optional[str] = None
    reminder_at: Optional[datetime] = None

    class Config:
        orm_mode = True


class TaskDetail(TaskOut):
    subtasks: List[SubtaskOut] = []
