from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from todo_api.schemas.task import TaskCreate, TaskDetail, TaskOut, TaskUpdate
from todo_api.models.task import Task
from todo_api.models.user import User
from todo_api.database import get_db
from todo_api.services.query import list_tasks as compose_task_list, distinct_categories
from todo_api.services.tasks import delete_user_tasks, get_owned_task
from todo_api.utils.auth import get_current_user

router = APIRouter(prefix="/api/todos", tags=["todos"])

# Explicit null clears these; for every other field null means "leave as is".
NULLABLE_FIELDS = ("due_date", "description", "reminder_at")


def _owned_or_404(db: Session, user: User, task_id: int) -> Task:
    task = get_owned_task(db, user.id, task_id)
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    return task


@router.get("", response_model=List[TaskOut])
def list_tasks(
    filter: str = Query("all", description="all | active | completed"),
    sort: str = Query("due", description="due | created | priority"),
    order: str = Query("desc", description="asc | desc, only used with sort=created"),
    completed_last: Optional[str] = Query(None, alias="completedLast", description="'0' disables grouping"),
    q: Optional[str] = Query(None, description="Search text, description and category"),
    category: Optional[str] = None,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Return the user's tasks, filtered and ordered.

    Completed tasks are grouped after open ones unless completedLast=0.
    Tasks without a due date always come after dated ones.
    """
    return compose_task_list(
        db,
        user.id,
        filter=filter,
        sort=sort,
        order=order,
        completed_last=completed_last != "0",
        q=q,
        category=category,
    )


@router.get("/categories", response_model=List[str])
def categories(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return distinct_categories(db, user.id)


@router.post("", response_model=TaskOut, status_code=201)
def create_task(task: TaskCreate, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    new = Task(user_id=user.id, completed=False, **task.dict())
    db.add(new)
    db.commit()
    db.refresh(new)
    return new


@router.delete("")
def delete_tasks(
    scope: str = Query("all", description="all | completed"),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    if scope not in ("all", "completed"):
        raise HTTPException(status_code=400, detail="scope must be 'all' or 'completed'")
    try:
        deleted = delete_user_tasks(db, user.id, completed_only=(scope == "completed"))
        db.commit()
    except Exception:
        db.rollback()
        raise
    return {"ok": True, "deleted": deleted}


@router.get("/{task_id}", response_model=TaskDetail)
def get_task(task_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return _owned_or_404(db, user, task_id)


@router.put("/{task_id}", response_model=TaskOut)
def update_task(task_id: int, changes: TaskUpdate, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    task = _owned_or_404(db, user, task_id)
    for field, value in changes.dict(exclude_unset=True).items():
        if value is None and field not in NULLABLE_FIELDS:
            continue
        if field == "category":
            value = value.strip() or task.category
        setattr(task, field, value)
    db.commit()
    db.refresh(task)
    return task


@router.patch("/{task_id}/toggle", response_model=TaskOut)
def toggle_task(task_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    task = _owned_or_404(db, user, task_id)
    task.completed = not task.completed
    db.commit()
    db.refresh(task)
    return task


@router.delete("/{task_id}")
def delete_task(task_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    task = _owned_or_404(db, user, task_id)
    db.delete(task)
    db.commit()
    return {"ok": True}
