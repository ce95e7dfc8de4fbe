from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List
from todo_api.schemas.task import SubtaskCreate, SubtaskOut, SubtaskUpdate
from todo_api.models.subtask import Subtask
from todo_api.models.user import User
from todo_api.database import get_db
from todo_api.services.tasks import get_owned_subtask, get_owned_task
from todo_api.utils.auth import get_current_user

router = APIRouter(prefix="/api", tags=["subtasks"])


def _parent_or_404(db: Session, user: User, todo_id: int):
    parent = get_owned_task(db, user.id, todo_id)
    if not parent:
        raise HTTPException(status_code=404, detail="Parent task not found")
    return parent


def _subtask_or_404(db: Session, user: User, subtask_id: int) -> Subtask:
    sub = get_owned_subtask(db, user.id, subtask_id)
    if not sub:
        raise HTTPException(status_code=404, detail="Subtask not found")
    return sub


@router.get("/todos/{todo_id}/subtasks", response_model=List[SubtaskOut])
def list_subtasks(todo_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    _parent_or_404(db, user, todo_id)
    return (
        db.query(Subtask)
        .filter(Subtask.todo_id == todo_id)
        .order_by(Subtask.completed.asc(), Subtask.id.asc())
        .all()
    )


@router.post("/todos/{todo_id}/subtasks", response_model=SubtaskOut, status_code=201)
def create_subtask(todo_id: int, body: SubtaskCreate, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    _parent_or_404(db, user, todo_id)
    sub = Subtask(todo_id=todo_id, title=body.title, completed=False)
    db.add(sub)
    db.commit()
    db.refresh(sub)
    return sub


@router.patch("/subtasks/{subtask_id}", response_model=SubtaskOut)
def update_subtask(subtask_id: int, body: SubtaskUpdate, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    sub = _subtask_or_404(db, user, subtask_id)
    if body.title is not None:
        sub.title = body.title
    if body.completed is not None:
        sub.completed = body.completed
    db.commit()
    db.refresh(sub)
    return sub


@router.delete("/subtasks/{subtask_id}")
def delete_subtask(subtask_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    sub = _subtask_or_404(db, user, subtask_id)
    db.delete(sub)
    db.commit()
    return {"ok": True}
