from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from todo_api.models.subtask import Subtask
from todo_api.models.task import Task


def get_owned_task(db: Session, user_id: int, task_id: int) -> Optional[Task]:
    return db.query(Task).filter(Task.id == task_id, Task.user_id == user_id).first()


def get_owned_subtask(db: Session, user_id: int, subtask_id: int) -> Optional[Subtask]:
    return (
        db.query(Subtask)
        .join(Task, Subtask.todo_id == Task.id)
        .filter(Subtask.id == subtask_id, Task.user_id == user_id)
        .first()
    )


def delete_user_tasks(db: Session, user_id: int, completed_only: bool = False) -> int:
    """Delete a user's tasks (all, or only completed ones) and their subtasks.

    Subtasks go first so the result is the same on stores without native
    cascading. Does not commit; the caller owns the transaction.
    """
    conditions = [Task.user_id == user_id]
    if completed_only:
        conditions.append(Task.completed.is_(True))

    owned = select(Task.id).where(*conditions)
    db.query(Subtask).filter(Subtask.todo_id.in_(owned)).delete(synchronize_session=False)
    deleted = db.query(Task).filter(*conditions).delete(synchronize_session=False)
    db.expire_all()
    return deleted
