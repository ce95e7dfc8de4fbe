"""Backup export and import.

The backup document is the JSON envelope::

    {"schema": "todo-backup.v1", "exported_at": ..., "user": {"id", "email"},
     "todos": [{..., "subtasks": [...]}, ...]}

Import validates the whole document before touching the database and then
applies it in a single transaction, so a rejected or failed import leaves the
user's tasks exactly as they were.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from todo_api.models.subtask import Subtask
from todo_api.models.task import DEFAULT_CATEGORY, DEFAULT_PRIORITY, PRIORITIES, Task
from todo_api.models.user import User
from todo_api.services.tasks import delete_user_tasks
from todo_api.utils.dates import parse_timestamp, utcnow

logger = logging.getLogger(__name__)

SCHEMA = "todo-backup.v1"
MODES = ("merge", "replace")
TASK_TIMESTAMPS = ("created_at", "due_date", "reminder_at")


class BackupValidationError(ValueError):
    """The document was rejected before any change was made."""


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _subtask_dict(s: Subtask) -> Dict[str, Any]:
    return {
        "id": s.id,
        "todo_id": s.todo_id,
        "title": s.title,
        "completed": bool(s.completed),
        "created_at": _iso(s.created_at),
    }


def _task_dict(t: Task) -> Dict[str, Any]:
    return {
        "id": t.id,
        "text": t.text,
        "completed": bool(t.completed),
        "created_at": _iso(t.created_at),
        "due_date": _iso(t.due_date),
        "priority": t.priority,
        "category": t.category,
        "description": t.description,
        "reminder_at": _iso(t.reminder_at),
        "subtasks": [],
    }


def export_backup(db: Session, user: User, now: Optional[datetime] = None) -> Dict[str, Any]:
    tasks = db.query(Task).filter(Task.user_id == user.id).order_by(Task.id.asc()).all()
    by_task = {t.id: _task_dict(t) for t in tasks}

    if by_task:
        subtasks = (
            db.query(Subtask)
            .filter(Subtask.todo_id.in_(list(by_task)))
            .order_by(Subtask.todo_id.asc(), Subtask.id.asc())
            .all()
        )
        for s in subtasks:
            by_task[s.todo_id]["subtasks"].append(_subtask_dict(s))

    return {
        "schema": SCHEMA,
        "exported_at": (now or utcnow()).isoformat() + "Z",
        "user": {"id": user.id, "email": user.email},
        "todos": [by_task[t.id] for t in tasks],
    }


def normalize_mode(mode: Any) -> str:
    if mode is None or mode == "":
        return "merge"
    if not isinstance(mode, str) or mode.lower() not in MODES:
        raise BackupValidationError("mode must be 'merge' or 'replace'")
    return mode.lower()


def _check_timestamp(value: Any, where: str) -> None:
    try:
        parse_timestamp(value)
    except (TypeError, ValueError):
        raise BackupValidationError(f"{where} is not a valid timestamp")


def validate_backup_todos(todos: Any) -> List[Dict[str, Any]]:
    """Check every incoming task and return them as a list.

    Raises BackupValidationError naming the first violation. Subtasks with an
    empty title are not errors; import skips them.
    """
    if todos is None:
        return []
    if not isinstance(todos, list):
        raise BackupValidationError("todos must be an array")

    for i, t in enumerate(todos):
        where = f"todos[{i}]"
        if not isinstance(t, dict):
            raise BackupValidationError(f"{where}: invalid todo object")
        text = t.get("text")
        if not isinstance(text, str) or not text.strip():
            raise BackupValidationError(f"{where}.text is required")
        if t.get("priority") and t["priority"] not in PRIORITIES:
            raise BackupValidationError(f"{where}.priority must be one of: low, medium, high")
        for field in ("category", "description"):
            if t.get(field) is not None and not isinstance(t[field], str):
                raise BackupValidationError(f"{where}.{field} must be a string")
        for field in TASK_TIMESTAMPS:
            _check_timestamp(t.get(field), f"{where}.{field}")

        subtasks = t.get("subtasks")
        if subtasks is None:
            continue
        if not isinstance(subtasks, list):
            raise BackupValidationError(f"{where}.subtasks must be an array if provided")
        for j, s in enumerate(subtasks):
            if isinstance(s, dict):
                _check_timestamp(s.get("created_at"), f"{where}.subtasks[{j}].created_at")
    return todos


def _subtask_title(s: Any) -> str:
    if not isinstance(s, dict) or not isinstance(s.get("title"), str):
        return ""
    return s["title"].strip()


def import_backup(db: Session, user: User, todos: Any, mode: Any = "merge") -> Dict[str, Any]:
    """Apply a backup document's todos to ``user``.

    ``merge`` appends every incoming task; nothing is deduplicated, so the
    same document imported twice yields two copies. ``replace`` deletes the
    user's tasks and subtasks first. Either way the whole import commits or
    rolls back as one transaction.
    """
    mode = normalize_mode(mode)
    todos = validate_backup_todos(todos)
    now = utcnow()
    imported_todos = 0
    imported_subtasks = 0

    try:
        if mode == "replace":
            removed = delete_user_tasks(db, user.id)
            logger.info("Replace import for user %s removed %d task(s)", user.id, removed)

        for t in todos:
            task = Task(
                user_id=user.id,
                text=t["text"].strip(),
                completed=bool(t.get("completed")),
                created_at=parse_timestamp(t.get("created_at")) or now,
                due_date=parse_timestamp(t.get("due_date")),
                priority=t.get("priority") or DEFAULT_PRIORITY,
                category=t.get("category") or DEFAULT_CATEGORY,
                description=t.get("description", ""),
                reminder_at=parse_timestamp(t.get("reminder_at")),
            )
            db.add(task)
            db.flush()
            imported_todos += 1

            for s in t.get("subtasks") or []:
                title = _subtask_title(s)
                if not title:
                    continue
                db.add(
                    Subtask(
                        todo_id=task.id,
                        title=title,
                        completed=bool(s.get("completed")),
                        created_at=parse_timestamp(s.get("created_at")) or now,
                    )
                )
                imported_subtasks += 1

        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(
        "Imported %d task(s) and %d subtask(s) for user %s (mode=%s)",
        imported_todos, imported_subtasks, user.id, mode,
    )
    return {"mode": mode, "imported_todos": imported_todos, "imported_subtasks": imported_subtasks}
