"""Filtering and ordering of a user's task list.

Every ordering ends with ``id DESC`` so no two rows ever compare equal and
the same inputs always produce the same sequence. Tasks without a due date
are treated as infinitely late: they follow every dated task and are never
interleaved with them.
"""
from typing import List, Optional

from sqlalchemy import case, or_
from sqlalchemy.orm import Query, Session

from todo_api.models.task import Task

FILTERS = ("all", "active", "completed")
SORTS = ("due", "created", "priority")

PRIORITY_RANK = case({"high": 0, "medium": 1}, value=Task.priority, else_=2)
NO_DUE_LAST = case((Task.due_date.is_(None), 1), else_=0)


def order_keys(sort: str = "due", order: str = "desc", completed_last: bool = True) -> list:
    """Return the ORDER BY clauses for a sort choice.

    ``order`` only matters for ``sort="created"``; only ``"asc"`` selects
    ascending. Unknown sorts fall back to ``"due"``.
    """
    sort = (sort or "due").lower()
    keys = []
    if completed_last:
        keys.append(Task.completed.asc())

    if sort == "priority":
        keys += [PRIORITY_RANK.asc(), NO_DUE_LAST.asc(), Task.due_date.asc()]
    elif sort == "created":
        keys.append(Task.created_at.asc() if order == "asc" else Task.created_at.desc())
    else:
        keys += [NO_DUE_LAST.asc(), Task.due_date.asc()]

    keys.append(Task.id.desc())
    return keys


def task_query(
    db: Session,
    user_id: int,
    filter: str = "all",
    q: Optional[str] = None,
    category: Optional[str] = None,
) -> Query:
    query = db.query(Task).filter(Task.user_id == user_id)
    if filter == "active":
        query = query.filter(Task.completed.is_(False))
    elif filter == "completed":
        query = query.filter(Task.completed.is_(True))
    if q and q.strip():
        like = f"%{q.strip()}%"
        query = query.filter(or_(Task.text.ilike(like), Task.description.ilike(like), Task.category.ilike(like)))
    if category:
        query = query.filter(Task.category == category)
    return query


def list_tasks(
    db: Session,
    user_id: int,
    filter: str = "all",
    sort: str = "due",
    order: str = "desc",
    completed_last: bool = True,
    q: Optional[str] = None,
    category: Optional[str] = None,
) -> List[Task]:
    query = task_query(db, user_id, filter=filter, q=q, category=category)
    return query.order_by(*order_keys(sort, order, completed_last)).all()


def distinct_categories(db: Session, user_id: int) -> List[str]:
    rows = (
        db.query(Task.category)
        .filter(Task.user_id == user_id)
        .distinct()
        .order_by(Task.category)
        .all()
    )
    return [r[0] for r in rows]
