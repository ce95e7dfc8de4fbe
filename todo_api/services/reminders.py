"""Reminder sweep.

Selects tasks whose reminder time has arrived, mails the owner and clears
``reminder_at``. A reminder counts as fired once selected, whether or not the
mail went out, so a second sweep never picks it up again. The sweep is run
by an outside trigger (``GET /api/reminders/check`` or
``tools/check_reminders.py``); nothing here schedules itself.
"""
import logging
from datetime import datetime
from typing import List, NamedTuple, Optional

from sqlalchemy.orm import Session

from todo_api.models.task import Task
from todo_api.models.user import User
from todo_api.utils.dates import humanize, utcnow
from todo_api.utils.mail import Mailer

logger = logging.getLogger(__name__)

SUBJECT = "Task Reminder"


class SweepResult(NamedTuple):
    selected: int
    delivered: int


class DueReminder(NamedTuple):
    task_id: int
    text: str
    due_date: Optional[datetime]
    reminder_at: datetime
    email: str


def due_reminders(db: Session, now: datetime) -> List[DueReminder]:
    rows = (
        db.query(Task.id, Task.text, Task.due_date, Task.reminder_at, User.email)
        .join(User, Task.user_id == User.id)
        .filter(
            Task.reminder_at.isnot(None),
            Task.completed.is_(False),
            Task.reminder_at <= now,
        )
        .order_by(Task.reminder_at.asc(), Task.id.asc())
        .all()
    )
    return [DueReminder(*row) for row in rows]


def reminder_body(due: DueReminder) -> str:
    when = humanize(due.due_date) if due.due_date else humanize(due.reminder_at)
    return f'Reminder: "{due.text}" is due at {when}\n\n-- Your To-Do App'


def process_due_reminders(db: Session, mailer: Mailer, now: Optional[datetime] = None) -> SweepResult:
    now = now or utcnow()
    reminders = due_reminders(db, now)
    if not reminders:
        return SweepResult(0, 0)

    logger.info("%d reminder(s) triggered", len(reminders))
    delivered = 0
    for due in reminders:
        try:
            if mailer.send(due.email, SUBJECT, reminder_body(due)):
                delivered += 1
        except Exception:
            logger.exception("Failed to send reminder for task %s to %s", due.task_id, due.email)
        # a task deleted since selection matches nothing here
        db.query(Task).filter(Task.id == due.task_id).update({"reminder_at": None}, synchronize_session=False)
        db.commit()
    return SweepResult(len(reminders), delivered)
