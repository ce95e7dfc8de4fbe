from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from todo_api.database import get_db
from todo_api.services.reminders import process_due_reminders
from todo_api.utils.mail import Mailer, get_mailer

router = APIRouter(prefix="/api/reminders", tags=["reminders"])


@router.get("/check")
def check_reminders(db: Session = Depends(get_db), mailer: Mailer = Depends(get_mailer)):
    """Fire every due reminder. Meant to be hit by an external cron."""
    result = process_due_reminders(db, mailer)
    if not result.selected:
        return {"ok": True, "message": "No reminders due", "sent": 0}
    return {"ok": True, "sent": result.selected, "delivered": result.delivered}
