"""Run one reminder sweep. Point a crontab entry at this, e.g. every minute:

    * * * * * cd /srv/todo-api && python tools/check_reminders.py
"""
import logging
import sys
from pathlib import Path

# ensure project root is on sys.path
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from todo_api import config
from todo_api.database import SessionLocal, engine
from todo_api.logging_setup import setup_logging
from todo_api.migrations import run_migrations
from todo_api.services.reminders import process_due_reminders
from todo_api.utils.mail import Mailer

setup_logging(config.LOG_LEVEL, config.LOG_FILE)
run_migrations(engine)

db = SessionLocal()
try:
    result = process_due_reminders(db, Mailer.from_config())
finally:
    db.close()
logging.getLogger("check_reminders").info("selected=%d delivered=%d", result.selected, result.delivered)
