import json
import sys
from pathlib import Path

# ensure project root is on sys.path
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from fastapi.testclient import TestClient
from todo_api.main import app
from todo_api.client import ApiError, AuthContext, TodoClient

auth = AuthContext()
auth.on_session_expired(lambda: print("session expired"))
api = TodoClient(TestClient(app), auth)

email = "quick_test_user@example.com"
password = "correct_horse_battery_staple"
try:
    api.register(email, password)
except ApiError:
    api.login(email, password)

todo = api.create_todo("Pay rent", due_date="2024-01-05", priority="high")
api.add_subtask(todo["id"], "Transfer money")
print(json.dumps(api.export_backup(), indent=2))
