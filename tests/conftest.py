import os
import uuid

# must be set before todo_api.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite:///./test_todos.db")
os.environ["APP_ENV"] = "test"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from todo_api.main import app
from todo_api.database import SessionLocal, Base, engine
from todo_api.models.task import Task
from todo_api.models.subtask import Subtask
from todo_api.models.user import User


# Recreate all tables for each test
@pytest.fixture(autouse=True)
def setup_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def register(client: TestClient):
    """Register a fresh user over HTTP and return (auth headers, user json)."""

    def _register(email=None, password="Pass123!"):
        email = email or f"user_{uuid.uuid4().hex[:8]}@example.com"
        r = client.post("/api/auth/register", json={"email": email, "password": password})
        assert r.status_code == 201, r.text
        data = r.json()
        return {"Authorization": f"Bearer {data['token']}"}, data["user"]

    return _register


@pytest.fixture
def user(db: Session) -> User:
    u = User(email=f"svc_{uuid.uuid4().hex[:8]}@example.com", password="not-a-real-hash")
    db.add(u)
    db.commit()
    db.refresh(u)
    return u


@pytest.fixture
def add_task(db: Session):
    """Insert a task straight into the store, bypassing the API."""

    def _add(owner: User, text: str, subtasks=(), **fields) -> Task:
        task = Task(user_id=owner.id, text=text, **fields)
        db.add(task)
        db.flush()
        for title in subtasks:
            db.add(Subtask(todo_id=task.id, title=title))
        db.commit()
        db.refresh(task)
        return task

    return _add
