from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from todo_api.models.subtask import Subtask
from todo_api.models.task import Task
from todo_api.services.backup import (
    SCHEMA,
    BackupValidationError,
    export_backup,
    import_backup,
    validate_backup_todos,
)


def count_tasks(db, user):
    db.expire_all()
    return db.query(Task).filter(Task.user_id == user.id).count()


def test_export_envelope(db, user, add_task):
    add_task(user, "with subs", subtasks=["one", "two"], priority="high", due_date=datetime(2024, 1, 5))
    add_task(user, "bare")

    doc = export_backup(db, user, now=datetime(2024, 3, 1, 8, 0))
    assert doc["schema"] == SCHEMA
    assert doc["exported_at"] == "2024-03-01T08:00:00Z"
    assert doc["user"] == {"id": user.id, "email": user.email}
    assert [t["text"] for t in doc["todos"]] == ["with subs", "bare"]
    assert [s["title"] for s in doc["todos"][0]["subtasks"]] == ["one", "two"]
    assert doc["todos"][0]["due_date"] == "2024-01-05T00:00:00"
    # every task carries the key, even when empty
    assert doc["todos"][1]["subtasks"] == []


def test_export_is_idempotent(db, user, add_task):
    add_task(user, "a", subtasks=["x"])
    add_task(user, "b")
    assert export_backup(db, user)["todos"] == export_backup(db, user)["todos"]


def test_replace_round_trip(db, user, add_task):
    add_task(user, "Pay rent", subtasks=["Transfer"], priority="high", category="Home")
    add_task(user, "Gym", priority="medium", category="Health", completed=True)
    before = export_backup(db, user)

    result = import_backup(db, user, before["todos"], mode="replace")
    assert result == {"mode": "replace", "imported_todos": 2, "imported_subtasks": 1}

    after = export_backup(db, user)

    def shape(doc):
        return [
            (t["text"], t["priority"], t["category"], t["completed"], t["created_at"], [s["title"] for s in t["subtasks"]])
            for t in doc["todos"]
        ]

    assert shape(after) == shape(before)


def test_merge_doubles_on_reimport(db, user, add_task):
    add_task(user, "one")
    add_task(user, "two")
    todos = export_backup(db, user)["todos"]

    import_backup(db, user, todos, mode="merge")
    assert count_tasks(db, user) == 4
    import_backup(db, user, todos)
    assert count_tasks(db, user) == 6


def test_replace_leaves_only_incoming(db, user, add_task):
    for i in range(5):
        add_task(user, f"old {i}", subtasks=["s"])
    import_backup(db, user, [{"text": "A"}], mode="replace")
    assert count_tasks(db, user) == 1
    assert db.query(Subtask).count() == 0


def test_defaults_applied(db, user):
    import_backup(db, user, [{"text": "  A  ", "subtasks": [{"title": "  "}, {"title": " kept "}, "junk"]}])
    task = db.query(Task).filter(Task.user_id == user.id).one()
    assert task.text == "A"
    assert task.completed is False
    assert task.priority == "low"
    assert task.category == "General"
    assert task.description == ""
    assert task.reminder_at is None
    assert task.created_at is not None
    assert [s.title for s in task.subtasks] == ["kept"]


def test_created_at_is_honored(db, user):
    import_backup(db, user, [{
        "text": "old",
        "created_at": "2020-05-01T10:00:00",
        "subtasks": [{"title": "s", "created_at": "2020-05-02"}],
    }])
    task = db.query(Task).filter(Task.user_id == user.id).one()
    assert task.created_at == datetime(2020, 5, 1, 10, 0)
    assert task.subtasks[0].created_at == datetime(2020, 5, 2)


@pytest.mark.parametrize("todos, message", [
    ([{"text": "ok"}, {"text": "   "}], "todos[1].text"),
    ([{"text": "ok"}, "not an object"], "todos[1]"),
    ([{"text": "x", "priority": "urgent"}], "priority"),
    ([{"text": "x", "subtasks": "nope"}], "subtasks must be an array"),
    ([{"text": "x", "due_date": "someday"}], "due_date"),
    ({"text": "x"}, "todos must be an array"),
])
def test_validation_names_first_violation(todos, message):
    with pytest.raises(BackupValidationError) as exc:
        validate_backup_todos(todos)
    assert message in str(exc.value)


def test_rejected_import_changes_nothing(db, user, add_task):
    add_task(user, "keep me", subtasks=["and me"])
    before = export_backup(db, user)["todos"]

    with pytest.raises(BackupValidationError):
        import_backup(db, user, [{"text": "fine"}, {"text": ""}], mode="replace")

    assert export_backup(db, user)["todos"] == before


def test_failure_mid_import_rolls_back(db, user, add_task, monkeypatch):
    add_task(user, "keep me")
    before = export_backup(db, user)["todos"]

    import todo_api.services.backup as backup

    calls = {"n": 0}
    real_parse = backup.parse_timestamp

    def flaky(value):
        calls["n"] += 1
        # validation parses every timestamp once; blow up while inserting
        if calls["n"] > 6:
            raise RuntimeError("store went away")
        return real_parse(value)

    monkeypatch.setattr(backup, "parse_timestamp", flaky)
    with pytest.raises(RuntimeError):
        import_backup(db, user, [{"text": "a"}, {"text": "b"}], mode="replace")

    assert export_backup(db, user)["todos"] == before


def test_unknown_mode_rejected(db, user):
    with pytest.raises(BackupValidationError):
        import_backup(db, user, [], mode="upsert")


def test_backup_endpoints(client: TestClient, register):
    headers, user = register()
    client.post("/api/todos", headers=headers, json={"text": "Pay rent", "priority": "high"})

    r = client.get("/api/backup/export?download=1", headers=headers)
    assert r.status_code == 200
    assert r.headers["content-disposition"].startswith('attachment; filename="backup-')
    doc = r.json()
    assert doc["user"]["email"] == user["email"]

    r = client.post("/api/backup/import", headers=headers, json={"todos": doc["todos"]})
    assert r.status_code == 200
    assert r.json() == {"ok": True, "mode": "merge", "summary": {"importedTodos": 1, "importedSubs": 0}}
    assert len(client.get("/api/todos", headers=headers).json()) == 2

    r = client.post("/api/backup/import", headers=headers, json={"mode": "replace", "todos": [{"text": ""}]})
    assert r.status_code == 400
    assert "text" in r.json()["detail"]
    assert len(client.get("/api/todos", headers=headers).json()) == 2

    r = client.post("/api/backup/import", headers=headers, json={"mode": "REPLACE", "todos": [{"text": "A"}]})
    assert r.json()["mode"] == "replace"
    assert [t["text"] for t in client.get("/api/todos", headers=headers).json()] == ["A"]


def test_empty_mode_means_merge(db, user, add_task):
    add_task(user, "kept")
    assert import_backup(db, user, [{"text": "A"}], mode="")["mode"] == "merge"
    assert count_tasks(db, user) == 2


def test_import_endpoint_empty_mode(client: TestClient, register):
    headers, _ = register()
    r = client.post("/api/backup/import", headers=headers, json={"mode": "", "todos": [{"text": "A"}]})
    assert r.status_code == 200
    assert r.json()["mode"] == "merge"
