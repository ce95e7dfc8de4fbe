from sqlalchemy import create_engine, inspect, text
from sqlalchemy.dialects import postgresql, sqlite

from todo_api.migrations import MIGRATIONS, add_column_sql, applied_versions, run_migrations


def test_fresh_database_is_stamped(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'fresh.db'}")
    applied = run_migrations(engine)
    assert applied == [m.version for m in MIGRATIONS]
    assert applied_versions(engine) == {m.version for m in MIGRATIONS}
    cols = {c["name"] for c in inspect(engine).get_columns("todos")}
    assert {"category", "description", "reminder_at"} <= cols
    # second run is a no-op
    assert run_migrations(engine) == []


def test_legacy_database_gets_missing_columns(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'legacy.db'}")
    with engine.begin() as conn:
        conn.execute(text("CREATE TABLE users (id INTEGER PRIMARY KEY, email VARCHAR UNIQUE NOT NULL, "
                          "password VARCHAR NOT NULL, created_at DATETIME NOT NULL)"))
        conn.execute(text("CREATE TABLE todos (id INTEGER PRIMARY KEY, user_id INTEGER NOT NULL, text VARCHAR NOT NULL, "
                          "completed BOOLEAN NOT NULL, created_at DATETIME NOT NULL, due_date DATETIME, "
                          "priority VARCHAR(10) NOT NULL)"))
        conn.execute(text("INSERT INTO todos (user_id, text, completed, created_at, priority) "
                          "VALUES (1, 'legacy', 0, '2023-01-01 00:00:00', 'low')"))

    assert run_migrations(engine) == [1, 2, 3]

    cols = {c["name"] for c in inspect(engine).get_columns("todos")}
    assert {"category", "description", "reminder_at"} <= cols
    assert inspect(engine).has_table("subtasks")
    with engine.connect() as conn:
        assert conn.execute(text("SELECT category FROM todos")).scalar() == "General"
    assert run_migrations(engine) == []


def test_column_types_follow_dialect():
    reminder = MIGRATIONS[2]
    pg = add_column_sql(reminder, postgresql.dialect())
    assert pg.startswith("ALTER TABLE todos ADD COLUMN reminder_at TIMESTAMP")
    assert "DATETIME" not in pg
    assert add_column_sql(reminder, sqlite.dialect()) == "ALTER TABLE todos ADD COLUMN reminder_at DATETIME"

    category = add_column_sql(MIGRATIONS[0], postgresql.dialect())
    assert category == "ALTER TABLE todos ADD COLUMN category VARCHAR DEFAULT 'General' NOT NULL"
