"""Versioned schema migrations.

Tables are created from the ORM metadata. Columns added after the first
release are listed in ``MIGRATIONS`` and applied once each, in version order;
the ``schema_migrations`` table records what has already run. A database
created from scratch already has every column, so all versions are stamped as
applied without executing them.
"""
import logging
from typing import NamedTuple

from sqlalchemy import DateTime, String, Text, inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.types import TypeEngine

from todo_api.database import Base
from todo_api.models.migration import SchemaMigration
# imported for their table definitions
from todo_api.models.user import User  # noqa: F401
from todo_api.models.task import Task  # noqa: F401
from todo_api.models.subtask import Subtask  # noqa: F401
from todo_api.utils.dates import utcnow

logger = logging.getLogger(__name__)


class Migration(NamedTuple):
    version: int
    name: str
    table: str
    column: str
    type_: TypeEngine
    extra: str = ""


MIGRATIONS = (
    Migration(1, "add todos.category", "todos", "category", String(), "DEFAULT 'General' NOT NULL"),
    Migration(2, "add todos.description", "todos", "description", Text()),
    Migration(3, "add todos.reminder_at", "todos", "reminder_at", DateTime()),
)


def add_column_sql(migration: Migration, dialect) -> str:
    """Render a migration's ALTER TABLE with the column type spelled for ``dialect``."""
    type_sql = migration.type_.compile(dialect=dialect)
    return f"ALTER TABLE {migration.table} ADD COLUMN {migration.column} {type_sql} {migration.extra}".strip()


def applied_versions(engine: Engine) -> set:
    with engine.connect() as conn:
        rows = conn.execute(text("SELECT version FROM schema_migrations"))
        return {r[0] for r in rows}


def run_migrations(engine: Engine) -> list:
    """Bring the schema up to date and return the versions applied by this call."""
    fresh = not inspect(engine).has_table(Task.__tablename__)
    Base.metadata.create_all(bind=engine)

    done = applied_versions(engine)
    applied = []
    for migration in MIGRATIONS:
        if migration.version in done:
            continue
        with engine.begin() as conn:
            if not fresh:
                conn.execute(text(add_column_sql(migration, engine.dialect)))
            conn.execute(
                SchemaMigration.__table__.insert().values(
                    version=migration.version, name=migration.name, applied_at=utcnow()
                )
            )
        applied.append(migration.version)
        if fresh:
            logger.debug("Stamped migration %s (%s) on new database", migration.version, migration.name)
        else:
            logger.info("Applied migration %s: %s", migration.version, migration.name)
    return applied
