from sqlalchemy import Column, DateTime, Integer, String
from todo_api.database import Base
from todo_api.utils.dates import utcnow


class SchemaMigration(Base):
    __tablename__ = "schema_migrations"

    version = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String, nullable=False)
    applied_at = Column(DateTime, nullable=False, default=utcnow)
