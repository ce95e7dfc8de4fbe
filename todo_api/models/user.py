from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.orm import relationship
from todo_api.database import Base
from todo_api.utils.dates import utcnow


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    email = Column(String, unique=True, nullable=False, index=True)
    password = Column(String, nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    tasks = relationship("Task", back_populates="owner", cascade="all, delete-orphan", passive_deletes=True)
