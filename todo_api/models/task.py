from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from todo_api.database import Base
from todo_api.utils.dates import utcnow

PRIORITIES = ("low", "medium", "high")
DEFAULT_PRIORITY = "low"
DEFAULT_CATEGORY = "General"


class Task(Base):
    __tablename__ = "todos"
    __table_args__ = (
        CheckConstraint("priority IN ('low', 'medium', 'high')", name="ck_todos_priority"),
    )

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    text = Column(String, nullable=False)
    completed = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    due_date = Column(DateTime, nullable=True)
    priority = Column(String(10), nullable=False, default=DEFAULT_PRIORITY)
    category = Column(String, nullable=False, default=DEFAULT_CATEGORY)
    description = Column(Text, nullable=True)
    reminder_at = Column(DateTime, nullable=True)

    owner = relationship("User", back_populates="tasks")
    subtasks = relationship(
        "Subtask",
        back_populates="task",
        cascade="all, delete-orphan",
        order_by="Subtask.id",
    )
