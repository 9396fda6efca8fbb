import enum
from datetime import datetime

from sqlalchemy import Boolean, Column, Date, DateTime, Integer, String, Text
from sqlalchemy.orm import relationship

from tasknotes.core.database import Base


class Priority(enum.Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


def _now_iso() -> str:
    return datetime.now().isoformat(timespec="seconds")


class Note(Base):
    """A user-authored note with optional checklist tasks."""

    # Table name kept for databases written by earlier app versions
    __tablename__ = "notesTable"

    id = Column(Integer, primary_key=True, autoincrement=True)
    date = Column(Text, nullable=False, default=_now_iso)  # ISO-8601 creation time
    title = Column(Text, nullable=False)
    note = Column(Text, nullable=False)
    priority = Column(String, default=Priority.MEDIUM.value)

    # Weak reference to Category.name, no foreign key
    category = Column(Text, nullable=True, index=True)

    completed = Column(Boolean, nullable=False, default=False, server_default="0")
    image = Column(Text, nullable=True)  # Path owned by the caller's file store
    reminder = Column(DateTime, nullable=True)

    # Added by migration 1
    due_date = Column(Date, nullable=True)

    tasks = relationship(
        "Task",
        back_populates="owner",
        order_by="Task.id",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def priority_level(self) -> Priority:
        return Priority(self.priority or Priority.MEDIUM.value)

    def __repr__(self):
        return (
            f"<Note(id={self.id}, title='{self.title}', "
            f"category={self.category!r}, completed={self.completed})>"
        )
