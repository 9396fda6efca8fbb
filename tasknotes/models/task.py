from sqlalchemy import Boolean, Column, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship

from tasknotes.core.database import Base


class Task(Base):
    """Checklist item owned by exactly one note."""

    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    note_id = Column(
        Integer,
        ForeignKey("notesTable.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    task = Column(Text, nullable=False)
    completed = Column(Boolean, nullable=False, default=False, server_default="0")

    # Unused; kept so databases written by earlier app versions keep their layout
    done = Column(Integer, default=0, server_default="0")

    owner = relationship("Note", back_populates="tasks")

    def __repr__(self):
        return (
            f"<Task(id={self.id}, note_id={self.note_id}, "
            f"task='{self.task}', completed={self.completed})>"
        )
