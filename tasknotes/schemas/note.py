from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from tasknotes.models.note import Priority
from tasknotes.utils.validation import to_naive_utc


class NoteBase(BaseModel):
    title: str
    note: str
    priority: Priority = Priority.MEDIUM
    category: Optional[str] = None
    image: Optional[str] = Field(None, description="Path of the attached image file")
    reminder: Optional[datetime] = Field(None, description="Stored as naive UTC")
    due_date: Optional[date] = None

    @field_validator("category", mode="before")
    @classmethod
    def blank_category_is_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("priority", mode="before")
    @classmethod
    def missing_priority_is_medium(cls, v):
        # Rows written before priorities existed hold NULL
        if v is None:
            return Priority.MEDIUM
        return v

    @field_validator("reminder")
    @classmethod
    def reminder_as_utc(cls, v):
        return to_naive_utc(v)


class NoteCreate(NoteBase):
    date: Optional[str] = Field(
        None, description="Creation timestamp; defaults to now (ISO-8601)"
    )


class NoteUpdate(BaseModel):
    """Partial update. Only fields that are explicitly set are written."""

    title: Optional[str] = None
    note: Optional[str] = None
    priority: Optional[Priority] = None
    category: Optional[str] = None
    image: Optional[str] = None
    reminder: Optional[datetime] = None
    due_date: Optional[date] = None

    @field_validator("reminder")
    @classmethod
    def reminder_as_utc(cls, v):
        return to_naive_utc(v)


class NoteFilter(BaseModel):
    completed: bool
    category: Optional[str] = None
    priority: Optional[Priority] = None
    search_text: Optional[str] = None


class Note(NoteBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    date: str
    completed: bool
