from datetime import date, datetime, timezone
from typing import List, Optional, Sequence

import structlog
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from tasknotes.core.database import transaction
from tasknotes.core.exceptions import NotFound
from tasknotes.models.note import Note, Priority
from tasknotes.schemas.note import NoteCreate, NoteFilter, NoteUpdate
from tasknotes.services.task import TaskRepository, task_repository
from tasknotes.utils.validation import (
    LIKE_ESCAPE,
    escape_like,
    require_text,
    require_texts,
    to_naive_utc,
)

logger = structlog.get_logger(__name__)


class NoteRepository:
    """Notes with filtering, completion tracking and their initial task list."""

    def __init__(self, tasks: Optional[TaskRepository] = None):
        self.tasks = tasks or task_repository

    async def create_note(
        self,
        db: AsyncSession,
        note_data: NoteCreate,
        initial_tasks: Sequence[str] = (),
    ) -> Note:
        """Create a note together with its initial tasks.

        The note row and every task row are written in one transaction; if
        any insert fails nothing is kept.
        """
        title = require_text(note_data.title, "title")
        body = require_text(note_data.note, "note")
        task_texts = require_texts(initial_tasks, "tasks")

        note_dict = note_data.model_dump(exclude={"date"})
        note_dict.update(title=title, note=body, priority=note_data.priority.value)
        if note_data.date:
            note_dict["date"] = note_data.date

        try:
            async with transaction(db):
                note = Note(**note_dict, tasks=[])
                db.add(note)
                await db.flush()

                for text in task_texts:
                    note.tasks.append(await self.tasks.add_task(db, note.id, text))
        except Exception as e:
            logger.error(
                "Failed to create note", title=title, task_count=len(task_texts), error=str(e)
            )
            raise

        logger.info("Note created", note_id=note.id, task_count=len(task_texts))
        return note

    async def get_note(
        self, db: AsyncSession, note_id: int, with_tasks: bool = False
    ) -> Note:
        stmt = select(Note).where(Note.id == note_id)
        if with_tasks:
            stmt = stmt.options(selectinload(Note.tasks)).execution_options(
                populate_existing=True
            )
        result = await db.execute(stmt)
        note = result.scalar_one_or_none()
        if note is None:
            logger.warning("Note not found", note_id=note_id)
            raise NotFound("Note", note_id)
        return note

    async def list_notes(
        self, db: AsyncSession, note_filter: NoteFilter, with_tasks: bool = False
    ) -> List[Note]:
        """Notes matching every given filter, newest first."""
        stmt = select(Note).where(Note.completed == note_filter.completed)

        if note_filter.category is not None:
            stmt = stmt.where(Note.category == note_filter.category)

        if note_filter.priority is not None:
            stmt = stmt.where(Note.priority == note_filter.priority.value)

        search_text = (note_filter.search_text or "").strip()
        if search_text:
            pattern = f"%{escape_like(search_text.lower())}%"
            stmt = stmt.where(
                or_(
                    func.lower(Note.title).like(pattern, escape=LIKE_ESCAPE),
                    func.lower(Note.note).like(pattern, escape=LIKE_ESCAPE),
                )
            )

        if with_tasks:
            stmt = stmt.options(selectinload(Note.tasks)).execution_options(
                populate_existing=True
            )
        stmt = stmt.order_by(Note.date.desc(), Note.id.desc())

        result = await db.execute(stmt)
        notes = list(result.scalars().all())
        logger.debug(
            "Retrieved notes",
            count=len(notes),
            completed=note_filter.completed,
            category=note_filter.category,
            priority=note_filter.priority.value if note_filter.priority else None,
            search_text=search_text or None,
        )
        return notes

    async def update_note(
        self, db: AsyncSession, note_id: int, note_data: NoteUpdate
    ) -> Note:
        """Apply the fields that were explicitly set; None clears optional ones."""
        update_data = note_data.model_dump(exclude_unset=True)

        for field in ("title", "note"):
            if field in update_data:
                update_data[field] = require_text(update_data[field], field)
        if "priority" in update_data:
            priority = update_data["priority"] or Priority.MEDIUM
            update_data["priority"] = priority.value
        if isinstance(update_data.get("category"), str) and not update_data["category"].strip():
            update_data["category"] = None

        async with transaction(db):
            note = await self.get_note(db, note_id)
            for field, value in update_data.items():
                setattr(note, field, value)

        logger.info("Note updated", note_id=note_id, fields=sorted(update_data))
        return note

    async def set_completed(self, db: AsyncSession, note_id: int, value: bool) -> Note:
        async with transaction(db):
            note = await self.get_note(db, note_id)
            note.completed = bool(value)

        logger.info("Note completion changed", note_id=note_id, completed=note.completed)
        return note

    async def toggle_completed(self, db: AsyncSession, note_id: int) -> Note:
        async with transaction(db):
            note = await self.get_note(db, note_id)
            note.completed = not note.completed

        logger.info("Note completion changed", note_id=note_id, completed=note.completed)
        return note

    async def delete_note(self, db: AsyncSession, note_id: int) -> Optional[str]:
        """Delete a note; its tasks go with it through the foreign key cascade.

        Returns the note's image path so the caller can remove the file.
        """
        async with transaction(db):
            note = await self.get_note(db, note_id)
            image = note.image
            await db.delete(note)

        logger.info("Note deleted", note_id=note_id, had_image=image is not None)
        return image

    async def list_due_notes(
        self, db: AsyncSession, day: Optional[date] = None
    ) -> List[Note]:
        """Notes that have a due date, optionally only those due on one day."""
        stmt = select(Note).where(Note.due_date.is_not(None))
        if day is not None:
            stmt = stmt.where(Note.due_date == day)
        stmt = stmt.order_by(Note.due_date, Note.id)

        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def list_pending_reminders(
        self, db: AsyncSession, after: Optional[datetime] = None
    ) -> List[Note]:
        """Incomplete notes whose reminder is still ahead, soonest first.

        Reminders are stored as naive UTC; an aware ``after`` is converted.
        """
        if after is None:
            after = datetime.now(timezone.utc)
        after = to_naive_utc(after)
        stmt = (
            select(Note)
            .where(
                Note.completed.is_(False),
                Note.reminder.is_not(None),
                Note.reminder > after,
            )
            .order_by(Note.reminder, Note.id)
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())


note_repository = NoteRepository()
