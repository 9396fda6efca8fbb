from typing import Dict, Iterable, List

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tasknotes.core.database import transaction
from tasknotes.core.exceptions import NotFound
from tasknotes.models.note import Note
from tasknotes.models.task import Task
from tasknotes.utils.validation import require_text

logger = structlog.get_logger(__name__)


class TaskRepository:
    """Checklist items of a note.

    Each method is its own statement; removing tasks with their note is left
    to the ON DELETE CASCADE declared on tasks.note_id.
    """

    async def list_by_note(self, db: AsyncSession, note_id: int) -> List[Task]:
        """Tasks of one note in insertion order."""
        result = await db.execute(
            select(Task).where(Task.note_id == note_id).order_by(Task.id)
        )
        return list(result.scalars().all())

    async def list_by_notes(
        self, db: AsyncSession, note_ids: Iterable[int]
    ) -> Dict[int, List[Task]]:
        """Tasks for several notes at once, keyed by note id."""
        ids = list(dict.fromkeys(note_ids))
        grouped: Dict[int, List[Task]] = {note_id: [] for note_id in ids}
        if not ids:
            return grouped

        result = await db.execute(
            select(Task).where(Task.note_id.in_(ids)).order_by(Task.id)
        )
        for task in result.scalars():
            grouped[task.note_id].append(task)
        return grouped

    async def get_task(self, db: AsyncSession, task_id: int) -> Task:
        result = await db.execute(select(Task).where(Task.id == task_id))
        task = result.scalar_one_or_none()
        if task is None:
            raise NotFound("Task", task_id)
        return task

    async def add_task(self, db: AsyncSession, note_id: int, text: str) -> Task:
        """Stage a task for note_id in the caller's transaction without committing."""
        task = Task(note_id=note_id, task=text)
        db.add(task)
        await db.flush()
        return task

    async def create_task(self, db: AsyncSession, note_id: int, text: str) -> Task:
        """Attach a new task to an existing note."""
        text = require_text(text, "task")

        async with transaction(db):
            note = await db.execute(select(Note.id).where(Note.id == note_id))
            if note.scalar_one_or_none() is None:
                raise NotFound("Note", note_id)
            task = await self.add_task(db, note_id, text)

        logger.info("Task created", task_id=task.id, note_id=note_id)
        return task

    async def delete_task(self, db: AsyncSession, task_id: int) -> None:
        async with transaction(db):
            task = await self.get_task(db, task_id)
            await db.delete(task)

        logger.info("Task deleted", task_id=task_id)

    async def set_completed(self, db: AsyncSession, task_id: int, value: bool) -> Task:
        async with transaction(db):
            task = await self.get_task(db, task_id)
            task.completed = bool(value)

        return task


task_repository = TaskRepository()
