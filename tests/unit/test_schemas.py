from datetime import date, datetime, timedelta, timezone
from types import SimpleNamespace

from sqlalchemy.ext.asyncio import AsyncSession

from tasknotes.models.category import Category
from tasknotes.models.note import Note, Priority
from tasknotes.schemas.category import Category as CategorySchema
from tasknotes.schemas.note import Note as NoteSchema
from tasknotes.schemas.note import NoteCreate, NoteUpdate
from tasknotes.schemas.task import Task as TaskSchema
from tasknotes.services.task import task_repository


class TestSchemas:
    """Test conversion between ORM rows and pydantic shapes."""

    async def test_note_from_orm(self, db: AsyncSession, sample_note: Note):
        """Test a stored note serializes with its enum priority."""
        data = NoteSchema.model_validate(sample_note)

        assert data.id == sample_note.id
        assert data.priority is Priority.HIGH
        assert data.category == "Work"
        assert data.completed is False
        assert data.due_date is None
        assert data.model_dump(mode="json")["priority"] == "High"

    async def test_category_from_orm(self, db: AsyncSession, sample_category: Category):
        data = CategorySchema.model_validate(sample_category)

        assert data.name == "Work"
        assert data.color == "#FF5733"

    async def test_task_from_orm(self, db: AsyncSession, note_with_tasks: Note):
        tasks = await task_repository.list_by_note(db, note_with_tasks.id)

        data = [TaskSchema.model_validate(task) for task in tasks]

        assert [t.completed for t in data] == [False, True, False]
        assert all(t.note_id == note_with_tasks.id for t in data)

    def test_note_create_defaults(self):
        data = NoteCreate(title="t", note="n", due_date="2024-02-01")

        assert data.priority is Priority.MEDIUM
        assert data.category is None
        assert data.due_date == date(2024, 2, 1)
        assert data.date is None

    def test_note_update_tracks_set_fields(self):
        data = NoteUpdate(image=None, priority="Low")

        assert data.model_dump(exclude_unset=True) == {
            "image": None,
            "priority": Priority.LOW,
        }

    def test_missing_priority_reads_as_medium(self):
        """Test a row stored without a priority serializes as Medium."""
        row = SimpleNamespace(
            id=7,
            date="2023-12-01T08:00:00",
            title="Old note",
            note="Written before priorities existed",
            priority=None,
            category=None,
            image=None,
            reminder=None,
            due_date=None,
            completed=False,
        )

        data = NoteSchema.model_validate(row)

        assert data.priority is Priority.MEDIUM
        assert NoteCreate(title="t", note="n", priority=None).priority is Priority.MEDIUM

    def test_aware_reminder_stored_as_utc(self):
        reminder = datetime(2024, 2, 1, 9, 0, tzinfo=timezone(timedelta(hours=1)))

        assert NoteCreate(title="t", note="n", reminder=reminder).reminder == datetime(
            2024, 2, 1, 8, 0
        )
        assert NoteUpdate(reminder="2024-02-01T08:00:00.000Z").reminder == datetime(
            2024, 2, 1, 8, 0
        )
        assert NoteUpdate(reminder=None).reminder is None

    def test_schemas_read_from_attributes(self):
        for schema in (NoteSchema, CategorySchema, TaskSchema):
            assert schema.model_config.get("from_attributes") is True
