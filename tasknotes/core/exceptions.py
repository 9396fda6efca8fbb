"""Error taxonomy raised by the repositories.

Callers can tell every failure apart by type; nothing is reported through a
generic error value.
"""

from typing import Optional, Sequence


class TaskNotesError(Exception):
    """Base class for all data layer errors."""


class ValidationError(TaskNotesError, ValueError):
    """A required field is missing or blank. Raised before touching the store."""

    def __init__(self, field: str, message: Optional[str] = None):
        self.field = field
        super().__init__(message or f"{field} must not be empty")


class UniqueConstraintViolation(TaskNotesError, ValueError):
    """A category with this name already exists."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Category '{name}' already exists")


class InUse(TaskNotesError):
    """A category cannot be deleted while notes still reference it."""

    def __init__(self, name: str, note_ids: Sequence[int]):
        self.name = name
        self.note_ids = list(note_ids)
        super().__init__(
            f"Category '{name}' is used by {len(self.note_ids)} note(s); "
            "move those notes to another category first"
        )


class NotFound(TaskNotesError, LookupError):
    """No row exists for the requested id."""

    def __init__(self, entity: str, entity_id: int):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")


class MigrationError(TaskNotesError):
    """A schema migration failed for a reason other than already being applied."""

    def __init__(self, version: int, message: str):
        self.version = version
        super().__init__(f"Migration {version} failed: {message}")
