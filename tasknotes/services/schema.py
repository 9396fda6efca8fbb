from pathlib import Path
from typing import Callable, NamedTuple, Optional, Sequence

import structlog
from sqlalchemy import func, inspect, insert, select, text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from tasknotes import models  # noqa: F401  registers all tables on Base.metadata
from tasknotes.core.database import Base
from tasknotes.core.exceptions import MigrationError
from tasknotes.models.note import Note
from tasknotes.models.schema_version import SchemaVersion
from tasknotes.utils.validation import parse_legacy_timestamp

logger = structlog.get_logger(__name__)


class Migration(NamedTuple):
    version: int
    description: str
    apply: Callable[[Connection], None]


def _add_note_due_date(conn: Connection) -> None:
    columns = {column["name"] for column in inspect(conn).get_columns(Note.__tablename__)}
    if "due_date" in columns:
        # Fresh schema already has it, or an older app version added it
        return
    conn.execute(text(f'ALTER TABLE "{Note.__tablename__}" ADD COLUMN due_date DATE'))


# Storage format of the DateTime column on SQLite
_DATETIME_STORAGE_FORMAT = "%Y-%m-%d %H:%M:%S.%f"


def _normalize_note_reminders(conn: Connection) -> None:
    rows = conn.execute(
        text(f'SELECT id, reminder FROM "{Note.__tablename__}" WHERE reminder IS NOT NULL')
    ).all()
    for note_id, raw in rows:
        try:
            stored = parse_legacy_timestamp(str(raw)).strftime(_DATETIME_STORAGE_FORMAT)
        except ValueError as e:
            raise ValueError(f"note {note_id} has unreadable reminder {raw!r}") from e
        if stored != raw:
            conn.execute(
                text(f'UPDATE "{Note.__tablename__}" SET reminder = :stored WHERE id = :id'),
                {"stored": stored, "id": note_id},
            )


MIGRATIONS: Sequence[Migration] = (
    Migration(1, "add due_date to notes", _add_note_due_date),
    Migration(2, "store note reminders as naive UTC", _normalize_note_reminders),
)


class SchemaManager:
    """Creates the tables and applies versioned, additive migrations."""

    def __init__(self, migrations: Optional[Sequence[Migration]] = None):
        self.migrations = sorted(
            MIGRATIONS if migrations is None else migrations,
            key=lambda migration: migration.version,
        )

    def _upgrade(self, conn: Connection) -> int:
        Base.metadata.create_all(conn)

        applied = set(conn.execute(select(SchemaVersion.version)).scalars())
        for migration in self.migrations:
            if migration.version in applied:
                continue
            try:
                migration.apply(conn)
            except (SQLAlchemyError, ValueError) as e:
                logger.error(
                    "Migration failed",
                    version=migration.version,
                    description=migration.description,
                    error=str(e),
                )
                raise MigrationError(migration.version, str(e)) from e

            conn.execute(insert(SchemaVersion).values(version=migration.version))
            applied.add(migration.version)
            logger.info(
                "Migration applied",
                version=migration.version,
                description=migration.description,
            )

        return max(applied, default=0)

    async def initialize(self, engine: AsyncEngine) -> int:
        """Create missing tables and apply pending migrations in one transaction.

        Safe to run on every startup. Returns the resulting schema version.
        Raises MigrationError when a migration fails; nothing is left applied.
        """
        async with engine.begin() as conn:
            version = await conn.run_sync(self._upgrade)

        logger.info("Schema initialized", schema_version=version)
        return version

    async def current_version(self, engine: AsyncEngine) -> int:
        """Highest applied migration version, 0 when none have run."""
        async with engine.connect() as conn:
            has_table = await conn.run_sync(
                lambda sync_conn: inspect(sync_conn).has_table(SchemaVersion.__tablename__)
            )
            if not has_table:
                return 0
            result = await conn.execute(select(func.max(SchemaVersion.version)))
            return result.scalar() or 0

    async def reset(self, engine: AsyncEngine) -> bool:
        """Delete the database file. Development use only.

        Returns True when a file was removed.
        """
        database = engine.url.database
        if not database or database == ":memory:":
            raise ValueError("Only file-backed databases can be reset")

        await engine.dispose()

        removed = False
        for suffix in ("", "-wal", "-shm"):
            path = Path(database + suffix)
            if path.exists():
                path.unlink()
                removed = True

        logger.warning("Database deleted", database=database, removed=removed)
        return removed


schema_manager = SchemaManager()
