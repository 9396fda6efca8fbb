from typing import List, Optional

import structlog
from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tasknotes.core.config import settings
from tasknotes.core.database import transaction
from tasknotes.core.exceptions import InUse, NotFound, UniqueConstraintViolation
from tasknotes.models.category import Category
from tasknotes.models.note import Note
from tasknotes.schemas.category import CategoryCreate, CategoryUpdate
from tasknotes.utils.validation import require_text

logger = structlog.get_logger(__name__)


class CategoryRepository:
    """Named categories. Notes point at a category by its name."""

    def __init__(self, propagate_renames: Optional[bool] = None):
        self._propagate_renames = propagate_renames

    @property
    def propagate_renames(self) -> bool:
        if self._propagate_renames is None:
            return settings.PROPAGATE_CATEGORY_RENAMES
        return self._propagate_renames

    async def list_categories(self, db: AsyncSession) -> List[Category]:
        result = await db.execute(select(Category).order_by(Category.name))
        return list(result.scalars().all())

    async def get_category(self, db: AsyncSession, category_id: int) -> Category:
        result = await db.execute(select(Category).where(Category.id == category_id))
        category = result.scalar_one_or_none()
        if category is None:
            raise NotFound("Category", category_id)
        return category

    async def _name_taken(
        self, db: AsyncSession, name: str, exclude_id: Optional[int] = None
    ) -> bool:
        stmt = select(Category.id).where(Category.name == name)
        if exclude_id is not None:
            stmt = stmt.where(Category.id != exclude_id)
        result = await db.execute(stmt.limit(1))
        return result.first() is not None

    async def note_ids_using(self, db: AsyncSession, name: str) -> List[int]:
        result = await db.execute(
            select(Note.id).where(Note.category == name).order_by(Note.id)
        )
        return list(result.scalars().all())

    async def count_notes(self, db: AsyncSession, name: str) -> int:
        """Number of notes filed under a category name."""
        result = await db.execute(
            select(func.count(Note.id)).where(Note.category == name)
        )
        return result.scalar_one()

    async def create_category(
        self, db: AsyncSession, category_data: CategoryCreate
    ) -> Category:
        """Create a category. Names are unique."""
        name = require_text(category_data.name, "name")

        try:
            async with transaction(db):
                if await self._name_taken(db, name):
                    raise UniqueConstraintViolation(name)

                category = Category(
                    name=name,
                    color=category_data.color or settings.DEFAULT_CATEGORY_COLOR,
                )
                db.add(category)
                await db.flush()
        except IntegrityError as e:
            # Lost a race against another writer on the UNIQUE index
            logger.error(
                "Failed to create category due to integrity constraint",
                name=name,
                error=str(e),
            )
            raise UniqueConstraintViolation(name) from e

        logger.info("Category created", category_id=category.id, name=name)
        return category

    async def update_category(
        self, db: AsyncSession, category_id: int, category_data: CategoryUpdate
    ) -> Category:
        """Rename and/or recolor a category.

        When renaming propagates, notes filed under the old name are moved to
        the new one in the same transaction.
        """
        update_data = category_data.model_dump(exclude_unset=True)
        if "name" in update_data:
            update_data["name"] = require_text(update_data["name"], "name")
        if update_data.get("color") is None:
            update_data.pop("color", None)

        try:
            async with transaction(db):
                category = await self.get_category(db, category_id)
                old_name = category.name
                new_name = update_data.get("name", old_name)

                if new_name != old_name and await self._name_taken(
                    db, new_name, exclude_id=category_id
                ):
                    raise UniqueConstraintViolation(new_name)

                for field, value in update_data.items():
                    setattr(category, field, value)
                await db.flush()

                moved = 0
                if new_name != old_name and self.propagate_renames:
                    result = await db.execute(
                        update(Note)
                        .where(Note.category == old_name)
                        .values(category=new_name)
                        .execution_options(synchronize_session="fetch")
                    )
                    moved = result.rowcount
        except IntegrityError as e:
            logger.error(
                "Failed to update category due to integrity constraint",
                category_id=category_id,
                error=str(e),
            )
            raise UniqueConstraintViolation(update_data.get("name", "")) from e

        logger.info(
            "Category updated",
            category_id=category_id,
            old_name=old_name,
            new_name=new_name,
            notes_moved=moved,
        )
        return category

    async def delete_category(self, db: AsyncSession, category_id: int) -> None:
        """Delete a category unless some note still uses its name."""
        async with transaction(db):
            category = await self.get_category(db, category_id)

            note_ids = await self.note_ids_using(db, category.name)
            if note_ids:
                logger.warning(
                    "Category in use, not deleted",
                    category_id=category_id,
                    name=category.name,
                    note_count=len(note_ids),
                )
                raise InUse(category.name, note_ids)

            await db.delete(category)

        logger.info("Category deleted", category_id=category_id, name=category.name)


category_repository = CategoryRepository()
