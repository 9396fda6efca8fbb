from typing import List

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tasknotes.models.note import Note
from tasknotes.schemas.report import CategoryCount, DateCount, ReportSummary

logger = structlog.get_logger(__name__)


class ReportAggregator:
    """Read-only counts over notes.

    Every figure is queried fresh on each call so it always matches what the
    note repository currently returns.
    """

    async def total_count(self, db: AsyncSession) -> int:
        result = await db.execute(select(func.count(Note.id)))
        return result.scalar_one()

    async def completed_count(self, db: AsyncSession) -> int:
        result = await db.execute(
            select(func.count(Note.id)).where(Note.completed.is_(True))
        )
        return result.scalar_one()

    async def incomplete_count(self, db: AsyncSession) -> int:
        result = await db.execute(
            select(func.count(Note.id)).where(Note.completed.is_(False))
        )
        return result.scalar_one()

    async def counts_by_date(self, db: AsyncSession) -> List[DateCount]:
        """Notes per creation day, most recent day first."""
        # date holds an ISO timestamp; the first 10 characters are the day
        day = func.substr(Note.date, 1, 10).label("day")
        result = await db.execute(
            select(day, func.count(Note.id)).group_by(day).order_by(day.desc())
        )
        return [DateCount(date=row[0], count=row[1]) for row in result.all()]

    async def counts_by_category(self, db: AsyncSession) -> List[CategoryCount]:
        """Notes per category name; uncategorised notes are counted under None."""
        result = await db.execute(
            select(Note.category, func.count(Note.id))
            .group_by(Note.category)
            .order_by(Note.category.is_(None), Note.category)
        )
        return [CategoryCount(category=row[0], count=row[1]) for row in result.all()]

    async def summary(self, db: AsyncSession) -> ReportSummary:
        total = await self.total_count(db)
        completed = await self.completed_count(db)
        incomplete = await self.incomplete_count(db)

        report = ReportSummary(
            total=total,
            completed=completed,
            incomplete=incomplete,
            completion_rate=(completed / total) if total else 0.0,
            by_date=await self.counts_by_date(db),
            by_category=await self.counts_by_category(db),
        )
        logger.debug("Report computed", total=total, completed=completed)
        return report


report_aggregator = ReportAggregator()
