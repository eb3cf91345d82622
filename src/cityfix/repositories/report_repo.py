"""Report repository."""

from sqlalchemy import select

from cityfix.db.models.report import ReportRow
from cityfix.repositories.base import BaseRepository


class ReportRepository(BaseRepository[ReportRow]):
    model = ReportRow
    pk_field = "report_id"

    async def list_by_owner(self, user_id: str) -> list[ReportRow]:
        """All reports owned by *user_id*, newest first."""
        stmt = (
            select(ReportRow)
            .where(ReportRow.user_id == user_id)
            .order_by(ReportRow.created_at.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_recent(self, limit: int) -> list[ReportRow]:
        """The newest *limit* reports across all owners."""
        stmt = select(ReportRow).order_by(ReportRow.created_at.desc()).limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
