"""Report lifecycle: creation, status changes, the update log, and reads.

This is the only code that mutates reports. Every mutation appends to the
report's update log, stamps ``updated_at`` and is committed before returning.
Status transitions are unrestricted between the three states, including
reopening a resolved report.
"""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from cityfix.config import settings
from cityfix.db.base import utcnow
from cityfix.db.models.report import ReportRow
from cityfix.errors.exceptions import NotFoundError, UnauthorizedError, ValidationError
from cityfix.models.enums import ReportStatus, Urgency
from cityfix.models.report import ReportCreate
from cityfix.repositories.report_repo import ReportRepository
from cityfix.services.classification import DEFAULT_AUTHORITY
from cityfix.services.id_generator import REPORT_PREFIX, generate_id
from cityfix.services.image_refs import resolve_for_storage

logger = logging.getLogger(__name__)

SUBMITTED_TEXT = "Report submitted"


def _clean(value: str | None) -> str:
    return value.strip() if value else ""


def _entry(text: str, when: datetime) -> dict:
    return {"date": when.isoformat(), "text": text}


def _coerce_status(value: ReportStatus | str) -> ReportStatus:
    try:
        return ReportStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in ReportStatus)
        raise ValidationError(f"Status must be one of: {allowed}", field="status") from None


class ReportLifecycleManager:
    """Owns every state transition of a report."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.repo = ReportRepository(session)

    # ── Creation ──────────────────────────────────────────────────────────────

    async def create(self, owner_id: str, fields: ReportCreate) -> ReportRow:
        title = _clean(fields.title)
        issue_type = _clean(fields.issue_type)
        description = _clean(fields.description)
        location = _clean(fields.location)

        if not title and not issue_type:
            raise ValidationError("Title or issue type is required", field="title")
        if not description:
            raise ValidationError("Description is required", field="description")
        if not location:
            raise ValidationError("Location is required", field="location")

        image = resolve_for_storage(fields.image)

        now = utcnow()
        row = await self.repo.create(
            report_id=generate_id(REPORT_PREFIX),
            user_id=owner_id,
            title=title or f"{issue_type} Report",
            description=description,
            ai_description=_clean(fields.ai_description),
            issue_type=issue_type or "Other",
            location=location,
            image=image,
            status=ReportStatus.PENDING.value,
            urgency=(fields.urgency or Urgency.MEDIUM).value,
            confidence_score=fields.confidence_score or 0.0,
            authority=_clean(fields.authority) or DEFAULT_AUTHORITY,
            upvotes=0,
            comments=0,
            updates=[_entry(SUBMITTED_TEXT, now)],
            created_at=now,
            updated_at=now,
        )
        await self.session.commit()
        await self.session.refresh(row, attribute_names=["owner"])
        logger.info("Report created: %s (owner=%s, type=%s)", row.report_id, owner_id, row.issue_type)
        return row

    # ── Mutations ─────────────────────────────────────────────────────────────

    async def set_status(self, report_id: str, new_status: ReportStatus | str, actor_id: str) -> ReportRow:
        status = _coerce_status(new_status)
        row = await self._load_owned(report_id, actor_id)
        self._change_status(row, status, utcnow())
        await self.session.commit()
        return row

    async def append_update(self, report_id: str, text: str, actor_id: str) -> ReportRow:
        text = _clean(text)
        if not text:
            raise ValidationError("Update text is required", field="updateText")
        row = await self._load_owned(report_id, actor_id)
        self._append(row, text, utcnow())
        await self.session.commit()
        return row

    async def apply_update(
        self,
        report_id: str,
        actor_id: str,
        status: ReportStatus | str | None = None,
        update_text: str | None = None,
    ) -> ReportRow:
        """Status change and/or free-text update in one commit.

        The status entry is logged before the free-text entry.
        """
        new_status = _coerce_status(status) if status else None
        text = _clean(update_text)
        if new_status is None and not text:
            raise ValidationError("Status or update text is required", field="status")

        row = await self._load_owned(report_id, actor_id)
        now = utcnow()
        if new_status is not None:
            self._change_status(row, new_status, now)
        if text:
            self._append(row, text, now)
        await self.session.commit()
        return row

    def _change_status(self, row: ReportRow, status: ReportStatus, when: datetime) -> None:
        previous = row.status
        row.status = status.value
        self._append(row, f"Status changed to {status.value}", when)
        logger.info("Report %s status: %s -> %s", row.report_id, previous, status.value)

    @staticmethod
    def _append(row: ReportRow, text: str, when: datetime) -> None:
        # Reassign rather than mutate in place so the JSON column is flagged dirty.
        row.updates = [*row.updates, _entry(text, when)]
        row.updated_at = when

    # ── Reads ─────────────────────────────────────────────────────────────────

    async def get_by_id(self, report_id: str, requester_id: str) -> ReportRow:
        return await self._load_owned(report_id, requester_id)

    async def list_for_user(self, user_id: str) -> list[ReportRow]:
        return await self.repo.list_by_owner(user_id)

    async def list_community_feed(self, limit: int | None = None) -> list[ReportRow]:
        cap = settings.community_feed_limit
        return await self.repo.list_recent(min(limit, cap) if limit else cap)

    async def _load_owned(self, report_id: str, actor_id: str) -> ReportRow:
        row = await self.repo.get(report_id)
        if row is None:
            raise NotFoundError("Report", report_id)
        if row.user_id != actor_id:
            raise UnauthorizedError()
        return row
