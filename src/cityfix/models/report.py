"""Pydantic models for report requests and responses."""

from datetime import datetime, timezone

from pydantic import Field

from cityfix.config import settings
from cityfix.models.common import CamelModel
from cityfix.models.enums import ReportStatus, Urgency
from cityfix.services.image_refs import resolve_for_display


class UpdateEntry(CamelModel):
    date: datetime
    text: str


class OwnerSummary(CamelModel):
    id: str
    name: str
    avatar: str | None = None


# ── Request models ─────────────────────────────────────────────────────────────

class ReportCreate(CamelModel):
    """Body of ``POST /api/reports``.

    Required fields are checked by the lifecycle manager so the error can name
    the missing field; only types and ranges are enforced here.
    """

    title: str | None = None
    description: str | None = None
    ai_description: str | None = None
    issue_type: str | None = None
    location: str | None = None
    image: str | None = None
    urgency: Urgency | None = None
    confidence_score: float | None = Field(default=None, ge=0.0, le=1.0)
    authority: str | None = None


class ReportUpdate(CamelModel):
    """Body of ``PUT /api/reports/{id}``."""

    status: ReportStatus | None = None
    update_text: str | None = None


# ── Response models ────────────────────────────────────────────────────────────

class ReportResponse(CamelModel):
    id: str
    user_id: str
    user: OwnerSummary | None = None
    title: str
    description: str
    ai_description: str
    issue_type: str
    location: str
    image: str | None
    image_url: str | None = None
    status: ReportStatus
    urgency: Urgency
    confidence_score: float
    authority: str
    upvotes: int
    comments: int
    updates: list[UpdateEntry]
    created_at: datetime
    updated_at: datetime


class ReportEnvelope(CamelModel):
    success: bool = True
    report: ReportResponse


def _aware(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; all stored values are UTC.
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def report_response(row) -> ReportResponse:
    """Build the canonical wire shape from a ``ReportRow``.

    ``imageUrl`` is the stored ``image`` made fetchable against
    ``settings.api_base_url``; it is None when there is nothing to fetch.
    """
    owner = row.owner
    return ReportResponse(
        id=row.report_id,
        user_id=row.user_id,
        user=OwnerSummary(id=owner.user_id, name=owner.name, avatar=owner.avatar) if owner else None,
        title=row.title,
        description=row.description,
        ai_description=row.ai_description,
        issue_type=row.issue_type,
        location=row.location,
        image=row.image,
        image_url=resolve_for_display(row.image, settings.api_base_url),
        status=row.status,
        urgency=row.urgency,
        confidence_score=row.confidence_score,
        authority=row.authority,
        upvotes=row.upvotes,
        comments=row.comments,
        updates=[UpdateEntry(date=datetime.fromisoformat(u["date"]), text=u["text"]) for u in row.updates],
        created_at=_aware(row.created_at),
        updated_at=_aware(row.updated_at),
    )
