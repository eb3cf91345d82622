"""Client-side report model, normalised at the data-access boundary.

Server payloads are converted into one canonical :class:`Report` with a
single identity field (``id``) and a single owner reference (``user_id``),
whatever spelling the payload used.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from cityfix.models.enums import ReportStatus, Urgency
from cityfix.services.image_refs import resolve_for_display

PLACEHOLDER_PREFIX = "local-"


@dataclass(frozen=True)
class LocalImage:
    """A picked or captured photo.

    ``uri`` is where the image lives: a device-local URI before upload, or a
    server path / URL once it is durable.
    """

    uri: str
    data: bytes
    filename: str = "photo.jpg"
    content_type: str = "image/jpeg"


class UpdateEntry(BaseModel):
    date: datetime
    text: str


class Report(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    id: str
    user_id: str
    title: str
    description: str
    ai_description: str = ""
    issue_type: str = "Other"
    location: str
    image: str | None = None
    status: ReportStatus = ReportStatus.PENDING
    urgency: Urgency = Urgency.MEDIUM
    confidence_score: float = 0.0
    authority: str = "City Maintenance"
    upvotes: int = 0
    comments: int = 0
    updates: list[UpdateEntry] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @model_validator(mode="before")
    @classmethod
    def _normalise_identity(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if "id" not in data and "_id" in data:
            data["id"] = data.pop("_id")
        if "userId" not in data and "user_id" not in data:
            owner = data.get("user")
            if isinstance(owner, dict):
                owner = owner.get("id") or owner.get("_id")
            if owner:
                data["userId"] = owner
        return data

    @property
    def is_durable(self) -> bool:
        """False for placeholders that were never accepted by the server."""
        return not self.id.startswith(PLACEHOLDER_PREFIX)

    def display_image(self, base_url: str) -> str | None:
        """URL to render for this report's image, or None for a placeholder graphic."""
        return resolve_for_display(self.image, base_url)


def placeholder_report(payload: dict, owner_id: str) -> Report:
    """Local stand-in for a report the server did not confirm.

    Its id carries :data:`PLACEHOLDER_PREFIX` so later operations can tell it
    apart from a durable report.
    """
    now = datetime.now(timezone.utc)
    fields = {k: v for k, v in payload.items() if v is not None}
    fields.setdefault("title", f"{fields.get('issueType', 'Other')} Report")
    return Report.model_validate(
        {
            **fields,
            "id": f"{PLACEHOLDER_PREFIX}{uuid.uuid4().hex[:12]}",
            "userId": owner_id,
            "status": ReportStatus.PENDING,
            "createdAt": now,
            "updatedAt": now,
            "updates": [{"date": now, "text": "Report submitted"}],
        }
    )


def apply_local_update(
    report: Report, status: ReportStatus | str | None = None, update_text: str | None = None
) -> Report:
    """Apply a status change / free-text update to a placeholder without the network.

    Raises:
        ValueError: *status* is not a known report status.
    """
    status = ReportStatus(status) if status else None
    now = datetime.now(timezone.utc)
    updates = list(report.updates)
    changes: dict[str, Any] = {"updated_at": now}
    if status:
        changes["status"] = status
        updates.append(UpdateEntry(date=now, text=f"Status changed to {status.value}"))
    if update_text:
        updates.append(UpdateEntry(date=now, text=update_text))
    changes["updates"] = updates
    return report.model_copy(update=changes)
