"""Sample reports for the presentation layer to show while offline.

Nothing in the data-access layer returns these; a screen that receives an
``Offline`` result may choose to render them, clearly marked as samples.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from cityfix_client.models import PLACEHOLDER_PREFIX, Report

_SAMPLES = (
    ("Pothole", "Deep pothole in the right lane", "Main St & 5th Ave", "Pending", "high"),
    ("Broken Streetlight", "Streetlight out for a week", "Oak Park entrance", "In Progress", "medium"),
    ("Graffiti", "Graffiti on the library wall", "Central Library", "Resolved", "low"),
)


def placeholder_reports(now: datetime | None = None) -> list[Report]:
    """Non-durable sample reports, newest first."""
    now = now or datetime.now(timezone.utc)
    reports = []
    for i, (issue_type, description, location, status, urgency) in enumerate(_SAMPLES):
        created = now - timedelta(days=i)
        reports.append(
            Report(
                id=f"{PLACEHOLDER_PREFIX}sample-{i + 1}",
                user_id="",
                title=f"{issue_type} Report",
                description=description,
                issue_type=issue_type,
                location=location,
                status=status,
                urgency=urgency,
                updates=[{"date": created, "text": "Report submitted"}],
                created_at=created,
                updated_at=created,
            )
        )
    return reports
