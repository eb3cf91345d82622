"""SQLAlchemy ORM models - import all to register with Base.metadata."""

from cityfix.db.models.user import UserRow
from cityfix.db.models.report import ReportRow
from cityfix.db.models.image import ImageRow

__all__ = [
    "UserRow",
    "ReportRow",
    "ImageRow",
]
