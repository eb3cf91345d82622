"""Report table."""

from sqlalchemy import Float, ForeignKey, Integer, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cityfix.db.base import Base, TimestampMixin
from cityfix.db.models.user import UserRow


class ReportRow(Base, TimestampMixin):
    __tablename__ = "reports"

    report_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(128), ForeignKey("users.user_id"), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    ai_description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    issue_type: Mapped[str] = mapped_column(String(100), nullable=False, default="Other")
    location: Mapped[str] = mapped_column(String(500), nullable=False)
    image: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="Pending")
    urgency: Mapped[str] = mapped_column(String(10), nullable=False, default="medium")
    confidence_score: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    authority: Mapped[str] = mapped_column(String(200), nullable=False, default="City Maintenance")
    upvotes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    comments: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # Append-only log of {"date": iso8601, "text": str}
    updates: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    owner: Mapped[UserRow] = relationship(lazy="selectin")
