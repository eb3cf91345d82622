"""Pydantic models for issue classification results."""

from datetime import datetime

from pydantic import Field

from cityfix.models.common import CamelModel
from cityfix.models.enums import ClassificationSource


class ClassificationCandidate(CamelModel):
    label: str
    confidence: float = Field(ge=0.0, le=1.0)


class ClassificationResult(CamelModel):
    """Advisory classification used to pre-fill the report form."""

    candidates: list[ClassificationCandidate]
    issue_type: str
    ai_description: str
    authority: str
    confidence_score: float = Field(ge=0.0, le=1.0)
    image_path: str | None = None
    source: ClassificationSource


class AnalyzeResponse(CamelModel):
    success: bool = True
    image_path: str
    issue_type: str
    ai_description: str
    authority: str
    confidence_score: float
    timestamp: datetime
