"""Issue classification gateway.

Classification only pre-fills the report form, so it must never block a
submission: every failure of the external classifier is absorbed here and
replaced with a fixed fallback candidate list.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass

import httpx
from pydantic import ValidationError as PydanticValidationError

from cityfix.errors.exceptions import UpstreamUnavailableError
from cityfix.models.classification import ClassificationCandidate, ClassificationResult
from cityfix.models.enums import ClassificationSource

logger = logging.getLogger(__name__)

DEFAULT_AUTHORITY = "City Maintenance"


@dataclass(frozen=True)
class IssueProfile:
    description: str
    authority: str


ISSUE_CATALOG: dict[str, IssueProfile] = {
    "Pothole": IssueProfile(
        description=(
            "Image shows a road defect characterized as a pothole. The depression in the "
            "road surface appears to be approximately 30-40cm in diameter with jagged edges. "
            "This could pose hazards to vehicles and requires repair."
        ),
        authority=DEFAULT_AUTHORITY,
    ),
    "Broken Streetlight": IssueProfile(
        description=(
            "The image shows a non-functioning streetlight. The light fixture appears intact "
            "but is not illuminated. This creates a safety concern for pedestrians and "
            "vehicles in the area."
        ),
        authority="Public Works - Electrical",
    ),
    "Graffiti": IssueProfile(
        description=(
            "Unauthorized marking or painting detected on public property, covering roughly "
            "1-2 square meters of surface area with multiple colors."
        ),
        authority="Parks Department",
    ),
    "Illegal Dumping": IssueProfile(
        description=(
            "Improperly disposed waste materials in a public area. This may include household "
            "items, construction debris, or general refuse placed outside designated disposal "
            "areas."
        ),
        authority="Environmental Services",
    ),
    "Fallen Tree": IssueProfile(
        description=(
            "A tree has fallen and is obstructing a path or road, possibly blocking vehicle or "
            "pedestrian traffic. Prompt removal is recommended to restore normal access."
        ),
        authority="Parks & Recreation Department",
    ),
}

FALLBACK_CANDIDATES: tuple[ClassificationCandidate, ...] = (
    ClassificationCandidate(label="Pothole", confidence=0.85),
    ClassificationCandidate(label="Broken Sidewalk", confidence=0.65),
    ClassificationCandidate(label="Water Damage", confidence=0.45),
)


def authority_for(issue_type: str | None) -> str:
    """Department responsible for *issue_type*."""
    profile = ISSUE_CATALOG.get(issue_type or "")
    return profile.authority if profile else DEFAULT_AUTHORITY


def describe(issue_type: str | None) -> str:
    """Human-readable description to pre-fill for *issue_type*."""
    profile = ISSUE_CATALOG.get(issue_type or "")
    if profile:
        return profile.description
    if issue_type:
        return f"Possible {issue_type.lower()} detected in the image. Please review and add details."
    return "No issue could be identified in the image. Please describe the problem."


def build_result(
    candidates: list[ClassificationCandidate] | tuple[ClassificationCandidate, ...],
    source: ClassificationSource,
    image_path: str | None = None,
) -> ClassificationResult:
    """Assemble a result; description and authority follow the top candidate."""
    top = max(candidates, key=lambda c: c.confidence) if candidates else None
    issue_type = top.label if top else "Other"
    return ClassificationResult(
        candidates=list(candidates),
        issue_type=issue_type,
        ai_description=describe(issue_type),
        authority=authority_for(issue_type),
        confidence_score=top.confidence if top else 0.0,
        image_path=image_path,
        source=source,
    )


def fallback_result(image_path: str | None = None) -> ClassificationResult:
    return build_result(FALLBACK_CANDIDATES, ClassificationSource.FALLBACK, image_path)


def mock_analyze(rng: random.Random | None = None, image_path: str | None = None) -> ClassificationResult:
    """Simulated classifier: a random catalog type with confidence in [0.70, 1.00]."""
    rng = rng or random.Random()
    issue_type = rng.choice(list(ISSUE_CATALOG))
    confidence = round(rng.uniform(0.7, 1.0), 2)
    return build_result(
        [ClassificationCandidate(label=issue_type, confidence=confidence)],
        ClassificationSource.MOCK,
        image_path,
    )


class ClassificationGateway:
    """Forwards images to an external classifier and never raises.

    The external endpoint receives a multipart form with the image under
    ``file`` (and ``serverPath`` when the image is already uploaded) and
    answers ``{"predictions": [{"label": ..., "confidence": ...}], "image_path": ...}``.
    """

    def __init__(
        self,
        classifier_url: str | None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.classifier_url = classifier_url
        self.timeout = timeout
        self._transport = transport

    async def classify(
        self,
        image: bytes,
        filename: str = "photo.jpg",
        content_type: str = "image/jpeg",
        server_path: str | None = None,
    ) -> ClassificationResult:
        if not self.classifier_url:
            logger.info("No classifier configured, using fallback candidates")
            return fallback_result(server_path)

        try:
            candidates, image_path = await self._request(image, filename, content_type, server_path)
        except UpstreamUnavailableError as exc:
            logger.warning("Classifier fallback used: %s", exc.message)
            return fallback_result(server_path)

        return build_result(candidates, ClassificationSource.EXTERNAL, image_path or server_path)

    async def _request(
        self,
        image: bytes,
        filename: str,
        content_type: str,
        server_path: str | None,
    ) -> tuple[list[ClassificationCandidate], str | None]:
        files = {"file": (filename, image, content_type)}
        data = {"serverPath": server_path} if server_path else None
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
                resp = await client.post(self.classifier_url, files=files, data=data)
            resp.raise_for_status()
            body = resp.json()
        except httpx.HTTPError as exc:
            raise UpstreamUnavailableError("classifier", str(exc) or type(exc).__name__) from exc
        except ValueError as exc:
            raise UpstreamUnavailableError("classifier", "response is not JSON") from exc

        predictions = body.get("predictions") if isinstance(body, dict) else None
        if not isinstance(predictions, list):
            raise UpstreamUnavailableError("classifier", "response has no predictions list")
        if not predictions:
            raise UpstreamUnavailableError("classifier", "response has no predictions")
        try:
            candidates = [ClassificationCandidate.model_validate(p) for p in predictions]
        except PydanticValidationError as exc:
            raise UpstreamUnavailableError("classifier", f"malformed prediction: {exc.error_count()} error(s)") from exc

        image_path = body.get("image_path")
        return candidates, image_path if isinstance(image_path, str) else None
