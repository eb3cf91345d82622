"""Image analysis route used to pre-fill the report form."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, File, UploadFile

from cityfix.api.routes.uploads import read_upload
from cityfix.dependencies import Classifier, CurrentUser, Ingestion
from cityfix.models.classification import AnalyzeResponse
from cityfix.services.classification import mock_analyze

logger = logging.getLogger(__name__)

router = APIRouter(tags=["AI"])


@router.post("/ai/analyze", response_model=AnalyzeResponse)
async def analyze_image(
    current: CurrentUser,
    service: Ingestion,
    classifier: Classifier,
    image: UploadFile = File(...),
):
    """Store the image, then classify it.

    With an external classifier configured the gateway is used (and falls
    back on failure); otherwise a simulated classification is returned.
    """
    data = await read_upload(image, service)
    image_path = await service.ingest(data, image.content_type, image.filename, current["sub"])

    if classifier.classifier_url:
        result = await classifier.classify(
            data,
            filename=image.filename or "photo.jpg",
            content_type=image.content_type,
            server_path=image_path,
        )
    else:
        result = mock_analyze(image_path=image_path)

    logger.info("Analyzed %s as %s (%.2f, %s)", image_path, result.issue_type, result.confidence_score, result.source)
    return AnalyzeResponse(
        image_path=image_path,
        issue_type=result.issue_type,
        ai_description=result.ai_description,
        authority=result.authority,
        confidence_score=result.confidence_score,
        timestamp=datetime.now(timezone.utc),
    )
