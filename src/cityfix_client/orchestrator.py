"""Drives one photo through classification, upload and report creation.

A flow runs: prepare the image, classify it, wait for the user to pick one
candidate label, upload the image if it is still on the device, then create
the report. Only one unfinished flow may exist per image.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from enum import StrEnum

from pydantic import ValidationError as PydanticValidationError

from cityfix.models.classification import ClassificationCandidate, ClassificationResult
from cityfix.models.enums import ClassificationSource, ImageRefKind, Urgency
from cityfix.services.classification import (
    ClassificationGateway,
    authority_for,
    build_result,
    describe,
    fallback_result,
)
from cityfix.services.image_refs import classify_reference
from cityfix_client.api_client import CityFixAPIClient
from cityfix_client.errors import (
    ApiError,
    FlowInProgressError,
    FlowStateError,
    NetworkError,
    SubmissionError,
)
from cityfix_client.image_prep import prepare_image
from cityfix_client.models import LocalImage, Report, placeholder_report

logger = logging.getLogger(__name__)

_DURABLE_KINDS = (ImageRefKind.SERVER_RELATIVE, ImageRefKind.ABSOLUTE_URL)


class FlowState(StrEnum):
    AWAITING_LABEL = "awaiting_label"
    LABEL_CHOSEN = "label_chosen"
    SUBMITTED = "submitted"
    FAILED = "failed"
    ABANDONED = "abandoned"


class SubmissionOrchestrator:
    """Starts submission flows and guards against duplicates per image.

    With a *classifier* (or ``classifier_url`` in the client config) the image
    is classified directly; otherwise the server's analyze endpoint is used,
    which also stores the image so the later upload step is skipped.
    """

    def __init__(self, api: CityFixAPIClient, classifier: ClassificationGateway | None = None) -> None:
        self.api = api
        if classifier is None and api.config.classifier_url:
            classifier = ClassificationGateway(api.config.classifier_url, timeout=api.config.timeout_seconds)
        self.classifier = classifier
        self._in_flight: set[str] = set()

    def is_in_flight(self, image_uri: str) -> bool:
        return image_uri in self._in_flight

    async def begin(self, image: LocalImage) -> SubmissionFlow:
        if image.uri in self._in_flight:
            raise FlowInProgressError(image.uri)
        self._in_flight.add(image.uri)
        try:
            config = self.api.config
            prepared = prepare_image(image, config.max_image_bytes, config.max_image_width)
            result, server_path = await self._classify(prepared)
        except Exception:
            self._in_flight.discard(image.uri)
            raise
        return SubmissionFlow(self, prepared, result, server_path)

    async def _classify(self, image: LocalImage) -> tuple[ClassificationResult, str | None]:
        if self.classifier is not None:
            return await self.classifier.classify(image.data, image.filename, image.content_type), None

        try:
            body = await self.api.analyze_image(image)
        except (NetworkError, ApiError) as exc:
            logger.warning("Analyze failed for %s, using fallback candidates: %s", image.uri, exc)
            return fallback_result(), None

        try:
            candidate = ClassificationCandidate(
                label=body.get("issueType") or "Other",
                confidence=body.get("confidenceScore") or 0.0,
            )
        except PydanticValidationError:
            logger.warning("Analyze returned a malformed result for %s, using fallback candidates", image.uri)
            return fallback_result(), None

        image_path = body.get("imagePath")
        return build_result([candidate], ClassificationSource.EXTERNAL, image_path), image_path

    def _release(self, image_uri: str) -> None:
        self._in_flight.discard(image_uri)


class SubmissionFlow:
    """One photo's way from candidates to a created report."""

    def __init__(
        self,
        orchestrator: SubmissionOrchestrator,
        image: LocalImage,
        classification: ClassificationResult,
        server_path: str | None = None,
    ) -> None:
        self._orchestrator = orchestrator
        self.image = image if server_path is None else replace(image, uri=server_path)
        self.source_uri = image.uri
        self.classification = classification
        self.state = FlowState.AWAITING_LABEL
        self.label: str | None = None

    @property
    def candidates(self) -> list[str]:
        ranked = sorted(self.classification.candidates, key=lambda c: c.confidence, reverse=True)
        return [c.label for c in ranked]

    @property
    def finished(self) -> bool:
        return self.state in (FlowState.SUBMITTED, FlowState.FAILED, FlowState.ABANDONED)

    def choose(self, label: str) -> None:
        """Pick the issue type; nothing is chosen by default."""
        if self.finished:
            raise FlowStateError(f"Flow is already {self.state}")
        if label not in self.candidates:
            raise FlowStateError(f"'{label}' is not one of the candidates: {', '.join(self.candidates)}")
        self.label = label
        self.state = FlowState.LABEL_CHOSEN

    def abandon(self) -> None:
        if not self.finished:
            self.state = FlowState.ABANDONED
            self._orchestrator._release(self.source_uri)

    async def submit(
        self,
        description: str,
        location: str,
        urgency: Urgency | str = Urgency.MEDIUM,
        title: str | None = None,
    ) -> Report:
        """Upload if needed, then create the report.

        Returns the server's report, or a non-durable placeholder when the
        server could not be reached for the create call.

        Raises:
            FlowStateError: no label was chosen or the flow already finished.
            SubmissionError: the upload failed or the server rejected the report.
        """
        if self.state is not FlowState.LABEL_CHOSEN:
            raise FlowStateError("A label must be chosen before submitting")
        urgency = Urgency(urgency)
        api = self._orchestrator.api

        try:
            image_path = await self._ensure_uploaded(api)
            payload = self._payload(description, location, urgency, title, image_path)
            try:
                report = await api.create_report(payload)
            except NetworkError as exc:
                logger.warning("Create report failed offline, keeping a local placeholder: %s", exc)
                report = placeholder_report(payload, api.context.user_id or "")
            except ApiError as exc:
                raise SubmissionError(exc.message) from exc
        except Exception:
            self.state = FlowState.FAILED
            raise
        finally:
            self._orchestrator._release(self.source_uri)

        self.state = FlowState.SUBMITTED
        return report

    async def _ensure_uploaded(self, api: CityFixAPIClient) -> str:
        if classify_reference(self.image.uri) in _DURABLE_KINDS:
            return self.image.uri
        try:
            path = await api.upload_image(self.image)
        except (NetworkError, ApiError) as exc:
            raise SubmissionError(f"Image upload failed: {exc}") from exc
        self.image = replace(self.image, uri=path)
        return path

    def _payload(
        self,
        description: str,
        location: str,
        urgency: Urgency,
        title: str | None,
        image_path: str,
    ) -> dict:
        label = self.label
        confidence = next(
            (c.confidence for c in self.classification.candidates if c.label == label), 0.0
        )
        if label == self.classification.issue_type:
            ai_description = self.classification.ai_description
        else:
            ai_description = describe(label)
        return {
            "title": title or f"{label} Report",
            "description": description,
            "aiDescription": ai_description,
            "issueType": label,
            "location": location,
            "image": image_path,
            "urgency": urgency.value,
            "confidenceScore": confidence,
            "authority": authority_for(label),
        }
