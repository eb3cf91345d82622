"""Async HTTP client for the CityFix API."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any

import httpx

from cityfix.models.enums import ReportStatus
from cityfix_client.config import ClientConfig
from cityfix_client.errors import ApiError, NetworkError
from cityfix_client.models import PLACEHOLDER_PREFIX, LocalImage, Report, apply_local_update
from cityfix_client.results import FetchResult, LocalOnly, Offline, Online

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClientContext:
    """Credentials and endpoints for one signed-in session.

    Passed explicitly to every client instead of living in module state, so
    two sessions can coexist.
    """

    config: ClientConfig = field(default_factory=ClientConfig)
    token: str | None = None
    user: dict | None = None

    @property
    def user_id(self) -> str | None:
        return (self.user or {}).get("id")

    def with_token(self, token: str, user: dict | None = None) -> ClientContext:
        return replace(self, token=token, user=user if user is not None else self.user)

    def headers(self) -> dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text or resp.reason_phrase
    if isinstance(body, dict):
        return body.get("message") or body.get("detail") or resp.reason_phrase
    return resp.reason_phrase


class CityFixAPIClient:
    """Talks to ``/api`` on behalf of a :class:`ClientContext`.

    Mutating calls raise :class:`NetworkError` when the server is unreachable
    and :class:`ApiError` when it refuses. Read calls return a
    :class:`FetchResult` instead: ``Offline`` on network failure or a 5xx,
    never fabricated data.
    """

    def __init__(self, context: ClientContext, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.context = context
        self._transport = transport

    @property
    def config(self) -> ClientConfig:
        return self.context.config

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = f"{self.config.api_url.rstrip('/')}{path}"
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self.config.timeout_seconds) as client:
                resp = await client.request(method, url, headers=self.context.headers(), **kwargs)
        except httpx.TransportError as exc:
            logger.warning("CityFix API unreachable: %s %s (%s)", method, path, exc)
            raise NetworkError(str(exc) or type(exc).__name__) from exc

        if resp.status_code >= 400:
            raise ApiError(resp.status_code, _error_message(resp))
        try:
            return resp.json()
        except ValueError as exc:
            raise ApiError(resp.status_code, "Response is not JSON") from exc

    async def _fetch(self, path: str) -> FetchResult:
        try:
            return Online(await self._request("GET", path))
        except NetworkError as exc:
            return Offline(str(exc))
        except ApiError as exc:
            if exc.status_code >= 500:
                return Offline(exc.message)
            raise

    # ── Auth ──────────────────────────────────────────────────────────────────

    async def register(self, name: str, email: str, password: str) -> ClientContext:
        body = await self._request("POST", "/auth/register", json={"name": name, "email": email, "password": password})
        return self.context.with_token(body["token"], body.get("user"))

    async def login(self, email: str, password: str) -> ClientContext:
        """Sign in and return a new context carrying the token."""
        body = await self._request("POST", "/auth/login", json={"email": email, "password": password})
        return self.context.with_token(body["token"], body.get("user"))

    async def update_user(self, **changes: Any) -> dict:
        body = await self._request("PUT", "/auth/user", json=changes)
        return body["user"]

    # ── Images ────────────────────────────────────────────────────────────────

    async def upload_image(self, image: LocalImage) -> str:
        """Upload *image* and return its canonical server path."""
        body = await self._request(
            "POST", "/uploads", files={"file": (image.filename, image.data, image.content_type)}
        )
        return body["imagePath"]

    async def analyze_image(self, image: LocalImage) -> dict:
        body = await self._request(
            "POST", "/ai/analyze", files={"image": (image.filename, image.data, image.content_type)}
        )
        return body

    # ── Reports ───────────────────────────────────────────────────────────────

    async def create_report(self, payload: dict) -> Report:
        body = await self._request("POST", "/reports", json=payload)
        return Report.model_validate(body["report"])

    async def get_user_reports(self) -> FetchResult:
        result = await self._fetch("/reports")
        if isinstance(result, Online):
            return Online([Report.model_validate(r) for r in result.data])
        return result

    async def get_community_feed(self) -> FetchResult:
        result = await self._fetch("/reports/community/feed")
        if isinstance(result, Online):
            return Online([Report.model_validate(r) for r in result.data])
        return result

    async def get_report(self, report_id: str, local: Report | None = None) -> FetchResult:
        """Fetch one report.

        Placeholder ids never reach the server; the caller's local copy is
        handed back as ``LocalOnly``.
        """
        if report_id.startswith(PLACEHOLDER_PREFIX):
            if local is None:
                return Offline(f"Report {report_id} exists only on this device")
            return LocalOnly(local)
        result = await self._fetch(f"/reports/{report_id}")
        if isinstance(result, Online):
            return Online(Report.model_validate(result.data))
        return result

    async def update_report(
        self,
        report: Report,
        status: ReportStatus | str | None = None,
        update_text: str | None = None,
    ) -> Online[Report] | LocalOnly[Report]:
        status = ReportStatus(status) if status else None
        if not report.is_durable:
            logger.info("Report %s is local only, applying update without the network", report.id)
            return LocalOnly(apply_local_update(report, status, update_text))
        payload = {k: v for k, v in {"status": status, "updateText": update_text}.items() if v is not None}
        body = await self._request("PUT", f"/reports/{report.id}", json=payload)
        return Online(Report.model_validate(body["report"]))
