"""Tests for the CityFix API client against the real app and offline transports."""

import httpx
import pytest
from pydantic import ValidationError as PydanticValidationError

from cityfix.models.enums import ReportStatus
from cityfix_client.api_client import CityFixAPIClient, ClientContext
from cityfix_client.config import ClientConfig
from cityfix_client.errors import ApiError, NetworkError
from cityfix_client.models import LocalImage, Report, apply_local_update, placeholder_report
from cityfix_client.results import LocalOnly, Offline, Online

CONFIG = ClientConfig(api_url="http://test/api", base_url="http://test")


def refused(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("connection refused", request=request)


def must_not_call(request: httpx.Request) -> httpx.Response:
    raise AssertionError(f"unexpected network call: {request.method} {request.url}")


@pytest.fixture
async def api(app):
    anonymous = CityFixAPIClient(ClientContext(config=CONFIG), transport=httpx.ASGITransport(app=app))
    context = await anonymous.register("Erin", "erin@example.com", "secret123")
    return CityFixAPIClient(context, transport=httpx.ASGITransport(app=app))


def offline_client(handler=refused) -> CityFixAPIClient:
    context = ClientContext(config=CONFIG, token="t", user={"id": "usr_1"})
    return CityFixAPIClient(context, transport=httpx.MockTransport(handler))


class TestReportNormalisation:
    def test_underscore_id_and_embedded_user(self):
        report = Report.model_validate(
            {
                "_id": "abc",
                "user": {"_id": "u1", "name": "Ann"},
                "title": "t",
                "description": "d",
                "location": "l",
            }
        )
        assert report.id == "abc"
        assert report.user_id == "u1"
        assert report.is_durable

    def test_plain_user_reference(self):
        report = Report.model_validate(
            {"id": "r1", "user": "u9", "title": "t", "description": "d", "location": "l"}
        )
        assert report.user_id == "u9"

    def test_display_image(self):
        report = Report(
            id="r1", user_id="u", title="t", description="d", location="l", image="/api/uploads/img_1"
        )
        assert report.display_image("http://host:5000") == "http://host:5000/api/uploads/img_1"
        assert report.model_copy(update={"image": None}).display_image("http://h") is None


def test_context_is_immutable():
    context = ClientContext(config=CONFIG)
    signed_in = context.with_token("abc", {"id": "u1"})
    assert context.token is None
    assert context.headers() == {}
    assert signed_in.headers() == {"Authorization": "Bearer abc"}
    assert signed_in.user_id == "u1"


@pytest.mark.asyncio
async def test_login_returns_new_context(app, api):
    anonymous = CityFixAPIClient(ClientContext(config=CONFIG), transport=httpx.ASGITransport(app=app))
    context = await anonymous.login("erin@example.com", "secret123")
    assert context.token
    assert context.user["email"] == "erin@example.com"
    assert anonymous.context.token is None


@pytest.mark.asyncio
async def test_login_failure_raises_api_error(app):
    anonymous = CityFixAPIClient(ClientContext(config=CONFIG), transport=httpx.ASGITransport(app=app))
    with pytest.raises(ApiError) as exc_info:
        await anonymous.login("nobody@example.com", "secret123")
    assert exc_info.value.status_code == 401


@pytest.mark.asyncio
async def test_upload_create_and_read(api, png_bytes):
    path = await api.upload_image(LocalImage(uri="file:///tmp/a.png", data=png_bytes, filename="a.png", content_type="image/png"))
    assert path.startswith("/api/uploads/")

    report = await api.create_report(
        {"issueType": "Graffiti", "description": "Tags on wall", "location": "Library", "image": path}
    )
    assert report.is_durable
    assert report.user_id == api.context.user_id
    assert report.display_image(CONFIG.base_url) == f"http://test{path}"

    mine = await api.get_user_reports()
    assert isinstance(mine, Online)
    assert [r.id for r in mine.data] == [report.id]

    one = await api.get_report(report.id)
    assert isinstance(one, Online)
    assert one.data.title == "Graffiti Report"

    feed = await api.get_community_feed()
    assert isinstance(feed, Online)
    assert report.id in {r.id for r in feed.data}


@pytest.mark.asyncio
async def test_update_report_online(api):
    report = await api.create_report({"issueType": "Pothole", "description": "d", "location": "l"})
    result = await api.update_report(report, status="Resolved")
    assert isinstance(result, Online)
    assert result.data.status == "Resolved"
    assert result.data.updates[-1].text == "Status changed to Resolved"


@pytest.mark.asyncio
async def test_update_user(api):
    user = await api.update_user(name="Erin B")
    assert user["name"] == "Erin B"


@pytest.mark.asyncio
async def test_reads_report_offline_instead_of_fabricating():
    api = offline_client()
    assert isinstance(await api.get_user_reports(), Offline)
    assert isinstance(await api.get_community_feed(), Offline)
    assert isinstance(await api.get_report("rpt_1"), Offline)


@pytest.mark.asyncio
async def test_server_error_reads_as_offline():
    api = offline_client(lambda request: httpx.Response(503, json={"success": False, "message": "down"}))
    result = await api.get_user_reports()
    assert isinstance(result, Offline)
    assert result.reason == "down"


@pytest.mark.asyncio
async def test_client_error_on_read_is_raised():
    api = offline_client(lambda request: httpx.Response(404, json={"success": False, "message": "Report 'x' not found"}))
    with pytest.raises(ApiError) as exc_info:
        await api.get_report("x")
    assert exc_info.value.status_code == 404


@pytest.mark.asyncio
async def test_mutation_offline_raises_network_error():
    api = offline_client()
    with pytest.raises(NetworkError):
        await api.create_report({"description": "d"})


@pytest.mark.asyncio
async def test_placeholder_never_touches_network():
    api = offline_client(must_not_call)
    placeholder = placeholder_report(
        {"issueType": "Pothole", "description": "d", "location": "l"}, owner_id="usr_1"
    )
    assert not placeholder.is_durable
    assert placeholder.id.startswith("local-")

    result = await api.update_report(placeholder, status="In Progress", update_text="noted")
    assert isinstance(result, LocalOnly)
    assert result.data.status == "In Progress"
    assert [u.text for u in result.data.updates] == [
        "Report submitted",
        "Status changed to In Progress",
        "noted",
    ]

    fetched = await api.get_report(placeholder.id, local=placeholder)
    assert isinstance(fetched, LocalOnly)
    assert isinstance(await api.get_report(placeholder.id), Offline)


@pytest.mark.asyncio
async def test_unknown_status_is_rejected_before_any_update():
    api = offline_client(must_not_call)
    placeholder = placeholder_report({"description": "d", "location": "l"}, owner_id="usr_1")

    with pytest.raises(ValueError):
        apply_local_update(placeholder, status="Bogus")
    with pytest.raises(ValueError):
        await api.update_report(placeholder, status="Bogus")
    assert placeholder.status is ReportStatus.PENDING
    assert len(placeholder.updates) == 1


def test_report_with_unknown_status_or_urgency_fails_validation():
    base = {"id": "r1", "userId": "u", "title": "t", "description": "d", "location": "l"}
    with pytest.raises(PydanticValidationError):
        Report.model_validate({**base, "status": "Bogus"})
    with pytest.raises(PydanticValidationError):
        Report.model_validate({**base, "urgency": "critical"})
    assert Report.model_validate({**base, "status": "In Progress"}).status is ReportStatus.IN_PROGRESS
