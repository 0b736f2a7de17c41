# This project was developed with assistance from AI tools.
"""Tests for the backend client and the resident directory."""

import json

import httpx
import pytest

from resident_review.enums import ApplicationStatus, Decision, MembershipTier
from resident_review.schemas.resident import Application, DecisionRequest
from resident_review.services.backend import BackendClient
from resident_review.services.directory import ResidentDirectory, _decode_pending_page
from resident_review.services.errors import BackendError, BackendUnavailable


def _client(handler) -> BackendClient:
    return BackendClient("http://backend.test", transport=httpx.MockTransport(handler))


# ---------------------------------------------------------------------------
# BackendClient
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_request_sends_operator_token_and_drops_empty_params():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers.get("Authorization")
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json={"ok": True})

    body = await _client(handler).get("/x", token="tok", params={"page": 1, "orderBy": None})
    assert body == {"ok": True}
    assert seen["auth"] == "Bearer tok"
    assert seen["params"] == {"page": "1"}


@pytest.mark.asyncio
async def test_error_status_raises_backend_error_with_message():
    def handler(request):
        return httpx.Response(422, json={"message": ["reason must not be empty"]})

    with pytest.raises(BackendError) as exc_info:
        await _client(handler).get("/x")
    assert exc_info.value.status_code == 422
    assert exc_info.value.detail == "reason must not be empty"
    assert exc_info.value.retryable is False


@pytest.mark.asyncio
async def test_plain_text_error_body_is_used_verbatim():
    def handler(request):
        return httpx.Response(500, text="upstream exploded")

    with pytest.raises(BackendError) as exc_info:
        await _client(handler).get("/x")
    assert exc_info.value.detail == "upstream exploded"
    assert exc_info.value.retryable is True


@pytest.mark.asyncio
async def test_connect_failure_raises_backend_unavailable():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(BackendUnavailable) as exc_info:
        await _client(handler).get("/x")
    assert exc_info.value.status_code == 503


@pytest.mark.asyncio
async def test_timeout_raises_backend_unavailable():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(BackendUnavailable, match="did not respond in time"):
        await _client(handler).get("/x")


@pytest.mark.asyncio
async def test_unreadable_response_raises_backend_error():
    def handler(request):
        raise httpx.DecodingError("Malformed gzip body", request=request)

    with pytest.raises(BackendError) as exc_info:
        await _client(handler).put("/x")
    assert not isinstance(exc_info.value, BackendUnavailable)
    assert exc_info.value.status_code == 502
    assert exc_info.value.retryable is True


@pytest.mark.asyncio
async def test_empty_body_returns_none():
    body = await _client(lambda request: httpx.Response(204)).put("/x")
    assert body is None


# ---------------------------------------------------------------------------
# Pending list decoding
# ---------------------------------------------------------------------------


ROW = {
    "id": 7,
    "firstName": "Ana",
    "lastName": "Lopez",
    "phone": "0991234567",
    "verificationStatus": "UNDER_REVIEW",
    "property": {"block": "C", "apartment": "12"},
}


def test_decode_users_envelope_with_pagination():
    page = _decode_pending_page(
        {"users": [ROW], "pagination": {"total": 41, "page": 2, "limit": 20, "totalPages": 3}},
        page=2,
        limit=20,
    )
    assert [a.id for a in page.applications] == ["7"]
    assert page.applications[0].status == ApplicationStatus.PENDING
    assert page.applications[0].address.block == "C"
    assert page.pagination.total == 41
    assert page.pagination.total_pages == 3
    assert page.pagination.has_more is True


def test_decode_nested_data_envelope():
    page = _decode_pending_page({"data": {"users": [ROW]}}, page=1, limit=50)
    assert len(page.applications) == 1
    assert page.pagination.total == 1
    assert page.pagination.total_pages == 1


def test_decode_tolerates_null_pagination_fields():
    page = _decode_pending_page(
        {
            "users": [ROW],
            "pagination": {"total": None, "page": None, "limit": None, "totalPages": None},
        },
        page=3,
        limit=20,
    )
    assert page.pagination.total == 1
    assert page.pagination.page == 3
    assert page.pagination.limit == 20
    assert page.pagination.total_pages == 1


def test_decode_bare_list_and_empty_body():
    assert len(_decode_pending_page([ROW, ROW], page=1, limit=50).applications) == 2
    assert _decode_pending_page(None, page=1, limit=50).applications == []


def test_decode_skips_malformed_rows():
    page = _decode_pending_page({"data": [ROW, {"firstName": "No id"}]}, page=1, limit=50)
    assert [a.id for a in page.applications] == ["7"]


def test_application_accepts_directory_and_own_shape():
    directory = Application.model_validate(ROW)
    own = Application.model_validate(directory.model_dump())
    assert own == directory
    assert directory.full_name == "Ana Lopez"


# ---------------------------------------------------------------------------
# ResidentDirectory
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_list_pending_sends_paging_and_ordering(fake_backend, backend_client):
    directory = ResidentDirectory(backend_client, "tok")
    page = await directory.list_pending(page=1, limit=10, order_column="createdAt", order_by="DESC")

    assert {a.id for a in page.applications} == {"101", "102"}
    request = fake_backend.calls("GET", "/admin/users/pending-verification")[0]
    assert request.url.params["orderColumn"] == "createdAt"
    assert request.url.params["orderBy"] == "DESC"
    assert request.url.params["limit"] == "10"


@pytest.mark.asyncio
async def test_decide_sends_remote_payload(fake_backend, backend_client):
    directory = ResidentDirectory(backend_client, "tok")
    request = DecisionRequest(
        decision=Decision.APPROVED,
        reason="  Documents match  ",
        initial_membership_tier=MembershipTier.GOLD,
    )

    message = await directory.decide("101", request)

    assert message == "User approved successfully"
    sent = json.loads(fake_backend.decision_calls()[0].content)
    assert sent == {
        "decision": "APPROVED",
        "reason": "Documents match",
        "assignedRole": "resident",
        "initialMembershipTier": "GOLD",
    }


@pytest.mark.asyncio
async def test_get_application_not_found(backend_client):
    directory = ResidentDirectory(backend_client, "tok")
    with pytest.raises(BackendError) as exc_info:
        await directory.get_application("999")
    assert exc_info.value.status_code == 404
    assert exc_info.value.detail == "User not found"
