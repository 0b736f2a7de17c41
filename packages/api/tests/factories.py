# This project was developed with assistance from AI tools.
"""Shared test factories.

``FakeBackend`` is an in-memory stand-in for the property-management
backend, served to ``BackendClient`` through ``httpx.MockTransport``. It
records every request so tests can assert on exactly what was sent.
"""

import json
import re

import httpx

from resident_review.enums import UserRole
from resident_review.schemas.auth import UserContext
from resident_review.services.backend import BackendClient

BASE_URL = "http://backend.test"

_APPROVE = re.compile(r"^/admin/users/([^/]+)/approve$")
_DOCUMENT = re.compile(r"^/admin/users/([^/]+)/documents/(national_id|ownership_document)$")
_RESIDENT = re.compile(r"^/admin/users/([^/]+)$")


def make_user(role: UserRole = UserRole.ADMIN, **kwargs) -> UserContext:
    """Build a UserContext for the given role."""
    defaults = {
        "user_id": "operator-1",
        "email": "operator@example.com",
        "name": "Test Operator",
        "access_token": "token-operator-1",
    }
    defaults.update(kwargs)
    return UserContext(role=role, **defaults)


def make_resident(
    id="101",
    first_name="Ana",
    last_name="Lopez",
    block="B",
    apartment="402",
    phone="+593991234567",
    email="ana@example.com",
    status="PENDING",
    created_at="2026-01-15T10:00:00",
    membership_tier=None,
) -> dict:
    """A resident row in the backend's own camelCase shape."""
    return {
        "id": id,
        "firstName": first_name,
        "lastName": last_name,
        "phone": phone,
        "email": email,
        "verificationStatus": status,
        "createdAt": created_at,
        "membershipTier": membership_tier,
        "property": {"block": block, "apartment": apartment},
    }


class FakeBackend:
    """Scriptable backend served over ``httpx.MockTransport``."""

    def __init__(self):
        self.residents: dict[str, dict] = {}
        # (resident id, kind) -> url string, or an int status code to fail with
        self.documents: dict[tuple[str, str], str | int] = {}
        self.permissions: list = [
            {
                "id": "APPROVE_RESIDENT",
                "name": "APPROVE_RESIDENT",
                "description": "Approve resident registrations",
                "action": "approve",
                "resource": "resident",
            }
        ]
        self.permissions_error: tuple[int, str] | None = None
        self.pending_error: tuple[int, str] | None = None
        self.decision_errors: dict[str, tuple[int, str]] = {}
        # resident ids whose approve PUT fails with a response httpx cannot decode
        self.unreadable_decisions: set[str] = set()
        self.network_down = False
        self.requests: list[httpx.Request] = []

    # -- setup helpers ----------------------------------------------------

    def add_resident(self, **kwargs) -> dict:
        row = make_resident(**kwargs)
        self.residents[row["id"]] = row
        return row

    def add_documents(self, resident_id: str, national_id=None, ownership_document=None) -> None:
        if national_id is not None:
            self.documents[(resident_id, "national_id")] = national_id
        if ownership_document is not None:
            self.documents[(resident_id, "ownership_document")] = ownership_document

    def client(self) -> BackendClient:
        return BackendClient(BASE_URL, timeout=5, transport=httpx.MockTransport(self.handle))

    # -- inspection -------------------------------------------------------

    def calls(self, method: str, path: str | None = None) -> list[httpx.Request]:
        return [
            r
            for r in self.requests
            if r.method == method and (path is None or r.url.path == path)
        ]

    def decision_calls(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == "PUT" and _APPROVE.match(r.url.path)]

    def pending_reads(self) -> int:
        return len(self.calls("GET", "/admin/users/pending-verification"))

    # -- handler ----------------------------------------------------------

    @staticmethod
    def _error(status_code: int, message: str) -> httpx.Response:
        return httpx.Response(status_code, json={"statusCode": status_code, "message": message})

    async def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.network_down:
            raise httpx.ConnectError("Connection refused", request=request)
        path = request.url.path

        if path == "/admin/users/pending-verification" and request.method == "GET":
            return self._pending(request)
        if path == "/auth/me-v2" and request.method == "GET":
            if self.permissions_error:
                return self._error(*self.permissions_error)
            return httpx.Response(
                200,
                json={"data": {"role": {"name": "admin", "permissions": self.permissions}}},
            )

        match = _APPROVE.match(path)
        if match and request.method == "PUT":
            if match.group(1) in self.unreadable_decisions:
                raise httpx.DecodingError("Malformed gzip body", request=request)
            return self._decide(match.group(1), json.loads(request.content))

        match = _DOCUMENT.match(path)
        if match and request.method == "GET":
            return self._document(match.group(1), match.group(2))

        match = _RESIDENT.match(path)
        if match and request.method == "GET":
            row = self.residents.get(match.group(1))
            if row is None:
                return self._error(404, "User not found")
            return httpx.Response(200, json={"data": row})

        return self._error(404, f"Cannot {request.method} {path}")

    def _pending(self, request: httpx.Request) -> httpx.Response:
        if self.pending_error:
            return self._error(*self.pending_error)
        page = int(request.url.params.get("page", 1))
        limit = int(request.url.params.get("limit", 50))
        rows = [r for r in self.residents.values() if r["verificationStatus"] == "PENDING"]
        start = (page - 1) * limit
        return httpx.Response(
            200,
            json={
                "users": rows[start : start + limit],
                "pagination": {
                    "total": len(rows),
                    "page": page,
                    "limit": limit,
                    "totalPages": max(1, -(-len(rows) // limit)),
                },
            },
        )

    def _decide(self, resident_id: str, body: dict) -> httpx.Response:
        if resident_id in self.decision_errors:
            return self._error(*self.decision_errors[resident_id])
        row = self.residents.get(resident_id)
        if row is None:
            return self._error(404, "User not found")
        if row["verificationStatus"] != "PENDING":
            return self._error(409, "User has already been verified")
        row["verificationStatus"] = body["decision"]
        row["membershipTier"] = body.get("initialMembershipTier")
        verb = "approved" if body["decision"] == "APPROVED" else "rejected"
        return httpx.Response(200, json={"message": f"User {verb} successfully"})

    def _document(self, resident_id: str, kind: str) -> httpx.Response:
        value = self.documents.get((resident_id, kind))
        if value is None:
            return self._error(404, "Document not found")
        if isinstance(value, int):
            return self._error(value, "Storage backend failure")
        return httpx.Response(200, json={"data": {"staticUrl": value}})
