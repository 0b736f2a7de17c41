# This project was developed with assistance from AI tools.
"""Resident directory collaborator.

Reads pending applications and submits verdicts. The directory owns the
application records and is the only source of truth for their status.
"""

import logging
import math

from pydantic import ValidationError

from ..schemas import Pagination
from ..schemas.resident import Application, DecisionRequest, PendingPage
from .backend import BackendClient
from .errors import BackendError

logger = logging.getLogger(__name__)

PENDING_PATH = "/admin/users/pending-verification"


def application_path(application_id: str) -> str:
    return f"/admin/users/{application_id}"


def approve_path(application_id: str) -> str:
    return f"/admin/users/{application_id}/approve"


def _unwrap(body) -> dict:
    """Strip the ``{"data": {...}}`` envelope some endpoints add."""
    if isinstance(body, dict) and isinstance(body.get("data"), dict):
        return body["data"]
    return body if isinstance(body, dict) else {}


def _decode_applications(rows: list) -> list[Application]:
    """Decode directory rows, skipping (and logging) malformed ones."""
    applications = []
    for row in rows:
        try:
            applications.append(Application.model_validate(row))
        except ValidationError:
            logger.warning("Skipping malformed pending resident row: %r", row)
    return applications


def _decode_pending_page(body, page: int, limit: int) -> PendingPage:
    """Decode the pending list in any of the shapes the directory uses.

    ``{"users": [...]}``, ``{"data": [...]}``, ``{"data": {"users": [...]}}``
    and a bare list all appear depending on backend version.
    """
    outer_meta = body.get("pagination") if isinstance(body, dict) else None
    if isinstance(body, dict):
        payload = _unwrap(body)
    else:
        payload = body if isinstance(body, list) else {}

    if isinstance(payload, list):
        rows, meta = payload, {}
    else:
        rows = payload.get("users")
        if rows is None:
            rows = payload.get("data")
        meta = payload.get("pagination") or {}
    if not isinstance(rows, list):
        rows = []
    meta = meta or outer_meta or {}

    applications = _decode_applications(rows)
    # Directory versions send null for fields they do not compute.
    total = int(meta.get("total") or len(applications))
    limit = int(meta.get("limit") or limit)
    pagination = Pagination(
        total=total,
        page=int(meta.get("page") or page),
        limit=limit,
        total_pages=int(meta.get("totalPages") or (math.ceil(total / limit) if limit else 1)),
    )
    return PendingPage(applications=applications, pagination=pagination)


class ResidentDirectory:
    """Calls the directory endpoints as one operator."""

    def __init__(self, client: BackendClient, token: str | None):
        self._client = client
        self._token = token

    async def list_pending(
        self,
        *,
        page: int = 1,
        limit: int = 50,
        order_column: str | None = None,
        order_by: str | None = None,
    ) -> PendingPage:
        """Return one page of applications awaiting verification."""
        body = await self._client.get(
            PENDING_PATH,
            token=self._token,
            params={
                "page": page,
                "limit": limit,
                "orderColumn": order_column,
                "orderBy": order_by,
            },
        )
        return _decode_pending_page(body, page, limit)

    async def get_application(self, application_id: str) -> Application:
        """Fetch one application by id.

        Raises:
            BackendError: 404 when the directory has no such resident.
        """
        body = await self._client.get(application_path(application_id), token=self._token)
        try:
            return Application.model_validate(_unwrap(body))
        except ValidationError as exc:
            raise BackendError(502, "The backend returned an unreadable resident record.") from exc

    async def decide(self, application_id: str, request: DecisionRequest) -> str:
        """Submit a verdict. Returns the directory's confirmation message."""
        body = await self._client.put(
            approve_path(application_id),
            token=self._token,
            json=request.to_remote(),
        )
        message = ""
        if isinstance(body, dict):
            message = str(body.get("message") or _unwrap(body).get("message") or "")
        logger.info(
            "Directory accepted decision %s for application %s",
            request.decision.value,
            application_id,
        )
        return message
