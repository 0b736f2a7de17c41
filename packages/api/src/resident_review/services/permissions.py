# This project was developed with assistance from AI tools.
"""Operator permission set and the UI permission gate.

The gate only decides which actions the dashboard offers. It is NOT an
authorization layer: every privileged call is still sent to the backend
with the operator's own token, and the backend's answer is final.
"""

import asyncio
import logging

from pydantic import ValidationError

from ..enums import GateState, PermissionLoadState
from ..schemas.permission import PermissionList, PermissionRecord
from .backend import BackendClient
from .errors import BackendError, PermissionsNotLoaded

logger = logging.getLogger(__name__)


def decode_permissions(body) -> list[PermissionRecord]:
    """Decode the operator's permissions from the profile response.

    Accepts ``{"role": {"permissions": [...]}}`` (optionally under ``data`` or
    ``user``), ``{"permissions": [...]}`` or a bare list. Entries may be
    strings or objects; both become ``PermissionRecord``.

    Raises:
        BackendError: the payload does not validate.
    """
    payload = body.get("data", body) if isinstance(body, dict) else body
    if isinstance(payload, dict) and isinstance(payload.get("user"), dict):
        payload = payload["user"]

    raw = None
    if isinstance(payload, dict):
        role = payload.get("role")
        if isinstance(role, dict):
            raw = role.get("permissions")
        if raw is None:
            raw = payload.get("permissions")
    elif isinstance(payload, list):
        raw = payload

    try:
        return PermissionList.validate_python(raw or [])
    except ValidationError as exc:
        raise BackendError(502, "The backend returned an unreadable permission set.") from exc


class PermissionService:
    """Loads the operator's permissions from the backend."""

    def __init__(self, client: BackendClient, token: str | None, path: str):
        self._client = client
        self._token = token
        self._path = path

    async def load_permissions(self) -> list[PermissionRecord]:
        body = await self._client.get(self._path, token=self._token)
        return decode_permissions(body)


class PermissionGate:
    """Session-scoped permission set with a neutral state while loading."""

    def __init__(self, service: PermissionService):
        self._service = service
        self._load_state = PermissionLoadState.IDLE
        self._records: tuple[PermissionRecord, ...] = ()
        self._granted: frozenset[str] = frozenset()
        self._error: str | None = None
        self._pending: asyncio.Task | None = None

    @property
    def load_state(self) -> PermissionLoadState:
        return self._load_state

    @property
    def records(self) -> tuple[PermissionRecord, ...]:
        return self._records

    @property
    def error(self) -> str | None:
        return self._error

    async def _fetch(self) -> None:
        self._load_state = PermissionLoadState.LOADING
        try:
            records = await self._service.load_permissions()
        except BackendError as exc:
            logger.warning("Permission set failed to load: %s", exc.detail)
            self._records = ()
            self._granted = frozenset()
            self._error = exc.detail
            self._load_state = PermissionLoadState.ERROR
            return
        self._records = tuple(records)
        self._granted = frozenset(r.id for r in records) | frozenset(r.name for r in records)
        self._error = None
        self._load_state = PermissionLoadState.LOADED
        logger.info("Loaded %d permissions", len(records))

    async def load(self) -> PermissionLoadState:
        """Load the set once per session; concurrent callers share one fetch."""
        if self._load_state in (PermissionLoadState.LOADED, PermissionLoadState.ERROR):
            return self._load_state
        if self._pending is None or self._pending.done():
            self._pending = asyncio.create_task(self._fetch(), name="permission-load")
        await asyncio.shield(self._pending)
        return self._load_state

    async def reload(self) -> PermissionLoadState:
        """Discard the current set and fetch it again."""
        if self._pending is not None and not self._pending.done():
            await asyncio.shield(self._pending)
        self._load_state = PermissionLoadState.IDLE
        self._pending = None
        return await self.load()

    def state(self, permission_id: str) -> GateState:
        """What the dashboard should render for a gated action."""
        if self._load_state in (PermissionLoadState.IDLE, PermissionLoadState.LOADING):
            return GateState.CHECKING
        return GateState.ALLOWED if permission_id in self._granted else GateState.DENIED

    def has_permission(self, permission_id: str) -> bool:
        """Answer from the loaded set without a backend call.

        Raises:
            PermissionsNotLoaded: the set is still loading (or was never loaded).
        """
        if self._load_state in (PermissionLoadState.IDLE, PermissionLoadState.LOADING):
            raise PermissionsNotLoaded("Permissions are still loading.")
        return permission_id in self._granted
