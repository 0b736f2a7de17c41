# This project was developed with assistance from AI tools.
"""HTTP client for the property-management backend.

One ``httpx.AsyncClient`` is shared by every operator session and opened at
app startup via ``init_backend_client()``. Each call carries the operator's
own bearer token so the backend authorizes every request itself.
"""

import logging
from typing import Any

import httpx

from ..core.config import Settings
from .errors import BackendError, BackendUnavailable

logger = logging.getLogger(__name__)


def _error_detail(response: httpx.Response) -> str:
    """Pull the human-readable message out of a backend error body."""
    try:
        body = response.json()
    except ValueError:
        return response.text.strip() or response.reason_phrase or "Backend error"

    if isinstance(body, dict):
        for key in ("message", "detail", "error"):
            value = body.get(key)
            if isinstance(value, list):
                value = "; ".join(str(v) for v in value)
            if value:
                return str(value)
    return response.reason_phrase or "Backend error"


class BackendClient:
    """Thin wrapper around a shared ``httpx.AsyncClient``."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        api_key: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        headers = {"Accept": "application/json"}
        if api_key:
            headers["X-API-Key"] = api_key
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            headers=headers,
            transport=transport,
        )

    async def request(
        self,
        method: str,
        path: str,
        *,
        token: str | None = None,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> Any:
        """Send one request and return the decoded JSON body (None when empty).

        Raises:
            BackendUnavailable: connect failure or timeout.
            BackendError: any non-2xx answer, with the backend's own message,
                or 502 for a response httpx could not read.
        """
        headers = {"Authorization": f"Bearer {token}"} if token else None
        if params:
            params = {k: v for k, v in params.items() if v is not None}

        try:
            response = await self._client.request(
                method, path, params=params, json=json, headers=headers
            )
        except httpx.TimeoutException as exc:
            logger.warning("Backend %s %s timed out", method, path)
            raise BackendUnavailable("The backend did not respond in time.") from exc
        except httpx.TransportError as exc:
            logger.warning("Backend %s %s failed: %s", method, path, exc)
            raise BackendUnavailable("The backend is unreachable.") from exc
        except httpx.RequestError as exc:
            logger.warning("Backend %s %s failed: %s", method, path, exc)
            raise BackendError(502, "The backend sent an unreadable response.") from exc

        if response.is_error:
            detail = _error_detail(response)
            logger.warning(
                "Backend %s %s returned %s: %s", method, path, response.status_code, detail
            )
            raise BackendError(response.status_code, detail)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    async def get(self, path: str, **kwargs: Any) -> Any:
        return await self.request("GET", path, **kwargs)

    async def put(self, path: str, **kwargs: Any) -> Any:
        return await self.request("PUT", path, **kwargs)

    async def aclose(self) -> None:
        await self._client.aclose()


# ---------------------------------------------------------------------------
# Module-level singleton
# ---------------------------------------------------------------------------

_client: BackendClient | None = None


def init_backend_client(cfg: Settings) -> BackendClient:
    """Initialise the singleton (called once from app lifespan)."""
    global _client  # noqa: PLW0603
    _client = BackendClient(
        base_url=cfg.BACKEND_BASE_URL,
        timeout=cfg.BACKEND_TIMEOUT_SECONDS,
        api_key=cfg.BACKEND_API_KEY,
    )
    logger.info("BackendClient initialised (base_url=%s)", cfg.BACKEND_BASE_URL)
    return _client


def get_backend_client() -> BackendClient:
    """Return the initialised BackendClient singleton."""
    if _client is None:
        raise RuntimeError("BackendClient not initialised -- call init_backend_client() first")
    return _client


async def close_backend_client() -> None:
    """Close the shared connection pool at shutdown."""
    global _client  # noqa: PLW0603
    if _client is not None:
        await _client.aclose()
        _client = None
