# This project was developed with assistance from AI tools.
"""Verification document fetching.

Each application has two independent documents: the national ID and the
ownership proof. ``DocumentLoader`` fetches both concurrently and joins with
``asyncio.gather(..., return_exceptions=True)`` so one failure never
cancels or fails the other.

Every load, retry and cancel stamps the affected kinds with a fresh
generation number. A fetch that completes after a newer operation started
for the same kind is discarded, so a stale response can never overwrite
fresher state.
"""

import asyncio
import logging

from ..enums import DocumentKind
from ..schemas.document import DocumentSet, DocumentState
from .backend import BackendClient
from .errors import BackendError

logger = logging.getLogger(__name__)

DOCUMENT_NOT_FOUND = "Document not found"
DOCUMENT_TIMED_OUT = "Document request timed out"
DOCUMENT_CANCELLED = "Document request cancelled"
DOCUMENT_LOAD_FAILED = "Document could not be loaded"


def document_path(application_id: str, kind: DocumentKind) -> str:
    return f"/admin/users/{application_id}/documents/{kind.value}"


def _document_url(body) -> str | None:
    """Extract the image reference from a document response.

    The backend answers with ``{"staticUrl": ...}``, ``{"url": ...}``, either
    one wrapped in ``{"data": ...}``, or a bare URL string.
    """
    if isinstance(body, dict) and "data" in body:
        body = body["data"]
    if isinstance(body, str):
        return body.strip() or None
    if isinstance(body, dict):
        url = body.get("staticUrl") or body.get("url")
        return str(url) if url else None
    return None


class DocumentService:
    """Calls the document endpoints as one operator."""

    def __init__(self, client: BackendClient, token: str | None):
        self._client = client
        self._token = token

    async def get_document(self, application_id: str, kind: DocumentKind) -> str | None:
        """Return the document URL, or None when the backend has nothing to show."""
        body = await self._client.get(document_path(application_id, kind), token=self._token)
        return _document_url(body)


class DocumentLoader:
    """Per-session document state for the applications an operator inspects."""

    def __init__(self, service: DocumentService, timeout: float = 15.0):
        self._service = service
        self._timeout = timeout
        self._generation: dict[str, int] = {}
        self._stamps: dict[tuple[str, DocumentKind], int] = {}
        self._states: dict[tuple[str, DocumentKind], DocumentState] = {}
        self._tasks: dict[tuple[str, DocumentKind], asyncio.Task] = {}

    # -- state ------------------------------------------------------------

    def _next_generation(self, application_id: str, kinds: tuple[DocumentKind, ...]) -> int:
        generation = self._generation.get(application_id, 0) + 1
        self._generation[application_id] = generation
        for kind in kinds:
            self._stamps[(application_id, kind)] = generation
        return generation

    def _is_current(self, application_id: str, kind: DocumentKind, generation: int) -> bool:
        return self._stamps.get((application_id, kind)) == generation

    def has_loaded(self, application_id: str) -> bool:
        return application_id in self._generation

    def snapshot(self, application_id: str) -> DocumentSet:
        """Current state of both documents.

        Kinds that were never requested read as unavailable.
        """

        def state(kind: DocumentKind) -> DocumentState:
            return self._states.get(
                (application_id, kind), DocumentState.unavailable(kind, "Document not loaded")
            )

        return DocumentSet(
            application_id=application_id,
            generation=self._generation.get(application_id, 0),
            national_id=state(DocumentKind.NATIONAL_ID),
            ownership_document=state(DocumentKind.OWNERSHIP_DOCUMENT),
        )

    def missing(self, application_id: str) -> list[DocumentKind]:
        """Kinds that are not currently available for the application."""
        return [s.kind for s in self.snapshot(application_id).states if not s.is_available]

    # -- fetching ---------------------------------------------------------

    async def _fetch(self, application_id: str, kind: DocumentKind) -> DocumentState:
        try:
            url = await asyncio.wait_for(
                self._service.get_document(application_id, kind), timeout=self._timeout
            )
        except asyncio.TimeoutError:
            logger.warning("Fetching %s for application %s timed out", kind.value, application_id)
            return DocumentState.unavailable(kind, DOCUMENT_TIMED_OUT)
        except BackendError as exc:
            if exc.status_code == 404:
                return DocumentState.unavailable(kind, DOCUMENT_NOT_FOUND)
            return DocumentState.unavailable(kind, exc.detail or DOCUMENT_LOAD_FAILED)

        if not url:
            return DocumentState.unavailable(kind, DOCUMENT_NOT_FOUND)
        return DocumentState.available(kind, url)

    async def _run(self, application_id: str, kinds: tuple[DocumentKind, ...]) -> DocumentSet:
        generation = self._next_generation(application_id, kinds)

        tasks: dict[DocumentKind, asyncio.Task] = {}
        for kind in kinds:
            key = (application_id, kind)
            superseded = self._tasks.pop(key, None)
            if superseded is not None and not superseded.done():
                superseded.cancel()
            self._states[key] = DocumentState.loading(kind)
            tasks[kind] = asyncio.create_task(
                self._fetch(application_id, kind),
                name=f"document-{kind.value}-{application_id}",
            )
            self._tasks[key] = tasks[kind]

        results = await asyncio.gather(*tasks.values(), return_exceptions=True)

        for kind, result in zip(tasks, results):
            key = (application_id, kind)
            if self._tasks.get(key) is tasks[kind]:
                del self._tasks[key]
            if not self._is_current(application_id, kind, generation):
                logger.debug(
                    "Discarding superseded %s result for application %s (generation %s)",
                    kind.value,
                    application_id,
                    generation,
                )
                continue
            if isinstance(result, asyncio.CancelledError):
                result = DocumentState.unavailable(kind, DOCUMENT_CANCELLED)
            elif isinstance(result, BaseException):
                logger.error(
                    "Unexpected failure fetching %s for application %s",
                    kind.value,
                    application_id,
                    exc_info=result,
                )
                result = DocumentState.unavailable(kind, DOCUMENT_LOAD_FAILED)
            self._states[key] = result

        documents = self.snapshot(application_id)
        if documents.all_failed:
            logger.info("Both documents unavailable for application %s", application_id)
        return documents

    async def load_documents(self, application_id: str) -> DocumentSet:
        """Reset and fetch both documents; completes once both settle."""
        return await self._run(application_id, tuple(DocumentKind))

    async def retry(self, application_id: str, kind: DocumentKind) -> DocumentSet:
        """Refetch one document, leaving the other untouched."""
        return await self._run(application_id, (kind,))

    def cancel(self, application_id: str) -> DocumentSet:
        """Abandon in-flight fetches for a dismissed view."""
        kinds = tuple(DocumentKind)
        self._next_generation(application_id, kinds)
        for kind in kinds:
            key = (application_id, kind)
            task = self._tasks.pop(key, None)
            if task is not None and not task.done():
                task.cancel()
                self._states[key] = DocumentState.unavailable(kind, DOCUMENT_CANCELLED)
        return self.snapshot(application_id)

    def cancel_all(self) -> None:
        """Cancel every in-flight fetch (session teardown)."""
        for task in self._tasks.values():
            if not task.done():
                task.cancel()
        self._tasks.clear()
