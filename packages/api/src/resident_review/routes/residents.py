# This project was developed with assistance from AI tools.
"""Pending resident review routes: queue, view, decisions and documents."""

from fastapi import APIRouter, Depends, Query

from ..enums import DocumentKind, ListFilter, ReviewAction
from ..middleware.auth import require_roles
from ..schemas.document import DocumentSetResponse
from ..schemas.resident import (
    ApplicationDetailResponse,
    BulkDecisionRequest,
    BulkDecisionResult,
    DecisionRequest,
    DecisionResult,
    PendingListResponse,
)
from ._review import REVIEW_ERRORS, REVIEW_ROLES, Workflow, http_error

router = APIRouter()


@router.get(
    "/pending",
    response_model=PendingListResponse,
    dependencies=[Depends(require_roles(*REVIEW_ROLES))],
)
async def list_pending(
    workflow: Workflow,
    filter: ListFilter = Query(default=ListFilter.ALL),  # noqa: A002
    search: str = Query(default="", max_length=100),
    page: int | None = Query(default=None, ge=1),
    limit: int | None = Query(default=None, ge=1, le=500),
    order_column: str | None = Query(default=None, alias="orderColumn"),
    order_by: str | None = Query(default=None, alias="orderBy", pattern="^(asc|desc|ASC|DESC)$"),
    refresh: bool = False,
) -> PendingListResponse:
    """The operator's pending queue, filtered locally by day and search term.

    The directory is re-read on the first call of a session, when
    ``refresh=true``, when paging/ordering changes, or when the refresh after
    a decision failed.
    """
    pending = workflow.pending
    requery = any(v is not None for v in (page, limit, order_column, order_by))
    if refresh or requery or not pending.loaded:
        try:
            await pending.refresh(
                page=page, limit=limit, order_column=order_column, order_by=order_by
            )
        except REVIEW_ERRORS as exc:
            raise http_error(exc) from exc

    decided = workflow.machine.decided_ids()
    return PendingListResponse(
        data=pending.items(filter, search, exclude=decided),
        pagination=pending.pagination,
        today_count=pending.today_count(exclude=decided),
        total_pending=len(pending.items(exclude=decided)),
    )


@router.post(
    "/pending/bulk-decision",
    response_model=BulkDecisionResult,
    dependencies=[Depends(require_roles(*REVIEW_ROLES))],
)
async def bulk_decision(body: BulkDecisionRequest, workflow: Workflow) -> BulkDecisionResult:
    """Apply one verdict to several applications; each id reports its own outcome."""
    try:
        return await workflow.dispatcher.decide_many(body.application_ids, body.for_each())
    except REVIEW_ERRORS as exc:
        raise http_error(exc) from exc


@router.get(
    "/pending/{application_id}",
    response_model=ApplicationDetailResponse,
    dependencies=[Depends(require_roles(*REVIEW_ROLES))],
)
async def view_application(application_id: str, workflow: Workflow) -> ApplicationDetailResponse:
    """Read-only view: the application plus a fresh load of both documents."""
    try:
        return await workflow.dispatcher.dispatch(ReviewAction.VIEW, [application_id])
    except REVIEW_ERRORS as exc:
        raise http_error(exc) from exc


@router.post(
    "/pending/{application_id}/decision",
    response_model=DecisionResult,
    dependencies=[Depends(require_roles(*REVIEW_ROLES))],
)
async def decide(
    application_id: str,
    body: DecisionRequest,
    workflow: Workflow,
) -> DecisionResult:
    """Approve or reject one application, then refresh the queue."""
    try:
        return await workflow.dispatcher.decide_one(application_id, body)
    except REVIEW_ERRORS as exc:
        raise http_error(exc) from exc


@router.get(
    "/pending/{application_id}/documents",
    response_model=DocumentSetResponse,
    dependencies=[Depends(require_roles(*REVIEW_ROLES))],
)
async def get_documents(application_id: str, workflow: Workflow) -> DocumentSetResponse:
    """Current document state; loads both documents on first request."""
    documents = workflow.documents
    if documents.has_loaded(application_id):
        return DocumentSetResponse.from_set(documents.snapshot(application_id))
    return DocumentSetResponse.from_set(await documents.load_documents(application_id))


@router.post(
    "/pending/{application_id}/documents/load",
    response_model=DocumentSetResponse,
    dependencies=[Depends(require_roles(*REVIEW_ROLES))],
)
async def load_documents(application_id: str, workflow: Workflow) -> DocumentSetResponse:
    """Reset and refetch both documents."""
    return DocumentSetResponse.from_set(
        await workflow.documents.load_documents(application_id)
    )


@router.post(
    "/pending/{application_id}/documents/{kind}/retry",
    response_model=DocumentSetResponse,
    dependencies=[Depends(require_roles(*REVIEW_ROLES))],
)
async def retry_document(
    application_id: str,
    kind: DocumentKind,
    workflow: Workflow,
) -> DocumentSetResponse:
    """Refetch one document; the other keeps its current state."""
    return DocumentSetResponse.from_set(await workflow.documents.retry(application_id, kind))


@router.delete(
    "/pending/{application_id}/documents",
    response_model=DocumentSetResponse,
    dependencies=[Depends(require_roles(*REVIEW_ROLES))],
)
async def cancel_documents(application_id: str, workflow: Workflow) -> DocumentSetResponse:
    """Abandon in-flight document fetches for a dismissed view."""
    return DocumentSetResponse.from_set(workflow.documents.cancel(application_id))
