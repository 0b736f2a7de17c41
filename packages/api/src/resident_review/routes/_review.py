# This project was developed with assistance from AI tools.
"""Shared plumbing for the review routes.

Resolves the operator's review session and translates service exceptions
into HTTP errors. Backend 401/403 answers become 403: the backend is the
authority on what an operator may do, and its refusal is never retried.
"""

from typing import Annotated

from fastapi import Depends, HTTPException, status

from ..core.config import settings
from ..enums import UserRole
from ..middleware.auth import CurrentUser
from ..services.backend import BackendClient, get_backend_client
from ..services.errors import (
    ApplicationAlreadyDecided,
    BackendError,
    BackendUnavailable,
    DecisionFailed,
    DecisionInProgress,
    DocumentsIncomplete,
    InvalidDecision,
    PermissionsNotLoaded,
)
from ..services.workflow import ReviewWorkflow, get_workflow_registry

REVIEW_ROLES = UserRole.operator_roles()

REVIEW_ERRORS = (
    BackendError,
    DecisionFailed,
    ApplicationAlreadyDecided,
    DecisionInProgress,
    DocumentsIncomplete,
    InvalidDecision,
    PermissionsNotLoaded,
)

_PASSTHROUGH_STATUSES = {400, 404, 409, 422, 429}
_RETRY_HINT = "Please try again."


def _backend_http_error(exc: BackendError) -> HTTPException:
    if isinstance(exc, BackendUnavailable):
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"{exc.detail} {_RETRY_HINT}",
        )
    if exc.status_code in (401, 403):
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=exc.detail)
    if exc.status_code in _PASSTHROUGH_STATUSES:
        return HTTPException(status_code=exc.status_code, detail=exc.detail)
    return HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY,
        detail=f"{exc.detail} {_RETRY_HINT}",
    )


def http_error(exc: Exception) -> HTTPException:
    """Map a review service exception onto the HTTP error the operator sees."""
    if isinstance(exc, DecisionFailed):
        return _backend_http_error(exc.cause)
    if isinstance(exc, BackendError):
        return _backend_http_error(exc)
    if isinstance(exc, InvalidDecision):
        return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
    if isinstance(
        exc,
        (ApplicationAlreadyDecided, DecisionInProgress, DocumentsIncomplete, PermissionsNotLoaded),
    ):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    raise TypeError(f"No HTTP mapping for {type(exc).__name__}")


async def get_workflow(
    user: CurrentUser,
    client: Annotated[BackendClient, Depends(get_backend_client)],
) -> ReviewWorkflow:
    """FastAPI dependency: the calling operator's review session."""
    return get_workflow_registry().get(user, client, settings)


Workflow = Annotated[ReviewWorkflow, Depends(get_workflow)]
