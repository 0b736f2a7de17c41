# This project was developed with assistance from AI tools.
"""Operator permission routes.

These answers drive which actions the dashboard renders. They are never an
authorization decision: the backend re-checks every mutation against the
operator's own token.
"""

from fastapi import APIRouter, Depends

from ..core.config import settings
from ..middleware.auth import require_roles
from ..schemas.permission import PermissionCheckResponse, PermissionSetResponse
from ..services.permissions import PermissionGate
from ._review import REVIEW_ROLES, Workflow

router = APIRouter()


def _set_response(gate: PermissionGate) -> PermissionSetResponse:
    capabilities = (
        settings.APPROVE_RESIDENT_PERMISSION_ID,
        settings.CREATE_PAYMENT_PERMISSION_ID,
    )
    return PermissionSetResponse(
        state=gate.load_state,
        permissions=list(gate.records),
        capabilities={pid: gate.state(pid) for pid in capabilities},
        error=gate.error,
    )


@router.get(
    "",
    response_model=PermissionSetResponse,
    dependencies=[Depends(require_roles(*REVIEW_ROLES))],
)
async def list_permissions(workflow: Workflow) -> PermissionSetResponse:
    """The operator's permission set, loaded once per session."""
    await workflow.permissions.load()
    return _set_response(workflow.permissions)


@router.post(
    "/reload",
    response_model=PermissionSetResponse,
    dependencies=[Depends(require_roles(*REVIEW_ROLES))],
)
async def reload_permissions(workflow: Workflow) -> PermissionSetResponse:
    """Discard the cached set and fetch it again."""
    await workflow.permissions.reload()
    return _set_response(workflow.permissions)


@router.get(
    "/{permission_id}",
    response_model=PermissionCheckResponse,
    dependencies=[Depends(require_roles(*REVIEW_ROLES))],
)
async def check_permission(permission_id: str, workflow: Workflow) -> PermissionCheckResponse:
    """Tri-state answer for one capability id or name."""
    gate = workflow.permissions
    await gate.load()
    return PermissionCheckResponse(
        permission_id=permission_id,
        state=gate.state(permission_id),
        error=gate.error,
    )
