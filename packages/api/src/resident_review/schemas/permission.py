# This project was developed with assistance from AI tools.
"""Schemas for operator permissions."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator

from ..enums import GateState, PermissionLoadState


class PermissionRecord(BaseModel):
    """One capability granted to the operator's role.

    The backend sometimes lists permissions as bare strings; those are
    decoded into records whose id and name are the string itself.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    name: str
    description: str = ""
    action: str = ""
    resource: str = ""

    @model_validator(mode="before")
    @classmethod
    def _from_string(cls, data: Any) -> Any:
        if isinstance(data, str):
            return {"id": data, "name": data}
        if isinstance(data, dict) and "name" not in data and "id" in data:
            return {**data, "name": data["id"]}
        return data


PermissionList = TypeAdapter(list[PermissionRecord])


class PermissionSetResponse(BaseModel):
    """The session's permission set as the dashboard sees it."""

    state: PermissionLoadState
    permissions: list[PermissionRecord]
    capabilities: dict[str, GateState] = Field(default_factory=dict)
    error: str | None = None


class PermissionCheckResponse(BaseModel):
    """Tri-state answer for one capability."""

    permission_id: str
    state: GateState
    error: str | None = None
