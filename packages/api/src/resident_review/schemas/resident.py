# This project was developed with assistance from AI tools.
"""Schemas for pending resident applications and review decisions."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..enums import ApplicationStatus, AssignedRole, Decision, MembershipTier
from . import Pagination
from .document import DocumentSet


class Address(BaseModel):
    """Apartment the applicant claims."""

    block: str = ""
    apartment: str = ""


class Contact(BaseModel):
    phone: str | None = None
    email: str | None = None


class Application(BaseModel):
    """A resident's registration request as seen by the review workflow.

    The directory returns residents in its own camelCase shape with the
    address under ``property`` and contact fields at the top level. Both
    that shape and the nested one produced by this service are accepted and
    normalised here, so nothing downstream branches on payload shape.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    first_name: str = ""
    last_name: str = ""
    address: Address = Field(default_factory=Address)
    contact: Contact = Field(default_factory=Contact)
    status: ApplicationStatus = ApplicationStatus.PENDING
    created_at: datetime | None = None
    membership_tier: MembershipTier | None = None

    @model_validator(mode="before")
    @classmethod
    def _from_directory_shape(cls, data: Any) -> Any:
        if not isinstance(data, dict) or "firstName" not in data and "property" not in data:
            return data

        prop = data.get("property") or data.get("address") or {}
        return {
            "id": data.get("id"),
            "first_name": data.get("firstName") or data.get("first_name") or "",
            "last_name": data.get("lastName") or data.get("last_name") or "",
            "address": {
                "block": prop.get("block") or data.get("block") or "",
                "apartment": prop.get("apartment") or data.get("apartment") or "",
            },
            "contact": data.get("contact")
            or {"phone": data.get("phone"), "email": data.get("email")},
            "status": ApplicationStatus.from_remote(
                data.get("verificationStatus") or data.get("status")
            ),
            "created_at": data.get("createdAt")
            or data.get("registrationDate")
            or data.get("created_at"),
            "membership_tier": data.get("membershipTier") or data.get("membership_tier"),
        }

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> str:
        if value is None or str(value).strip() == "":
            raise ValueError("application id is required")
        return str(value)

    @property
    def is_pending(self) -> bool:
        return self.status == ApplicationStatus.PENDING

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class PendingPage(BaseModel):
    """One page of pending applications as returned by the directory."""

    applications: list[Application]
    pagination: Pagination


class DecisionRequest(BaseModel):
    """Operator verdict on one application."""

    decision: Decision
    reason: str = Field(min_length=1, max_length=1000)
    assigned_role: AssignedRole = AssignedRole.RESIDENT
    initial_membership_tier: MembershipTier = MembershipTier.STANDARD

    @field_validator("reason")
    @classmethod
    def _reason_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("reason is required")
        return value

    def to_remote(self) -> dict[str, str]:
        """Body for the directory's approve endpoint."""
        return {
            "decision": self.decision.value.upper(),
            "reason": self.reason,
            "assignedRole": self.assigned_role.value,
            "initialMembershipTier": self.initial_membership_tier.value,
        }


class BulkDecisionRequest(BaseModel):
    """Same verdict applied to every selected application."""

    application_ids: list[str] = Field(min_length=1, max_length=200)
    decision: Decision
    reason: str = Field(min_length=1, max_length=1000)
    assigned_role: AssignedRole = AssignedRole.RESIDENT
    initial_membership_tier: MembershipTier = MembershipTier.STANDARD

    def for_each(self) -> DecisionRequest:
        return DecisionRequest(
            decision=self.decision,
            reason=self.reason,
            assigned_role=self.assigned_role,
            initial_membership_tier=self.initial_membership_tier,
        )


class DecisionResult(BaseModel):
    """Outcome of a single successful decision."""

    application_id: str
    status: ApplicationStatus
    message: str = ""
    refreshed: bool = True
    refresh_error: str | None = None


class BulkItemResult(BaseModel):
    application_id: str
    success: bool
    message: str = ""
    error: str | None = None
    status_code: int | None = None


class BulkDecisionResult(BaseModel):
    """Per-id outcome of a bulk approve/reject."""

    decision: Decision
    results: list[BulkItemResult]
    success_count: int
    error_count: int
    refreshed: bool = False
    refresh_error: str | None = None


class PendingListResponse(BaseModel):
    """Response for the operator's pending queue."""

    data: list[Application]
    pagination: Pagination | None = None
    today_count: int = 0
    total_pending: int = 0


class ApplicationDetailResponse(BaseModel):
    """Response for the read-only view action."""

    data: Application
    documents: DocumentSet
