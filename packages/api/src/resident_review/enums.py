# This project was developed with assistance from AI tools.
"""
Domain enums for the resident onboarding workflow.

Shared by the Pydantic schemas, the review services and the routes.
"""

import enum


class ApplicationStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    @classmethod
    def terminal_statuses(cls) -> frozenset["ApplicationStatus"]:
        """Statuses an application can never leave through this workflow."""
        return frozenset({cls.APPROVED, cls.REJECTED})

    @classmethod
    def valid_transitions(cls) -> dict["ApplicationStatus", frozenset["ApplicationStatus"]]:
        """Allowed status transitions in the onboarding lifecycle."""
        return {
            cls.PENDING: frozenset({cls.APPROVED, cls.REJECTED}),
            cls.APPROVED: frozenset(),
            cls.REJECTED: frozenset(),
        }

    @classmethod
    def from_remote(cls, value: str | None) -> "ApplicationStatus":
        """Map the directory's verification status onto the workflow status.

        ``UNDER_REVIEW`` and missing values are still awaiting a decision.
        """
        normalized = (value or "").strip().lower()
        if normalized == cls.APPROVED.value:
            return cls.APPROVED
        if normalized == cls.REJECTED.value:
            return cls.REJECTED
        return cls.PENDING


class Decision(str, enum.Enum):
    APPROVED = "approved"
    REJECTED = "rejected"

    @property
    def status(self) -> ApplicationStatus:
        return ApplicationStatus(self.value)


class ReviewAction(str, enum.Enum):
    APPROVE = "approve"
    REJECT = "reject"
    VIEW = "view"

    @property
    def decision(self) -> Decision | None:
        """The decision this action renders, or None for read-only actions."""
        if self == ReviewAction.APPROVE:
            return Decision.APPROVED
        if self == ReviewAction.REJECT:
            return Decision.REJECTED
        return None


class AssignedRole(str, enum.Enum):
    RESIDENT = "resident"
    TENANT = "tenant"


class MembershipTier(str, enum.Enum):
    GOLD = "GOLD"
    SILVER = "SILVER"
    STANDARD = "STANDARD"


class DocumentKind(str, enum.Enum):
    NATIONAL_ID = "national_id"
    OWNERSHIP_DOCUMENT = "ownership_document"


class DocumentStatus(str, enum.Enum):
    LOADING = "loading"
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"


class GateState(str, enum.Enum):
    CHECKING = "checking"
    ALLOWED = "allowed"
    DENIED = "denied"


class PermissionLoadState(str, enum.Enum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    ERROR = "error"


class ListFilter(str, enum.Enum):
    ALL = "all"
    TODAY = "today"


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    STAFF = "staff"
    RESIDENT = "resident"

    @classmethod
    def operator_roles(cls) -> tuple["UserRole", ...]:
        """Roles allowed to work the review queue."""
        return (cls.ADMIN, cls.MANAGER, cls.STAFF)
