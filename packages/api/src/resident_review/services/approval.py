# This project was developed with assistance from AI tools.
"""Approval state machine for pending resident applications.

An application moves ``pending -> approved`` or ``pending -> rejected`` and
never moves again. Each decision is exactly one directory call. After a
successful call the pending queue is re-read in full; nothing is patched
locally. A failed call leaves the application pending and the error goes
back to the operator. Nothing is retried automatically.
"""

import logging

from pydantic import ValidationError

from ..enums import ApplicationStatus, AssignedRole, Decision, MembershipTier
from ..schemas.resident import DecisionRequest, DecisionResult
from .directory import ResidentDirectory
from .documents import DocumentLoader
from .errors import (
    ApplicationAlreadyDecided,
    BackendError,
    DecisionFailed,
    DecisionInProgress,
    DocumentsIncomplete,
    InvalidDecision,
)
from .pending import PendingList

logger = logging.getLogger(__name__)


def build_request(
    decision: Decision | str,
    reason: str,
    assigned_role: AssignedRole | str = AssignedRole.RESIDENT,
    initial_membership_tier: MembershipTier | str = MembershipTier.STANDARD,
) -> DecisionRequest:
    """Validate raw decision inputs.

    Raises:
        InvalidDecision: unknown verdict, role or tier, or a blank reason.
    """
    try:
        return DecisionRequest(
            decision=decision,
            reason=reason,
            assigned_role=assigned_role,
            initial_membership_tier=initial_membership_tier,
        )
    except ValidationError as exc:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) or "input" for err in exc.errors())
        raise InvalidDecision(f"Invalid decision input: {fields}.") from exc


class ApprovalStateMachine:
    """Drives applications from pending to a terminal status."""

    def __init__(
        self,
        directory: ResidentDirectory,
        pending: PendingList,
        documents: DocumentLoader,
        *,
        require_all_documents: bool = False,
    ):
        self._directory = directory
        self._pending = pending
        self._documents = documents
        self._require_all_documents = require_all_documents
        self._decided: dict[str, ApplicationStatus] = {}
        self._in_flight: set[str] = set()

    def status_of(self, application_id: str) -> ApplicationStatus:
        """Status as far as this session knows; pending until decided here."""
        return self._decided.get(application_id, ApplicationStatus.PENDING)

    def decided_ids(self) -> frozenset[str]:
        """Ids this session has driven to a terminal status."""
        return frozenset(self._decided)

    def _check(self, application_id: str, request: DecisionRequest) -> None:
        current = self.status_of(application_id)
        target = request.decision.status
        if target not in ApplicationStatus.valid_transitions()[current]:
            raise ApplicationAlreadyDecided(application_id, current.value)
        if application_id in self._in_flight:
            raise DecisionInProgress(application_id)
        if self._require_all_documents and request.decision == Decision.APPROVED:
            missing = self._documents.missing(application_id)
            if missing:
                raise DocumentsIncomplete(application_id, [k.value for k in missing])

    async def submit(self, application_id: str, request: DecisionRequest) -> str:
        """Send one decision without refreshing the queue.

        Returns the directory's confirmation message.

        Raises:
            ApplicationAlreadyDecided: decided earlier in this session.
            DecisionInProgress: the same application is being decided right now.
            DocumentsIncomplete: approval blocked by the document policy.
            DecisionFailed: the directory refused or failed the call.
        """
        self._check(application_id, request)
        self._in_flight.add(application_id)
        try:
            message = await self._directory.decide(application_id, request)
        except BackendError as exc:
            logger.warning(
                "Decision %s for application %s failed (%s): %s",
                request.decision.value,
                application_id,
                exc.status_code,
                exc.detail,
            )
            raise DecisionFailed(application_id, exc) from exc
        finally:
            self._in_flight.discard(application_id)

        self._decided[application_id] = request.decision.status
        logger.info("Application %s %s", application_id, request.decision.value)
        return message

    async def refresh_queue(self) -> str | None:
        """Re-read the pending queue; returns the error message if that fails.

        A failed refresh never undoes a decision that already went through;
        the queue is marked stale so the next read goes back to the directory.
        """
        try:
            await self._pending.refresh()
        except BackendError as exc:
            logger.warning("Pending list refresh after decision failed: %s", exc.detail)
            self._pending.invalidate()
            return exc.detail
        return None

    async def decide(
        self,
        application_id: str,
        decision: Decision | str,
        reason: str,
        assigned_role: AssignedRole | str = AssignedRole.RESIDENT,
        initial_membership_tier: MembershipTier | str = MembershipTier.STANDARD,
    ) -> DecisionResult:
        """Render a verdict on one application, then refresh the queue."""
        request = build_request(decision, reason, assigned_role, initial_membership_tier)
        return await self.apply(application_id, request)

    async def apply(self, application_id: str, request: DecisionRequest) -> DecisionResult:
        """Submit an already-validated request, then refresh the queue."""
        message = await self.submit(application_id, request)
        refresh_error = await self.refresh_queue()
        return DecisionResult(
            application_id=application_id,
            status=request.decision.status,
            message=message,
            refreshed=refresh_error is None,
            refresh_error=refresh_error,
        )
