# This project was developed with assistance from AI tools.
"""Turns operator selections into review actions.

``view`` is read-only. ``approve``/``reject`` on one id is a single decision
followed by a queue refresh. On several ids the decision fans out per id,
bounded by a semaphore; each id reports its own outcome and the queue is
refreshed once afterwards if anything went through.
"""

import asyncio
import logging

from ..enums import ApplicationStatus, Decision, ReviewAction
from ..schemas.resident import (
    Application,
    ApplicationDetailResponse,
    BulkDecisionResult,
    BulkItemResult,
    DecisionRequest,
    DecisionResult,
)
from .approval import ApprovalStateMachine
from .directory import ResidentDirectory
from .documents import DocumentLoader
from .errors import (
    ApplicationAlreadyDecided,
    DecisionFailed,
    DecisionInProgress,
    DocumentsIncomplete,
    InvalidDecision,
)
from .pending import PendingList

logger = logging.getLogger(__name__)


def _unique(ids: list[str]) -> list[str]:
    seen: set[str] = set()
    ordered = []
    for application_id in ids:
        if application_id not in seen:
            seen.add(application_id)
            ordered.append(application_id)
    return ordered


class ActionDispatcher:
    """Composes the queue, document loader and state machine."""

    def __init__(
        self,
        machine: ApprovalStateMachine,
        pending: PendingList,
        documents: DocumentLoader,
        directory: ResidentDirectory,
        *,
        bulk_concurrency: int = 4,
    ):
        self._machine = machine
        self._pending = pending
        self._documents = documents
        self._directory = directory
        self._bulk_concurrency = max(1, bulk_concurrency)

    async def _application(self, application_id: str) -> Application:
        application = self._pending.get(application_id)
        if application is None:
            application = await self._directory.get_application(application_id)
        known = self._machine.status_of(application_id)
        if application.is_pending and known in ApplicationStatus.terminal_statuses():
            application = application.model_copy(update={"status": known})
        return application

    async def view(self, application_id: str) -> ApplicationDetailResponse:
        """Open the detail view: application plus a fresh document load."""
        application = await self._application(application_id)
        documents = await self._documents.load_documents(application_id)
        return ApplicationDetailResponse(data=application, documents=documents)

    async def decide_one(self, application_id: str, request: DecisionRequest) -> DecisionResult:
        return await self._machine.apply(application_id, request)

    async def decide_many(
        self, application_ids: list[str], request: DecisionRequest
    ) -> BulkDecisionResult:
        """Apply one verdict to each id independently."""
        ids = _unique(application_ids)
        if not ids:
            raise InvalidDecision("Select at least one application.")

        semaphore = asyncio.Semaphore(self._bulk_concurrency)

        async def one(application_id: str) -> BulkItemResult:
            async with semaphore:
                try:
                    message = await self._machine.submit(application_id, request)
                except DecisionFailed as exc:
                    return BulkItemResult(
                        application_id=application_id,
                        success=False,
                        error=str(exc),
                        status_code=exc.status_code,
                    )
                except (ApplicationAlreadyDecided, DecisionInProgress, DocumentsIncomplete) as exc:
                    return BulkItemResult(
                        application_id=application_id,
                        success=False,
                        error=str(exc),
                        status_code=409,
                    )
                except Exception:
                    logger.exception("Bulk decision for application %s failed", application_id)
                    return BulkItemResult(
                        application_id=application_id,
                        success=False,
                        error="An unexpected error occurred.",
                        status_code=500,
                    )
            return BulkItemResult(application_id=application_id, success=True, message=message)

        results = await asyncio.gather(*(one(i) for i in ids))
        success_count = sum(1 for r in results if r.success)
        logger.info(
            "Bulk %s: %d succeeded, %d failed",
            request.decision.value,
            success_count,
            len(results) - success_count,
        )

        refresh_error = None
        refreshed = False
        if success_count:
            refresh_error = await self._machine.refresh_queue()
            refreshed = refresh_error is None

        return BulkDecisionResult(
            decision=request.decision,
            results=list(results),
            success_count=success_count,
            error_count=len(results) - success_count,
            refreshed=refreshed,
            refresh_error=refresh_error,
        )

    async def dispatch(
        self,
        action: ReviewAction | str,
        target_ids: list[str],
        request: DecisionRequest | None = None,
    ) -> ApplicationDetailResponse | DecisionResult | BulkDecisionResult:
        """Route one UI action to the matching operation.

        Raises:
            InvalidDecision: unknown action, wrong number of targets, or a
                mutating action without a decision payload.
        """
        try:
            action = ReviewAction(action)
        except ValueError as exc:
            raise InvalidDecision(f"Unknown action '{action}'.") from exc

        ids = _unique(target_ids)
        if action == ReviewAction.VIEW:
            if len(ids) != 1:
                raise InvalidDecision("View takes exactly one application.")
            return await self.view(ids[0])

        if request is None:
            raise InvalidDecision(f"'{action.value}' requires a reason.")
        decision: Decision = action.decision
        if request.decision != decision:
            request = request.model_copy(update={"decision": decision})

        if len(ids) == 1:
            return await self.decide_one(ids[0], request)
        return await self.decide_many(ids, request)
