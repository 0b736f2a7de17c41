# This project was developed with assistance from AI tools.
"""One review workflow per operator session.

A ``ReviewWorkflow`` owns everything a single operator sees: the pending
queue, document state and permission set. Nothing is shared between
operators, so no locking is needed; the backend is the only shared state.
"""

import logging
import time

from ..core.config import Settings, settings
from ..schemas.auth import UserContext
from ..schemas.session import SessionConfig
from .approval import ApprovalStateMachine
from .backend import BackendClient
from .directory import ResidentDirectory
from .dispatcher import ActionDispatcher
from .documents import DocumentLoader, DocumentService
from .pending import PendingList
from .permissions import PermissionGate, PermissionService

logger = logging.getLogger(__name__)


class ReviewWorkflow:
    """Wires the review components for one operator."""

    def __init__(self, config: SessionConfig, client: BackendClient, permissions_path: str):
        token = config.operator.access_token
        self.config = config
        self.directory = ResidentDirectory(client, token)
        self.documents = DocumentLoader(
            DocumentService(client, token),
            timeout=config.document_fetch_timeout,
        )
        self.permissions = PermissionGate(PermissionService(client, token, permissions_path))
        self.pending = PendingList(self.directory, page_limit=config.page_limit)
        self.machine = ApprovalStateMachine(
            self.directory,
            self.pending,
            self.documents,
            require_all_documents=config.require_all_documents,
        )
        self.dispatcher = ActionDispatcher(
            self.machine,
            self.pending,
            self.documents,
            self.directory,
            bulk_concurrency=config.bulk_concurrency,
        )
        self.last_used = time.monotonic()

    def touch(self) -> None:
        self.last_used = time.monotonic()

    def close(self) -> None:
        self.documents.cancel_all()


class WorkflowRegistry:
    """In-memory map of operator id to their review workflow."""

    def __init__(self, idle_ttl: float = 1800):
        self._idle_ttl = idle_ttl
        self._sessions: dict[str, ReviewWorkflow] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def _evict_idle(self) -> None:
        cutoff = time.monotonic() - self._idle_ttl
        for user_id in [u for u, w in self._sessions.items() if w.last_used < cutoff]:
            logger.info("Discarding idle review session for %s", user_id)
            self._sessions.pop(user_id).close()

    def get(
        self,
        user: UserContext,
        client: BackendClient,
        cfg: Settings,
    ) -> ReviewWorkflow:
        """Return the operator's workflow, starting a new one when needed.

        A new bearer token starts a new session: the session config is
        immutable, and the token is part of it.
        """
        self._evict_idle()
        workflow = self._sessions.get(user.user_id)
        if workflow is not None and workflow.config.operator.access_token != user.access_token:
            workflow.close()
            workflow = None
        if workflow is None:
            workflow = ReviewWorkflow(
                SessionConfig.from_settings(user, cfg),
                client,
                cfg.PERMISSIONS_PATH,
            )
            self._sessions[user.user_id] = workflow
            logger.info("Started review session for %s (%s)", user.user_id, user.role.value)
        workflow.touch()
        return workflow

    def discard(self, user_id: str) -> bool:
        workflow = self._sessions.pop(user_id, None)
        if workflow is None:
            return False
        workflow.close()
        return True

    def clear(self) -> None:
        for workflow in self._sessions.values():
            workflow.close()
        self._sessions.clear()


# Module-level singleton
_registry = WorkflowRegistry(idle_ttl=settings.SESSION_IDLE_TTL_SECONDS)


def get_workflow_registry() -> WorkflowRegistry:
    """Return the module-level WorkflowRegistry singleton."""
    return _registry
