# This project was developed with assistance from AI tools.
"""Per-operator session configuration."""

from pydantic import BaseModel, ConfigDict

from ..core.config import Settings
from .auth import UserContext


class SessionConfig(BaseModel):
    """Immutable configuration threaded through one operator's workflow.

    Built once when the session starts; a change of settings takes effect on
    the next session, never halfway through one.
    """

    model_config = ConfigDict(frozen=True)

    operator: UserContext
    require_all_documents: bool = False
    document_fetch_timeout: float = 15.0
    bulk_concurrency: int = 4
    page_limit: int = 50

    @classmethod
    def from_settings(cls, operator: UserContext, settings: Settings) -> "SessionConfig":
        return cls(
            operator=operator,
            require_all_documents=settings.REQUIRE_ALL_DOCUMENTS,
            document_fetch_timeout=settings.DOCUMENT_FETCH_TIMEOUT_SECONDS,
            bulk_concurrency=settings.BULK_DECISION_CONCURRENCY,
            page_limit=settings.PENDING_PAGE_LIMIT,
        )
