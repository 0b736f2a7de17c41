# This project was developed with assistance from AI tools.
"""Schemas for verification document state."""

from pydantic import BaseModel, ConfigDict

from ..enums import DocumentKind, DocumentStatus


class DocumentState(BaseModel):
    """What the dashboard should render for one document kind."""

    model_config = ConfigDict(frozen=True)

    kind: DocumentKind
    status: DocumentStatus
    url: str | None = None
    error: str | None = None

    @classmethod
    def loading(cls, kind: DocumentKind) -> "DocumentState":
        return cls(kind=kind, status=DocumentStatus.LOADING)

    @classmethod
    def available(cls, kind: DocumentKind, url: str) -> "DocumentState":
        return cls(kind=kind, status=DocumentStatus.AVAILABLE, url=url)

    @classmethod
    def unavailable(cls, kind: DocumentKind, error: str) -> "DocumentState":
        return cls(kind=kind, status=DocumentStatus.UNAVAILABLE, error=error)

    @property
    def is_available(self) -> bool:
        return self.status == DocumentStatus.AVAILABLE


class DocumentSet(BaseModel):
    """Both verification documents for one application."""

    application_id: str
    generation: int
    national_id: DocumentState
    ownership_document: DocumentState

    @property
    def states(self) -> tuple[DocumentState, DocumentState]:
        return (self.national_id, self.ownership_document)

    @property
    def all_failed(self) -> bool:
        return all(s.status == DocumentStatus.UNAVAILABLE for s in self.states)

    @property
    def complete(self) -> bool:
        return all(s.is_available for s in self.states)


class DocumentSetResponse(BaseModel):
    """Document state plus the retry affordances the UI should offer."""

    data: DocumentSet
    all_failed: bool
    retryable: list[DocumentKind]

    @classmethod
    def from_set(cls, documents: DocumentSet) -> "DocumentSetResponse":
        return cls(
            data=documents,
            all_failed=documents.all_failed,
            retryable=[
                s.kind for s in documents.states if s.status == DocumentStatus.UNAVAILABLE
            ],
        )
