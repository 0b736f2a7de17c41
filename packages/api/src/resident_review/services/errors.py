# This project was developed with assistance from AI tools.
"""Exceptions raised by the review services.

Routes translate these into Problem Details responses; services never
swallow them.
"""


class BackendError(Exception):
    """The backend answered a call with an error status."""

    def __init__(self, status_code: int, detail: str):
        super().__init__(detail)
        self.status_code = status_code
        self.detail = detail

    @property
    def retryable(self) -> bool:
        return self.status_code >= 500 or self.status_code in (408, 429)


class BackendUnavailable(BackendError):
    """The backend could not be reached or did not answer in time."""

    def __init__(self, detail: str):
        super().__init__(503, detail)


class InvalidDecision(ValueError):
    """The requested verdict is not one the workflow accepts."""


class ApplicationAlreadyDecided(Exception):
    """The application already reached a terminal status in this session."""

    def __init__(self, application_id: str, status: str):
        super().__init__(f"Application {application_id} is already {status}.")
        self.application_id = application_id
        self.status = status


class DocumentsIncomplete(Exception):
    """Approval refused because the document policy requires both documents."""

    def __init__(self, application_id: str, missing: list[str]):
        super().__init__(
            f"Application {application_id} cannot be approved before these documents "
            f"are available: {', '.join(missing)}."
        )
        self.application_id = application_id
        self.missing = missing


class DecisionFailed(Exception):
    """The backend refused or failed a decision; the application stays pending."""

    def __init__(self, application_id: str, cause: BackendError):
        super().__init__(cause.detail)
        self.application_id = application_id
        self.cause = cause

    @property
    def status_code(self) -> int:
        return self.cause.status_code

    @property
    def retryable(self) -> bool:
        return self.cause.retryable


class PermissionsNotLoaded(Exception):
    """A definite permission answer was requested before the set loaded."""


class DecisionInProgress(Exception):
    """Another decision for the same application is still in flight."""

    def __init__(self, application_id: str):
        super().__init__(f"A decision for application {application_id} is already being submitted.")
        self.application_id = application_id
