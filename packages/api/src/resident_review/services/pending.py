# This project was developed with assistance from AI tools.
"""The operator's pending-application queue.

The queue is never patched locally: after every mutation it is rebuilt from
a full directory read. Refreshes are generation-stamped so a slow, older
read cannot replace the result of a newer one.
"""

import logging
from collections.abc import Collection
from datetime import date, datetime

from ..enums import ListFilter
from ..schemas import Pagination
from ..schemas.resident import Application
from .directory import ResidentDirectory

logger = logging.getLogger(__name__)


def _local_date(moment: datetime) -> date:
    if moment.tzinfo is not None:
        return moment.astimezone().date()
    return moment.date()


def submitted_on(application: Application, day: date) -> bool:
    """True when the application was created on *day* (local time)."""
    if application.created_at is None:
        return False
    return _local_date(application.created_at) == day


def matches_search(application: Application, search: str) -> bool:
    """Case-insensitive name match, or substring match on the phone number."""
    term = search.strip().lower()
    if not term:
        return True
    if term in application.first_name.lower() or term in application.last_name.lower():
        return True
    phone = application.contact.phone or ""
    return term in phone


class PendingList:
    """Pending applications as last read from the directory."""

    def __init__(self, directory: ResidentDirectory, page_limit: int = 50):
        self._directory = directory
        self._applications: tuple[Application, ...] = ()
        self._pagination: Pagination | None = None
        self._started = 0
        self._applied = 0
        self._stale = False
        self._query: dict = {"page": 1, "limit": page_limit, "order_column": None, "order_by": None}

    @property
    def loaded(self) -> bool:
        return self._applied > 0 and not self._stale

    def invalidate(self) -> None:
        """Force the next read to go back to the directory."""
        self._stale = True

    @property
    def pagination(self) -> Pagination | None:
        return self._pagination

    @property
    def applications(self) -> tuple[Application, ...]:
        return self._applications

    async def refresh(
        self,
        *,
        page: int | None = None,
        limit: int | None = None,
        order_column: str | None = None,
        order_by: str | None = None,
    ) -> tuple[Application, ...]:
        """Re-read the queue. Without arguments, repeats the last query.

        Directory errors propagate unchanged; the previous queue stays visible.
        """
        query = dict(self._query)
        for key, value in (
            ("page", page),
            ("limit", limit),
            ("order_column", order_column),
            ("order_by", order_by),
        ):
            if value is not None:
                query[key] = value
        self._query = query

        self._started += 1
        generation = self._started
        result = await self._directory.list_pending(**query)

        if generation <= self._applied:
            logger.debug("Discarding superseded pending list (generation %s)", generation)
            return self._applications

        self._applied = generation
        self._stale = False
        self._applications = tuple(a for a in result.applications if a.is_pending)
        self._pagination = result.pagination
        logger.debug("Pending list refreshed: %d applications", len(self._applications))
        return self._applications

    def get(self, application_id: str) -> Application | None:
        for application in self._applications:
            if application.id == application_id:
                return application
        return None

    def items(
        self,
        list_filter: ListFilter = ListFilter.ALL,
        search: str = "",
        today: date | None = None,
        exclude: Collection[str] = (),
    ) -> list[Application]:
        """Filter the queue locally. Ids in *exclude* are left out."""
        today = today or date.today()
        return [
            a
            for a in self._applications
            if a.id not in exclude
            and matches_search(a, search)
            and (list_filter == ListFilter.ALL or submitted_on(a, today))
        ]

    def today_count(self, today: date | None = None, exclude: Collection[str] = ()) -> int:
        today = today or date.today()
        return sum(
            1 for a in self._applications if a.id not in exclude and submitted_on(a, today)
        )
