# This project was developed with assistance from AI tools.
"""Tests for the pending queue: refresh ordering, day filter and search."""

import asyncio
from datetime import date
from unittest.mock import AsyncMock

import pytest
from factories import make_resident

from resident_review.enums import ListFilter
from resident_review.schemas import Pagination
from resident_review.schemas.resident import Application, PendingPage
from resident_review.services.directory import ResidentDirectory
from resident_review.services.errors import BackendError
from resident_review.services.pending import PendingList, matches_search

TODAY = date(2026, 1, 15)


def _page(*rows) -> PendingPage:
    applications = [Application.model_validate(r) for r in rows]
    return PendingPage(
        applications=applications,
        pagination=Pagination(total=len(applications), page=1, limit=50, total_pages=1),
    )


# ---------------------------------------------------------------------------
# Search and filters
# ---------------------------------------------------------------------------


def test_matches_search_on_names_and_phone():
    application = Application.model_validate(make_resident(phone="+593991234567"))

    assert matches_search(application, "ana")
    assert matches_search(application, "LOP")
    assert matches_search(application, "99123")
    assert matches_search(application, "   ")
    assert not matches_search(application, "bruno")


@pytest.mark.asyncio
async def test_items_filter_today_and_search(fake_backend, backend_client):
    fake_backend.add_resident(id="103", first_name="Carla", created_at="2026-01-15T18:45:00")
    pending = PendingList(ResidentDirectory(backend_client, "tok"))
    await pending.refresh()

    assert {a.id for a in pending.items()} == {"101", "102", "103"}
    assert {a.id for a in pending.items(ListFilter.TODAY, today=TODAY)} == {"101", "103"}
    assert [a.id for a in pending.items(ListFilter.TODAY, "carla", today=TODAY)] == ["103"]
    assert pending.today_count(today=TODAY) == 2


@pytest.mark.asyncio
async def test_refresh_keeps_only_pending_and_pagination():
    directory = AsyncMock(spec=ResidentDirectory)
    directory.list_pending.return_value = _page(
        make_resident(id="1"),
        make_resident(id="2", status="APPROVED"),
        make_resident(id="3", status="UNDER_REVIEW"),
    )
    pending = PendingList(directory, page_limit=25)

    applications = await pending.refresh()

    assert [a.id for a in applications] == ["1", "3"]
    assert pending.loaded is True
    assert pending.pagination.total == 3
    directory.list_pending.assert_awaited_once_with(
        page=1, limit=25, order_column=None, order_by=None
    )


@pytest.mark.asyncio
async def test_refresh_without_arguments_repeats_last_query():
    directory = AsyncMock(spec=ResidentDirectory)
    directory.list_pending.return_value = _page()
    pending = PendingList(directory)

    await pending.refresh(page=3, order_column="createdAt", order_by="ASC")
    await pending.refresh()

    assert directory.list_pending.await_args.kwargs == {
        "page": 3,
        "limit": 50,
        "order_column": "createdAt",
        "order_by": "ASC",
    }


@pytest.mark.asyncio
async def test_failed_refresh_keeps_previous_queue():
    directory = AsyncMock(spec=ResidentDirectory)
    directory.list_pending.side_effect = [
        _page(make_resident(id="1")),
        BackendError(503, "Backend unreachable"),
    ]
    pending = PendingList(directory)
    await pending.refresh()

    with pytest.raises(BackendError):
        await pending.refresh()
    assert [a.id for a in pending.applications] == ["1"]


@pytest.mark.asyncio
async def test_invalidate_forces_next_read_but_keeps_queue_visible():
    directory = AsyncMock(spec=ResidentDirectory)
    directory.list_pending.return_value = _page(make_resident(id="1"), make_resident(id="2"))
    pending = PendingList(directory)
    await pending.refresh()
    assert pending.loaded is True

    pending.invalidate()

    assert pending.loaded is False
    assert len(pending.applications) == 2
    await pending.refresh()
    assert pending.loaded is True


@pytest.mark.asyncio
async def test_excluded_ids_are_left_out_of_items_and_counts():
    directory = AsyncMock(spec=ResidentDirectory)
    directory.list_pending.return_value = _page(
        make_resident(id="1", created_at="2026-01-15T09:00:00"),
        make_resident(id="2", created_at="2026-01-15T11:00:00"),
    )
    pending = PendingList(directory)
    await pending.refresh()

    assert [a.id for a in pending.items(exclude={"1"})] == ["2"]
    assert pending.today_count(today=TODAY, exclude={"1"}) == 1
    assert pending.today_count(today=TODAY) == 2


# ---------------------------------------------------------------------------
# Ordering
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_older_refresh_finishing_late_is_discarded():
    release_old = asyncio.Event()

    async def slow_old(**kwargs):
        await release_old.wait()
        return _page(make_resident(id="old"))

    async def fast_new(**kwargs):
        return _page(make_resident(id="new"))

    answers = [slow_old, fast_new]

    async def list_pending(**kwargs):
        return await answers.pop(0)(**kwargs)

    directory = AsyncMock(spec=ResidentDirectory)
    directory.list_pending.side_effect = list_pending
    pending = PendingList(directory)

    older = asyncio.create_task(pending.refresh())
    await asyncio.sleep(0)
    await pending.refresh()
    release_old.set()
    await older

    assert [a.id for a in pending.applications] == ["new"]
