import asyncio
from datetime import date

import pytest

from timesheets.exceptions import StoreNotConfiguredError
from timesheets.services.live_view import LiveView
from timesheets.services.store import DocumentStore, ENTRIES, PROJECTS
from timesheets.services.timesheet_service import ALL_ENTRIES_FILTER


def test_each_snapshot_replaces_the_working_set(store):
    view = LiveView(store, ENTRIES, ALL_ENTRIES_FILTER)
    view.open()
    assert view.documents == ()

    async def seed():
        await store.write(ENTRIES, {"user_id": "u1", "hours": 1, "date": date(2024, 1, 1), "task": "a"})
        await store.write(ENTRIES, {"user_id": "u1", "hours": 2, "date": date(2024, 1, 3), "task": "b"})
    asyncio.run(seed())

    assert [e.task for e in view.documents] == ["b", "a"]
    assert view.version == 2


def test_closed_view_stops_following_the_store(store):
    view = LiveView(store, PROJECTS)
    view.open()
    view.close()

    asyncio.run(store.write(PROJECTS, {"name": "Apollo"}))

    assert not view.is_open
    with pytest.raises(StoreNotConfiguredError):
        view.documents


def test_open_requires_a_configured_store():
    view = LiveView(DocumentStore(None), ENTRIES)
    with pytest.raises(StoreNotConfiguredError):
        view.open()
