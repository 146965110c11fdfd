import asyncio

import pytest

from alunos.client.flash import ERROR, FlashQueue
from alunos.client.listing import (
    LOAD_ERROR_MESSAGE,
    LoadState,
    StudentListController,
    derive_view,
)
from alunos.core.errors import TransportError
from conftest import make_student


@pytest.fixture
def roster():
    return [
        make_student(full_name="Ana Silva", registration_number="2024001", course="Engenharia"),
        make_student(full_name="Bruno Costa", registration_number="2024002", course="Direito"),
        make_student(
            full_name="Carla Souza",
            registration_number="2023999",
            course="Engenharia Civil",
            status="Inativo",
        ),
    ]


@pytest.fixture
def listing(fake_gateway):
    return StudentListController(fake_gateway, FlashQueue())


@pytest.mark.parametrize(
    "text,expected",
    [
        ("", ["Ana Silva", "Bruno Costa", "Carla Souza"]),
        ("ana", ["Ana Silva"]),
        ("SILVA", ["Ana Silva"]),
        ("2024", ["Ana Silva", "Bruno Costa"]),
        ("engenharia", ["Ana Silva", "Carla Souza"]),
        ("direito", ["Bruno Costa"]),
        ("zzz", []),
    ],
)
def test_derive_view_matches_name_registration_or_course(roster, text, expected):
    assert [s.full_name for s in derive_view(roster, text)] == expected


def test_derive_view_keeps_collection_order(roster):
    reversed_roster = list(reversed(roster))

    view = derive_view(reversed_roster, "a")

    assert view == [s for s in reversed_roster if s in view]


def test_derive_view_is_idempotent(roster):
    once = derive_view(roster, "eng")

    assert derive_view(once, "eng") == once


def test_derive_view_does_not_search_email(roster):
    assert derive_view(roster, "carla@x.com") == []


@pytest.mark.asyncio
async def test_refresh_replaces_collection(listing, fake_gateway, roster):
    fake_gateway.students = roster

    assert listing.load_state == LoadState.IDLE
    assert await listing.refresh() is True

    assert listing.load_state == LoadState.READY
    assert list(listing.records) == roster
    assert listing.view == roster


@pytest.mark.asyncio
async def test_refresh_replaces_wholesale(listing, fake_gateway, roster):
    fake_gateway.students = roster
    await listing.refresh()

    fake_gateway.students = roster[:1]
    await listing.refresh()

    assert list(listing.records) == roster[:1]


@pytest.mark.asyncio
async def test_refresh_recomputes_view_with_current_filter(listing, fake_gateway, roster):
    listing.set_filter("direito")
    fake_gateway.students = roster

    await listing.refresh()

    assert [s.full_name for s in listing.view] == ["Bruno Costa"]


@pytest.mark.asyncio
async def test_failed_refresh_keeps_previous_collection(fake_gateway, roster):
    flashes = FlashQueue()
    listing = StudentListController(fake_gateway, flashes)
    fake_gateway.students = roster
    await listing.refresh()

    fake_gateway.fail["list_students"] = TransportError("boom", status_code=500)
    assert await listing.refresh() is False

    assert listing.load_state == LoadState.FAILED
    assert listing.error == LOAD_ERROR_MESSAGE
    assert list(listing.records) == roster
    assert [(f.level, f.message) for f in flashes.peek()] == [(ERROR, LOAD_ERROR_MESSAGE)]


@pytest.mark.asyncio
async def test_failed_refresh_does_not_retry(listing, fake_gateway):
    fake_gateway.fail["list_students"] = TransportError()

    await listing.refresh()

    assert fake_gateway.count("list_students") == 1


def test_set_filter_recomputes_immediately(listing, roster):
    listing._records = tuple(roster)

    listing.set_filter("bruno")
    assert [s.full_name for s in listing.view] == ["Bruno Costa"]

    listing.set_filter("")
    assert listing.view == roster


@pytest.mark.asyncio
async def test_stats_counts_canonical_collection(listing, fake_gateway, roster):
    fake_gateway.students = roster
    await listing.refresh()
    listing.set_filter("bruno")

    stats = listing.stats

    assert (stats.total, stats.active, stats.inactive) == (3, 2, 1)


@pytest.mark.asyncio
async def test_reset_discards_in_flight_load(fake_gateway, roster):
    """Carga que termina depois do reset não repõe dados antigos."""
    started = asyncio.Event()
    release = asyncio.Event()

    class SlowGateway:
        async def list_students(self):
            started.set()
            await release.wait()
            return roster

    listing = StudentListController(SlowGateway(), FlashQueue())
    task = asyncio.create_task(listing.refresh())
    await started.wait()
    assert listing.loading

    listing.reset()
    release.set()

    assert await task is False
    assert listing.records == ()
    assert listing.load_state == LoadState.IDLE


def test_reset_clears_filter(listing, roster):
    listing._records = tuple(roster)
    listing.set_filter("ana")

    listing.reset()

    assert listing.filter_text == ""
    assert listing.view == []


@pytest.mark.asyncio
async def test_older_load_finishing_last_is_discarded(roster):
    """Uma carga antiga que termina depois da mais nova não sobrescreve a coleção."""
    old_started = asyncio.Event()
    release_old = asyncio.Event()

    class OverlappingGateway:
        def __init__(self):
            self.calls = 0

        async def list_students(self):
            self.calls += 1
            if self.calls == 1:
                old_started.set()
                await release_old.wait()
                return roster[:1]
            return roster

    listing = StudentListController(OverlappingGateway(), FlashQueue())
    old = asyncio.create_task(listing.refresh())
    await old_started.wait()

    assert await listing.refresh() is True
    release_old.set()

    assert await old is False
    assert list(listing.records) == roster
    assert listing.load_state == LoadState.READY


@pytest.mark.asyncio
async def test_older_load_failing_last_keeps_newer_state(roster):
    old_started = asyncio.Event()
    release_old = asyncio.Event()

    class OverlappingGateway:
        def __init__(self):
            self.calls = 0

        async def list_students(self):
            self.calls += 1
            if self.calls == 1:
                old_started.set()
                await release_old.wait()
                raise TransportError("boom", status_code=500)
            return roster

    flashes = FlashQueue()
    listing = StudentListController(OverlappingGateway(), flashes)
    old = asyncio.create_task(listing.refresh())
    await old_started.wait()
    await listing.refresh()
    release_old.set()

    assert await old is False
    assert listing.load_state == LoadState.READY
    assert listing.error is None
    assert flashes.peek() == []
