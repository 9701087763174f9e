"""End-to-end tests of the client against the fake bingo API."""

from datetime import datetime, timedelta, timezone

import httpx
import pytest

from bingo.api import BingoApi
from bingo.auth import Capabilities
from bingo.board import BoardView
from bingo.create import BoardCreator, validate
from bingo.errors import Conflict, Forbidden, NetworkError, NotFound, ServerError, Unauthorized
from bingo.grid import project
from bingo.listing import BoardListing
from bingo.models import CellType, SortBy, SortOrder
from bingo.session import CellEditSession, Editing

from stubs import make_board, make_cells


def seed_boards(storage, count, owner="u-alice"):
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    return [
        storage.create_board(
            storage.users[owner],
            f"Board {i:02d}",
            size=3,
            created_at=start + timedelta(hours=i),
        )
        for i in range(count)
    ]


@pytest.mark.asyncio
async def test_list_boards_reads_meta(storage, make_api):
    seed_boards(storage, 3)
    api = make_api()
    page = await api.list_boards(limit=2, offset=0)
    assert [b.title for b in page.boards] == ["Board 02", "Board 01"]
    assert page.has_more is True

    page = await api.list_boards(limit=2, offset=2)
    assert [b.title for b in page.boards] == ["Board 00"]
    assert page.has_more is False


@pytest.mark.asyncio
async def test_list_boards_without_meta(storage, make_api):
    seed_boards(storage, 1)
    storage.report_has_more = False
    page = await make_api().list_boards()
    assert page.has_more is None


@pytest.mark.asyncio
async def test_list_boards_search_and_sort(storage, make_api):
    seed_boards(storage, 3)
    storage.create_board(storage.users["u-bob"], "Cats on a train")
    api = make_api()
    page = await api.list_boards(search="cats")
    assert [b.title for b in page.boards] == ["Cats on a train"]
    page = await api.list_boards(sort_by=SortBy.TITLE, sort_order=SortOrder.ASC)
    assert [b.title for b in page.boards][0] == "Board 00"


@pytest.mark.asyncio
async def test_board_fields_are_mapped(storage, make_api):
    stored = storage.create_board(storage.users["u-alice"], "Road Trip", size=5, description="summer")
    board = await make_api().get_board("alice", "road-trip")
    assert board.id == stored.id
    assert board.creator_id == "u-alice"
    assert board.created_by == "alice"
    assert board.settings.size == 5
    assert board.settings.free_space is True
    assert board.cell_count == 25
    assert board.url == "/alice/road-trip"
    assert board.created_at is not None


@pytest.mark.asyncio
async def test_get_missing_board(make_api):
    with pytest.raises(NotFound):
        await make_api().get_board("alice", "nothing-here")


@pytest.mark.asyncio
async def test_current_user(make_api):
    user = await make_api("u-anon").get_current_user()
    assert user.username == "Anonymous User"
    assert user.auth_provider == "anonymous"
    assert await make_api().get_current_user() is None


@pytest.mark.asyncio
async def test_list_cells(storage, make_api):
    stored = storage.create_board(storage.users["u-alice"], "Cells", size=3)
    cells = await make_api().list_cells(stored.id)
    assert len(cells) == 9
    assert all(c.board_id == stored.id for c in cells)
    assert {c.type for c in cells} == {CellType.TEXT}


@pytest.mark.asyncio
async def test_update_cell_errors(storage, make_api):
    stored = storage.create_board(storage.users["u-alice"], "Guarded", size=3)
    cell = storage.cell_at(stored, 0, 0)

    with pytest.raises(Unauthorized):
        await make_api().update_cell(stored.id, cell.id, value="x")
    with pytest.raises(Forbidden):
        await make_api("u-bob").update_cell(stored.id, cell.id, value="x")

    storage.conflicts.add(cell.id)
    with pytest.raises(Conflict) as excinfo:
        await make_api("u-alice").update_cell(stored.id, cell.id, value="x")
    assert excinfo.value.status == 409

    storage.failures.append(500)
    with pytest.raises(ServerError) as excinfo:
        await make_api("u-alice").update_cell(stored.id, cell.id, value="x")
    assert excinfo.value.message == "scripted failure 500"


@pytest.mark.asyncio
async def test_transport_failure_becomes_network_error():
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    api = BingoApi(httpx.AsyncClient(transport=httpx.MockTransport(refuse), base_url="http://bingo.test"))
    with pytest.raises(NetworkError):
        await api.list_boards()


@pytest.mark.asyncio
async def test_listing_against_api(storage, make_api):
    seed_boards(storage, 5)
    listing = BoardListing(make_api(), limit=2)
    await listing.refresh()
    await listing.load_more()
    await listing.load_more()
    assert [b.title for b in listing.results] == [f"Board {i:02d}" for i in (4, 3, 2, 1, 0)]
    assert listing.state.has_more is False


@pytest.mark.asyncio
async def test_full_page_without_meta_infers_more(storage, make_api):
    seed_boards(storage, 20)
    storage.report_has_more = False
    listing = BoardListing(make_api(), limit=20)
    await listing.refresh()
    assert len(listing.results) == 20
    assert listing.state.has_more is True

    await listing.load_more()
    assert len(listing.results) == 20
    assert listing.state.has_more is False


@pytest.mark.asyncio
async def test_listing_reset_failure_shows_error(storage, make_api):
    seed_boards(storage, 2)
    storage.failures.append(503)
    listing = BoardListing(make_api(), limit=2)
    outcome = await listing.refresh()
    assert isinstance(outcome.error, ServerError)
    assert listing.results == ()
    assert (await listing.refresh()).ok
    assert len(listing.results) == 2


@pytest.mark.asyncio
async def test_open_board_edit_and_save(storage, make_api):
    stored = storage.create_board(storage.users["u-alice"], "Office", size=5)
    view = await BoardView.open(make_api("u-alice"), "alice", "office")
    assert view.capabilities.can_edit
    assert view.grid[12].is_free_space

    target = storage.cell_at(stored, 0, 4)
    assert view.start_edit(target.id).ok
    view.update_draft("Printer jams")
    assert (await view.save_edit()).ok
    assert target.value == "Printer jams"
    assert view.grid[4].value == "Printer jams"


@pytest.mark.asyncio
async def test_viewer_marks_but_cannot_edit(storage, make_api):
    stored = storage.create_board(storage.users["u-alice"], "Office", size=3)
    view = await BoardView.open(make_api("u-bob"), "alice", "office")
    target = storage.cell_at(stored, 0, 0)
    assert not view.start_edit(target.id).ok
    assert (await view.toggle_mark(target.id)).ok
    assert target.marked
    assert view.board.marked_count == 1


@pytest.mark.asyncio
async def test_save_conflict_keeps_draft(storage, make_api):
    stored = storage.create_board(storage.users["u-alice"], "Office", size=3)
    view = await BoardView.open(make_api("u-alice"), "alice", "office")
    target = storage.cell_at(stored, 0, 0)
    storage.conflicts.add(target.id)
    view.start_edit(target.id)
    view.update_draft("mine")
    outcome = await view.save_edit()
    assert isinstance(outcome.error, Conflict)
    assert view.session_state.draft == "mine"
    assert target.value == "Square 1"


@pytest.mark.asyncio
async def test_anonymous_board_creation(storage, make_api):
    api = make_api("u-anon")
    user = await api.get_current_user()
    creator = BoardCreator(api)

    outcome = await creator.submit({"title": "Anon fun", "size": 3, "isPublic": True, "createdByName": " "}, user)
    assert outcome.ok
    assert outcome.value.created_by == "anonymous"

    # any anonymous session may edit an anonymous board
    other = make_api("u-anon2")
    view = await BoardView.open(other, "anonymous", "anon-fun")
    assert view.capabilities.can_edit


def test_anonymous_submission_payload():
    submission = validate({"title": "Anon", "size": 5, "createdByName": "  Fox "}, None)
    assert "createdByName" not in submission.value.to_payload()


def api_returning(body):
    def respond(request):
        return httpx.Response(200, json=body)

    return BingoApi(httpx.AsyncClient(transport=httpx.MockTransport(respond), base_url="http://bingo.test"))


@pytest.mark.asyncio
async def test_malformed_board_page_is_a_server_error():
    listing = BoardListing(api_returning({"boards": [{"title": "no id"}]}), limit=2)
    outcome = await listing.refresh()
    assert isinstance(outcome.error, ServerError)
    assert "malformed" in outcome.error.message
    assert not listing.loading

    again = await listing.refresh()
    assert isinstance(again.error, ServerError)


@pytest.mark.asyncio
async def test_malformed_cell_reply_keeps_draft():
    board = make_board(size=3)
    cells = {c.id: c for c in make_cells(board)}
    grid = {slot.id: slot for slot in project(cells.values(), 3, True) if slot is not None}
    session = CellEditSession(api_returning({"success": True, "cell": {"row": 0}}), board.id, cells)

    session.start_edit(grid["c0-1"], Capabilities(can_edit=True, can_mark=True))
    session.update_draft("b")
    outcome = await session.save()
    assert isinstance(outcome.error, ServerError)
    assert session.state == Editing(cell_id="c0-1", draft="b", error=outcome.error)


@pytest.mark.asyncio
async def test_update_cell_unwraps_success_reply(storage, make_api):
    stored = storage.create_board(storage.users["u-alice"], "Wrapped", size=3)
    cell = storage.cell_at(stored, 1, 2)

    updated = await make_api("u-alice").update_cell(stored.id, cell.id, value="Pic", type=CellType.IMAGE)
    assert updated.id == cell.id
    assert updated.value == "Pic"
    assert updated.type is CellType.IMAGE
    assert (updated.row, updated.col) == (1, 2)
    assert storage.boards[stored.id].cells[cell.id].type == "image"
