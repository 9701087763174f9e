"""Per-board view state: cells, edit session, mark toggles."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable, Optional

from .api import BingoApi
from .auth import Capabilities, capabilities
from .errors import BingoError, Cancelled, NotFound, Outcome, Rejected
from .grid import GridCell, completion_percentage, free_space_index, project
from .intents import CancelEdit, SaveEdit, StartEdit, ToggleMark, UpdateDraft
from .models import Board, Cell, User
from .session import CellEditSession, SessionState

logger = logging.getLogger(__name__)


class BoardView:
    """State owned by one open board page.

    Derived fields (``grid``, ``capabilities``, ``completion_percentage``)
    are computed on access so they always reflect the current inputs.
    """

    def __init__(
        self,
        api: BingoApi,
        board: Board,
        cells: Iterable[Cell],
        user: Optional[User] = None,
    ) -> None:
        self._api = api
        self.board = board
        self.user = user
        self.cells: dict[str, Cell] = {}
        for cell in cells:
            if cell.board_id != board.id:
                raise ValueError(f"cell {cell.id} belongs to board {cell.board_id}, not {board.id}")
            self.cells[cell.id] = cell
        self.session = CellEditSession(api, board.id, self.cells)
        self._toggling: set[str] = set()
        self._closed = False

    @classmethod
    async def open(cls, api: BingoApi, owner: str, slug: str) -> BoardView:
        board = await api.get_board(owner, slug)
        cells = await api.list_cells(board.id)
        user = await api.get_current_user()
        logger.debug("Opened board %s with %d cells", board.id, len(cells))
        return cls(api, board, cells, user)

    # === Derived view model ===

    @property
    def grid(self) -> list[Optional[GridCell]]:
        settings = self.board.settings
        return project(self.cells.values(), settings.size, settings.free_space)

    @property
    def capabilities(self) -> Capabilities:
        return capabilities(self.user, self.board)

    @property
    def completion_percentage(self) -> int:
        return completion_percentage(self.board.marked_count, self.board.cell_count)

    @property
    def session_state(self) -> SessionState:
        return self.session.state

    def grid_cell(self, cell_id: str) -> Optional[GridCell]:
        for slot in self.grid:
            if slot is not None and slot.id == cell_id:
                return slot
        return None

    # === Input changes ===

    def set_user(self, user: Optional[User]) -> None:
        self.user = user
        if not self.capabilities.can_edit:
            self.session.abort()

    def set_board(self, board: Board) -> None:
        if board.id != self.board.id:
            raise ValueError("a view cannot switch to another board")
        self.board = board
        if not self.capabilities.can_edit:
            self.session.abort()

    # === Editing ===

    def start_edit(self, cell_id: str) -> Outcome:
        cell = self.grid_cell(cell_id)
        if cell is None:
            return Outcome.failure(NotFound(f"cell {cell_id} is not on this board"))
        return self.session.start_edit(cell, self.capabilities)

    def update_draft(self, text: str) -> Outcome:
        return self.session.update_draft(text)

    def cancel_edit(self) -> Outcome:
        return self.session.cancel()

    async def save_edit(self) -> Outcome:
        return await self.session.save()

    # === Marking ===

    async def toggle_mark(self, cell_id: str) -> Outcome[Cell]:
        """Flip a cell's mark optimistically; roll back if the server refuses."""
        if self._closed:
            return Outcome.failure(Cancelled("board view closed"))
        if not self.capabilities.can_mark:
            return Outcome.failure(Rejected("sign in to mark cells"))
        cell = self.cells.get(cell_id)
        if cell is None:
            return Outcome.failure(NotFound(f"cell {cell_id} is not on this board"))
        size = self.board.size
        has_free = free_space_index(size, self.board.settings.free_space) is not None
        if has_free and cell.row == cell.col == size // 2:
            return Outcome.failure(Rejected("the free space is always marked"))
        if cell_id in self._toggling:
            return Outcome.failure(Rejected("cell is already being updated"))

        marked = not cell.marked
        delta = 1 if marked else -1
        self._toggling.add(cell_id)
        self.cells[cell_id] = replace(cell, marked=marked)
        self.board = replace(self.board, marked_count=self.board.marked_count + delta)
        try:
            await self._api.update_cell(self.board.id, cell_id, marked=marked)
        except BingoError as exc:
            if self._closed:
                return Outcome.failure(Cancelled("board view closed"))
            logger.info("Marking cell %s failed, rolling back: %s", cell_id, exc)
            current = self.cells.get(cell_id)
            if current is not None:
                self.cells[cell_id] = replace(current, marked=cell.marked)
            self.board = replace(self.board, marked_count=self.board.marked_count - delta)
            return Outcome.failure(exc)
        finally:
            self._toggling.discard(cell_id)
        if self._closed:
            return Outcome.failure(Cancelled("board view closed"))
        return Outcome.success(self.cells[cell_id])

    async def dispatch(self, intent: object) -> Outcome:
        if isinstance(intent, StartEdit):
            return self.start_edit(intent.cell_id)
        if isinstance(intent, UpdateDraft):
            return self.update_draft(intent.text)
        if isinstance(intent, CancelEdit):
            return self.cancel_edit()
        if isinstance(intent, SaveEdit):
            return await self.save_edit()
        if isinstance(intent, ToggleMark):
            return await self.toggle_mark(intent.cell_id)
        raise TypeError(f"unsupported board intent: {intent!r}")

    def close(self) -> None:
        self._closed = True
        self.session.close()
        self._toggling.clear()
