"""Single-cell edit-and-save state machine.

    Idle --start_edit--> Editing --save--> Saving --ok--> Idle
                           ^                  |
                           +------error-------+

Only one cell is edited at a time. Failures keep the draft.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import MutableMapping, Optional, Union

from . import config
from .api import BingoApi
from .auth import Capabilities
from .errors import BingoError, Cancelled, Outcome, Rejected, ValidationError
from .grid import GridCell
from .models import Cell

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Editing:
    cell_id: str
    draft: str
    error: Optional[BingoError] = None


@dataclass(frozen=True)
class Saving:
    cell_id: str
    draft: str


SessionState = Union[Idle, Editing, Saving]

IDLE = Idle()


class CellEditSession:
    def __init__(self, api: BingoApi, board_id: str, cells: MutableMapping[str, Cell]) -> None:
        self._api = api
        self._board_id = board_id
        self._cells = cells
        self._closed = False
        self.state: SessionState = IDLE

    @property
    def draft(self) -> Optional[str]:
        if isinstance(self.state, (Editing, Saving)):
            return self.state.draft
        return None

    def _reject(self, reason: str) -> Outcome:
        logger.debug("Edit rejected on board %s: %s", self._board_id, reason)
        return Outcome.failure(Rejected(reason))

    def start_edit(self, cell: GridCell, capabilities: Capabilities) -> Outcome[Editing]:
        if self._closed:
            return Outcome.failure(Cancelled("session closed"))
        if not isinstance(self.state, Idle):
            return self._reject("another cell is being edited")
        if not capabilities.can_edit:
            return self._reject("not allowed to edit this board")
        if cell.is_free_space:
            return self._reject("the free space cannot be edited")
        if cell.id not in self._cells:
            return self._reject(f"unknown cell {cell.id}")
        self.state = Editing(cell_id=cell.id, draft=cell.value)
        return Outcome.success(self.state)

    def update_draft(self, text: str) -> Outcome[Editing]:
        if not isinstance(self.state, Editing):
            return self._reject("no cell is being edited")
        self.state = Editing(cell_id=self.state.cell_id, draft=text)
        return Outcome.success(self.state)

    def cancel(self) -> Outcome[Idle]:
        if not isinstance(self.state, Editing):
            return self._reject("no cell is being edited")
        self.state = IDLE
        return Outcome.success(IDLE)

    def abort(self) -> None:
        """Drop an unsaved draft, e.g. when edit rights go away."""
        if isinstance(self.state, Editing):
            self.state = IDLE

    async def save(self) -> Outcome[Cell]:
        if self._closed:
            return Outcome.failure(Cancelled("session closed"))
        editing = self.state
        if not isinstance(editing, Editing):
            return self._reject("no cell is being edited")
        if len(editing.draft) > config.MAX_CELL_VALUE_LENGTH:
            error = ValidationError(
                "cell value too long",
                fields={"value": f"Cell value must be at most {config.MAX_CELL_VALUE_LENGTH} characters"},
            )
            self.state = replace(editing, error=error)
            return Outcome.failure(error)

        self.state = Saving(cell_id=editing.cell_id, draft=editing.draft)
        try:
            await self._api.update_cell(self._board_id, editing.cell_id, value=editing.draft)
        except BingoError as exc:
            if self._closed:
                return Outcome.failure(Cancelled("session closed"))
            logger.info("Saving cell %s failed: %s", editing.cell_id, exc)
            self.state = Editing(cell_id=editing.cell_id, draft=editing.draft, error=exc)
            return Outcome.failure(exc)
        except Exception:
            self.state = Editing(cell_id=editing.cell_id, draft=editing.draft)
            raise

        if self._closed:
            return Outcome.failure(Cancelled("session closed"))
        cell = replace(self._cells[editing.cell_id], value=editing.draft)
        self._cells[cell.id] = cell
        self.state = IDLE
        return Outcome.success(cell)

    def close(self) -> None:
        self._closed = True
        self.state = IDLE
