"""Projection of persisted cells onto the dense board grid."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from .models import Cell, CellType


@dataclass(frozen=True)
class GridCell:
    id: str
    row: int
    col: int
    value: str
    type: CellType
    marked: bool
    is_free_space: bool = False

    @property
    def editable(self) -> bool:
        return not self.is_free_space


@dataclass(frozen=True)
class MiniCell:
    filled: bool
    marked: bool


def free_space_index(size: int, free_space: bool) -> Optional[int]:
    """Slot index of the free space, or None when the board has none."""
    if not free_space or size % 2 == 0:
        return None
    center = size // 2
    return center * size + center


def project(cells: Iterable[Cell], size: int, free_space: bool) -> list[Optional[GridCell]]:
    """Lay cells out as ``size * size`` slots in row-major order.

    Cells outside the board (stale data from a resized board) are dropped.
    Positions without a cell stay ``None``, except the free space, which
    is always present when the board has one.
    """
    slots: list[Optional[GridCell]] = [None] * (size * size)
    free = free_space_index(size, free_space)
    for cell in cells:
        if not (0 <= cell.row < size and 0 <= cell.col < size):
            continue
        index = cell.row * size + cell.col
        is_free = index == free
        slots[index] = GridCell(
            id=cell.id,
            row=cell.row,
            col=cell.col,
            value=cell.value,
            type=cell.type,
            marked=False if is_free else cell.marked,
            is_free_space=is_free,
        )
    if free is not None and slots[free] is None:
        center = size // 2
        slots[free] = GridCell(
            id=f"free-{free}",
            row=center,
            col=center,
            value="",
            type=CellType.TEXT,
            marked=False,
            is_free_space=True,
        )
    return slots


def rows(grid: Sequence[Optional[GridCell]], size: int) -> list[list[Optional[GridCell]]]:
    return [list(grid[r * size : (r + 1) * size]) for r in range(size)]


def completion_percentage(marked_count: int, cell_count: int) -> int:
    if cell_count <= 0:
        return 0
    # half-up
    return math.floor(marked_count * 100 / cell_count + 0.5)


def mini_grid(total_cells: int, marked_cells: int) -> list[MiniCell]:
    """Illustrative preview grid for listings; not tied to real positions."""
    if total_cells <= 0:
        return []
    side = math.ceil(math.sqrt(total_cells))
    return [MiniCell(filled=i < total_cells, marked=i < marked_cells) for i in range(side * side)]
