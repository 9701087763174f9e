from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from . import config
from .schemas import BoardOut, CellOut, UserOut


class CellType(str, Enum):
    TEXT = "text"
    IMAGE = "image"


class SortBy(str, Enum):
    LAST_UPDATED = "last_updated"
    CREATED = "created"
    TITLE = "title"


class SortOrder(str, Enum):
    ASC = "ASC"
    DESC = "DESC"


# === Domain objects held by the client views ===


@dataclass(frozen=True)
class BoardSettings:
    size: int = config.DEFAULT_SIZE
    free_space: bool = True


@dataclass(frozen=True)
class Board:
    id: str
    slug: str
    title: str
    creator_id: Optional[str] = None
    creator_username: Optional[str] = None
    created_by: Optional[str] = None
    description: Optional[str] = None
    is_public: bool = False
    settings: BoardSettings = field(default_factory=BoardSettings)
    cell_count: int = 0
    marked_count: int = 0
    created_at: Optional[datetime] = None
    last_updated: Optional[datetime] = None

    @property
    def size(self) -> int:
        return self.settings.size

    @property
    def url(self) -> str:
        owner = self.creator_username or self.created_by or config.ANONYMOUS
        return f"/{owner}/{self.slug}"


@dataclass(frozen=True)
class Cell:
    id: str
    board_id: str
    row: int
    col: int
    value: str = ""
    type: CellType = CellType.TEXT
    marked: bool = False


@dataclass(frozen=True)
class User:
    user_id: str
    username: str
    is_admin: bool = False
    auth_provider: str = "local"


# === Wire conversions ===


def board_from(out: BoardOut) -> Board:
    return Board(
        id=out.id,
        slug=out.slug,
        title=out.title,
        creator_id=out.creatorId,
        creator_username=out.creatorUsername,
        created_by=out.createdBy if out.createdBy is not None else out.creatorUsername,
        description=out.description,
        is_public=out.isPublic,
        settings=BoardSettings(size=out.settings.size, free_space=out.settings.freeSpace),
        cell_count=out.cellCount,
        marked_count=out.markedCount,
        created_at=out.createdAt,
        last_updated=out.lastUpdated,
    )


def cell_from(out: CellOut, board_id: Optional[str] = None) -> Cell:
    owner = out.boardId or board_id
    if owner is None:
        raise ValueError(f"cell {out.id} has no board")
    try:
        cell_type = CellType(out.type)
    except ValueError:
        cell_type = CellType.TEXT
    return Cell(
        id=out.id,
        board_id=owner,
        row=out.row,
        col=out.col,
        value=out.value or "",
        type=cell_type,
        marked=out.marked,
    )


def user_from(out: UserOut) -> User:
    return User(
        user_id=out.userId,
        username=out.username,
        is_admin=out.isAdmin,
        auth_provider=out.authProvider,
    )
