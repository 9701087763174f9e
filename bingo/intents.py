"""User intents consumed by the listing and board controllers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .models import SortBy, SortOrder


# === Listing ===


@dataclass(frozen=True)
class Search:
    text: str


@dataclass(frozen=True)
class Sort:
    sort_by: SortBy
    sort_order: Optional[SortOrder] = None


@dataclass(frozen=True)
class LoadMore:
    pass


@dataclass(frozen=True)
class Refresh:
    pass


@dataclass(frozen=True)
class ClearFilters:
    pass


# === Board ===


@dataclass(frozen=True)
class StartEdit:
    cell_id: str


@dataclass(frozen=True)
class UpdateDraft:
    text: str


@dataclass(frozen=True)
class CancelEdit:
    pass


@dataclass(frozen=True)
class SaveEdit:
    pass


@dataclass(frozen=True)
class ToggleMark:
    cell_id: str
