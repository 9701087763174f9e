"""Board listing query state: search, sort and offset pagination."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Optional

from . import config
from .api import BingoApi
from .errors import BingoError, Cancelled, Outcome, Rejected
from .grid import MiniCell, completion_percentage, mini_grid
from .intents import ClearFilters, LoadMore, Refresh, Search, Sort
from .models import Board, SortBy, SortOrder

logger = logging.getLogger(__name__)

_FILTER_KEYS = ("search", "sort_by", "sort_order")


@dataclass(frozen=True)
class QueryState:
    search: str = ""
    sort_by: SortBy = SortBy.LAST_UPDATED
    sort_order: SortOrder = SortOrder.DESC
    limit: int = config.PAGE_SIZE
    offset: int = 0
    has_more: bool = True
    results: tuple[Board, ...] = ()
    loading: bool = False
    error: Optional[BingoError] = None


def infer_has_more(explicit: Optional[bool], page_length: int, limit: int) -> bool:
    """Trust the server's signal; otherwise assume a full page means more.

    The fallback reports ``True`` for an exactly-full last page; the next
    (empty) page corrects it.
    """
    if explicit is not None:
        return explicit
    return page_length == limit


class BoardListing:
    """Query controller for one listing view.

    At most one fetch is outstanding; calls made while loading are
    rejected, not queued.
    """

    def __init__(self, api: BingoApi, limit: int = config.PAGE_SIZE, **filters: Any) -> None:
        self._api = api
        self._closed = False
        self.state = QueryState(limit=limit, **self._normalize(filters))

    @staticmethod
    def _normalize(filters: dict[str, Any]) -> dict[str, Any]:
        unknown = set(filters) - set(_FILTER_KEYS)
        if unknown:
            raise TypeError(f"unknown filters: {', '.join(sorted(unknown))}")
        out: dict[str, Any] = {}
        if filters.get("search") is not None:
            out["search"] = filters["search"].strip()
        if filters.get("sort_by") is not None:
            out["sort_by"] = SortBy(filters["sort_by"])
        if filters.get("sort_order") is not None:
            out["sort_order"] = SortOrder(filters["sort_order"])
        return out

    @property
    def results(self) -> tuple[Board, ...]:
        return self.state.results

    @property
    def loading(self) -> bool:
        return self.state.loading

    async def query(self, reset: bool = False, **filters: Any) -> Outcome[tuple[Board, ...]]:
        if self._closed:
            return Outcome.failure(Cancelled("listing closed"))
        if self.state.loading:
            logger.debug("Listing fetch rejected: already loading")
            return Outcome.failure(Rejected("fetch already in progress"))

        changes = self._normalize(filters)
        if any(getattr(self.state, k) != v for k, v in changes.items()):
            reset = True
        if not reset and not self.state.has_more:
            logger.debug("Listing load-more rejected: no more boards")
            return Outcome.failure(Rejected("no more boards to load"))

        previous = self.state
        offset = 0 if reset else previous.offset + previous.limit
        self.state = replace(
            previous,
            **changes,
            offset=offset,
            results=() if reset else previous.results,
            loading=True,
            error=None,
        )
        current = self.state

        try:
            page = await self._api.list_boards(
                search=current.search or None,
                sort_by=current.sort_by,
                sort_order=current.sort_order,
                limit=current.limit,
                offset=current.offset,
            )
        except BingoError as exc:
            if self._closed:
                return Outcome.failure(Cancelled("listing closed"))
            if reset:
                self.state = replace(current, results=(), offset=0, has_more=False, loading=False, error=exc)
            else:
                self.state = replace(current, offset=previous.offset, loading=False, error=exc)
            return Outcome.failure(exc)
        except Exception:
            self.state = replace(previous, loading=False)
            raise

        if self._closed:
            logger.debug("Discarding listing page that arrived after close")
            return Outcome.failure(Cancelled("listing closed"))

        results = page.boards if reset else current.results + page.boards
        self.state = replace(
            current,
            results=results,
            has_more=infer_has_more(page.has_more, len(page.boards), current.limit),
            loading=False,
        )
        logger.info(
            "Boards loaded: count=%d total=%d has_more=%s",
            len(page.boards),
            len(results),
            self.state.has_more,
        )
        return Outcome.success(results)

    async def refresh(self) -> Outcome[tuple[Board, ...]]:
        return await self.query(reset=True)

    async def load_more(self) -> Outcome[tuple[Board, ...]]:
        return await self.query(reset=False)

    async def search(self, text: str) -> Outcome[tuple[Board, ...]]:
        return await self.query(reset=True, search=text)

    async def sort(
        self, sort_by: SortBy, sort_order: Optional[SortOrder] = None
    ) -> Outcome[tuple[Board, ...]]:
        return await self.query(reset=True, sort_by=sort_by, sort_order=sort_order)

    async def clear_filters(self) -> Outcome[tuple[Board, ...]]:
        return await self.query(
            reset=True, search="", sort_by=SortBy.LAST_UPDATED, sort_order=SortOrder.DESC
        )

    async def dispatch(self, intent: object) -> Outcome[tuple[Board, ...]]:
        if isinstance(intent, Search):
            return await self.search(intent.text)
        if isinstance(intent, Sort):
            return await self.sort(intent.sort_by, intent.sort_order)
        if isinstance(intent, LoadMore):
            return await self.load_more()
        if isinstance(intent, Refresh):
            return await self.refresh()
        if isinstance(intent, ClearFilters):
            return await self.clear_filters()
        raise TypeError(f"unsupported listing intent: {intent!r}")

    def close(self) -> None:
        self._closed = True


def board_progress(board: Board) -> int:
    return completion_percentage(board.marked_count, board.cell_count)


def board_preview(board: Board) -> list[MiniCell]:
    return mini_grid(board.cell_count, board.marked_count)
