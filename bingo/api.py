"""Async client for the bingo board HTTP API."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional, TypeVar

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from . import config
from .errors import BingoError, NetworkError, ServerError, Unauthorized, error_for_status
from .models import Board, Cell, CellType, SortBy, SortOrder, User, board_from, cell_from, user_from
from .schemas import BoardCreate, BoardOut, BoardsPage, CellOut, CellUpdate, UserOut

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


@dataclass(frozen=True)
class Page:
    boards: tuple[Board, ...]
    has_more: Optional[bool] = None


def _json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text or None


def _parse(model: type[M], body: Any) -> M:
    try:
        return model.model_validate(body)
    except PydanticValidationError as exc:
        logger.error("Malformed %s in response: %d problem(s)", model.__name__, exc.error_count())
        raise ServerError(f"malformed response: expected {model.__name__}") from exc


class BingoApi:
    """Thin wrapper mapping API endpoints onto domain objects.

    Every failure is raised as a ``BingoError`` subclass; transport
    failures become ``NetworkError``.
    """

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    @classmethod
    def from_env(cls, base_url: Optional[str] = None, token: Optional[str] = None) -> BingoApi:
        headers = {"Accept": "application/json"}
        token = token or config.API_TOKEN
        if token:
            headers["Authorization"] = f"Bearer {token}"
        client = httpx.AsyncClient(
            base_url=base_url or config.API_URL,
            headers=headers,
            timeout=config.TIMEOUT,
        )
        return cls(client)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.TransportError as exc:
            raise NetworkError(str(exc) or type(exc).__name__) from exc
        if response.is_error:
            raise error_for_status(response.status_code, _json(response))
        if response.status_code == 204 or not response.content:
            return None
        return _json(response)

    # === Boards ===

    async def list_boards(
        self,
        search: Optional[str] = None,
        sort_by: SortBy = SortBy.LAST_UPDATED,
        sort_order: SortOrder = SortOrder.DESC,
        limit: int = config.PAGE_SIZE,
        offset: int = 0,
    ) -> Page:
        params: dict[str, Any] = {
            "limit": limit,
            "offset": offset,
            "sortBy": SortBy(sort_by).value,
            "sortOrder": SortOrder(sort_order).value,
        }
        if search:
            params["search"] = search
        try:
            body = await self._request("GET", "/boards", params=params)
        except BingoError as exc:
            logger.error("Failed to fetch boards: %s (params=%s)", exc, params)
            raise
        page = _parse(BoardsPage, body or {})
        return Page(
            boards=tuple(board_from(b) for b in page.boards),
            has_more=page.has_more,
        )

    async def get_board(self, owner: str, slug: str) -> Board:
        try:
            body = await self._request("GET", f"/boards/{owner}/{slug}")
        except BingoError as exc:
            logger.error("Failed to fetch board %s/%s: %s", owner, slug, exc)
            raise
        return board_from(_parse(BoardOut, body))

    async def create_board(self, submission: BoardCreate) -> Board:
        try:
            body = await self._request("POST", "/boards", json=submission.to_payload())
        except BingoError as exc:
            logger.error("Failed to create board %r: %s", submission.title, exc)
            raise
        board = board_from(_parse(BoardOut, body))
        logger.info("Board created: %s", board.id)
        return board

    # === Cells ===

    async def list_cells(self, board_id: str) -> list[Cell]:
        try:
            body = await self._request("GET", f"/boards/{board_id}/cells")
        except BingoError as exc:
            logger.error("Failed to fetch cells for board %s: %s", board_id, exc)
            raise
        if isinstance(body, dict):
            body = body.get("cells", [])
        return [cell_from(_parse(CellOut, c), board_id) for c in body or []]

    async def update_cell(
        self,
        board_id: str,
        cell_id: str,
        value: Optional[str] = None,
        marked: Optional[bool] = None,
        type: Optional[CellType] = None,
    ) -> Cell:
        payload = CellUpdate(
            value=value,
            marked=marked,
            type=CellType(type).value if type is not None else None,
        ).model_dump(exclude_none=True)
        try:
            body = await self._request("PUT", f"/boards/{board_id}/cells/{cell_id}", json=payload)
        except BingoError as exc:
            logger.error("Failed to update cell %s on board %s: %s", cell_id, board_id, exc)
            raise
        if isinstance(body, dict) and isinstance(body.get("cell"), dict):
            body = body["cell"]
        logger.info("Cell updated: %s/%s", board_id, cell_id)
        return cell_from(_parse(CellOut, body), board_id)

    # === Users ===

    async def get_current_user(self) -> Optional[User]:
        try:
            body = await self._request("GET", "/auth/status")
        except Unauthorized:
            return None
        if isinstance(body, dict) and "user" in body:
            body = body["user"]
        if not body:
            return None
        return user_from(_parse(UserOut, body))
