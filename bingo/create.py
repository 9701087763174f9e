"""Client-side validation and submission of new boards."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError

from . import config
from .api import BingoApi
from .auth import is_anonymous
from .errors import BingoError, Cancelled, Outcome, Rejected, ValidationError
from .models import Board, User
from .schemas import BoardCreate

logger = logging.getLogger(__name__)

_FIELD_NAMES = {
    "is_public": "isPublic",
    "free_space": "freeSpace",
    "created_by_name": "createdByName",
}

_MESSAGES = {
    ("title", "missing"): "Board title is required",
    ("title", "string_too_short"): "Board title is required",
    ("title", "string_too_long"): f"Title must be less than {config.MAX_TITLE_LENGTH} characters",
    ("description", "string_too_long"): (
        f"Description must be less than {config.MAX_DESCRIPTION_LENGTH} characters"
    ),
    ("size", "greater_than_equal"): f"Board size must be at least {config.MIN_SIZE}x{config.MIN_SIZE}",
    ("size", "less_than_equal"): f"Board size must be at most {config.MAX_SIZE}x{config.MAX_SIZE}",
    ("size", "int_type"): (
        f"Board size must be a whole number between {config.MIN_SIZE} and {config.MAX_SIZE}"
    ),
}


def _violations(exc: PydanticValidationError) -> dict[str, str]:
    fields: dict[str, str] = {}
    for err in exc.errors():
        loc = str(err["loc"][0]) if err["loc"] else "__all__"
        name = _FIELD_NAMES.get(loc, loc)
        fields.setdefault(name, _MESSAGES.get((name, err["type"]), err["msg"]))
    return fields


def validate(form: Mapping[str, Any], user: Optional[User] = None) -> Outcome[BoardCreate]:
    """Check a proposed board before it is sent.

    ``freeSpace`` is accepted for even sizes; it simply has no effect
    there. ``createdByName`` is only attached for anonymous users, and
    only when it is non-blank after trimming.
    """
    data = dict(form)
    raw_name = data.pop("createdByName", None)
    raw_name = data.pop("created_by_name", raw_name)
    name = raw_name.strip() if isinstance(raw_name, str) else ""
    if is_anonymous(user) and name:
        data["createdByName"] = name

    try:
        submission = BoardCreate.model_validate(data)
    except PydanticValidationError as exc:
        return Outcome.failure(ValidationError("invalid board", fields=_violations(exc)))
    return Outcome.success(submission)


class BoardCreator:
    """Submits one board at a time; entered values are never mutated."""

    def __init__(self, api: BingoApi) -> None:
        self._api = api
        self._closed = False
        self.submitting = False
        self.error: Optional[BingoError] = None

    @property
    def field_errors(self) -> dict[str, str]:
        if isinstance(self.error, ValidationError):
            return dict(self.error.fields)
        return {}

    async def submit(self, form: Mapping[str, Any], user: Optional[User] = None) -> Outcome[Board]:
        if self._closed:
            return Outcome.failure(Cancelled("form closed"))
        if self.submitting:
            return Outcome.failure(Rejected("board is already being created"))

        checked = validate(form, user)
        if not checked.ok:
            logger.debug("Board form rejected: %s", sorted(checked.error.fields))
            self.error = checked.error
            return Outcome.failure(checked.error)

        self.submitting = True
        self.error = None
        try:
            board = await self._api.create_board(checked.value)
        except BingoError as exc:
            if self._closed:
                return Outcome.failure(Cancelled("form closed"))
            self.error = exc
            return Outcome.failure(exc)
        finally:
            self.submitting = False
        if self._closed:
            return Outcome.failure(Cancelled("form closed"))
        return Outcome.success(board)

    def close(self) -> None:
        self._closed = True
