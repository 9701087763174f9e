from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from . import config
from .models import Board, User


@dataclass(frozen=True)
class Capabilities:
    can_view: bool = True
    can_edit: bool = False
    can_mark: bool = False


def is_anonymous(user: Optional[User]) -> bool:
    """Anonymous is derived from the session, never stored.

    Any username starting with "Anonymous" counts, so a registered user
    named e.g. "Anonymously" is classified anonymous too.
    """
    if user is None:
        return False
    return (
        user.auth_provider == config.ANONYMOUS
        or user.username == config.ANONYMOUS_USERNAME
        or user.username.startswith("Anonymous")
    )


def can_edit(user: Optional[User], board: Board) -> bool:
    if user is None:
        return False
    if user.is_admin:
        return True
    if board.creator_id is not None and user.user_id == board.creator_id:
        return True
    # anonymous boards have no owner identity beyond the provider
    return is_anonymous(user) and board.created_by == config.ANONYMOUS


def capabilities(user: Optional[User], board: Board) -> Capabilities:
    return Capabilities(
        can_view=True,
        can_edit=can_edit(user, board),
        can_mark=user is not None,
    )
