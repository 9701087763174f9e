from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from . import config


class ErrorEnvelope(BaseModel):
    code: str
    message: str
    details: Optional[dict[str, Any]] = None
    requestId: Optional[str] = None


class WireModel(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True, populate_by_name=True)


class UserOut(WireModel):
    userId: str = Field(validation_alias=AliasChoices("userId", "user_id", "id"))
    username: str
    isAdmin: bool = Field(default=False, validation_alias=AliasChoices("isAdmin", "is_admin"))
    authProvider: str = Field(
        default="local", validation_alias=AliasChoices("authProvider", "auth_provider")
    )


class BoardSettingsOut(WireModel):
    size: int = config.DEFAULT_SIZE
    freeSpace: bool = True


class BoardOut(WireModel):
    id: str
    slug: str
    title: str
    description: Optional[str] = None
    createdBy: Optional[str] = None
    creatorId: Optional[str] = None
    creatorUsername: Optional[str] = None
    isPublic: bool = False
    settings: BoardSettingsOut = Field(default_factory=BoardSettingsOut)
    cellCount: int = 0
    markedCount: int = 0
    createdAt: Optional[datetime] = None
    lastUpdated: Optional[datetime] = None


class CellOut(WireModel):
    id: str
    boardId: Optional[str] = None
    row: int
    col: int
    value: Optional[str] = None
    type: str = "text"
    marked: bool = False
    lastUpdated: Optional[datetime] = None
    updatedBy: Optional[str] = None


class PageMeta(BaseModel):
    hasMore: Optional[bool] = None


class Pagination(BaseModel):
    hasNext: Optional[bool] = None


class BoardsPage(BaseModel):
    boards: list[BoardOut] = Field(default_factory=list)
    meta: Optional[PageMeta] = None
    pagination: Optional[Pagination] = None

    @property
    def has_more(self) -> Optional[bool]:
        if self.meta is not None and self.meta.hasMore is not None:
            return self.meta.hasMore
        if self.pagination is not None:
            return self.pagination.hasNext
        return None


class CellUpdate(BaseModel):
    value: Optional[str] = Field(default=None, max_length=config.MAX_CELL_VALUE_LENGTH)
    type: Optional[str] = None
    marked: Optional[bool] = None


class BoardCreate(BaseModel):
    """Board submission as accepted by ``POST /boards``."""

    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    title: str = Field(min_length=1, max_length=config.MAX_TITLE_LENGTH)
    description: Optional[str] = Field(default=None, max_length=config.MAX_DESCRIPTION_LENGTH)
    size: int = Field(default=config.DEFAULT_SIZE, ge=config.MIN_SIZE, le=config.MAX_SIZE, strict=True)
    isPublic: bool = Field(default=False, alias="is_public")
    freeSpace: bool = Field(default=True, alias="free_space")
    createdByName: Optional[str] = Field(default=None, alias="created_by_name")

    @field_validator("description", "createdByName")
    @classmethod
    def blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        return value or None

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)
