"""Error taxonomy shared by the API client and the state machines.

The API client raises these. Controllers catch them and hand them back
inside an ``Outcome`` so the caller decides how to roll back.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, Optional, TypeVar

from pydantic import ValidationError as PydanticValidationError

from .schemas import ErrorEnvelope

T = TypeVar("T")


class BingoError(Exception):
    kind = "error"

    def __init__(self, message: str, status: int = 0, request_id: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.request_id = request_id

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r})"


class NetworkError(BingoError):
    kind = "network"


class ValidationError(BingoError):
    kind = "validation"

    def __init__(
        self,
        message: str = "validation_failed",
        fields: Optional[dict[str, str]] = None,
        status: int = 422,
        request_id: Optional[str] = None,
    ) -> None:
        super().__init__(message, status, request_id)
        self.fields = dict(fields or {})


class NotFound(BingoError):
    kind = "not_found"


class Conflict(BingoError):
    kind = "conflict"


class Unauthorized(BingoError):
    kind = "unauthorized"


class Forbidden(BingoError):
    kind = "forbidden"


class ServerError(BingoError):
    kind = "server"


class Rejected(BingoError):
    """A state-machine guard refused the operation; nothing was sent."""

    kind = "rejected"


class Cancelled(BingoError):
    """The owning view was closed before the response arrived."""

    kind = "cancelled"


_STATUS_ERRORS: dict[int, type[BingoError]] = {
    401: Unauthorized,
    403: Forbidden,
    404: NotFound,
    409: Conflict,
    412: Conflict,
}


def _envelope(body: Any) -> ErrorEnvelope:
    if not isinstance(body, dict):
        return ErrorEnvelope(code="unknown", message=str(body or "request_failed"))
    payload = body.get("error") if isinstance(body.get("error"), dict) else body
    try:
        return ErrorEnvelope.model_validate(payload)
    except PydanticValidationError:
        message = payload.get("message") or payload.get("error") or payload.get("detail")
        if not isinstance(message, str):
            message = "request_failed"
        details = payload.get("details", payload.get("data"))
        return ErrorEnvelope(
            code=str(payload.get("code") or message),
            message=message,
            details=details if isinstance(details, dict) else None,
        )


def _field_messages(envelope: ErrorEnvelope) -> dict[str, str]:
    details = envelope.details or {}
    fields = details.get("fields", details)
    if not isinstance(fields, dict):
        return {}
    return {str(k): str(v) for k, v in fields.items() if isinstance(v, (str, int, float))}


def error_for_status(status: int, body: Any = None) -> BingoError:
    """Build the taxonomy error for a non-2xx response."""
    envelope = _envelope(body)
    if status in (400, 422):
        return ValidationError(
            envelope.message,
            fields=_field_messages(envelope),
            status=status,
            request_id=envelope.requestId,
        )
    cls = _STATUS_ERRORS.get(status, ServerError)
    return cls(envelope.message, status=status, request_id=envelope.requestId)


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Tagged result returned across a state-machine boundary."""

    value: Optional[T] = None
    error: Optional[BingoError] = field(default=None)

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Optional[T] = None) -> Outcome[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, error: BingoError) -> Outcome[T]:
        return cls(error=error)
