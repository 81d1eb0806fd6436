"""Error kinds carried by Err results.

Four kinds, mirrored by the HTTP layer's status mapping:
ExternalApiError (provider / market data), StorageError (state and archive I/O),
ValidationError (malformed input), InternalError (everything unexpected).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Union


@dataclass(frozen=True)
class ExternalApiError:
    kind: ClassVar[str] = "ExternalApiError"

    provider: str
    message: str
    status: int | None = None
    ticker: str | None = None


@dataclass(frozen=True)
class StorageError:
    kind: ClassVar[str] = "StorageError"

    op: str  # get, put, delete, list, cas
    key: str
    message: str


@dataclass(frozen=True)
class ValidationError:
    kind: ClassVar[str] = "ValidationError"

    message: str
    details: Any = None


@dataclass(frozen=True)
class InternalError:
    kind: ClassVar[str] = "InternalError"

    message: str
    cause: Any = None


AppError = Union[ExternalApiError, StorageError, ValidationError, InternalError]


def error_to_dict(error: AppError) -> dict[str, Any]:
    """Flatten an error into a JSON-friendly dict (``cause`` is stringified)."""
    data: dict[str, Any] = {"type": error.kind, "message": error.message}
    if isinstance(error, ExternalApiError):
        data.update(provider=error.provider, status=error.status, ticker=error.ticker)
    elif isinstance(error, StorageError):
        data.update(op=error.op, key=error.key)
    elif isinstance(error, ValidationError):
        data["details"] = error.details
    elif isinstance(error, InternalError) and error.cause is not None:
        data["cause"] = str(error.cause)
    return data
