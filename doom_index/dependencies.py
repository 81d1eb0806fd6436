"""FastAPI dependency injection."""

from __future__ import annotations

from fastapi import HTTPException, Request

from doom_index.models.errors import AppError, error_to_dict
from doom_index.services.container import ServiceContainer

_STATUS_BY_KIND = {
    "ValidationError": 422,
    "ExternalApiError": 502,
    "StorageError": 503,
    "InternalError": 500,
}


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


def raise_for_error(error: AppError) -> None:
    """Translate an Err payload into an HTTPException with the kind's status code."""
    raise HTTPException(status_code=_STATUS_BY_KIND.get(error.kind, 500), detail=error_to_dict(error))
