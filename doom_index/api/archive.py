"""Archive endpoints — paginated listing and raw object access."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response

from doom_index.dependencies import get_container, raise_for_error
from doom_index.models.responses import ArchiveListResponse
from doom_index.models.result import Err
from doom_index.services.container import ServiceContainer

router = APIRouter()


@router.get("/archive", response_model=ArchiveListResponse)
async def list_archive(
    limit: int = Query(20),
    cursor: str | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
    container: ServiceContainer = Depends(get_container),
) -> ArchiveListResponse:
    result = await container.archive.list_images(
        limit=limit, cursor=cursor, start_date=start_date, end_date=end_date
    )
    if isinstance(result, Err):
        raise_for_error(result.error)
    page = result.value
    return ArchiveListResponse(items=page.items, cursor=page.cursor, has_more=page.has_more)


@router.get("/archive/object/{key:path}")
async def archive_object(key: str, container: ServiceContainer = Depends(get_container)) -> Response:
    result = await container.archive.get_object(key)
    if isinstance(result, Err):
        raise_for_error(result.error)
    if result.value is None:
        raise HTTPException(status_code=404, detail=f"Object not found: {key}")
    return Response(
        content=result.value.data,
        media_type=result.value.content_type,
        headers={"Cache-Control": "public, max-age=31536000, immutable"},
    )
