"""Emby server settings and sync endpoints."""

import logging
from collections import Counter

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from embytag.api.dependencies import get_server_cache
from embytag.database import get_db
from embytag.exceptions import EmbyConnectionError, ServerNotFoundError
from embytag.models.remote_server import RemoteServer
from embytag.schemas.item import (
    ItemSyncResultResponse,
    LocalItemResponse,
    LocalItemWithScoreResponse,
    RemoteItemResponse,
    SyncResponse,
)
from embytag.schemas.server import (
    ServerCreate,
    ServerInfoResponse,
    ServerResponse,
    ServerUpdate,
)
from embytag.services.item_matcher import ItemSyncResult, MatchStatus
from embytag.services.item_repository import ItemRepository
from embytag.services.reconciliation import ReconciliationSession
from embytag.services.server_cache import ActiveServerCache
from embytag.services.server_service import ServerService

logger = logging.getLogger(__name__)
router = APIRouter()


async def _get_server_or_404(service: ServerService, server_id: int) -> RemoteServer:
    try:
        return await service.get_server(server_id)
    except ServerNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e


def _to_response(result: ItemSyncResult) -> ItemSyncResultResponse:
    return ItemSyncResultResponse(
        item=RemoteItemResponse.model_validate(result.item),
        matches=[
            LocalItemWithScoreResponse(
                item=LocalItemResponse.model_validate(match.item),
                score=match.score,
            )
            for match in result.matches
        ],
        status=result.status.value,
    )


@router.get("/servers", response_model=list[ServerResponse])
async def list_servers(db: AsyncSession = Depends(get_db)) -> list[RemoteServer]:
    """List all servers ordered by name."""
    return list(await ServerService(db).list_servers())


@router.get("/servers/active", response_model=ServerResponse)
async def get_active_server(
    db: AsyncSession = Depends(get_db),
    cache: ActiveServerCache = Depends(get_server_cache),
) -> RemoteServer:
    """Return the active server, served from a short-lived cache."""
    server = await cache.get(ServerService(db).get_active_server)
    if server is None:
        raise HTTPException(status_code=404, detail="No active server configured")
    return server


@router.get("/servers/{server_id}", response_model=ServerResponse)
async def get_server(server_id: int, db: AsyncSession = Depends(get_db)) -> RemoteServer:
    return await _get_server_or_404(ServerService(db), server_id)


@router.post("/servers", response_model=ServerResponse, status_code=201)
async def create_server(
    request: ServerCreate,
    db: AsyncSession = Depends(get_db),
    cache: ActiveServerCache = Depends(get_server_cache),
) -> RemoteServer:
    """
    Register a server.

    The connection is tested first; an unreachable server or a rejected API
    key returns 502 and nothing is stored.
    """
    try:
        server = await ServerService(db).create_server(request)
    except EmbyConnectionError as e:
        raise HTTPException(status_code=502, detail=str(e)) from e

    if server.is_active:
        cache.set(server)
    return server


@router.patch("/servers/{server_id}", response_model=ServerResponse)
async def update_server(
    server_id: int,
    request: ServerUpdate,
    db: AsyncSession = Depends(get_db),
    cache: ActiveServerCache = Depends(get_server_cache),
) -> RemoteServer:
    if not request.model_dump(exclude_unset=True, exclude_none=True):
        raise HTTPException(status_code=400, detail="No fields to update")

    service = ServerService(db)
    await _get_server_or_404(service, server_id)
    try:
        server = await service.update_server(server_id, request)
    except EmbyConnectionError as e:
        raise HTTPException(status_code=502, detail=str(e)) from e

    cache.invalidate()
    return server


@router.delete("/servers/{server_id}", status_code=204)
async def delete_server(
    server_id: int,
    db: AsyncSession = Depends(get_db),
    cache: ActiveServerCache = Depends(get_server_cache),
) -> None:
    """Delete a server and every item mirrored from it."""
    try:
        await ServerService(db).delete_server(server_id)
    except ServerNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    cache.invalidate()


@router.post("/servers/{server_id}/test", response_model=ServerInfoResponse)
async def test_server(server_id: int, db: AsyncSession = Depends(get_db)) -> ServerInfoResponse:
    """Check that a stored server is reachable and report its identity."""
    service = ServerService(db)
    server = await _get_server_or_404(service, server_id)
    try:
        info = await service.test_connection(server.url, server.api_key)
    except EmbyConnectionError as e:
        raise HTTPException(status_code=502, detail=str(e)) from e

    return ServerInfoResponse(
        server_name=info.server_name,
        version=info.version,
        server_id=info.id,
        os=info.operating_system,
    )


@router.post("/servers/{server_id}/sync", response_model=SyncResponse)
async def sync_server(server_id: int, db: AsyncSession = Depends(get_db)) -> SyncResponse:
    """
    Run a sync pass for a server.

    Refreshes the mirror of the server's catalog and returns a match
    proposal for every mirrored item. A connection failure returns 502
    and no results.
    """
    server = await _get_server_or_404(ServerService(db), server_id)
    try:
        results = await ReconciliationSession(db).run(server)
    except EmbyConnectionError as e:
        logger.error(f"Sync of server {server_id} failed: {e}")
        raise HTTPException(status_code=502, detail=str(e)) from e

    counts = Counter(result.status.value for result in results)
    return SyncResponse(
        results=[_to_response(result) for result in results],
        counts={status.value: counts.get(status.value, 0) for status in MatchStatus},
    )


@router.get(
    "/servers/{server_id}/unmapped-local-items",
    response_model=list[LocalItemResponse],
)
async def unmapped_local_items(
    server_id: int,
    q: str | None = Query(None, description="Title search string"),
    limit: int = Query(50, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
) -> list[LocalItemResponse]:
    """Local items not yet mapped on the server, for manual mapping."""
    await _get_server_or_404(ServerService(db), server_id)
    items = await ItemRepository(db).unmapped_local_items(server_id, search=q, limit=limit)
    return [LocalItemResponse.model_validate(item) for item in items]
