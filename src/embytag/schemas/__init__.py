"""Pydantic schemas for API requests and responses."""

from embytag.schemas.emby import EmbyItem, EmbyPerson, EmbyStudio, ServerInfo
from embytag.schemas.item import (
    ItemSyncResultResponse,
    LocalItemResponse,
    LocalItemWithScoreResponse,
    RemoteItemResponse,
    SyncResponse,
)
from embytag.schemas.mapping import (
    BatchRequest,
    BatchResult,
    CreateOperation,
    FailedOperation,
    ItemMapOperation,
    MapOperation,
    RefreshOperation,
    UnmapOperation,
)
from embytag.schemas.server import (
    ServerCreate,
    ServerInfoResponse,
    ServerResponse,
    ServerUpdate,
)

__all__ = [
    "EmbyItem",
    "EmbyPerson",
    "EmbyStudio",
    "ServerInfo",
    "LocalItemResponse",
    "RemoteItemResponse",
    "LocalItemWithScoreResponse",
    "ItemSyncResultResponse",
    "SyncResponse",
    "MapOperation",
    "UnmapOperation",
    "CreateOperation",
    "RefreshOperation",
    "ItemMapOperation",
    "BatchRequest",
    "BatchResult",
    "FailedOperation",
    "ServerCreate",
    "ServerUpdate",
    "ServerResponse",
    "ServerInfoResponse",
]
