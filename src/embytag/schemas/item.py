"""Pydantic schemas for local and mirrored items."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class LocalItemResponse(BaseModel):
    """Local item response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    original_title: str | None = None
    overview: str | None = None
    type: str
    premiere_date: datetime | None = None
    external_ids: dict[str, str] | None = None


class RemoteItemResponse(BaseModel):
    """Mirrored Emby item response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    remote_id: str
    server_id: int
    local_item_id: int | None = None
    title: str
    original_title: str | None = None
    overview: str | None = None
    type: str
    premiere_date: datetime | None = None
    production_year: int | None = None
    community_rating: float | None = None
    external_ids: dict[str, str] | None = None
    genres: list[str] | None = None
    studios: list[str] | None = None
    actors: list[str] | None = None
    directors: list[str] | None = None


class LocalItemWithScoreResponse(BaseModel):
    """Candidate local item with its similarity score."""

    item: LocalItemResponse
    score: float


class ItemSyncResultResponse(BaseModel):
    """Match proposal for one mirrored item."""

    item: RemoteItemResponse
    matches: list[LocalItemWithScoreResponse]
    status: str


class SyncResponse(BaseModel):
    """Response for a sync pass."""

    results: list[ItemSyncResultResponse]
    counts: dict[str, int]
