"""Pydantic schemas for mapping operations and batch results."""

from typing import Annotated, Literal

from pydantic import BaseModel, Field


class MapOperation(BaseModel):
    """Link a mirrored item to an existing local item."""

    type: Literal["map"] = "map"
    remote_item_id: int
    # Optional so a missing id fails this operation, not the whole batch
    local_item_id: int | None = None


class UnmapOperation(BaseModel):
    """Remove the link of a mirrored item."""

    type: Literal["unmap"] = "unmap"
    remote_item_id: int


class CreateOperation(BaseModel):
    """Create a local item from a mirrored item and link them."""

    type: Literal["create"] = "create"
    remote_item_id: int


class RefreshOperation(BaseModel):
    """Overwrite the linked local item with the mirrored metadata."""

    type: Literal["refresh"] = "refresh"
    remote_item_id: int


ItemMapOperation = Annotated[
    MapOperation | UnmapOperation | CreateOperation | RefreshOperation,
    Field(discriminator="type"),
]


class BatchRequest(BaseModel):
    """Request body for executing queued mapping operations."""

    operations: list[ItemMapOperation]


class FailedOperation(BaseModel):
    id: int
    error: str


class BatchResult(BaseModel):
    """Per-operation outcome of a batch. Ids are remote item ids."""

    success: list[int] = Field(default_factory=list)
    failed: list[FailedOperation] = Field(default_factory=list)
