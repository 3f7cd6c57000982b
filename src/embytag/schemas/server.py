"""Pydantic schemas for Emby server settings."""

from pydantic import BaseModel, ConfigDict, Field


class ServerCreate(BaseModel):
    """Request body for registering a server."""

    name: str = Field(..., min_length=1)
    url: str = Field(..., min_length=1)
    api_key: str = Field(..., min_length=1)
    is_active: bool = True


class ServerUpdate(BaseModel):
    """Partial update; omitted fields are left unchanged."""

    name: str | None = Field(default=None, min_length=1)
    url: str | None = Field(default=None, min_length=1)
    api_key: str | None = Field(default=None, min_length=1)
    is_active: bool | None = None


class ServerResponse(BaseModel):
    """Server response schema. The API key is never returned."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    url: str
    is_active: bool
    remote_id: str | None = None


class ServerInfoResponse(BaseModel):
    """Identity reported by a successful connection test."""

    server_name: str | None = None
    version: str | None = None
    server_id: str | None = None
    os: str | None = None
