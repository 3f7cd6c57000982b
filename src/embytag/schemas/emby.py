"""Pydantic models for Emby API payloads."""

import re
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Emby emits seven fractional digits ("2024-01-10T00:00:00.0000000Z")
_EXTRA_FRACTION = re.compile(r"(\.\d{6})\d+")


class EmbyModel(BaseModel):
    """Base for Emby payloads: PascalCase aliases, unknown keys ignored."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class EmbyPerson(EmbyModel):
    name: str | None = Field(default=None, alias="Name")
    type: str | None = Field(default=None, alias="Type")


class EmbyStudio(EmbyModel):
    name: str | None = Field(default=None, alias="Name")


class EmbyItem(EmbyModel):
    """A single entry of an Emby ``/Items`` listing."""

    id: str = Field(alias="Id")
    name: str | None = Field(default=None, alias="Name")
    original_title: str | None = Field(default=None, alias="OriginalTitle")
    overview: str | None = Field(default=None, alias="Overview")
    type: str | None = Field(default=None, alias="Type")
    date_created: datetime | None = Field(default=None, alias="DateCreated")
    premiere_date: datetime | None = Field(default=None, alias="PremiereDate")
    production_year: int | None = Field(default=None, alias="ProductionYear")
    provider_ids: dict[str, str] | None = Field(default=None, alias="ProviderIds")
    genres: list[str] | None = Field(default=None, alias="Genres")
    studios: list[EmbyStudio] | None = Field(default=None, alias="Studios")
    people: list[EmbyPerson] | None = Field(default=None, alias="People")
    community_rating: float | None = Field(default=None, alias="CommunityRating")
    path: str | None = Field(default=None, alias="Path")
    image_tags: dict[str, str] | None = Field(default=None, alias="ImageTags")
    backdrop_image_tags: list[str] | None = Field(default=None, alias="BackdropImageTags")

    @field_validator("date_created", "premiere_date", mode="before")
    @classmethod
    def _trim_fraction(cls, value: Any) -> Any:
        if isinstance(value, str):
            return _EXTRA_FRACTION.sub(r"\1", value)
        return value

    def people_of_type(self, person_type: str) -> list[str] | None:
        if self.people is None:
            return None
        return [p.name for p in self.people if p.type == person_type and p.name]

    @property
    def actors(self) -> list[str] | None:
        return self.people_of_type("Actor")

    @property
    def directors(self) -> list[str] | None:
        return self.people_of_type("Director")

    @property
    def studio_names(self) -> list[str] | None:
        if self.studios is None:
            return None
        return [s.name for s in self.studios if s.name]


class ServerInfo(EmbyModel):
    """Identity returned by ``/System/Info``."""

    id: str | None = Field(default=None, alias="Id")
    server_name: str | None = Field(default=None, alias="ServerName")
    version: str | None = Field(default=None, alias="Version")
    operating_system: str | None = Field(default=None, alias="OperatingSystem")
