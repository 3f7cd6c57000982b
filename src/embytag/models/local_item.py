"""Local item model: the user's canonical catalog entry."""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import JSON, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from embytag.models.base import Base, TimestampMixin
from embytag.models.tag import local_item_tags

if TYPE_CHECKING:
    from embytag.models.remote_item import RemoteItem
    from embytag.models.tag import Tag


class LocalItem(Base, TimestampMixin):
    """
    Local item model.

    The target of tags, comments and ratings. Created by hand or from a
    mirrored Emby item, and linked to at most one remote item per server.
    """

    __tablename__ = "local_items"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(500), nullable=False, index=True)
    original_title: Mapped[str | None] = mapped_column(String(500), nullable=True)
    overview: Mapped[str | None] = mapped_column(Text, nullable=True)
    type: Mapped[str] = mapped_column(String(50), nullable=False, default="Movie", index=True)
    premiere_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    # Provider key -> id, e.g. {"Imdb": "tt0111161"}
    external_ids: Mapped[dict[str, str] | None] = mapped_column(JSON, nullable=True)

    # Relationships
    tags: Mapped[list["Tag"]] = relationship(
        secondary=local_item_tags,
        back_populates="items",
    )
    remote_items: Mapped[list["RemoteItem"]] = relationship(
        back_populates="local_item",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<LocalItem(id={self.id}, title={self.title!r}, type={self.type!r})>"
