"""Remote item model: local mirror of an Emby catalog entry."""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import JSON, DateTime, Float, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from embytag.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from embytag.models.local_item import LocalItem
    from embytag.models.remote_server import RemoteServer


class RemoteItem(Base, TimestampMixin):
    """
    Mirrored Emby item.

    Rewritten on every sync pass from the server listing. The local_item_id
    mapping is owned by the mapping operations and never touched by the mirror.
    """

    __tablename__ = "remote_items"
    __table_args__ = (
        UniqueConstraint("remote_id", "server_id", name="uq_remote_item_server"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    remote_id: Mapped[str] = mapped_column(String(100), nullable=False)
    server_id: Mapped[int] = mapped_column(
        ForeignKey("remote_servers.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    local_item_id: Mapped[int | None] = mapped_column(
        ForeignKey("local_items.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    title: Mapped[str] = mapped_column(String(500), nullable=False)
    original_title: Mapped[str | None] = mapped_column(String(500), nullable=True)
    overview: Mapped[str | None] = mapped_column(Text, nullable=True)
    type: Mapped[str] = mapped_column(String(50), nullable=False)
    premiere_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    production_year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    date_added: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    community_rating: Mapped[float | None] = mapped_column(Float, nullable=True)
    poster_tag: Mapped[str | None] = mapped_column(String(100), nullable=True)
    backdrop_tag: Mapped[str | None] = mapped_column(String(100), nullable=True)
    external_ids: Mapped[dict[str, str] | None] = mapped_column(JSON, nullable=True)

    # Ordered name lists as returned by Emby
    genres: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    studios: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    actors: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    directors: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)

    # Relationships
    server: Mapped["RemoteServer"] = relationship(back_populates="items")
    local_item: Mapped["LocalItem | None"] = relationship(back_populates="remote_items")

    def __repr__(self) -> str:
        return (
            f"<RemoteItem(id={self.id}, remote_id={self.remote_id!r}, "
            f"title={self.title!r}, local_item_id={self.local_item_id})>"
        )
