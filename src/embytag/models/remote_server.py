"""Remote server model: connection details for an Emby server."""

from typing import TYPE_CHECKING

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from embytag.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from embytag.models.remote_item import RemoteItem


class RemoteServer(Base, TimestampMixin):
    """
    Emby server connection.

    At most one server is active at a time; that rule is kept by
    ServerService rather than by a database constraint.
    """

    __tablename__ = "remote_servers"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    url: Mapped[str] = mapped_column(String(500), nullable=False)
    api_key: Mapped[str] = mapped_column(String(200), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    # Server id reported by Emby on the first successful connection test
    remote_id: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # Relationships
    items: Mapped[list["RemoteItem"]] = relationship(
        back_populates="server",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<RemoteServer(id={self.id}, name={self.name!r}, active={self.is_active})>"
