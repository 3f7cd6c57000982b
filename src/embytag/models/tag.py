"""Tag model and the local item association table."""

from typing import TYPE_CHECKING

from sqlalchemy import Column, ForeignKey, String, Table, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from embytag.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from embytag.models.local_item import LocalItem


local_item_tags = Table(
    "local_item_tags",
    Base.metadata,
    Column("local_item_id", ForeignKey("local_items.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)


class Tag(Base, TimestampMixin):
    """
    Tag model.

    Tags are user taxonomy attached to local items. Person and studio tags
    are created automatically when an Emby item is mapped ("演员: Name").
    """

    __tablename__ = "tags"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False, unique=True, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    group: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # Relationships
    items: Mapped[list["LocalItem"]] = relationship(
        secondary=local_item_tags,
        back_populates="tags",
    )

    def __repr__(self) -> str:
        return f"<Tag(id={self.id}, name={self.name!r})>"
