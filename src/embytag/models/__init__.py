"""SQLAlchemy ORM models."""

from embytag.models.base import Base
from embytag.models.local_item import LocalItem
from embytag.models.remote_item import RemoteItem
from embytag.models.remote_server import RemoteServer
from embytag.models.tag import Tag, local_item_tags

__all__ = ["Base", "LocalItem", "RemoteItem", "RemoteServer", "Tag", "local_item_tags"]
