"""Collapse multi-part movies that Emby lists as several items."""

import logging
from collections import defaultdict
from collections.abc import Sequence
from typing import Protocol, TypeVar

from embytag.utils.text import parent_directory

logger = logging.getLogger(__name__)


class PathedItem(Protocol):
    name: str | None
    path: str | None


T = TypeVar("T", bound=PathedItem)


def collapse_multi_part(items: Sequence[T]) -> tuple[list[T], list[list[T]]]:
    """
    Keep one item per multi-part movie.

    Emby returns each file of a split movie ("movie.cd1.mkv", "movie.cd2.mkv")
    as its own item. Items sharing a title and a source directory are treated
    as one movie and only the first one, in listing order, is kept. Items
    without a path are never collapsed.

    Args:
        items: Items as returned by the server

    Returns:
        (items with the extra parts removed, groups of parts that were collapsed)
    """
    by_name: dict[str | None, list[T]] = defaultdict(list)
    for item in items:
        by_name[item.name].append(item)

    groups: list[list[T]] = []
    for same_name in by_name.values():
        if len(same_name) < 2:
            continue
        by_dir: dict[str, list[T]] = defaultdict(list)
        for item in same_name:
            if item.path:
                by_dir[parent_directory(item.path)].append(item)
        groups.extend(parts for parts in by_dir.values() if len(parts) > 1)

    discarded = {id(part) for parts in groups for part in parts[1:]}
    kept = [item for item in items if id(item) not in discarded]

    for parts in groups:
        logger.debug(
            f"Multi-part item {parts[0].name!r}: kept {parts[0].path!r}, "
            f"dropped {len(parts) - 1} part(s)"
        )
    return kept, groups
