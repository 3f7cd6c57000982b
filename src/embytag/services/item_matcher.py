"""Propose local items for mirrored Emby items."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum

from embytag.config import settings
from embytag.models.local_item import LocalItem
from embytag.models.remote_item import RemoteItem
from embytag.utils.text import similarity

logger = logging.getLogger(__name__)


class MatchStatus(str, Enum):
    MATCHED = "matched"  # already mapped
    EXACT = "exact"  # one candidate found by title or external id
    MULTIPLE = "multiple"  # fuzzy candidates only
    NONE = "none"  # nothing above the threshold


@dataclass
class LocalItemWithScore:
    item: LocalItem
    score: float


@dataclass
class ItemSyncResult:
    item: RemoteItem
    matches: list[LocalItemWithScore] = field(default_factory=list)
    status: MatchStatus = MatchStatus.NONE


class ItemMatcher:
    """
    Pairs mirrored items with local items.

    Per remote item, in input order:
    1. Already mapped → MATCHED, no candidates
    2. Exact pass over unclaimed local items of the same type: equal titles,
       equal original titles, or an equal id under a shared provider key →
       EXACT with one candidate scored 1.0. The local item is claimed for the
       rest of the run.
    3. Fuzzy pass over all unclaimed local items: best of title and original
       title similarity, kept when >= threshold, best first, capped →
       MULTIPLE, or NONE when empty.

    Claims are greedy, so the result depends on the order of remote_items.
    """

    def __init__(self, threshold: float | None = None, max_candidates: int | None = None) -> None:
        self.threshold = settings.match_threshold if threshold is None else threshold
        self.max_candidates = (
            settings.match_max_candidates if max_candidates is None else max_candidates
        )

    def match(
        self,
        local_items: Sequence[LocalItem],
        remote_items: Sequence[RemoteItem],
    ) -> list[ItemSyncResult]:
        claimed: set[int] = set()
        results: list[ItemSyncResult] = []

        for remote_item in remote_items:
            if remote_item.local_item_id is not None:
                results.append(ItemSyncResult(item=remote_item, status=MatchStatus.MATCHED))
                continue

            available = [local for local in local_items if local.id not in claimed]

            exact = next((local for local in available if self._is_exact(remote_item, local)), None)
            if exact is not None:
                claimed.add(exact.id)
                results.append(
                    ItemSyncResult(
                        item=remote_item,
                        matches=[LocalItemWithScore(item=exact, score=1.0)],
                        status=MatchStatus.EXACT,
                    )
                )
                continue

            candidates = self._fuzzy_candidates(remote_item, available)
            results.append(
                ItemSyncResult(
                    item=remote_item,
                    matches=candidates,
                    status=MatchStatus.MULTIPLE if candidates else MatchStatus.NONE,
                )
            )

        logger.debug(
            f"Matched {len(remote_items)} remote items against {len(local_items)} local items, "
            f"{len(claimed)} exact"
        )
        return results

    def _is_exact(self, remote_item: RemoteItem, local_item: LocalItem) -> bool:
        if remote_item.type != local_item.type:
            return False
        if remote_item.title == local_item.title:
            return True
        if (
            remote_item.original_title
            and local_item.original_title
            and remote_item.original_title == local_item.original_title
        ):
            return True

        remote_ids = remote_item.external_ids or {}
        local_ids = local_item.external_ids or {}
        return any(
            local_ids.get(key) and local_ids[key] == value
            for key, value in remote_ids.items()
        )

    def _fuzzy_candidates(
        self,
        remote_item: RemoteItem,
        local_items: Sequence[LocalItem],
    ) -> list[LocalItemWithScore]:
        candidates: list[LocalItemWithScore] = []
        for local_item in local_items:
            score = similarity(remote_item.title, local_item.title)
            if remote_item.original_title and local_item.original_title:
                score = max(
                    score,
                    similarity(remote_item.original_title, local_item.original_title),
                )
            if score >= self.threshold:
                candidates.append(LocalItemWithScore(item=local_item, score=score))

        # sort is stable: equal scores keep local item order
        candidates.sort(key=lambda c: c.score, reverse=True)
        return candidates[: self.max_candidates]
