"""Pending mapping decisions for one sync pass."""

from collections.abc import Iterable
from enum import Enum

from embytag.schemas.mapping import (
    BatchResult,
    ItemMapOperation,
    MapOperation,
    RefreshOperation,
    UnmapOperation,
)
from embytag.services.item_matcher import ItemSyncResult, MatchStatus


class DecisionState(str, Enum):
    UNMATCHED = "unmatched"
    PENDING = "pending"
    RESOLVED = "resolved"


class MappingPlan:
    """
    Tracks what the user decided for each mirrored item of a sync pass.

    Each remote item id has a state and at most one queued operation:

        unmatched --stage--> pending --apply_result(ok)--> resolved
        pending --unstage--> unmatched
        resolved --stage(unmap|refresh)--> pending

    Operations are returned in the order they were staged. Failed operations
    stay pending so they can be retried or unstaged.
    """

    def __init__(self, results: Iterable[ItemSyncResult] = ()) -> None:
        self._results: dict[int, ItemSyncResult] = {}
        self._states: dict[int, DecisionState] = {}
        self._pending: dict[int, ItemMapOperation] = {}
        for result in results:
            self._results[result.item.id] = result
            self._states[result.item.id] = (
                DecisionState.RESOLVED
                if result.status == MatchStatus.MATCHED
                else DecisionState.UNMATCHED
            )

    def state(self, remote_item_id: int) -> DecisionState:
        try:
            return self._states[remote_item_id]
        except KeyError:
            raise KeyError(f"Remote item {remote_item_id} is not part of this plan") from None

    def pending_operation(self, remote_item_id: int) -> ItemMapOperation | None:
        return self._pending.get(remote_item_id)

    def stage(self, op: ItemMapOperation) -> None:
        """Queue an operation, replacing any already queued for the same item."""
        state = self.state(op.remote_item_id)
        if state == DecisionState.RESOLVED and not isinstance(
            op, (UnmapOperation, RefreshOperation)
        ):
            raise ValueError(
                f"Remote item {op.remote_item_id} is already resolved; "
                f"only unmap or refresh can be staged"
            )
        # Re-insert so replaced operations move to the end of the queue
        self._pending.pop(op.remote_item_id, None)
        self._pending[op.remote_item_id] = op
        self._states[op.remote_item_id] = DecisionState.PENDING

    def unstage(self, remote_item_id: int) -> None:
        if self.state(remote_item_id) != DecisionState.PENDING:
            raise ValueError(f"Remote item {remote_item_id} has no pending operation")
        del self._pending[remote_item_id]
        self._states[remote_item_id] = DecisionState.UNMATCHED

    def stage_exact_matches(self) -> int:
        """Stage a map operation for every unmatched exact result."""
        staged = 0
        for remote_item_id, result in self._results.items():
            if result.status != MatchStatus.EXACT:
                continue
            if self._states[remote_item_id] != DecisionState.UNMATCHED:
                continue
            self.stage(
                MapOperation(
                    remote_item_id=remote_item_id,
                    local_item_id=result.matches[0].item.id,
                )
            )
            staged += 1
        return staged

    def operations(self) -> list[ItemMapOperation]:
        return list(self._pending.values())

    def items_in(self, state: DecisionState) -> list[int]:
        return [item_id for item_id, s in self._states.items() if s == state]

    def apply_result(self, result: BatchResult) -> None:
        """Resolve the operations that succeeded; failures stay pending."""
        for remote_item_id in result.success:
            if self._pending.pop(remote_item_id, None) is not None:
                self._states[remote_item_id] = DecisionState.RESOLVED

    def __len__(self) -> int:
        return len(self._pending)

