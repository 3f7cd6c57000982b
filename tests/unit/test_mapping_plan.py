"""Unit tests for MappingPlan."""

import pytest

from embytag.models import LocalItem, RemoteItem
from embytag.schemas.mapping import (
    BatchResult,
    CreateOperation,
    FailedOperation,
    MapOperation,
    RefreshOperation,
    UnmapOperation,
)
from embytag.services.item_matcher import ItemSyncResult, LocalItemWithScore, MatchStatus
from embytag.services.mapping_plan import DecisionState, MappingPlan


def make_result(
    id: int,
    status: MatchStatus,
    candidate_ids: tuple[int, ...] = (),
) -> ItemSyncResult:
    remote = RemoteItem(id=id, remote_id=f"emby-{id}", server_id=1, title=f"Item {id}", type="Movie")
    matches = [
        LocalItemWithScore(item=LocalItem(id=cid, title=f"Local {cid}", type="Movie"), score=1.0)
        for cid in candidate_ids
    ]
    return ItemSyncResult(item=remote, matches=matches, status=status)


@pytest.fixture
def plan() -> MappingPlan:
    return MappingPlan(
        [
            make_result(1, MatchStatus.EXACT, (10,)),
            make_result(2, MatchStatus.MATCHED),
            make_result(3, MatchStatus.MULTIPLE, (30, 31)),
            make_result(4, MatchStatus.NONE),
            make_result(5, MatchStatus.EXACT, (50,)),
        ]
    )


class TestInitialState:
    def test_matched_items_start_resolved(self, plan: MappingPlan) -> None:
        assert plan.state(2) == DecisionState.RESOLVED
        assert plan.items_in(DecisionState.RESOLVED) == [2]

    def test_other_items_start_unmatched(self, plan: MappingPlan) -> None:
        assert plan.items_in(DecisionState.UNMATCHED) == [1, 3, 4, 5]
        assert len(plan) == 0
        assert plan.operations() == []

    def test_unknown_item_raises(self, plan: MappingPlan) -> None:
        with pytest.raises(KeyError):
            plan.state(99)


class TestStage:
    def test_stage_marks_item_pending(self, plan: MappingPlan) -> None:
        op = MapOperation(remote_item_id=3, local_item_id=31)

        plan.stage(op)

        assert plan.state(3) == DecisionState.PENDING
        assert plan.pending_operation(3) == op
        assert len(plan) == 1

    def test_restaging_replaces_and_moves_to_end(self, plan: MappingPlan) -> None:
        plan.stage(MapOperation(remote_item_id=3, local_item_id=30))
        plan.stage(CreateOperation(remote_item_id=4))
        plan.stage(MapOperation(remote_item_id=3, local_item_id=31))

        ops = plan.operations()
        assert [op.remote_item_id for op in ops] == [4, 3]
        assert ops[1].local_item_id == 31

    def test_resolved_item_accepts_unmap_and_refresh(self, plan: MappingPlan) -> None:
        plan.stage(RefreshOperation(remote_item_id=2))
        assert plan.state(2) == DecisionState.PENDING

        plan.stage(UnmapOperation(remote_item_id=2))
        assert isinstance(plan.pending_operation(2), UnmapOperation)

    def test_resolved_item_rejects_map_and_create(self, plan: MappingPlan) -> None:
        with pytest.raises(ValueError, match="already resolved"):
            plan.stage(MapOperation(remote_item_id=2, local_item_id=10))
        with pytest.raises(ValueError, match="already resolved"):
            plan.stage(CreateOperation(remote_item_id=2))

        assert plan.state(2) == DecisionState.RESOLVED

    def test_staging_unknown_item_raises(self, plan: MappingPlan) -> None:
        with pytest.raises(KeyError):
            plan.stage(CreateOperation(remote_item_id=99))


class TestUnstage:
    def test_unstage_returns_item_to_unmatched(self, plan: MappingPlan) -> None:
        plan.stage(CreateOperation(remote_item_id=4))

        plan.unstage(4)

        assert plan.state(4) == DecisionState.UNMATCHED
        assert plan.pending_operation(4) is None
        assert len(plan) == 0

    def test_unstage_without_pending_operation_raises(self, plan: MappingPlan) -> None:
        with pytest.raises(ValueError, match="no pending operation"):
            plan.unstage(4)


def test_stage_exact_matches_maps_to_the_single_candidate(plan: MappingPlan) -> None:
    plan.stage(CreateOperation(remote_item_id=5))

    staged = plan.stage_exact_matches()

    assert staged == 1
    op = plan.pending_operation(1)
    assert isinstance(op, MapOperation)
    assert op.local_item_id == 10
    # already pending with the user's own choice
    assert isinstance(plan.pending_operation(5), CreateOperation)


class TestApplyResult:
    def test_successes_resolve_and_failures_stay_pending(self, plan: MappingPlan) -> None:
        plan.stage(MapOperation(remote_item_id=1, local_item_id=10))
        plan.stage(CreateOperation(remote_item_id=4))

        plan.apply_result(
            BatchResult(success=[1], failed=[FailedOperation(id=4, error="boom")])
        )

        assert plan.state(1) == DecisionState.RESOLVED
        assert plan.state(4) == DecisionState.PENDING
        assert [op.remote_item_id for op in plan.operations()] == [4]

    def test_unknown_success_ids_are_ignored(self, plan: MappingPlan) -> None:
        plan.apply_result(BatchResult(success=[3, 99]))

        assert plan.state(3) == DecisionState.UNMATCHED

    def test_resolved_item_can_be_unmapped_again(self, plan: MappingPlan) -> None:
        plan.stage(MapOperation(remote_item_id=1, local_item_id=10))
        plan.apply_result(BatchResult(success=[1]))

        plan.stage(UnmapOperation(remote_item_id=1))

        assert plan.state(1) == DecisionState.PENDING
