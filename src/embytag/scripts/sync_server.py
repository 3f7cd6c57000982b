"""Run a sync pass from the command line and optionally apply exact matches.

Usage:
    python -m embytag.scripts.sync_server [--server-id N] [--apply-exact]
"""

import argparse
import asyncio
import logging
from collections import Counter

from embytag.database import AsyncSessionLocal
from embytag.exceptions import EmbyConnectionError, ServerNotFoundError
from embytag.services.mapping_executor import MappingExecutor
from embytag.services.mapping_plan import DecisionState, MappingPlan
from embytag.services.reconciliation import ReconciliationSession
from embytag.services.server_service import ServerService

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
logger = logging.getLogger(__name__)


async def sync(server_id: int | None, apply_exact: bool) -> int:
    async with AsyncSessionLocal() as db:
        service = ServerService(db)
        if server_id is None:
            server = await service.get_active_server()
            if server is None:
                logger.error("No active server configured; pass --server-id")
                return 1
        else:
            try:
                server = await service.get_server(server_id)
            except ServerNotFoundError as e:
                logger.error(str(e))
                return 1

        try:
            results = await ReconciliationSession(db).run(server)
        except EmbyConnectionError as e:
            logger.error(f"Sync failed: {e}")
            return 1

        counts = Counter(result.status.value for result in results)
        logger.info(
            f"{server.name}: {len(results)} items: "
            + ", ".join(f"{status} {count}" for status, count in sorted(counts.items()))
        )

        if not apply_exact:
            return 0

        plan = MappingPlan(results)
        staged = plan.stage_exact_matches()
        if not staged:
            logger.info("No exact matches to apply")
            return 0

        batch = await MappingExecutor(db).execute(plan.operations())
        plan.apply_result(batch)
        for failure in batch.failed:
            logger.warning(f"Item {failure.id}: {failure.error}")
        logger.info(
            f"Applied {len(batch.success)} of {staged} exact matches; "
            f"{len(plan.items_in(DecisionState.PENDING))} still pending"
        )
        return 0 if not batch.failed else 2


def main() -> None:
    parser = argparse.ArgumentParser(description="Synchronise an Emby server's catalog")
    parser.add_argument("--server-id", type=int, default=None, help="Server to sync (default: active)")
    parser.add_argument(
        "--apply-exact",
        action="store_true",
        help="Map every exact match without review",
    )
    args = parser.parse_args()
    raise SystemExit(asyncio.run(sync(args.server_id, args.apply_exact)))


if __name__ == "__main__":
    main()
