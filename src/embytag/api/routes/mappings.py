"""Mapping batch endpoint."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from embytag.database import get_db
from embytag.schemas.mapping import BatchRequest, BatchResult
from embytag.services.mapping_executor import MappingExecutor

router = APIRouter()


@router.post("/mappings/batch", response_model=BatchResult)
async def execute_mappings(
    request: BatchRequest,
    db: AsyncSession = Depends(get_db),
) -> BatchResult:
    """
    Execute queued mapping operations.

    Every operation is attempted; failures are reported per item in
    ``failed`` and do not undo the others. Run a sync pass again to see the
    updated match state.
    """
    return await MappingExecutor(db).execute(request.operations)
