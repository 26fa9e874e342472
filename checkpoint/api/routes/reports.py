# =======================================================================================
# checkpoint/api/routes/reports.py - Report Endpoints
# =======================================================================================
from fastapi import APIRouter, Depends
from ...models.schemas import LogReport
from ...services.checkpoint_service import CheckpointService
from ..dependencies import get_checkpoint_service

router = APIRouter()

@router.get("/reports", response_model=LogReport)
async def get_report(service: CheckpointService = Depends(get_checkpoint_service)):
    """Occupancy and activity figures, recomputed from the full log."""
    return await service.report()
