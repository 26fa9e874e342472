# =======================================================================================
# checkpoint/api/routes/scan.py - Scan, Visitor and Bulk Endpoints
# =======================================================================================
from fastapi import APIRouter, Depends, status
from ...models.schemas import (
    BulkRequest, BulkResponse, Event, ScanRequest, ScanResponse, VisitorRequest,
)
from ...services.checkpoint_service import CheckpointService
from ..dependencies import get_checkpoint_service

router = APIRouter()

@router.post("/scan", response_model=ScanResponse, status_code=status.HTTP_201_CREATED)
async def handle_scan(
    request: ScanRequest, service: CheckpointService = Depends(get_checkpoint_service)
):
    """Record a barcode scan as an entry or exit."""
    event, identity = await service.scan(request.device_id, request.action)
    return ScanResponse(
        success=True,
        message=f"{event.action.capitalize()} recorded for {event.subject_name}",
        event=event,
        identity=identity,
    )

@router.post("/visitors", response_model=Event, status_code=status.HTTP_201_CREATED)
async def handle_visitor(
    request: VisitorRequest, service: CheckpointService = Depends(get_checkpoint_service)
):
    return await service.record_visitor(
        request.visitor_name, request.device_id, request.host_employee, request.purpose
    )

@router.post("/bulk", response_model=BulkResponse, status_code=status.HTTP_201_CREATED)
async def handle_bulk(
    request: BulkRequest, service: CheckpointService = Depends(get_checkpoint_service)
):
    """Mass entry/exit for the selected employees."""
    events = await service.bulk(request.identity_ids, request.operation_type, request.event_name)
    action = events[0].action
    return BulkResponse(
        processed=len(events),
        operation_type=action,
        message=f"Successfully processed {action} for {len(events)} employees",
        events=events,
    )
