# =======================================================================================
# checkpoint/api/routes/logs.py - Log Endpoints
# =======================================================================================
from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, Query, Response, status
from ...models.enums import DEFAULT_RECENT_LIMIT
from ...models.schemas import Event, EventList, LogStats
from ...services import report_service
from ...services.checkpoint_service import CheckpointService
from ...services.fallback import FallbackCoordinator
from ..dependencies import get_checkpoint_service, get_coordinator

router = APIRouter()

@router.get("/logs", response_model=EventList)
async def list_logs(
    query: Optional[str] = Query(None, description="Matches subject name or device id"),
    action: str = Query("all"),
    sort_by: str = Query("timestamp", alias="sortBy"),
    order: str = Query("desc"),
    device_id: Optional[str] = Query(None, alias="deviceId"),
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    service: CheckpointService = Depends(get_checkpoint_service),
):
    events = await service.find_events(
        query=query,
        action=action,
        sort_by=sort_by,
        order=order,
        device_id=device_id,
        start=start_date,
        end=end_date,
    )
    return EventList(events=events)

@router.get("/logs/recent", response_model=EventList)
async def recent_logs(
    limit: int = Query(DEFAULT_RECENT_LIMIT, ge=1),
    coordinator: FallbackCoordinator = Depends(get_coordinator),
):
    events = await coordinator.list_events()
    return EventList(events=report_service.recent_events(events, limit))

@router.get("/logs/stats", response_model=LogStats)
async def log_stats(coordinator: FallbackCoordinator = Depends(get_coordinator)):
    return await coordinator.get_stats()

@router.get("/logs/export")
async def export_logs(service: CheckpointService = Depends(get_checkpoint_service)):
    """CSV download of every event."""
    body = await service.export_csv()
    filename = report_service.csv_filename(service.clock())
    return Response(
        content=body,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )

@router.get("/logs/{event_id}", response_model=Event)
async def get_log(event_id: str, coordinator: FallbackCoordinator = Depends(get_coordinator)):
    return await coordinator.get_event(event_id)

@router.delete("/logs", status_code=status.HTTP_204_NO_CONTENT)
async def clear_logs(service: CheckpointService = Depends(get_checkpoint_service)):
    await service.clear_all()
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.delete("/logs/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_log(event_id: str, service: CheckpointService = Depends(get_checkpoint_service)):
    await service.delete_event(event_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
