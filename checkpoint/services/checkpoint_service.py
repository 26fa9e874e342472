# =======================================================================================
# checkpoint/services/checkpoint_service.py - Checkpoint Business Logic
# =======================================================================================
import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence, Tuple

from ..models.enums import UNKNOWN_EMPLOYEE
from ..models.schemas import Event, Identity, LogReport, NewEvent
from ..models.subjects import format_visitor_name
from ..utils.exceptions import ValidationError
from ..utils.validators import DeviceIdValidator, unique_ids, validate_action, validate_date_range
from .fallback import FallbackCoordinator
from .report_service import build_report, export_csv, filter_events

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CheckpointService:
    """Turns gate actions (scan, visitor sign-in, bulk entry/exit) into stored events."""

    def __init__(self, coordinator: FallbackCoordinator, clock: Optional[Callable[[], datetime]] = None):
        self.coordinator = coordinator
        self.clock = clock or _utc_now

    async def scan(self, device_id: str, action: str) -> Tuple[Event, Optional[Identity]]:
        """
        Record a barcode scan.

        The device id must look like ``AB12345``. The remote service rejects
        ids it does not know (ValidationError); on local fallback an id missing
        from the directory is logged under "Unknown Employee".
        """
        event_action = validate_action(action)
        device_id = DeviceIdValidator.validate(device_id)

        identity = await self.coordinator.find_identity(device_id)
        event = await self.coordinator.append_event(
            NewEvent(
                timestamp=self.clock(),
                subject_name=identity.name if identity else UNKNOWN_EMPLOYEE,
                device_id=device_id,
                action=event_action,
                employee_id=identity.id if identity else None,
            )
        )
        logger.info("Recorded %s for device %s (%s)", event.action, event.device_id, event.subject_name)
        return event, identity

    async def record_visitor(
        self,
        visitor_name: str,
        device_id: str,
        host: Optional[str] = None,
        purpose: Optional[str] = None,
    ) -> Event:
        visitor_name = (visitor_name or "").strip()
        device_id = (device_id or "").strip()
        if not visitor_name or not device_id:
            raise ValidationError("Please fill in visitor name and device ID")

        event = await self.coordinator.append_event(
            NewEvent(
                timestamp=self.clock(),
                subject_name=format_visitor_name(visitor_name, (host or "").strip() or None),
                device_id=device_id,
                action="entry",
            )
        )
        logger.info("Recorded visitor %s with device %s (purpose: %s)", visitor_name, device_id, purpose or "-")
        return event

    async def bulk(self, identity_ids: Sequence[str], operation_type: str, event_name: str) -> List[Event]:
        """
        Mass entry or exit for a selection of identities.

        Events are appended one at a time, each awaited before the next; a
        failure part-way leaves the earlier events stored.
        """
        action = validate_action(operation_type)
        selected = unique_ids(identity_ids)
        if not selected:
            raise ValidationError("Please select at least one employee")
        if not (event_name or "").strip():
            raise ValidationError("Please enter an event name")

        directory = {identity.id: identity for identity in await self.coordinator.list_identities()}
        events: List[Event] = []
        for identity_id in selected:
            identity = directory.get(identity_id)
            event = await self.coordinator.append_event(
                NewEvent(
                    timestamp=self.clock(),
                    subject_name=identity.name if identity else UNKNOWN_EMPLOYEE,
                    device_id=identity_id,
                    action=action,
                    employee_id=identity_id,
                )
            )
            events.append(event)

        logger.info("Bulk %s for %d employees (%s)", action, len(events), event_name.strip())
        return events

    async def find_events(
        self,
        query: Optional[str] = None,
        action: str = "all",
        sort_by: str = "timestamp",
        order: str = "desc",
        device_id: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[Event]:
        """
        Log view query.

        A date range or device id narrows the fetch itself (remote query
        endpoints, local filtering on fallback); search, action filter and
        sort are applied to whatever comes back.
        """
        if start is not None or end is not None:
            start, end = validate_date_range(start, end)
            events = await self.coordinator.events_in_range(start, end)
        elif device_id:
            events = await self.coordinator.events_for_device(device_id)
        else:
            events = await self.coordinator.list_events()
        return filter_events(events, query, action, sort_by, order, device_id=device_id)

    async def delete_event(self, event_id: str) -> None:
        await self.coordinator.delete_event(event_id)

    async def clear_all(self) -> None:
        await self.coordinator.clear_events()
        logger.info("All log entries cleared")

    async def report(self, now: Optional[datetime] = None) -> LogReport:
        events = await self.coordinator.list_events()
        return build_report(events, now=now or self.clock())

    async def export_csv(self) -> str:
        return export_csv(await self.coordinator.list_events())
