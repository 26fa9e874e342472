# =======================================================================================
# checkpoint/services/fallback.py - Remote-then-Local Access Coordinator
# =======================================================================================
import logging
from datetime import datetime
from typing import Awaitable, Callable, List, Optional, Sequence, TypeVar

from ..models.schemas import Event, Identity, LogStats, NewEvent
from ..stores.local import LocalDirectoryStore, LocalEventStore
from ..stores.remote import RemoteDirectoryStore, RemoteEventStore
from ..utils.exceptions import RemoteUnavailableError
from .report_service import compute_stats

logger = logging.getLogger(__name__)

T = TypeVar("T")


class FallbackCoordinator:
    """
    Single entry point for event and directory access.

    Each operation is tried against the remote service once; on any remote
    failure it is repeated against the local store and that result is
    returned as-is. Local failures propagate. Validation and not-found errors
    are answers, not outages, and never trigger the fallback.
    """

    def __init__(
        self,
        remote_events: RemoteEventStore,
        local_events: LocalEventStore,
        remote_directory: RemoteDirectoryStore,
        local_directory: LocalDirectoryStore,
    ):
        self.remote_events = remote_events
        self.local_events = local_events
        self.remote_directory = remote_directory
        self.local_directory = local_directory

    async def _with_fallback(
        self,
        operation: str,
        remote_call: Callable[[], Awaitable[T]],
        local_call: Callable[[], Awaitable[T]],
    ) -> T:
        try:
            return await remote_call()
        except RemoteUnavailableError as e:
            logger.warning("Remote %s failed, using local store: %s", operation, e)
        return await local_call()

    # ---------- events ----------

    async def append_event(self, event: NewEvent) -> Event:
        return await self._with_fallback(
            "append event",
            lambda: self.remote_events.append(event),
            lambda: self.local_events.append(event),
        )

    async def list_events(self) -> Sequence[Event]:
        return await self._with_fallback("list events", self.remote_events.list_all, self.local_events.list_all)

    async def events_for_device(self, device_id: str) -> Sequence[Event]:
        return await self._with_fallback(
            "events for device",
            lambda: self.remote_events.by_device(device_id),
            lambda: self.local_events.by_device(device_id),
        )

    async def events_in_range(self, start: datetime, end: datetime) -> Sequence[Event]:
        return await self._with_fallback(
            "events in range",
            lambda: self.remote_events.in_range(start, end),
            lambda: self.local_events.in_range(start, end),
        )

    async def get_event(self, event_id: str) -> Event:
        return await self._with_fallback(
            "get event",
            lambda: self.remote_events.get(event_id),
            lambda: self.local_events.get(event_id),
        )

    async def delete_event(self, event_id: str) -> None:
        await self._with_fallback(
            "delete event",
            lambda: self.remote_events.delete_one(event_id),
            lambda: self.local_events.delete_one(event_id),
        )

    async def clear_events(self) -> None:
        await self._with_fallback("clear events", self.remote_events.delete_all, self.local_events.delete_all)

    async def get_stats(self) -> LogStats:
        async def local_stats() -> LogStats:
            return compute_stats(await self.local_events.list_all())

        return await self._with_fallback("log stats", self.remote_events.stats, local_stats)

    # ---------- directory ----------

    async def list_identities(self) -> Sequence[Identity]:
        return await self._with_fallback(
            "list employees", self.remote_directory.list_all, self.local_directory.list_all
        )

    async def find_identity(self, device_id: str) -> Optional[Identity]:
        return await self._with_fallback(
            "find employee",
            lambda: self.remote_directory.find_by_device_id(device_id),
            lambda: self.local_directory.find_by_device_id(device_id),
        )

    async def get_identity(self, identity_id: str) -> Identity:
        return await self._with_fallback(
            "get employee",
            lambda: self.remote_directory.get(identity_id),
            lambda: self.local_directory.get(identity_id),
        )

    async def search_identities(self, query: str) -> List[Identity]:
        return await self._with_fallback(
            "search employees",
            lambda: self.remote_directory.search(query),
            lambda: self.local_directory.search(query),
        )

    async def identities_by_department(self, department: str) -> List[Identity]:
        return await self._with_fallback(
            "employees by department",
            lambda: self.remote_directory.by_department(department),
            lambda: self.local_directory.by_department(department),
        )
