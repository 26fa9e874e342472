# =======================================================================================
# checkpoint/stores/remote.py - Remote Event & Directory Stores
# =======================================================================================
from datetime import datetime
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from pydantic import ValidationError as SchemaError

from ..clients.api_client import ApiClient
from ..models.enums import UNKNOWN_EMPLOYEE
from ..models.schemas import Event, Identity, LogStats, NewEvent
from ..utils.exceptions import NotFoundError, RemoteUnavailableError, ValidationError
from .base import DirectoryStore, EventStore


def _as_list(payload: Any) -> List[Dict[str, Any]]:
    if isinstance(payload, list):
        return [row for row in payload if isinstance(row, dict)]
    raise RemoteUnavailableError(f"Expected a list from the remote service, got {type(payload).__name__}")


def _path_id(value: str) -> str:
    return quote(value, safe="")


class RemoteEventStore(EventStore):
    """Log records held by the authoritative service (`/logs`)."""

    backend = "remote"

    def __init__(self, client: ApiClient):
        self.client = client

    # ---------- mapping ----------

    @staticmethod
    def to_payload(event: NewEvent) -> Dict[str, Any]:
        return {
            "timestamp": event.timestamp.isoformat(),
            "employeeId": event.employee_id or event.device_id,
            "deviceId": event.device_id,
            "action": event.action,
        }

    @staticmethod
    def from_record(record: Dict[str, Any], subject_name: Optional[str] = None) -> Event:
        employee = record.get("employee") or {}
        name = employee.get("name") if isinstance(employee, dict) else None
        try:
            return Event(
                id=str(record["id"]),
                timestamp=record["timestamp"],
                subject_name=name or subject_name or UNKNOWN_EMPLOYEE,
                device_id=record["deviceId"],
                action=record["action"],
            )
        except (KeyError, SchemaError) as e:
            raise RemoteUnavailableError(f"Malformed log record from remote: {e}") from e

    # ---------- contract ----------

    async def append(self, event: NewEvent) -> Event:
        try:
            record = await self.client.post("/logs", self.to_payload(event))
        except RemoteUnavailableError as e:
            # Unknown employee id or invalid action
            if e.status_code in (400, 404):
                raise ValidationError(e.detail or str(e)) from e
            raise
        if not isinstance(record, dict):
            raise RemoteUnavailableError("Remote did not return the created log record")
        return self.from_record(record, subject_name=event.subject_name)

    async def list_all(self) -> List[Event]:
        records = _as_list(await self.client.get("/logs"))
        return [self.from_record(r) for r in records]

    async def by_device(self, device_id: str) -> List[Event]:
        records = _as_list(await self.client.get(f"/logs/device/{_path_id(device_id)}"))
        return [self.from_record(r) for r in records]

    async def in_range(self, start: datetime, end: datetime) -> List[Event]:
        records = _as_list(await self.client.get(
            "/logs/date-range", {"startDate": start.isoformat(), "endDate": end.isoformat()}
        ))
        return [self.from_record(r) for r in records]

    async def get(self, event_id: str) -> Event:
        try:
            record = await self.client.get(f"/logs/{_path_id(event_id)}")
        except RemoteUnavailableError as e:
            # The service answers 400 for ids that are not UUIDs
            if e.status_code in (400, 404):
                raise NotFoundError(f"Log entry with ID {event_id} not found") from e
            raise
        return self.from_record(record)

    async def delete_all(self) -> None:
        await self.client.delete("/logs")

    async def delete_one(self, event_id: str) -> None:
        try:
            await self.client.delete(f"/logs/{_path_id(event_id)}")
        except RemoteUnavailableError as e:
            if e.status_code in (400, 404):
                return
            raise

    async def stats(self) -> LogStats:
        payload = await self.client.get("/logs/stats")
        try:
            return LogStats.model_validate(payload)
        except SchemaError as e:
            raise RemoteUnavailableError(f"Malformed stats from remote: {e}") from e


class RemoteDirectoryStore(DirectoryStore):
    """Employee directory held by the authoritative service (`/employees`)."""

    backend = "remote"

    def __init__(self, client: ApiClient):
        self.client = client

    @staticmethod
    def _identities(payload: Any) -> List[Identity]:
        try:
            # Soft-deleted rows never appear in listings
            return [
                Identity.model_validate(row)
                for row in _as_list(payload)
                if not (isinstance(row, dict) and row.get("deletedAt"))
            ]
        except SchemaError as e:
            raise RemoteUnavailableError(f"Malformed employee record from remote: {e}") from e

    async def list_all(self) -> List[Identity]:
        return self._identities(await self.client.get("/employees"))

    async def get(self, identity_id: str) -> Identity:
        try:
            record = await self.client.get(f"/employees/{_path_id(identity_id)}")
        except RemoteUnavailableError as e:
            if e.status_code == 404:
                raise NotFoundError(f"Employee with ID {identity_id} not found") from e
            raise
        try:
            return Identity.model_validate(record)
        except SchemaError as e:
            raise RemoteUnavailableError(f"Malformed employee record from remote: {e}") from e

    async def find_by_device_id(self, device_id: str) -> Optional[Identity]:
        try:
            return await self.get(device_id)
        except NotFoundError:
            return None

    async def search(self, query: str) -> List[Identity]:
        return self._identities(await self.client.get("/employees/search", {"q": query}))

    async def by_department(self, department: str) -> List[Identity]:
        return self._identities(await self.client.get(f"/employees/department/{_path_id(department)}"))
