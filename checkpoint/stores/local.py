# =======================================================================================
# checkpoint/stores/local.py - Local Fallback Event & Directory Stores
# =======================================================================================
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError as SchemaError

from ..database import DatabaseManager
from ..models.schemas import Event, Identity, NewEvent
from ..utils.exceptions import LocalStorageError, NotFoundError
from .base import DirectoryStore, EventStore

LOG_ENTRIES_DOCUMENT = "laptop_log_entries"
EMPLOYEES_DOCUMENT = "employees_database"

DEFAULT_IDENTITIES: List[Dict[str, str]] = [
    {"id": "12345", "name": "John Smith", "department": "IT", "email": "john.smith@company.com"},
    {"id": "67890", "name": "Jane Doe", "department": "HR", "email": "jane.doe@company.com"},
    {"id": "11111", "name": "Bob Johnson", "department": "Finance", "email": "bob.johnson@company.com"},
    {"id": "22222", "name": "Alice Brown", "department": "Marketing", "email": "alice.brown@company.com"},
]


def _rows(document: Any, name: str) -> List[Dict[str, Any]]:
    if document is None:
        return []
    if not isinstance(document, list):
        raise LocalStorageError(f"Local document {name} is not a list")
    return document


class LocalEventStore(EventStore):
    """
    Events kept on the device as one JSON array, newest first.

    Every write is a read-modify-write of the whole array inside a single
    transaction. Database work runs on the FastAPI threadpool so a slow
    `LOCAL_DB_URL` backend does not stall the event loop; the manager's
    lock keeps concurrent appends from losing each other.
    """

    backend = "local"

    def __init__(self, db: DatabaseManager):
        self.db = db

    @staticmethod
    def _decode(rows: List[Dict[str, Any]]) -> List[Event]:
        try:
            return [Event.model_validate(row) for row in rows]
        except SchemaError as e:
            raise LocalStorageError(f"Corrupt local log entry: {e}") from e

    def _append(self, stored: Event) -> None:
        with self.db.get_connection() as conn:
            rows = _rows(self.db.read_document(conn, LOG_ENTRIES_DOCUMENT), LOG_ENTRIES_DOCUMENT)
            rows.insert(0, stored.model_dump(mode="json", by_alias=True))
            self.db.write_document(conn, LOG_ENTRIES_DOCUMENT, rows)

    def _delete_one(self, event_id: str) -> None:
        with self.db.get_connection() as conn:
            rows = _rows(self.db.read_document(conn, LOG_ENTRIES_DOCUMENT), LOG_ENTRIES_DOCUMENT)
            kept = [row for row in rows if row.get("id") != event_id]
            if len(kept) != len(rows):
                self.db.write_document(conn, LOG_ENTRIES_DOCUMENT, kept)

    async def append(self, event: NewEvent) -> Event:
        stored = Event.from_new(str(uuid.uuid4()), event)
        await run_in_threadpool(self._append, stored)
        return stored

    async def list_all(self) -> List[Event]:
        document = await run_in_threadpool(self.db.get_document, LOG_ENTRIES_DOCUMENT)
        return self._decode(_rows(document, LOG_ENTRIES_DOCUMENT))

    async def get(self, event_id: str) -> Event:
        for event in await self.list_all():
            if event.id == event_id:
                return event
        raise NotFoundError(f"Log entry with ID {event_id} not found")

    async def by_device(self, device_id: str) -> List[Event]:
        return [event for event in await self.list_all() if event.device_id == device_id]

    async def in_range(self, start: datetime, end: datetime) -> List[Event]:
        return [event for event in await self.list_all() if start <= event.timestamp <= end]

    async def delete_all(self) -> None:
        await run_in_threadpool(self.db.remove_document, LOG_ENTRIES_DOCUMENT)

    async def delete_one(self, event_id: str) -> None:
        await run_in_threadpool(self._delete_one, event_id)


class LocalDirectoryStore(DirectoryStore):
    """Identities kept on the device; falls back to a built-in seed list."""

    backend = "local"

    def __init__(self, db: DatabaseManager):
        self.db = db

    async def list_all(self) -> List[Identity]:
        document = await run_in_threadpool(self.db.get_document, EMPLOYEES_DOCUMENT)
        rows = DEFAULT_IDENTITIES if document is None else _rows(document, EMPLOYEES_DOCUMENT)
        try:
            return [Identity.model_validate(row) for row in rows]
        except SchemaError as e:
            raise LocalStorageError(f"Corrupt local employee record: {e}") from e

    async def find_by_device_id(self, device_id: str) -> Optional[Identity]:
        for identity in await self.list_all():
            if identity.id == device_id:
                return identity
        return None

    async def get(self, identity_id: str) -> Identity:
        identity = await self.find_by_device_id(identity_id)
        if identity is None:
            raise NotFoundError(f"Employee with ID {identity_id} not found")
        return identity

    async def search(self, query: str) -> List[Identity]:
        needle = (query or "").lower()
        matches = [
            identity for identity in await self.list_all()
            if any(needle in (value or "").lower() for value in (identity.name, identity.email, identity.department))
        ]
        return sorted(matches, key=lambda identity: identity.name)

    async def by_department(self, department: str) -> List[Identity]:
        matches = [i for i in await self.list_all() if i.department == department]
        return sorted(matches, key=lambda identity: identity.name)

    async def replace_all(self, identities: List[Identity]) -> None:
        """Overwrite the on-device directory, e.g. with a copy pulled from the remote."""
        await run_in_threadpool(
            self.db.put_document,
            EMPLOYEES_DOCUMENT,
            [identity.model_dump(mode="json", by_alias=True) for identity in identities],
        )
