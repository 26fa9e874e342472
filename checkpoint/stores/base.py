# =======================================================================================
# checkpoint/stores/base.py - Store Interfaces
# =======================================================================================
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Sequence
from ..models.schemas import Event, Identity, NewEvent


class EventStore(ABC):
    """Append-only event persistence. Implemented by the remote and local stores."""

    backend: str = "unknown"

    @abstractmethod
    async def append(self, event: NewEvent) -> Event:
        """Store the event under a freshly assigned id."""
        raise NotImplementedError

    @abstractmethod
    async def list_all(self) -> Sequence[Event]:
        """Every known event; no ordering guarantee."""
        raise NotImplementedError

    @abstractmethod
    async def by_device(self, device_id: str) -> Sequence[Event]:
        """Events whose device id matches exactly."""
        raise NotImplementedError

    @abstractmethod
    async def in_range(self, start: datetime, end: datetime) -> Sequence[Event]:
        """Events with start <= timestamp <= end."""
        raise NotImplementedError

    @abstractmethod
    async def get(self, event_id: str) -> Event:
        """Raises NotFoundError when the id is unknown."""
        raise NotImplementedError

    @abstractmethod
    async def delete_all(self) -> None:
        raise NotImplementedError

    @abstractmethod
    async def delete_one(self, event_id: str) -> None:
        """No-op when the id is unknown."""
        raise NotImplementedError


class DirectoryStore(ABC):
    """Read-only identity lookup. Implemented by the remote and local stores."""

    backend: str = "unknown"

    @abstractmethod
    async def list_all(self) -> Sequence[Identity]:
        raise NotImplementedError

    @abstractmethod
    async def find_by_device_id(self, device_id: str) -> Optional[Identity]:
        """Exact id match, None when absent."""
        raise NotImplementedError

    @abstractmethod
    async def get(self, identity_id: str) -> Identity:
        """Raises NotFoundError when the id is unknown."""
        raise NotImplementedError

    @abstractmethod
    async def search(self, query: str) -> List[Identity]:
        raise NotImplementedError

    @abstractmethod
    async def by_department(self, department: str) -> List[Identity]:
        raise NotImplementedError
