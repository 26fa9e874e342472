# =======================================================================================
# checkpoint/container.py - Explicit Wiring
# =======================================================================================
from dataclasses import dataclass
from typing import Optional

import httpx

from .clients.api_client import ApiClient
from .config import config
from .database import DatabaseManager
from .services.checkpoint_service import CheckpointService
from .services.fallback import FallbackCoordinator
from .stores.local import LocalDirectoryStore, LocalEventStore
from .stores.remote import RemoteDirectoryStore, RemoteEventStore


@dataclass
class Container:
    db: DatabaseManager
    api_client: ApiClient
    coordinator: FallbackCoordinator
    checkpoint_service: CheckpointService

    async def aclose(self) -> None:
        await self.api_client.aclose()
        self.db.dispose()


def build_container(
    db_url: Optional[str] = None,
    api_base_url: Optional[str] = None,
    api_timeout: Optional[float] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Container:
    """Construct every collaborator once; nothing here is module-global."""
    db = DatabaseManager(db_url or config.LOCAL_DB_URL)
    api_client = ApiClient(
        base_url=api_base_url or config.API_BASE_URL,
        timeout=api_timeout,
        transport=transport,
        token_storage=db,
    )
    coordinator = FallbackCoordinator(
        remote_events=RemoteEventStore(api_client),
        local_events=LocalEventStore(db),
        remote_directory=RemoteDirectoryStore(api_client),
        local_directory=LocalDirectoryStore(db),
    )
    return Container(
        db=db,
        api_client=api_client,
        coordinator=coordinator,
        checkpoint_service=CheckpointService(coordinator),
    )
