# =======================================================================================
# checkpoint/stores/__init__.py - Stores Package
# =======================================================================================
from .base import EventStore, DirectoryStore
from .remote import RemoteEventStore, RemoteDirectoryStore
from .local import LocalEventStore, LocalDirectoryStore

__all__ = [
    "EventStore", "DirectoryStore", "RemoteEventStore", "RemoteDirectoryStore",
    "LocalEventStore", "LocalDirectoryStore",
]
