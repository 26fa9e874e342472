# =======================================================================================
# checkpoint/utils/__init__.py - Utils Package
# =======================================================================================
from .exceptions import *
from .validators import *

__all__ = [
    "CheckpointError", "ValidationError", "NotFoundError", "LocalStorageError",
    "RemoteUnavailableError", "AuthenticationError", "DeviceIdValidator",
    "validate_action", "unique_ids",
]
