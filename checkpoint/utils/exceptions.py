# =======================================================================================
# checkpoint/utils/exceptions.py - Custom Exceptions
# =======================================================================================
from typing import Optional

class CheckpointError(Exception):
    """Base exception for the laptop checkpoint system."""
    pass

class ValidationError(CheckpointError):
    """Raised when input is rejected, locally or by the remote service."""
    pass

class NotFoundError(CheckpointError):
    """Raised when an entity fetched by id does not exist."""
    pass

class LocalStorageError(CheckpointError):
    """Raised when the local fallback store cannot be read or written."""
    pass

class RemoteUnavailableError(CheckpointError):
    """Raised for any failure talking to the remote service."""

    def __init__(self, message: str, status_code: Optional[int] = None, detail: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        # Message from the remote response body, when there was one
        self.detail = detail

class AuthenticationError(RemoteUnavailableError):
    """Raised when the remote service rejects our credentials."""
    pass
