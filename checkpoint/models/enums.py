# =======================================================================================
# checkpoint/models/enums.py - Enums and Constants
# =======================================================================================
from enum import Enum
from typing import Literal

# Type aliases for better type hints
EventAction = Literal["entry", "exit"]
SortField = Literal["timestamp", "name"]
SortOrder = Literal["asc", "desc"]
ActionFilter = Literal["all", "entry", "exit"]

class Action(str, Enum):
    """Direction of a checkpoint event."""
    ENTRY = "entry"
    EXIT = "exit"

class SubjectKind(Enum):
    """Who an event was recorded for."""
    EMPLOYEE = "employee"
    VISITOR = "visitor"

UNKNOWN_EMPLOYEE = "Unknown Employee"
DEFAULT_PEAK_HOUR = 9
TOP_DEVICE_LIMIT = 5
DEFAULT_RECENT_LIMIT = 50
