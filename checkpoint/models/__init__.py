# =======================================================================================
# checkpoint/models/__init__.py - Models Package
# =======================================================================================
from .schemas import *
from .enums import *
from .subjects import *

__all__ = [
    "NewEvent", "Event", "Identity", "DeviceActivity", "LogStats", "LogReport",
    "ScanRequest", "ScanResponse", "VisitorRequest", "BulkRequest", "BulkResponse",
    "EventList", "LoginRequest", "LoginResponse", "HealthResponse",
    "EventAction", "Action", "SubjectKind", "EmployeeSubject", "VisitorSubject",
    "format_visitor_name", "parse_subject", "is_visitor",
]
