# =======================================================================================
# checkpoint/models/schemas.py - Pydantic Models
# =======================================================================================
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from .enums import EventAction

class CamelModel(BaseModel):
    """Snake case in Python, camelCase on the wire and in local documents."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

# ========== Core entities ==========
class NewEvent(CamelModel):
    """An event as submitted by a caller, before a store assigns its id."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    timestamp: datetime
    subject_name: str = Field(
        ...,
        validation_alias=AliasChoices("subjectName", "employeeName", "subject_name"),
    )
    device_id: str = Field(..., min_length=1, max_length=100)
    action: EventAction
    # Directory key sent to the remote service; the device id doubles as it.
    employee_id: Optional[str] = Field(None, exclude=True)

    @field_validator("timestamp")
    @classmethod
    def _aware_timestamp(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

class Event(NewEvent):
    """A stored check-in/check-out event. Immutable once created."""
    id: str

    @classmethod
    def from_new(cls, event_id: str, new_event: NewEvent, subject_name: Optional[str] = None) -> "Event":
        return cls(
            id=event_id,
            timestamp=new_event.timestamp,
            subject_name=subject_name or new_event.subject_name,
            device_id=new_event.device_id,
            action=new_event.action,
        )

class Identity(CamelModel):
    """Employee or badge holder; `id` is also the device id scanned at the gate."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    id: str
    name: str
    department: Optional[str] = None
    email: Optional[str] = None

# ========== Reporting ==========
class DeviceActivity(CamelModel):
    device_id: str
    count: int

class LogStats(CamelModel):
    total_logs: int
    entries_today: int
    exits_today: int

class LogReport(CamelModel):
    generated_at: datetime
    total_events: int
    today_entries: int
    today_exits: int
    currently_inside: int
    weekly_entries: int
    most_active_devices: List[DeviceActivity]
    peak_hour: int
    peak_hour_label: str
    average_daily: int
    last_activity: Optional[datetime] = None
    last_activity_label: str

# ========== Checkpoint operations ==========
class ScanRequest(CamelModel):
    """Barcode scan coming from the gate front end."""
    device_id: str = Field(..., min_length=1, max_length=100, description="Scanned barcode")
    action: str = Field(..., description="entry | exit")

class ScanResponse(CamelModel):
    success: bool
    message: str
    event: Event
    identity: Optional[Identity] = None

class VisitorRequest(CamelModel):
    visitor_name: str = Field("", description="Visitor's full name")
    device_id: str = Field("", description="Laptop carried by the visitor")
    host_employee: Optional[str] = Field(None, description="Employee hosting the visit")
    purpose: Optional[str] = None

class BulkRequest(CamelModel):
    identity_ids: List[str] = Field(default_factory=list)
    operation_type: str = Field(..., description="entry | exit")
    event_name: str = ""

class BulkResponse(CamelModel):
    processed: int
    operation_type: EventAction
    message: str
    events: List[Event]

class EventList(CamelModel):
    events: List[Event]

# ========== Auth ==========
class LoginRequest(BaseModel):
    email: str
    password: str

class LoginResponse(BaseModel):
    authenticated: bool
    user: Optional[Dict[str, Any]] = None

# ========== Health ==========
class HealthResponse(CamelModel):
    status: str                 # "ok" | "error"
    local_storage_available: bool
    remote_url: str
    message: Optional[str] = None
