# =======================================================================================
# checkpoint/utils/validators.py - Validation Helpers
# =======================================================================================
import re
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Tuple
from .exceptions import ValidationError
from ..models.enums import Action, EventAction

# Two uppercase letters followed by five digits, e.g. CA12345
DEVICE_ID_PATTERN = re.compile(r"^[A-Z]{2}\d{5}$")


class DeviceIdValidator:
    """Validates tokens produced by the barcode front end."""

    @staticmethod
    def is_valid(device_id: str) -> bool:
        return bool(DEVICE_ID_PATTERN.match(device_id or ""))

    @staticmethod
    def validate(device_id: str) -> str:
        """Return the trimmed device id or raise ValidationError."""
        value = (device_id or "").strip()
        if not value:
            raise ValidationError("Please enter a valid barcode")
        if not DeviceIdValidator.is_valid(value):
            raise ValidationError(f"Invalid device id format: {value}")
        return value


def validate_action(action: str) -> EventAction:
    """Only 'entry' and 'exit' are accepted."""
    if action == Action.ENTRY.value:
        return "entry"
    if action == Action.EXIT.value:
        return "exit"
    raise ValidationError("Action must be either 'entry' or 'exit'")


def unique_ids(ids: Iterable[str]) -> List[str]:
    """Drop blanks and repeats while keeping selection order."""
    seen = set()
    out: List[str] = []
    for raw in ids:
        value = (raw or "").strip()
        if value and value not in seen:
            seen.add(value)
            out.append(value)
    return out


def validate_date_range(start: Optional[datetime], end: Optional[datetime]) -> Tuple[datetime, datetime]:
    """Both bounds are required; naive values are taken as UTC."""
    if start is None or end is None:
        raise ValidationError("startDate and endDate must be given together")
    if start.tzinfo is None:
        start = start.replace(tzinfo=timezone.utc)
    if end.tzinfo is None:
        end = end.replace(tzinfo=timezone.utc)
    if start > end:
        raise ValidationError("startDate must not be after endDate")
    return start, end
