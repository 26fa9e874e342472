# =======================================================================================
# checkpoint/services/report_service.py - Aggregation Engine
# =======================================================================================
"""
Reporting over a full snapshot of events.

Everything here is a pure function of the event list and the evaluation
instant; nothing is cached between calls. Calendar days and hours are taken
in local time (``tz=None`` means the host's zone).
"""
from __future__ import annotations

import math
from collections import Counter
from datetime import datetime, timedelta, tzinfo
from typing import Dict, Iterable, List, Optional, Sequence

from ..models.enums import DEFAULT_PEAK_HOUR, DEFAULT_RECENT_LIMIT, TOP_DEVICE_LIMIT
from ..models.schemas import DeviceActivity, Event, LogReport, LogStats
from ..utils.exceptions import ValidationError

CSV_HEADER = "Timestamp,Employee Name,Device ID,Action"
CSV_COLUMNS = ["timestamp", "employeeName", "deviceId", "action"]


def _now(now: Optional[datetime], tz: Optional[tzinfo]) -> datetime:
    return (now or datetime.now().astimezone()).astimezone(tz)


def _local(ts: datetime, tz: Optional[tzinfo]) -> datetime:
    return ts.astimezone(tz)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


# ---------- ordering ----------

def sort_events(events: Iterable[Event], newest_first: bool = True) -> List[Event]:
    return sorted(events, key=lambda e: e.timestamp, reverse=newest_first)


def recent_events(events: Iterable[Event], limit: int = DEFAULT_RECENT_LIMIT) -> List[Event]:
    return sort_events(events)[:max(0, limit)]


def filter_events(
    events: Iterable[Event],
    query: Optional[str] = None,
    action: str = "all",
    sort_by: str = "timestamp",
    order: str = "desc",
    device_id: Optional[str] = None,
) -> List[Event]:
    """Log view: text search over name and device id, action and exact device filters, then sort."""
    if action not in ("all", "entry", "exit"):
        raise ValidationError(f"Unknown action filter: {action}")
    if sort_by not in ("timestamp", "name"):
        raise ValidationError(f"Unknown sort field: {sort_by}")
    if order not in ("asc", "desc"):
        raise ValidationError(f"Unknown sort order: {order}")

    filtered = list(events)
    needle = (query or "").strip().lower()
    if needle:
        filtered = [
            e for e in filtered
            if needle in e.subject_name.lower() or needle in e.device_id.lower()
        ]
    if action != "all":
        filtered = [e for e in filtered if e.action == action]
    if device_id:
        filtered = [e for e in filtered if e.device_id == device_id]

    descending = order == "desc"
    if sort_by == "timestamp":
        return sorted(filtered, key=lambda e: e.timestamp, reverse=descending)
    return sorted(filtered, key=lambda e: e.subject_name.lower(), reverse=descending)


# ---------- aggregates ----------

def _today_counts(events: Sequence[Event], now: datetime, tz: Optional[tzinfo]) -> Dict[str, int]:
    today = now.date()
    counts = {"entry": 0, "exit": 0}
    for e in events:
        if _local(e.timestamp, tz).date() == today:
            counts[e.action] += 1
    return counts


def most_active_devices(events: Sequence[Event], limit: int = TOP_DEVICE_LIMIT) -> List[DeviceActivity]:
    """Devices by number of events (entries and exits together); ties keep first-seen order."""
    counts = Counter(e.device_id for e in events)
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [DeviceActivity(device_id=device_id, count=count) for device_id, count in ranked[:limit]]


def peak_hour(events: Sequence[Event], tz: Optional[tzinfo] = None) -> int:
    """Busiest local hour of day; earliest hour wins a tie."""
    if not events:
        return DEFAULT_PEAK_HOUR
    counts = Counter(_local(e.timestamp, tz).hour for e in events)
    return min(counts, key=lambda hour: (-counts[hour], hour))


def average_daily(events: Sequence[Event], now: datetime) -> int:
    """Events per day since the oldest event, by explicit minimum timestamp."""
    if not events:
        return 0
    oldest = min(e.timestamp for e in events)
    days = math.ceil((now - oldest) / timedelta(days=1))
    return _round_half_up(len(events) / max(1, days))


def last_activity(events: Sequence[Event]) -> Optional[datetime]:
    if not events:
        return None
    return max(e.timestamp for e in events)


def compute_stats(events: Sequence[Event], now: Optional[datetime] = None, tz: Optional[tzinfo] = None) -> LogStats:
    now = _now(now, tz)
    today = _today_counts(events, now, tz)
    return LogStats(total_logs=len(events), entries_today=today["entry"], exits_today=today["exit"])


def build_report(events: Sequence[Event], now: Optional[datetime] = None, tz: Optional[tzinfo] = None) -> LogReport:
    now = _now(now, tz)
    events = list(events)
    today = _today_counts(events, now, tz)
    week_ago = now - timedelta(days=7)
    hour = peak_hour(events, tz)
    latest = last_activity(events)

    return LogReport(
        generated_at=now,
        total_events=len(events),
        today_entries=today["entry"],
        today_exits=today["exit"],
        currently_inside=max(0, today["entry"] - today["exit"]),
        weekly_entries=sum(1 for e in events if e.action == "entry" and e.timestamp >= week_ago),
        most_active_devices=most_active_devices(events),
        peak_hour=hour,
        peak_hour_label=format_peak_hour(hour),
        average_daily=average_daily(events, now),
        last_activity=latest,
        last_activity_label=format_last_activity(latest, now, tz),
    )


# ---------- display helpers ----------

def format_peak_hour(hour: int) -> str:
    period = "PM" if hour >= 12 else "AM"
    display = 12 if hour == 0 else hour - 12 if hour > 12 else hour
    return f"{display}:00 {period}"


def format_last_activity(ts: Optional[datetime], now: Optional[datetime] = None, tz: Optional[tzinfo] = None) -> str:
    if ts is None:
        return "No activity"
    now = _now(now, tz)
    minutes = math.floor((now - ts).total_seconds() / 60)
    if minutes < 1:
        return "Just now"
    if minutes < 60:
        return f"{minutes}m ago"
    if minutes < 1440:
        return f"{minutes // 60}h ago"
    return _local(ts, tz).date().isoformat()


# ---------- CSV ----------

def export_csv(events: Iterable[Event]) -> str:
    """
    Header plus one line per event, in the order given.

    Values are joined with bare commas, no quoting: a comma inside a name
    shifts that row's columns.
    """
    lines = [
        ",".join([e.timestamp.isoformat(), e.subject_name, e.device_id, e.action])
        for e in events
    ]
    return CSV_HEADER + "\n" + "\n".join(lines)


def parse_csv(text: str) -> List[Dict[str, str]]:
    """Split an exported log back into rows, skipping the header and blank lines."""
    rows: List[Dict[str, str]] = []
    for line in text.splitlines()[1:]:
        if not line.strip():
            continue
        rows.append(dict(zip(CSV_COLUMNS, line.split(","))))
    return rows


def csv_filename(now: Optional[datetime] = None) -> str:
    return f"laptop_log_{_now(now, None).date().isoformat()}.csv"
