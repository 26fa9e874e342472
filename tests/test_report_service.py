from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from checkpoint.services import report_service
from checkpoint.utils.exceptions import ValidationError
from conftest import make_event

UTC = timezone.utc
NOW = datetime(2026, 3, 10, 15, 30, tzinfo=UTC)


def test_currently_inside_never_negative():
    events = [make_event(NOW - timedelta(hours=h), action="exit") for h in (1, 2, 3)]

    report = report_service.build_report(events, now=NOW, tz=UTC)

    assert report.today_exits == 3
    assert report.today_entries == 0
    assert report.currently_inside == 0


def test_today_counts_use_local_calendar_day():
    events = [
        make_event(datetime(2026, 3, 10, 0, 5, tzinfo=UTC), action="entry"),
        make_event(datetime(2026, 3, 10, 12, 0, tzinfo=UTC), action="entry"),
        make_event(datetime(2026, 3, 10, 13, 0, tzinfo=UTC), action="exit"),
        make_event(datetime(2026, 3, 9, 23, 55, tzinfo=UTC), action="entry"),
    ]

    report = report_service.build_report(events, now=NOW, tz=UTC)
    assert (report.today_entries, report.today_exits, report.currently_inside) == (2, 1, 1)

    # Two hours east, the 23:55 entry of the 9th falls on the 10th and the 00:05 one stays there
    plus_two = timezone(timedelta(hours=2))
    shifted = report_service.build_report(events, now=NOW, tz=plus_two)
    assert shifted.today_entries == 3


def test_weekly_entries_only_counts_entries_in_last_seven_days():
    events = [
        make_event(NOW - timedelta(days=1), action="entry"),
        make_event(NOW - timedelta(days=6, hours=23), action="entry"),
        make_event(NOW - timedelta(days=2), action="exit"),
        make_event(NOW - timedelta(days=8), action="entry"),
    ]

    assert report_service.build_report(events, now=NOW, tz=UTC).weekly_entries == 2


def test_most_active_devices_sorted_descending():
    counts = {"A": 5, "B": 3, "C": 3, "D": 1}
    events = [
        make_event(NOW - timedelta(minutes=i), device_id=device, action="entry" if i % 2 else "exit")
        for device, n in counts.items()
        for i in range(n)
    ]

    ranked = report_service.most_active_devices(events)

    assert [d.device_id for d in ranked][0] == "A"
    assert [d.device_id for d in ranked][-1] == "D"
    assert [d.count for d in ranked] == [5, 3, 3, 1]


def test_most_active_devices_capped_at_five():
    events = [make_event(NOW, device_id=f"CA0000{i}") for i in range(8)]

    assert len(report_service.most_active_devices(events)) == 5


def test_peak_hour_defaults_to_nine_on_empty_log():
    assert report_service.peak_hour([]) == 9
    assert report_service.build_report([], now=NOW, tz=UTC).peak_hour == 9


def test_peak_hour_picks_busiest_hour_and_earliest_on_tie():
    busy = [make_event(datetime(2026, 3, 9, 14, m, tzinfo=UTC)) for m in (1, 2, 3)]
    quiet = [make_event(datetime(2026, 3, 9, 8, 0, tzinfo=UTC))]
    assert report_service.peak_hour(busy + quiet, tz=UTC) == 14

    tie = [
        make_event(datetime(2026, 3, 9, 17, 0, tzinfo=UTC)),
        make_event(datetime(2026, 3, 9, 7, 0, tzinfo=UTC)),
    ]
    assert report_service.peak_hour(tie, tz=UTC) == 7


def test_average_daily_uses_oldest_timestamp_not_list_order():
    oldest = NOW - timedelta(days=9)
    events = [make_event(oldest + timedelta(hours=12 * i)) for i in range(18)]

    chronological = report_service.average_daily(events, NOW)
    reversed_order = report_service.average_daily(list(reversed(events)), NOW)
    shuffled = report_service.average_daily(events[5:] + events[:5], NOW)

    assert chronological == reversed_order == shuffled == 2


def test_average_daily_rounds_half_up_and_floors_divisor_at_one():
    events = [make_event(NOW - timedelta(hours=1)) for _ in range(3)]
    assert report_service.average_daily(events, NOW) == 3

    two_days = [make_event(NOW - timedelta(days=2)) for _ in range(5)]
    assert report_service.average_daily(two_days, NOW) == 3


def test_report_on_empty_log():
    report = report_service.build_report([], now=NOW, tz=UTC)

    assert report.total_events == 0
    assert report.average_daily == 0
    assert report.last_activity is None
    assert report.last_activity_label == "No activity"
    assert report.most_active_devices == []
    assert report.peak_hour_label == "9:00 AM"


def test_last_activity_is_latest_timestamp():
    latest = NOW - timedelta(minutes=5)
    events = [make_event(NOW - timedelta(days=1)), make_event(latest), make_event(NOW - timedelta(hours=3))]

    report = report_service.build_report(events, now=NOW, tz=UTC)

    assert report.last_activity == latest
    assert report.last_activity_label == "5m ago"


@pytest.mark.parametrize(
    "hour, label",
    [(0, "12:00 AM"), (9, "9:00 AM"), (12, "12:00 PM"), (15, "3:00 PM"), (23, "11:00 PM")],
)
def test_format_peak_hour(hour, label):
    assert report_service.format_peak_hour(hour) == label


def test_format_last_activity_buckets():
    assert report_service.format_last_activity(NOW - timedelta(seconds=20), NOW, UTC) == "Just now"
    assert report_service.format_last_activity(NOW - timedelta(hours=3, minutes=10), NOW, UTC) == "3h ago"
    assert report_service.format_last_activity(NOW - timedelta(days=3), NOW, UTC) == "2026-03-07"


def test_compute_stats_matches_remote_shape():
    events = [
        make_event(NOW - timedelta(hours=1), action="entry"),
        make_event(NOW - timedelta(hours=2), action="exit"),
        make_event(NOW - timedelta(days=2), action="entry"),
    ]

    stats = report_service.compute_stats(events, now=NOW, tz=UTC)

    assert stats.model_dump(by_alias=True) == {"totalLogs": 3, "entriesToday": 1, "exitsToday": 1}


def test_csv_export_parses_back_to_same_row_count():
    events = [
        make_event(NOW - timedelta(minutes=i), device_id=f"CA1000{i}", name=f"Person {i}")
        for i in range(4)
    ]

    text = report_service.export_csv(events)
    rows = report_service.parse_csv(text)

    assert text.splitlines()[0] == "Timestamp,Employee Name,Device ID,Action"
    assert len(rows) == len(events)
    assert rows[2] == {
        "timestamp": events[2].timestamp.isoformat(),
        "employeeName": "Person 2",
        "deviceId": "CA10002",
        "action": "entry",
    }


def test_csv_export_does_not_quote_commas():
    text = report_service.export_csv([make_event(NOW, name="Smith, John")])

    assert len(text.splitlines()[1].split(",")) == 5


def test_csv_of_empty_log_is_header_only():
    assert report_service.parse_csv(report_service.export_csv([])) == []


def test_csv_filename_uses_date():
    assert report_service.csv_filename(NOW) == "laptop_log_2026-03-10.csv"


def test_filter_events_search_action_and_sort():
    events = [
        make_event(NOW - timedelta(hours=1), name="Bob Johnson", device_id="CA00002", action="exit"),
        make_event(NOW - timedelta(hours=3), name="alice Brown", device_id="CA00001"),
        make_event(NOW - timedelta(hours=2), name="John Smith", device_id="HR00003"),
    ]

    by_device = report_service.filter_events(events, query="hr000")
    assert [e.subject_name for e in by_device] == ["John Smith"]

    entries = report_service.filter_events(events, action="entry", order="asc")
    assert [e.subject_name for e in entries] == ["alice Brown", "John Smith"]

    by_name = report_service.filter_events(events, sort_by="name", order="asc")
    assert [e.subject_name for e in by_name] == ["alice Brown", "Bob Johnson", "John Smith"]


def test_filter_events_rejects_unknown_options():
    with pytest.raises(ValidationError):
        report_service.filter_events([], action="maybe")
    with pytest.raises(ValidationError):
        report_service.filter_events([], sort_by="device")


def test_recent_events_newest_first():
    events = [make_event(NOW - timedelta(minutes=m)) for m in (30, 10, 20)]

    recent = report_service.recent_events(events, limit=2)

    assert [e.timestamp for e in recent] == [NOW - timedelta(minutes=10), NOW - timedelta(minutes=20)]
