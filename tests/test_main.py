import sys
from datetime import date

import pytest

from zonecal import main as cli
from zonecal.state import load_events

EVENTS_YAML = """
events:
  - id: standup
    title: Standup
    start: "2024-03-05T14:00:00Z"
    end: "2024-03-05T14:30:00Z"
    location: Room 4
  - id: offsite
    title: Offsite
    start: "2024-03-05T05:00:00Z"
    end: "2024-03-06T04:59:59.999Z"
    all_day: true
    timezone: America/New_York
  - id: conference
    title: Conference
    start: "2024-03-04T14:00:00Z"
    end: "2024-03-06T22:00:00Z"
"""


@pytest.fixture
def paths(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    for var in ("CALENDAR_TIMEZONE", "TZ"):
        monkeypatch.delenv(var, raising=False)
    config = tmp_path / "config.yaml"
    config.write_text("timezone: America/New_York\ndefault_view: day\n", encoding="utf-8")
    events = tmp_path / "events.yaml"
    events.write_text(EVENTS_YAML, encoding="utf-8")
    return str(config), str(events)


def test_day_view_lists_events_in_display_order(paths):
    config, events = paths

    lines = cli.run_show(config, events, on=date(2024, 3, 5))

    assert lines[0] == "Tuesday Mar 05"
    assert lines[2] == "Tue Mar 05"
    body = lines[3:6]
    assert body[0].endswith("« Conference »")
    assert body[1].split() == ["All", "day", "Offsite"]
    assert "9:00 AM – 9:30 AM" in body[2]
    assert body[2].endswith("Standup @ Room 4")


def test_week_view_marks_continuing_events(paths):
    config, events = paths

    lines = cli.run_show(config, events, view_name="week", on=date(2024, 3, 5))
    conference = [line for line in lines if "Conference" in line]

    assert lines[0] == "March 03 – 09"
    assert conference[0].endswith("Conference »")
    assert not conference[0].endswith("« Conference »")
    assert conference[1].endswith("« Conference »")
    assert conference[2].endswith("« Conference")


def test_timezone_override_moves_events(paths):
    config, events = paths

    lines = cli.run_show(config, events, on=date(2024, 3, 5), timezone="Asia/Tokyo")

    assert "Standup" in "\n".join(lines)
    assert any("11:00 PM – 11:30 PM" in line for line in lines)


def test_empty_range_reports_no_events(paths):
    config, events = paths

    lines = cli.run_show(config, events, on=date(2025, 1, 1))

    assert lines[-2:] == ["No events found", "There are no events scheduled for this time period."]


def test_run_add_writes_events_file(paths):
    config, events = paths

    saved = cli.run_add("Lunch", date(2024, 3, 7), config, events, start="12:00", end="13:00")

    stored = {e.id: e for e in load_events(events)}
    assert stored[saved.id].title == "Lunch"
    assert stored[saved.id].start.isoformat() == "2024-03-07T17:00:00+00:00"
    assert len(stored) == 4


def test_main_show_prints_schedule(paths, monkeypatch, capsys):
    config, events = paths
    monkeypatch.setattr(
        sys, "argv", ["zonecal", "--config", config, "--events", events, "show", "--date", "2024-03-05"]
    )

    cli.main()

    out = capsys.readouterr().out
    assert out.startswith("Tuesday Mar 05")
    assert "Standup @ Room 4" in out


def test_main_add_all_day(paths, monkeypatch, capsys):
    config, events = paths
    monkeypatch.setattr(
        sys,
        "argv",
        ["zonecal", "--config", config, "--events", events, "add", "Holiday", "--date", "2024-03-08", "--all-day"],
    )

    cli.main()

    assert 'Event "Holiday" added' in capsys.readouterr().out
    holiday = [e for e in load_events(events) if e.title == "Holiday"][0]
    assert holiday.all_day
    assert holiday.timezone == "America/New_York"


def test_main_reads_config_once(paths, monkeypatch, capsys):
    config, events = paths
    calls = []
    real_load_config = cli.load_config

    def counting_load_config(path):
        calls.append(path)
        return real_load_config(path)

    monkeypatch.setattr(cli, "load_config", counting_load_config)
    monkeypatch.setattr(
        sys, "argv", ["zonecal", "--config", config, "--events", events, "show", "--date", "2024-03-05"]
    )

    cli.main()

    assert calls == [config]
    assert "Standup" in capsys.readouterr().out
