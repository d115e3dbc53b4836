from __future__ import annotations

import argparse
import logging
from datetime import date, datetime, time
from typing import List, Optional

from dotenv import load_dotenv

from . import dates
from .config import AppConfig, load_config
from .editor import EventEditor
from .formats import DEFAULT_MESSAGES, default_localizer
from .localizer import LocalizedView, merge_with_defaults
from .models import DateRange, Event, EventForm
from .ordering import VIEWS, display_interval, get_agenda_events_for_day, visible_range
from .state import EventStore, TimezoneStore, load_events, save_events
from .tz import as_zone

CONFIG_PATH_DEFAULT = "config.yaml"
EVENTS_PATH_DEFAULT = "events.yaml"

_HEADER_FORMATS = {
    "day": "dayHeaderFormat",
    "week": "dayRangeHeaderFormat",
    "month": "monthHeaderFormat",
    "agenda": "agendaHeaderFormat",
}


def _parse_hhmm(s: str) -> time:
    hh, mm = s.split(":")
    return time(hour=int(hh), minute=int(mm))


def _view_for(cfg: AppConfig, locale: Optional[str]) -> LocalizedView:
    return merge_with_defaults(
        default_localizer(),
        locale or cfg.locale.locale,
        cfg.locale.formats,
        {**DEFAULT_MESSAGES, **cfg.locale.messages},
    )


def _event_line(event: Event, tz: str, day: datetime, view: LocalizedView) -> str:
    start, end = display_interval(event, tz)
    if event.all_day:
        when = view.messages["allDay"]
    else:
        when = view.format(DateRange(start, end), "eventTimeRangeFormat")
    title = event.title
    if view.continues_prior(start, day):
        title = f"« {title}"
    if view.continues_after(start, end, view.end_of(day, dates.DAY)):
        title = f"{title} »"
    if event.location:
        title = f"{title} @ {event.location}"
    return f"  {when:<22}{title}"


def _schedule_lines(
    events: List[Event],
    view_name: str,
    current: date,
    tz: str,
    view: LocalizedView,
    agenda_days: int,
) -> List[str]:
    window = visible_range(view_name, current, tz, view, view.locale, agenda_days)
    if view_name in ("day", "month"):
        header_value = datetime.combine(current, time(12), tzinfo=as_zone(tz))
    else:
        header_value = window
    lines = [view.format(header_value, _HEADER_FORMATS[view_name]), ""]

    found = False
    for day in view.range(view.start_of(window.start, dates.DAY), window.end, dates.DAY):
        day_events = get_agenda_events_for_day(events, day, tz, view)
        if not day_events:
            continue
        found = True
        lines.append(view.format(day, "agendaDateFormat"))
        lines.extend(_event_line(e, tz, day, view) for e in day_events)
        lines.append("")

    if not found:
        lines.append(view.messages["noEvents"])
        lines.append(view.messages["noEventsInRange"])
    return lines


def run_show(
    config_path: str = CONFIG_PATH_DEFAULT,
    events_path: str = EVENTS_PATH_DEFAULT,
    view_name: Optional[str] = None,
    on: Optional[date] = None,
    timezone: Optional[str] = None,
    locale: Optional[str] = None,
    cfg: Optional[AppConfig] = None,
) -> List[str]:
    load_dotenv()
    cfg = cfg or load_config(config_path)
    store = TimezoneStore(timezone or cfg.timezone)
    events = EventStore(load_events(events_path))

    view_name = view_name or cfg.default_view
    current = on or datetime.now(tz=as_zone(store)).date()
    return _schedule_lines(
        list(events.events),
        view_name,
        current,
        store.timezone,
        _view_for(cfg, locale),
        cfg.agenda.days_to_show,
    )


def run_add(
    title: str,
    on: date,
    config_path: str = CONFIG_PATH_DEFAULT,
    events_path: str = EVENTS_PATH_DEFAULT,
    start: Optional[str] = None,
    end: Optional[str] = None,
    end_date: Optional[date] = None,
    all_day: bool = False,
    location: str = "",
    timezone: Optional[str] = None,
    cfg: Optional[AppConfig] = None,
) -> Event:
    load_dotenv()
    cfg = cfg or load_config(config_path)
    store = TimezoneStore(timezone or cfg.timezone)
    events = EventStore(load_events(events_path))
    editor = EventEditor(
        store,
        events,
        default_duration_minutes=cfg.editor.default_duration_minutes,
        snap_minutes=cfg.editor.snap_minutes,
    )

    form = EventForm(start_date=on, end_date=end_date or on, all_day=all_day, title=title, location=location)
    if not all_day:
        if start:
            form.start_time = _parse_hhmm(start)
        if end:
            form.end_time = _parse_hhmm(end)
    saved = editor.save(form)
    save_events(events_path, events.events)
    return saved


def main():
    ap = argparse.ArgumentParser(description="Timezone-aware calendar schedule")
    ap.add_argument("--config", default=CONFIG_PATH_DEFAULT)
    ap.add_argument("--events", default=EVENTS_PATH_DEFAULT)
    ap.add_argument("--timezone", help="IANA zone, e.g. America/New_York")
    sub = ap.add_subparsers(dest="command", required=True)

    show = sub.add_parser("show")
    show.add_argument("--view", choices=VIEWS)
    show.add_argument("--date", type=date.fromisoformat)
    show.add_argument("--locale")

    add = sub.add_parser("add")
    add.add_argument("title")
    add.add_argument("--date", type=date.fromisoformat, required=True)
    add.add_argument("--end-date", type=date.fromisoformat)
    add.add_argument("--start", help="HH:MM")
    add.add_argument("--end", help="HH:MM")
    add.add_argument("--all-day", action="store_true")
    add.add_argument("--location", default="")
    args = ap.parse_args()

    cfg = load_config(args.config)
    logging.basicConfig(level=getattr(logging, cfg.log_level, logging.WARNING))

    if args.command == "show":
        lines = run_show(
            config_path=args.config,
            events_path=args.events,
            view_name=args.view,
            on=args.date,
            timezone=args.timezone,
            locale=args.locale,
            cfg=cfg,
        )
        print("\n".join(lines))
        return

    saved = run_add(
        args.title,
        args.date,
        config_path=args.config,
        events_path=args.events,
        start=args.start,
        end=args.end,
        end_date=args.end_date,
        all_day=args.all_day,
        location=args.location,
        timezone=args.timezone,
        cfg=cfg,
    )
    print(f'Event "{saved.title}" added ({saved.id})')


if __name__ == "__main__":
    main()
