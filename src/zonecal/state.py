from __future__ import annotations
from dataclasses import replace
from datetime import date, datetime, time, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple
import logging
import uuid

import yaml

from .errors import InvalidArgument
from .models import Event
from .tz import default_timezone, is_identifier_shaped

logger = logging.getLogger(__name__)

TimezoneListener = Callable[[str, str], None]   # (old, new)


class TimezoneStore:
    """Currently selected timezone.

    Readers take ``store.timezone`` at the moment they convert or format.
    ``set_timezone`` is the only writer; listeners run right after it.
    """

    def __init__(self, timezone: Optional[str] = None):
        if timezone is None:
            timezone = default_timezone()
        self._timezone = self._validate(timezone)
        self._listeners: List[TimezoneListener] = []

    @staticmethod
    def _validate(name: str) -> str:
        if not is_identifier_shaped(name):
            raise InvalidArgument(f"Invalid timezone identifier: {name!r}")
        return name

    @property
    def timezone(self) -> str:
        return self._timezone

    def set_timezone(self, name: str) -> None:
        name = self._validate(name)
        old = self._timezone
        if name == old:
            return
        self._timezone = name
        logger.info("Timezone changed from %s to %s", old, name)
        for listener in list(self._listeners):
            listener(old, name)

    def subscribe(self, listener: TimezoneListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe


def on_timezone_change(store: TimezoneStore, new_timezone: str) -> None:
    store.set_timezone(new_timezone)


def new_event_id() -> str:
    return uuid.uuid4().hex[:9]


class EventStore:
    """In-memory event collection; every write swaps in a new tuple."""

    def __init__(self, events: Iterable[Event] = ()):
        self._events: Tuple[Event, ...] = tuple(events)

    @property
    def events(self) -> Tuple[Event, ...]:
        return self._events

    def get(self, event_id: str) -> Optional[Event]:
        for event in self._events:
            if event.id == event_id:
                return event
        return None

    def add(self, event: Event) -> Event:
        if not event.id:
            event = replace(event, id=new_event_id())
        elif self.get(event.id) is not None:
            raise InvalidArgument(f"Duplicate event id: {event.id!r}")
        self._events = self._events + (event,)
        logger.debug("Added event %s", event.id)
        return event

    def update(self, event: Event) -> Event:
        if self.get(event.id) is None:
            raise InvalidArgument(f"Unknown event id: {event.id!r}")
        self._events = tuple(event if e.id == event.id else e for e in self._events)
        logger.debug("Updated event %s", event.id)
        return event

    def upsert(self, event: Event) -> Event:
        if event.id and self.get(event.id) is not None:
            return self.update(event)
        return self.add(event)

    def delete(self, event_id: str) -> Optional[Event]:
        removed = self.get(event_id)
        if removed is not None:
            self._events = tuple(e for e in self._events if e.id != event_id)
            logger.debug("Deleted event %s", event_id)
        return removed


def _parse_instant(value: Any, field_name: str) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError as ex:
            raise InvalidArgument(f"Invalid {field_name}: {value!r}") from ex
    else:
        raise InvalidArgument(f"Invalid {field_name}: {value!r}")
    # Naive timestamps in event files are UTC.
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _event_from_dict(data: Dict[str, Any]) -> Event:
    return Event(
        id=str(data.get("id", "")),
        title=str(data.get("title", "")),
        start=_parse_instant(data.get("start"), "start"),
        end=_parse_instant(data.get("end", data.get("start")), "end"),
        all_day=bool(data.get("all_day", False)),
        description=data.get("description"),
        color=data.get("color"),
        location=data.get("location"),
        timezone=data.get("timezone"),
    )


def _event_to_dict(event: Event) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "id": event.id,
        "title": event.title,
        "start": event.start.astimezone(timezone.utc).isoformat(),
        "end": event.end.astimezone(timezone.utc).isoformat(),
        "all_day": event.all_day,
    }
    for key in ("description", "color", "location", "timezone"):
        value = getattr(event, key)
        if value is not None:
            data[key] = value
    return data


def load_events(path: str) -> List[Event]:
    p = Path(path)
    if not p.exists():
        return []
    data = yaml.safe_load(p.read_text(encoding="utf-8")) or []
    if isinstance(data, dict):
        data = data.get("events", [])
    return [_event_from_dict(item) for item in data]


def save_events(path: str, events: Iterable[Event]) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    payload = {"events": [_event_to_dict(e) for e in events]}
    p.write_text(yaml.safe_dump(payload, sort_keys=False, allow_unicode=True), encoding="utf-8")
