from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from . import dates
from .boundary import convert_for_edit, convert_for_save, snap_to_increment
from .errors import InvalidArgument
from .formats import DEFAULT_MESSAGES
from .models import Event, EventForm
from .state import EventStore, TimezoneStore
from .tz import as_zone

logger = logging.getLogger(__name__)


class EventEditor:
    """Create, edit and delete events against the stores.

    Holds the timezone store itself rather than a zone name, so a form
    saved after the user switched zones converts in the new zone.
    """

    def __init__(
        self,
        timezone_store: TimezoneStore,
        event_store: EventStore,
        default_duration_minutes: int = 60,
        snap_minutes: int = 15,
    ):
        if default_duration_minutes <= 0:
            raise InvalidArgument("default_duration_minutes must be positive")
        self.timezone_store = timezone_store
        self.event_store = event_store
        self.default_duration_minutes = default_duration_minutes
        self.snap_minutes = snap_minutes

    def create_at(self, slot_start: datetime) -> Event:
        """Unsaved event starting at a grid slot, snapped to the increment."""
        if slot_start.tzinfo is None:
            raise InvalidArgument("create_at() needs a timezone-aware slot time")
        local = slot_start.astimezone(as_zone(self.timezone_store))
        start = snap_to_increment(local, self.snap_minutes)
        end = dates.add(start, self.default_duration_minutes, dates.MINUTES)
        logger.debug("New event slot %s snapped to %s", local.isoformat(), start.isoformat())
        return Event(
            id="",
            title="",
            start=start.astimezone(timezone.utc),
            end=end.astimezone(timezone.utc),
        )

    def open(self, event: Event) -> EventForm:
        return convert_for_edit(event, self.timezone_store)

    def save(self, form: EventForm) -> Event:
        zone = self.timezone_store.timezone
        saved_range = convert_for_save(form, zone)
        event = Event(
            id=form.id,
            title=form.title.strip() or DEFAULT_MESSAGES["noTitle"],
            start=saved_range.start,
            end=saved_range.end,
            all_day=form.all_day,
            description=form.description or None,
            color=form.color or None,
            location=form.location or None,
            timezone=zone if form.all_day else None,
        )
        return self.event_store.upsert(event)

    def delete(self, event_id: str) -> Optional[Event]:
        return self.event_store.delete(event_id)
