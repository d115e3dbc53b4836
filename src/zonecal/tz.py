from __future__ import annotations

import logging
import os
import re
from datetime import timezone, tzinfo
from functools import lru_cache
from pathlib import Path
from typing import Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .errors import InvalidArgument, UnresolvedTimezone

logger = logging.getLogger(__name__)

FALLBACK_TIMEZONE = "UTC"
ENV_VARS = ("CALENDAR_TIMEZONE", "TZ")
LOCALTIME_PATH = "/etc/localtime"

# "UTC", "America/New_York", "America/Argentina/Buenos_Aires", "Etc/GMT+5"
_IDENTIFIER_RE = re.compile(r"^[A-Za-z][A-Za-z0-9_+\-]*(?:/[A-Za-z0-9_+\-]+)*$")


def is_identifier_shaped(name: object) -> bool:
    return isinstance(name, str) and bool(_IDENTIFIER_RE.match(name))


@lru_cache(maxsize=None)
def get_zone(name: str) -> ZoneInfo:
    if not is_identifier_shaped(name):
        raise InvalidArgument(f"Invalid timezone identifier: {name!r}")
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as ex:
        raise InvalidArgument(f"Unknown timezone: {name!r}") from ex


def as_zone(tz: Union[str, tzinfo, object]) -> tzinfo:
    """tzinfo for a zone name, a tzinfo, or anything exposing ``.timezone``.

    Objects with a ``timezone`` attribute (the timezone store) are read at
    call time, so every conversion sees the current selection.
    """
    if isinstance(tz, tzinfo):
        return tz
    name = getattr(tz, "timezone", tz)
    if not isinstance(name, str):
        raise InvalidArgument(f"Cannot resolve a timezone from {tz!r}")
    return get_zone(name)


def zone_name(tz: Union[str, tzinfo, object]) -> str:
    zone = as_zone(tz)
    if zone is timezone.utc:
        return "UTC"
    return getattr(zone, "key", None) or str(zone)


def _zone_exists(name: str) -> bool:
    try:
        get_zone(name)
    except InvalidArgument:
        return False
    return True


def _localtime_target(path: str = LOCALTIME_PATH) -> Optional[str]:
    p = Path(path)
    try:
        if not p.is_symlink():
            return None
        target = str(p.resolve())
    except OSError:
        return None
    marker = "zoneinfo/"
    if marker not in target:
        return None
    name = target.split(marker, 1)[1]
    return name if _zone_exists(name) else None


def environment_timezone(localtime_path: str = LOCALTIME_PATH) -> str:
    """IANA name of the zone this process runs in.

    Checks ``CALENDAR_TIMEZONE``, then ``TZ``, then the ``/etc/localtime``
    symlink. Raises UnresolvedTimezone when none of them names a known zone.
    """
    for var in ENV_VARS:
        value = os.environ.get(var, "").strip().lstrip(":")
        if not value:
            continue
        if _zone_exists(value):
            return value
        logger.warning("Ignoring %s=%r: not a known IANA timezone", var, value)

    name = _localtime_target(localtime_path)
    if name:
        return name
    raise UnresolvedTimezone("Could not determine the system timezone")


def default_timezone(localtime_path: str = LOCALTIME_PATH) -> str:
    try:
        return environment_timezone(localtime_path)
    except UnresolvedTimezone as ex:
        logger.info("%s; falling back to %s", ex, FALLBACK_TIMEZONE)
        return FALLBACK_TIMEZONE
