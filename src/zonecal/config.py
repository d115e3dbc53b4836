from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional
import yaml

@dataclass
class LocaleConfig:
    locale: str
    formats: Dict[str, str] = field(default_factory=dict)
    messages: Dict[str, str] = field(default_factory=dict)

@dataclass
class EditorConfig:
    default_duration_minutes: int
    snap_minutes: int

@dataclass
class AgendaConfig:
    days_to_show: int

@dataclass
class AppConfig:
    timezone: Optional[str]     # None: resolve from the environment
    default_view: str
    log_level: str
    locale: LocaleConfig
    editor: EditorConfig
    agenda: AgendaConfig

def load_config(path: str) -> AppConfig:
    p = Path(path)
    data: Dict[str, Any] = {}
    if p.exists():
        data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}

    locale = data.get("locale", {})
    if isinstance(locale, str):
        locale = {"name": locale}
    editor = data.get("editor", {})
    agenda = data.get("agenda", {})

    timezone = data.get("timezone")
    return AppConfig(
        timezone=str(timezone) if timezone else None,
        default_view=str(data.get("default_view", "week")),
        log_level=str(data.get("log_level", "WARNING")).upper(),
        locale=LocaleConfig(
            locale=str(locale.get("name", "en-US")),
            formats={str(k): str(v) for k, v in (locale.get("formats") or {}).items()},
            messages={str(k): str(v) for k, v in (locale.get("messages") or {}).items()},
        ),
        editor=EditorConfig(
            default_duration_minutes=int(editor.get("default_duration_minutes", 60)),
            snap_minutes=int(editor.get("snap_minutes", 15)),
        ),
        agenda=AgendaConfig(
            days_to_show=int(agenda.get("days_to_show", 30)),
        ),
    )
