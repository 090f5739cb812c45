from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List
import yaml

DEFAULT_SCOPES = ["https://www.googleapis.com/auth/calendar"]

@dataclass
class GoogleConfig:
    calendar_id: str
    scopes: List[str]

@dataclass
class AppConfig:
    log_level: str
    google: GoogleConfig

def load_config(path: str) -> AppConfig:
    p = Path(path)
    data: Dict[str, Any] = {}
    if p.exists():
        data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}

    google = data.get("google") or {}

    return AppConfig(
        log_level=str(data.get("log_level", "INFO")).upper(),
        google=GoogleConfig(
            calendar_id=str(google.get("calendar_id", "primary")),
            scopes=list(google.get("scopes", DEFAULT_SCOPES)),
        ),
    )
