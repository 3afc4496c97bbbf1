"""Application settings with JSON persistence.

Settings are stored at:
    ~/.boosttimer/settings.json    (or $BOOSTTIMER_HOME/settings.json)

Usage::

    settings = load_settings()
    settings.sound_volume = 50
    save_settings(settings)
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, asdict, fields
from pathlib import Path

logger = logging.getLogger(__name__)

APP_SUPPORT_DIR = Path(
    os.environ.get("BOOSTTIMER_HOME") or Path.home() / ".boosttimer"
)
SETTINGS_PATH = APP_SUPPORT_DIR / "settings.json"


@dataclass
class Settings:
    """All user-configurable preferences."""

    # ── timer ─────────────────────────────────────────────────────────
    default_hours: int = 0
    default_minutes: int = 25
    default_seconds: int = 0
    tick_interval_ms: int = 1000

    # ── audio ─────────────────────────────────────────────────────────
    sound_enabled: bool = True
    sound_volume: int = 60                 # 0-100

    # ── notifications ─────────────────────────────────────────────────
    notifications_enabled: bool = True

    # ── window ────────────────────────────────────────────────────────
    minimize_to_tray: bool = True
    always_on_top: bool = False
    window_x: int | None = None
    window_y: int | None = None
    window_width: int = 820
    window_height: int = 620
    focus_x: int | None = None
    focus_y: int | None = None

    # ── diagnostics ───────────────────────────────────────────────────
    log_level: str = "INFO"

    @property
    def default_duration(self) -> int:
        """The duration inputs' starting value, in seconds."""
        return (
            max(0, min(self.default_hours, 99)) * 3600
            + max(0, min(self.default_minutes, 59)) * 60
            + max(0, min(self.default_seconds, 59))
        )


def load_settings() -> Settings:
    """Load settings from disk, falling back to defaults."""
    try:
        if SETTINGS_PATH.exists():
            data = json.loads(SETTINGS_PATH.read_text(encoding="utf-8"))
            # Only use keys that exist in the dataclass
            valid_keys = {f.name for f in fields(Settings)}
            filtered = {k: v for k, v in data.items() if k in valid_keys}
            return Settings(**filtered)
    except (OSError, ValueError, TypeError, AttributeError) as exc:
        logger.warning("Ignoring unreadable settings file %s: %s", SETTINGS_PATH, exc)
    return Settings()


def save_settings(settings: Settings) -> None:
    """Write settings to disk as JSON."""
    APP_SUPPORT_DIR.mkdir(parents=True, exist_ok=True)
    SETTINGS_PATH.write_text(
        json.dumps(asdict(settings), indent=2) + "\n",
        encoding="utf-8",
    )
