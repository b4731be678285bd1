"""
Theme Context — Light/dark preference, created once and passed to whoever
renders. The preference survives restarts through a PreferenceStore.
"""
import json
import logging
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from paydesk.client.settings import get_client_settings

logger = logging.getLogger(__name__)


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"
    SYSTEM = "system"


class PreferenceStore:
    """Tiny JSON key/value file."""

    def __init__(self, path):
        self.path = Path(path)

    @classmethod
    def default(cls) -> "PreferenceStore":
        """Store at PREFERENCES_FILE from the client settings."""
        return cls(get_client_settings().PREFERENCES_FILE)

    def _load(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            return json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable preferences file %s: %s", self.path, e)
            return {}

    def get(self, key: str, default=None):
        return self._load().get(key, default)

    def set(self, key: str, value):
        data = self._load()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")


class ThemeContext:
    def __init__(self, store: Optional[PreferenceStore] = None, system_prefers_dark: Optional[Callable[[], bool]] = None):
        self.store = store or PreferenceStore.default()
        self._system_prefers_dark = system_prefers_dark or (lambda: False)
        try:
            self._theme = Theme(self.store.get("theme", Theme.SYSTEM.value))
        except ValueError:
            self._theme = Theme.SYSTEM
        self._listeners: list[Callable[[Theme], None]] = []

    @property
    def theme(self) -> Theme:
        return self._theme

    @property
    def actual_theme(self) -> Theme:
        """The theme to paint with; SYSTEM resolves to light or dark."""
        if self._theme is Theme.SYSTEM:
            return Theme.DARK if self._system_prefers_dark() else Theme.LIGHT
        return self._theme

    def subscribe(self, listener: Callable[[Theme], None]):
        self._listeners.append(listener)

    def set_theme(self, theme) -> Theme:
        self._theme = Theme(theme)
        self.store.set("theme", self._theme.value)
        for listener in self._listeners:
            listener(self.actual_theme)
        return self._theme

    def toggle(self) -> Theme:
        """Flip between light and dark based on what is currently shown."""
        return self.set_theme(Theme.LIGHT if self.actual_theme is Theme.DARK else Theme.DARK)
