"""User-visible alerts for engine completion events.

The engine only signals; this collaborator turns the signals into a tray
balloon plus a sound.  Anything that goes wrong here is logged and
dropped so it can never disturb the countdown.
"""

from __future__ import annotations

import logging

from PyQt6.QtCore import QObject, pyqtSignal
from PyQt6.QtWidgets import QSystemTrayIcon

from .audio.sounds import SoundManager
from .timer.engine import TimerEngine

logger = logging.getLogger(__name__)

ALERT_MS = 5000

TODO_TITLE = "To-Do Complete"
TIMER_TITLE = "Timer Complete"
TIMER_BODY = "Your countdown has finished."
QUEUE_TITLE = "All To-Dos Done"
QUEUE_BODY = "Every task has been completed."


class Notifier(QObject):
    """Listens to a TimerEngine and alerts the user.

    Signals
    -------
    alerted(title: str, body: str)
        Emitted for every alert, whether or not a tray balloon was shown.
    """

    alerted = pyqtSignal(str, str)

    def __init__(
        self,
        engine: TimerEngine,
        parent: QObject | None = None,
        *,
        sounds: SoundManager | None = None,
        tray: QSystemTrayIcon | None = None,
        enabled: bool = True,
    ) -> None:
        super().__init__(parent)
        self._sounds = sounds
        self._tray = tray
        self._enabled = enabled

        engine.todo_completed.connect(self._on_todo_completed)
        engine.timer_completed.connect(self._on_timer_completed)
        engine.queue_completed.connect(self._on_queue_completed)

    @property
    def enabled(self) -> bool:
        return self._enabled

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = enabled

    def set_tray(self, tray: QSystemTrayIcon | None) -> None:
        self._tray = tray

    # ── slots ─────────────────────────────────────────────────────────────

    def _on_todo_completed(self, title: str) -> None:
        self._alert(TODO_TITLE, f'"{title}" finished.', "todo_complete")

    def _on_timer_completed(self) -> None:
        self._alert(TIMER_TITLE, TIMER_BODY, "timer_complete")

    def _on_queue_completed(self) -> None:
        self._alert(QUEUE_TITLE, QUEUE_BODY, "queue_complete")

    # ── internal ──────────────────────────────────────────────────────────

    def _alert(self, title: str, body: str, sound: str) -> None:
        logger.info("Alert: %s: %s", title, body)
        if self._sounds is not None:
            try:
                self._sounds.play(sound)
            except RuntimeError:
                logger.exception("Could not play %s", sound)
        if self._enabled and self._tray is not None and self._tray.supportsMessages():
            try:
                self._tray.showMessage(
                    title, body, QSystemTrayIcon.MessageIcon.Information, ALERT_MS,
                )
            except RuntimeError:
                logger.exception("Could not show alert %r", title)
        self.alerted.emit(title, body)
