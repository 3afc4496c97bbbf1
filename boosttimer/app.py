"""Application shell: one engine, its collaborators, and every surface.

Owns the process-wide TimerEngine and hands it to each surface's
projector.  Also wires the caller-side duties the engine leaves out:
saving todos on change, alerts on completion, and the tray menu.
"""

from __future__ import annotations

import logging

from PyQt6.QtCore import QObject, Qt
from PyQt6.QtGui import QAction, QColor, QIcon, QImage, QPainter, QPen, QPixmap
from PyQt6.QtWidgets import QApplication, QMenu, QSystemTrayIcon

from .audio.sounds import SoundManager
from .database.todos import TodoStore
from .notifier import Notifier
from .settings import Settings, load_settings, save_settings
from .surface.projector import SurfaceProjector, SurfaceView
from .timer.engine import TimerEngine
from .timer.models import TimerMode
from .ui.focus_overlay import FocusOverlay
from .ui.main_window import MainWindow

logger = logging.getLogger(__name__)


# ── tray-icon image generation ────────────────────────────────────────────


def _make_tray_icon(mode: TimerMode) -> QIcon:
    """32×32 monochrome glyph: ring when idle, disc when running,
    bars when paused, ring + dot when finished."""
    size = 64  # drawn at 2× for HiDPI
    img = QImage(size, size, QImage.Format.Format_ARGB32_Premultiplied)
    img.fill(Qt.GlobalColor.transparent)
    p = QPainter(img)
    p.setRenderHint(QPainter.RenderHint.Antialiasing)
    colour = QColor(0, 0, 0, 220)
    cx, cy, r = size // 2, size // 2, size // 2 - 4

    if mode is TimerMode.RUNNING:
        p.setPen(Qt.PenStyle.NoPen)
        p.setBrush(colour)
        p.drawEllipse(cx - r, cy - r, r * 2, r * 2)
    elif mode is TimerMode.PAUSED:
        p.setPen(Qt.PenStyle.NoPen)
        p.setBrush(colour)
        bar_w, bar_h, gap = 8, 28, 6
        y = cy - bar_h // 2
        p.drawRoundedRect(cx - gap - bar_w, y, bar_w, bar_h, 3, 3)
        p.drawRoundedRect(cx + gap, y, bar_w, bar_h, 3, 3)
    else:
        p.setPen(QPen(colour, 4))
        p.setBrush(Qt.BrushStyle.NoBrush)
        p.drawEllipse(cx - r, cy - r, r * 2, r * 2)
        if mode is TimerMode.FINISHED:
            p.setPen(Qt.PenStyle.NoPen)
            p.setBrush(colour)
            p.drawEllipse(cx - 6, cy - 6, 12, 12)

    p.end()
    img.setDevicePixelRatio(2.0)
    return QIcon(QPixmap.fromImage(img))


class BoostTimerApp(QObject):
    """Creates and connects everything; ``show()`` puts it on screen."""

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        settings: Settings | None = None,
        store: TodoStore | None = None,
        sounds: SoundManager | None = None,
        with_tray: bool = True,
    ) -> None:
        super().__init__(parent)
        self._settings = settings or load_settings()
        self._store = store or TodoStore()

        # ── engine, seeded with the saved todo list ───────────────────
        self._engine = TimerEngine(self, tick_interval=self._settings.tick_interval_ms)
        duration = self._settings.default_duration
        self._engine.reset({
            "remaining_seconds": duration,
            "initial_seconds": duration,
            "todos": self._store.load_todos(),
        })
        self._engine.todos_changed.connect(self._store.save_todos)

        # ── alerts ────────────────────────────────────────────────────
        if sounds is None:
            sounds = SoundManager(self)
        self._sounds = sounds
        self._sounds.set_volume(self._settings.sound_volume)
        self._sounds.set_enabled(self._settings.sound_enabled)
        self._notifier = Notifier(
            self._engine, self, sounds=self._sounds,
            enabled=self._settings.notifications_enabled,
        )

        # ── surfaces ──────────────────────────────────────────────────
        self._main_window = MainWindow(
            SurfaceProjector(self._engine, self, name="main"),
            default_duration=duration,
            close_to_tray=self._settings.minimize_to_tray and with_tray,
        )
        self._main_window.resize(self._settings.window_width, self._settings.window_height)
        if self._settings.window_x is not None and self._settings.window_y is not None:
            self._main_window.move(self._settings.window_x, self._settings.window_y)
        self._main_window.focus_requested.connect(self.open_focus)
        self._main_window.always_on_top_toggled.connect(self.set_always_on_top)

        self._focus: FocusOverlay | None = None

        self._tray: QSystemTrayIcon | None = None
        self._tray_projector: SurfaceProjector | None = None
        if with_tray and QSystemTrayIcon.isSystemTrayAvailable():
            self._build_tray()

        self.set_always_on_top(self._settings.always_on_top)

    # ── properties ────────────────────────────────────────────────────────

    @property
    def engine(self) -> TimerEngine:
        return self._engine

    @property
    def main_window(self) -> MainWindow:
        return self._main_window

    @property
    def focus_overlay(self) -> FocusOverlay | None:
        return self._focus

    @property
    def notifier(self) -> Notifier:
        return self._notifier

    # ── window management ─────────────────────────────────────────────────

    def show(self) -> None:
        self._main_window.show()

    def toggle_main_window(self) -> None:
        if self._main_window.isVisible():
            self._main_window.hide()
        else:
            self._main_window.show()
            self._main_window.raise_()
            self._main_window.activateWindow()

    def open_focus(self) -> None:
        """Swap the main window for the focus overlay."""
        self._main_window.hide()
        if self._focus is None:
            self._focus = FocusOverlay(SurfaceProjector(self._engine, name="focus"))
            self._focus.close_requested.connect(self.close_focus)
            if self._settings.focus_x is not None and self._settings.focus_y is not None:
                self._focus.move(self._settings.focus_x, self._settings.focus_y)
        self._focus.show()
        self._focus.raise_()

    def close_focus(self) -> None:
        """Tear the overlay down and bring the main window back."""
        if self._focus is None:
            return
        pos = self._focus.pos()
        self._settings.focus_x, self._settings.focus_y = pos.x(), pos.y()
        self._focus.projector.detach()
        self._focus.hide()
        self._focus.deleteLater()
        self._focus = None
        self._main_window.show()
        self._main_window.raise_()

    def toggle_focus(self) -> None:
        if self._focus is not None and self._focus.isVisible():
            self._focus.hide()
        else:
            self.open_focus()

    def set_always_on_top(self, on_top: bool) -> None:
        self._settings.always_on_top = bool(on_top)
        visible = self._main_window.isVisible()
        self._main_window.setWindowFlag(Qt.WindowType.WindowStaysOnTopHint, self._settings.always_on_top)
        if visible:
            # changing window flags hides the window
            self._main_window.show()
        self._main_window.set_always_on_top(self._settings.always_on_top)
        if self._tray is not None:
            self._aot_action.setChecked(self._settings.always_on_top)

    def quit(self) -> None:
        geo = self._main_window.geometry()
        self._settings.window_x, self._settings.window_y = geo.x(), geo.y()
        self._settings.window_width, self._settings.window_height = geo.width(), geo.height()
        try:
            save_settings(self._settings)
        except OSError:
            logger.exception("Could not save settings")
        self._main_window.prepare_quit()
        if self._tray is not None:
            self._tray.hide()
        app = QApplication.instance()
        if app is not None:
            app.quit()

    # ── tray ──────────────────────────────────────────────────────────────

    def _build_tray(self) -> None:
        self._tray = QSystemTrayIcon(_make_tray_icon(TimerMode.IDLE), self)
        self._tray_mode = TimerMode.IDLE
        self._tray.setToolTip("#BoostTimer")

        menu = QMenu()
        self._start_action = QAction("Start", menu)
        self._start_action.triggered.connect(self._engine.toggle)
        self._show_action = QAction("Show / Hide", menu)
        self._show_action.triggered.connect(self.toggle_main_window)
        self._focus_action = QAction("Focus Mode", menu)
        self._focus_action.triggered.connect(self.toggle_focus)
        self._aot_action = QAction("Always on Top", menu)
        self._aot_action.setCheckable(True)
        self._aot_action.toggled.connect(self.set_always_on_top)
        quit_action = QAction("Quit", menu)
        quit_action.triggered.connect(self.quit)

        menu.addAction(self._start_action)
        menu.addAction(self._show_action)
        menu.addAction(self._focus_action)
        menu.addAction(self._aot_action)
        menu.addSeparator()
        menu.addAction(quit_action)
        self._tray_menu = menu
        self._tray.setContextMenu(menu)
        self._tray.activated.connect(self._on_tray_activated)

        self._notifier.set_tray(self._tray)

        # the tray is a surface too
        self._tray_projector = SurfaceProjector(self._engine, self, name="tray")
        self._tray_projector.view_changed.connect(self._render_tray)
        self._tray_projector.attach()
        self._tray.show()

    def _render_tray(self, view: SurfaceView) -> None:
        self._tray.setToolTip(f"⏱ {view.time_text}")
        if view.mode is not self._tray_mode:
            self._tray_mode = view.mode
            self._tray.setIcon(_make_tray_icon(view.mode))
        self._start_action.setText(view.start_label)

    def _on_tray_activated(self, reason: QSystemTrayIcon.ActivationReason) -> None:
        if reason == QSystemTrayIcon.ActivationReason.Trigger:
            self.toggle_main_window()
