"""Tests for the PyQt6 surfaces and the application shell.

Covers:
- MainWindow rendering, Start/Pause from the duration inputs, todo form
- Reordering through merge_state
- FocusOverlay clock + active task line
- BoostTimerApp focus swap, todo persistence and reload
"""

from __future__ import annotations

import pytest

from boosttimer.app import BoostTimerApp
from boosttimer.audio.sounds import SoundManager
from boosttimer.database.todos import TodoStore
from boosttimer.settings import Settings
from boosttimer.surface.projector import SurfaceProjector
from boosttimer.timer.models import SchedulingMode, TimerMode, Todo
from boosttimer.ui.focus_overlay import FocusOverlay
from boosttimer.ui.main_window import MainWindow

from helpers import queue_snapshot, tick


@pytest.fixture
def window(engine):
    win = MainWindow(SurfaceProjector(engine, name="main"), default_duration=90)
    yield win
    win.prepare_quit()
    win.close()


@pytest.fixture
def app(qapp, tmp_path, monkeypatch):
    monkeypatch.setattr("boosttimer.settings.SETTINGS_PATH", tmp_path / "settings.json")
    monkeypatch.setattr("boosttimer.settings.APP_SUPPORT_DIR", tmp_path)
    shell = BoostTimerApp(
        settings=Settings(default_minutes=10),
        sounds=SoundManager(sounds_dir=tmp_path / "sounds"),
        with_tray=False,
    )
    yield shell
    shell.close_focus()
    shell.main_window.prepare_quit()
    shell.main_window.close()


# ═══════════════════════════════════════════════════════════════════════
#  MAIN WINDOW
# ═══════════════════════════════════════════════════════════════════════


class TestMainWindow:

    def test_duration_inputs(self, window):
        assert window.duration_inputs() == 90
        window.set_duration_inputs(3725)
        assert window.duration_inputs() == 3725

    def test_start_button_runs_countdown(self, window, engine):
        window._start_pause_btn.click()
        assert engine.mode == TimerMode.RUNNING
        assert engine.get_state().remaining_seconds == 90
        assert window._start_pause_btn.text() == "Pause"

    def test_display_follows_ticks(self, window, engine):
        window._start_pause_btn.click()
        tick(engine, 2)
        assert window._display.text() == "00:01:28"

    def test_start_button_pauses(self, window, engine):
        window._start_pause_btn.click()
        window._start_pause_btn.click()
        assert engine.mode == TimerMode.PAUSED
        assert window._start_pause_btn.text() == "Start"

    def test_reset_uses_inputs(self, window, engine):
        window._start_pause_btn.click()
        tick(engine, 5)
        window.set_duration_inputs(30)
        window._reset_btn.click()
        state = engine.get_state()
        assert state.mode == TimerMode.IDLE
        assert state.remaining_seconds == 30

    def test_add_todo_from_form(self, window, engine):
        window._todo_title.setText("Write")
        window._todo_estimate.setValue(2)
        window._add_btn.click()
        todos = engine.get_state().todos
        assert [(t.title, t.estimate_seconds) for t in todos] == [("Write", 120)]
        assert window._todo_title.text() == ""
        assert window._todo_list.count() == 1

    def test_add_todo_in_hours(self, window, engine):
        window._todo_title.setText("Deep work")
        window._todo_estimate.setValue(2)
        window._todo_unit.setCurrentIndex(1)
        window._add_btn.click()
        assert engine.get_state().todos[0].estimate_seconds == 2 * 3600

    def test_start_with_todos_runs_queue(self, window, engine):
        engine.add_todo("A", 60)
        window._start_pause_btn.click()
        assert engine.get_state().scheduling_mode == SchedulingMode.TODO_QUEUE

    def test_search_filters_list(self, window, engine):
        engine.add_todo("Write report", 60)
        engine.add_todo("Read mail", 60)
        window._search.setText("mail")
        assert window._todo_list.count() == 1

    def test_apply_order_reorders_engine(self, window, engine):
        a = engine.add_todo("A", 60)
        b = engine.add_todo("B", 60)
        window._apply_order([b.id, a.id])
        assert [t.title for t in engine.get_state().todos] == ["B", "A"]

    def test_hidden_window_reconciles_on_show(self, window, engine):
        window.show()
        window._start_pause_btn.click()
        window.hide()
        tick(engine, 7)
        assert window._display.text() == "00:01:30"
        window.show()
        assert window._display.text() == "00:01:23"

    def test_completion_prompts_next_todo(self, window, engine):
        engine.start(queue_snapshot(1, 2))
        tick(engine)
        assert window.status_text == '"Task 1" finished. Next up: Task 2'
        tick(engine, 2)
        assert window.status_text == "All tasks done."

    def test_countdown_completion_message_cleared_on_start(self, window, engine):
        engine.start({"remaining_seconds": 1})
        tick(engine)
        assert window.status_text == "Time's up."
        window._start_pause_btn.click()
        assert window.status_text == ""

    def test_close_hides_to_tray(self, engine):
        win = MainWindow(SurfaceProjector(engine), close_to_tray=True)
        win.show()
        win.close()
        assert not win.isVisible()
        assert win.projector.is_attached
        win.show()
        win.prepare_quit()
        win.close()
        assert not win.projector.is_attached


# ═══════════════════════════════════════════════════════════════════════
#  FOCUS OVERLAY
# ═══════════════════════════════════════════════════════════════════════


class TestFocusOverlay:

    def test_late_attach_shows_current_time(self, engine):
        engine.start({"remaining_seconds": 600})
        tick(engine, 10)
        overlay = FocusOverlay(SurfaceProjector(engine, name="focus"))
        assert overlay.time_text == "00:09:50"

    def test_shows_active_todo(self, engine):
        overlay = FocusOverlay(SurfaceProjector(engine, name="focus"))
        engine.start(queue_snapshot(2, 5))
        assert overlay.todo_text == "Task 1"
        tick(engine, 2)
        assert overlay.todo_text == "Task 2"

    def test_no_todo_line_for_plain_countdown(self, engine):
        overlay = FocusOverlay(SurfaceProjector(engine, name="focus"))
        engine.start({"remaining_seconds": 60})
        assert overlay.todo_text == ""

    def test_play_button_toggles(self, engine):
        overlay = FocusOverlay(SurfaceProjector(engine, name="focus"))
        engine.start({"remaining_seconds": 60})
        overlay._play_btn.click()
        assert engine.mode == TimerMode.PAUSED


# ═══════════════════════════════════════════════════════════════════════
#  APPLICATION SHELL
# ═══════════════════════════════════════════════════════════════════════


class TestApp:

    def test_engine_seeded_from_settings(self, app):
        state = app.engine.get_state()
        assert state.remaining_seconds == 600
        assert state.mode == TimerMode.IDLE

    def test_focus_swaps_windows(self, app):
        app.show()
        app.open_focus()
        assert not app.main_window.isVisible()
        assert app.focus_overlay is not None
        assert app.focus_overlay.isVisible()
        app.close_focus()
        assert app.focus_overlay is None
        assert app.main_window.isVisible()

    def test_focus_cycles_do_not_accumulate_projectors(self, app):
        app.show()
        before = len(app.findChildren(SurfaceProjector))
        for _ in range(3):
            app.open_focus()
            assert app.focus_overlay.projector.parent() is app.focus_overlay
            app.close_focus()
        assert len(app.findChildren(SurfaceProjector)) == before

    def test_focus_overlay_follows_engine_while_main_hidden(self, app):
        app.show()
        app.engine.start({"remaining_seconds": 60})
        app.open_focus()
        tick(app.engine, 5)
        assert app.focus_overlay.time_text == "00:00:55"
        app.close_focus()
        assert app.main_window._display.text() == "00:00:55"

    def test_todos_are_saved(self, app):
        app.engine.add_todo("Persist me", 60)
        assert [t.title for t in TodoStore().load_todos()] == ["Persist me"]

    def test_saved_todos_are_loaded(self, qapp, tmp_path):
        TodoStore().save_todos([Todo("Saved", 60, id="s1")])
        shell = BoostTimerApp(
            settings=Settings(),
            sounds=SoundManager(sounds_dir=tmp_path),
            with_tray=False,
        )
        try:
            assert shell.engine.get_state().todos == (Todo("Saved", 60, id="s1"),)
        finally:
            shell.main_window.prepare_quit()
            shell.main_window.close()
