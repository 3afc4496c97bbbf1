"""Per-surface view of the shared TimerEngine.

Each window (main window, focus overlay, tray) owns one projector.  The
projector never keeps its own copy of the countdown: every engine
notification replaces the view wholesale, and a surface coming back from
hidden re-reads ``engine.get_state()`` instead of guessing how much time
passed while it was away.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Mapping

from PyQt6.QtCore import QObject, pyqtSignal

from ..timer.engine import TimerEngine
from ..timer.models import (
    SchedulingMode,
    TimerMode,
    TimerSnapshot,
    Todo,
    first_pending,
)

logger = logging.getLogger(__name__)


class CompletionKind(Enum):
    TODO = "todo"
    QUEUE = "queue"
    TIMER = "timer"


@dataclass(frozen=True)
class CompletionEvent:
    kind: CompletionKind
    title: str = ""


@dataclass(frozen=True)
class SurfaceView:
    """Everything a surface needs to paint itself, derived from a snapshot."""

    time_text: str
    mode: TimerMode
    scheduling_mode: SchedulingMode
    remaining_seconds: int
    total_remaining: int
    todos: tuple[Todo, ...]
    active_todo_id: str | None
    active_title: str | None
    percent: int

    @property
    def task_count(self) -> int:
        return len(self.todos)

    @property
    def start_label(self) -> str:
        return "Pause" if self.mode is TimerMode.RUNNING else "Start"

    @classmethod
    def from_snapshot(cls, snap: TimerSnapshot) -> SurfaceView:
        active = snap.active_todo
        return cls(
            time_text=snap.time_text,
            mode=snap.mode,
            scheduling_mode=snap.scheduling_mode,
            remaining_seconds=snap.remaining_seconds,
            total_remaining=snap.total_remaining,
            todos=snap.todos,
            active_todo_id=snap.active_todo_id,
            active_title=active.title if active else None,
            percent=snap.percent_complete,
        )


def filter_todos(todos: Iterable[Todo], query: str) -> list[Todo]:
    """Case-insensitive title search used by the todo list filter box."""
    q = (query or "").strip().lower()
    if not q:
        return list(todos)
    return [t for t in todos if q in t.title.lower()]


class SurfaceProjector(QObject):
    """Bridges one UI surface to the engine.

    Signals
    -------
    view_changed(view: SurfaceView)
        Emitted on attach, on every engine update while listening, and on
        visibility restore.
    completed(event: CompletionEvent)
        Relays the engine's completion signals to this surface.
    """

    view_changed = pyqtSignal(object)
    completed = pyqtSignal(object)

    def __init__(
        self,
        engine: TimerEngine,
        parent: QObject | None = None,
        *,
        name: str = "surface",
    ) -> None:
        super().__init__(parent)
        self._engine = engine
        self._name = name
        self._attached = False
        self._listening = False
        self._hidden = False
        self._view: SurfaceView | None = None

    # ── properties ────────────────────────────────────────────────────────

    @property
    def engine(self) -> TimerEngine:
        return self._engine

    @property
    def name(self) -> str:
        return self._name

    @property
    def is_attached(self) -> bool:
        return self._attached

    @property
    def is_listening(self) -> bool:
        return self._listening

    @property
    def is_hidden(self) -> bool:
        return self._hidden

    @property
    def view(self) -> SurfaceView | None:
        """The last view rendered; None before the first attach."""
        return self._view

    # ── lifecycle ─────────────────────────────────────────────────────────

    def attach(self) -> None:
        """Subscribe and render the engine's current state right away."""
        if self._attached:
            return
        self._attached = True
        self._hidden = False
        self._connect()
        logger.debug("Surface %s attached", self._name)
        self._pull()

    def detach(self) -> None:
        """Unsubscribe.  Engine state is not touched."""
        if not self._attached:
            return
        self._disconnect()
        self._attached = False
        logger.debug("Surface %s detached", self._name)

    def on_visibility_hidden(self) -> None:
        """Stop listening while nobody can see this surface."""
        self._hidden = True
        self._disconnect()

    def on_visibility_restored(self) -> None:
        """Throw away the old view and re-read the engine."""
        self._hidden = False
        if self._attached:
            self._connect()
        self._pull()

    # ── commands ──────────────────────────────────────────────────────────

    def start(self, snapshot: Mapping[str, Any] | TimerSnapshot | None = None) -> bool:
        return self._engine.start(snapshot)

    def pause(self) -> bool:
        return self._engine.pause()

    def reset(self, snapshot: Mapping[str, Any] | TimerSnapshot | None = None) -> bool:
        return self._engine.reset(snapshot)

    def toggle(self) -> bool:
        return self._engine.toggle()

    def merge_state(self, partial: Mapping[str, Any]) -> bool:
        return self._engine.merge_state(partial)

    def add_todo(self, title: str, estimate_seconds: int) -> Todo | None:
        return self._engine.add_todo(title, estimate_seconds)

    def edit_todo(
        self,
        todo_id: str,
        title: str | None = None,
        estimate_seconds: int | None = None,
    ) -> bool:
        return self._engine.edit_todo(todo_id, title, estimate_seconds)

    def remove_todo(self, todo_id: str) -> bool:
        return self._engine.remove_todo(todo_id)

    def complete_todo(self, todo_id: str) -> bool:
        return self._engine.complete_todo(todo_id)

    def move_todo(self, todo_id: str, index: int) -> bool:
        return self._engine.move_todo(todo_id, index)

    def clear_todos(self) -> None:
        self._engine.clear_todos()

    def select_todo(self, todo_id: str) -> bool:
        return self._engine.select_todo(todo_id)

    def start_countdown(self, seconds: int) -> bool:
        """Fresh single countdown of *seconds*, keeping the todo list."""
        state = self._engine.get_state()
        return self._engine.start({
            "remaining_seconds": seconds,
            "initial_seconds": seconds,
            "scheduling_mode": SchedulingMode.SINGLE_DURATION,
            "todos": state.todos,
            "active_todo_id": None,
        })

    def start_queue(self) -> bool:
        """Run through the todo list head-first."""
        state = self._engine.get_state()
        head = first_pending(state.todos)
        return self._engine.start({
            "remaining_seconds": state.remaining_seconds,
            "initial_seconds": state.total_remaining,
            "scheduling_mode": SchedulingMode.TODO_QUEUE,
            "todos": state.todos,
            "active_todo_id": head.id if head else None,
        })

    def start_or_pause(self, seconds: int) -> bool:
        """The Start/Pause button.

        Pauses a running timer.  A paused run resumes where it stopped.
        Otherwise the queue runs when there are todos, else a countdown
        of *seconds* from the duration inputs.
        """
        state = self._engine.get_state()
        if state.mode is TimerMode.RUNNING:
            return self._engine.pause()
        if state.mode is TimerMode.PAUSED:
            return self._engine.start()
        if state.scheduling_mode is SchedulingMode.SINGLE_DURATION and state.active_todo_id:
            # a selected todo arms its own countdown
            return self._engine.start()
        if state.todos:
            return self.start_queue()
        return self.start_countdown(seconds)

    # ── internal ──────────────────────────────────────────────────────────

    def _connect(self) -> None:
        if self._listening:
            return
        self._engine.state_changed.connect(self._on_state_changed)
        self._engine.todo_completed.connect(self._on_todo_completed)
        self._engine.queue_completed.connect(self._on_queue_completed)
        self._engine.timer_completed.connect(self._on_timer_completed)
        self._listening = True

    def _disconnect(self) -> None:
        if not self._listening:
            return
        self._engine.state_changed.disconnect(self._on_state_changed)
        self._engine.todo_completed.disconnect(self._on_todo_completed)
        self._engine.queue_completed.disconnect(self._on_queue_completed)
        self._engine.timer_completed.disconnect(self._on_timer_completed)
        self._listening = False

    def _pull(self) -> None:
        self._render(self._engine.get_state())

    def _render(self, snap: TimerSnapshot) -> None:
        self._view = SurfaceView.from_snapshot(snap)
        self.view_changed.emit(self._view)

    def _on_state_changed(self, snap: TimerSnapshot) -> None:
        self._render(snap)

    def _on_todo_completed(self, title: str) -> None:
        self.completed.emit(CompletionEvent(CompletionKind.TODO, title))

    def _on_queue_completed(self) -> None:
        self.completed.emit(CompletionEvent(CompletionKind.QUEUE))

    def _on_timer_completed(self) -> None:
        self.completed.emit(CompletionEvent(CompletionKind.TIMER))
