"""Countdown / todo-queue state machine for BoostTimer.

States
------
IDLE       Armed with a duration or a queue, not counting.
RUNNING    The tick driver fires once a second.
PAUSED     Frozen mid-run; ``start()`` with no snapshot resumes.
FINISHED   The countdown or the whole queue reached zero.

Transitions
-----------
IDLE | PAUSED | FINISHED → RUNNING    (start)
RUNNING → PAUSED                      (pause)
RUNNING → FINISHED                    (countdown / queue reaches 0)
Any → IDLE                            (reset)

Scheduling
----------
SINGLE_DURATION   ``remaining_seconds`` counts down.  When it hits zero the
                  todo tied to the countdown (if any) is deleted.
TODO_QUEUE        The first todo with time left is decremented.  A todo
                  that reaches zero is deleted (deletion *is* completion)
                  and the clock shows the sum of what is left.

Zero frame
----------
A single countdown emits its ``00:00:00`` frame while still RUNNING and
finishes in that same tick.  The queue never shows a running zero frame:
the tick that empties it goes straight to FINISHED.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from .models import (
    MAX_ESTIMATE_SECONDS,
    SNAPSHOT_FIELDS,
    SchedulingMode,
    TimerMode,
    TimerSnapshot,
    Todo,
    coerce_seconds,
    first_pending,
    format_hms,
    snapshot_fields,
    total_remaining,
)

logger = logging.getLogger(__name__)

TICK_INTERVAL_MS = 1000


# ── engine ────────────────────────────────────────────────────────────────


class TimerEngine(QObject):
    """Owns the one authoritative timer state and its tick driver.

    Every surface talks to the same instance.  Nothing here does I/O;
    persistence and notifications hang off the signals.

    Signals
    -------
    state_changed(snapshot: TimerSnapshot)
        Emitted once per tick and after every mutation.
    todo_completed(title: str)
        A queued todo ran out of time and was removed.
    queue_completed()
        The todo queue is exhausted.
    timer_completed()
        A single-duration countdown reached zero.
    todos_changed(todos: tuple[Todo, ...])
        The todo sequence changed (ticks included).  Hook persistence here.
    """

    state_changed = pyqtSignal(object)
    todo_completed = pyqtSignal(str)
    queue_completed = pyqtSignal()
    timer_completed = pyqtSignal()
    todos_changed = pyqtSignal(object)

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        tick_interval: int = TICK_INTERVAL_MS,
    ) -> None:
        super().__init__(parent)

        # ── state ─────────────────────────────────────────────────────
        self._mode: TimerMode = TimerMode.IDLE
        self._scheduling: SchedulingMode = SchedulingMode.SINGLE_DURATION
        self._remaining: int = 0
        self._initial: int = 0
        self._todos: list[Todo] = []
        self._active_id: str | None = None
        self._time_text: str = format_hms(0)

        # ── tick driver ───────────────────────────────────────────────
        self._driver = QTimer(self)
        self._driver.setInterval(max(1, int(tick_interval)))
        self._driver.timeout.connect(self._on_tick)

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC PROPERTIES
    # ══════════════════════════════════════════════════════════════════

    @property
    def mode(self) -> TimerMode:
        return self._mode

    @property
    def scheduling_mode(self) -> SchedulingMode:
        return self._scheduling

    @property
    def is_running(self) -> bool:
        return self._mode is TimerMode.RUNNING

    @property
    def is_ticking(self) -> bool:
        """True while the tick driver is armed."""
        return self._driver.isActive()

    @property
    def time_text(self) -> str:
        """Last formatted ``HH:MM:SS``, what a late surface should show."""
        return self._time_text

    @property
    def tick_interval(self) -> int:
        return self._driver.interval()

    @tick_interval.setter
    def tick_interval(self, ms: int) -> None:
        self._driver.setInterval(max(1, int(ms)))

    def get_state(self) -> TimerSnapshot:
        return TimerSnapshot(
            mode=self._mode,
            scheduling_mode=self._scheduling,
            remaining_seconds=self._remaining,
            initial_seconds=self._initial,
            todos=tuple(self._todos),
            active_todo_id=self._active_id,
            time_text=self._time_text,
        )

    # ══════════════════════════════════════════════════════════════════
    #  CONTROLS
    # ══════════════════════════════════════════════════════════════════

    def start(self, snapshot: Mapping[str, Any] | TimerSnapshot | None = None) -> bool:
        """Adopt *snapshot* and begin counting.

        ``None`` keeps the current fields, which is how a paused run
        resumes.  Returns False (and changes nothing) while already
        running, or when the snapshot has nothing to count down.
        """
        if self._mode is TimerMode.RUNNING:
            logger.debug("start() ignored: already running")
            return False

        fields = snapshot_fields(self.get_state() if snapshot is None else snapshot)
        if fields["scheduling_mode"] is SchedulingMode.TODO_QUEUE:
            head = first_pending(fields["todos"])
            if head is None:
                logger.debug("start() ignored: queue has no pending todos")
                return False
            fields["active_todo_id"] = head.id
        elif fields["remaining_seconds"] <= 0:
            logger.debug("start() ignored: nothing left to count down")
            return False

        self._driver.stop()
        self._adopt(fields)
        self._mode = TimerMode.RUNNING
        self._driver.start()
        logger.info(
            "Timer started (%s, %s)",
            self._scheduling.value, format_hms(self._display_seconds()),
        )
        self._emit_state()
        return True

    def pause(self) -> bool:
        """Freeze a running countdown.  No-op unless RUNNING."""
        if self._mode is not TimerMode.RUNNING:
            return False
        self._driver.stop()
        self._mode = TimerMode.PAUSED
        logger.info("Timer paused at %s", self._time_text)
        self._emit_state()
        return True

    def reset(self, snapshot: Mapping[str, Any] | TimerSnapshot | None = None) -> bool:
        """Stop the driver, go IDLE and adopt *snapshot* (None keeps fields)."""
        self._driver.stop()
        fields = snapshot_fields(self.get_state() if snapshot is None else snapshot)
        todos_before = tuple(self._todos)
        self._adopt(fields)
        self._mode = TimerMode.IDLE
        logger.info("Timer reset to %s", format_hms(self._display_seconds()))
        if tuple(self._todos) != todos_before:
            self.todos_changed.emit(tuple(self._todos))
        self._emit_state()
        return True

    def toggle(self) -> bool:
        """Pause if running, otherwise resume with the current state."""
        if self._mode is TimerMode.RUNNING:
            return self.pause()
        return self.start()

    def merge_state(self, partial: Mapping[str, Any]) -> bool:
        """Overwrite the given fields in place; mode and driver are untouched.

        Lets a surface edit the todo list mid-run so the next tick sees it.
        """
        known = {k: v for k, v in partial.items() if k in SNAPSHOT_FIELDS}
        ignored = set(partial) - set(known)
        if ignored:
            logger.warning("merge_state() ignoring fields: %s", sorted(ignored))
        if not known:
            return False

        current = {name: getattr(self.get_state(), name) for name in SNAPSHOT_FIELDS}
        current.update(known)
        # a caller that swaps todos without naming the active one keeps it
        # only if it still exists
        fields = snapshot_fields(current)
        todos_before = tuple(self._todos)
        self._adopt(fields)
        self._refresh_queue_head()
        if tuple(self._todos) != todos_before:
            self.todos_changed.emit(tuple(self._todos))
        self._emit_state()
        return True

    # ══════════════════════════════════════════════════════════════════
    #  TODO COMMANDS
    # ══════════════════════════════════════════════════════════════════

    def add_todo(self, title: str, estimate_seconds: int) -> Todo | None:
        """Append a todo.  Blank titles and non-positive estimates are refused."""
        title = (title or "").strip()
        seconds = coerce_seconds(estimate_seconds)
        if not title or seconds <= 0:
            return None
        todo = Todo(title=title, estimate_seconds=min(seconds, MAX_ESTIMATE_SECONDS))
        self._todos.append(todo)
        logger.debug("Added todo %r (%s)", todo.title, format_hms(todo.estimate_seconds))
        self._todos_mutated()
        return todo

    def edit_todo(
        self,
        todo_id: str,
        title: str | None = None,
        estimate_seconds: int | None = None,
    ) -> bool:
        idx = self._index_of(todo_id)
        if idx is None:
            return False
        todo = self._todos[idx]
        new_title = (title or "").strip() or todo.title
        new_estimate = todo.estimate_seconds
        if estimate_seconds is not None:
            new_estimate = max(1, min(coerce_seconds(estimate_seconds), MAX_ESTIMATE_SECONDS))
        self._todos[idx] = Todo(title=new_title, estimate_seconds=new_estimate, id=todo.id)

        if todo_id == self._active_id and self._scheduling is SchedulingMode.SINGLE_DURATION:
            # the countdown is this todo's estimate; re-arm it from scratch
            self._driver.stop()
            self._mode = TimerMode.IDLE
            self._remaining = new_estimate
            self._initial = new_estimate
        self._todos_mutated()
        return True

    def remove_todo(self, todo_id: str) -> bool:
        idx = self._index_of(todo_id)
        if idx is None:
            return False
        del self._todos[idx]
        if todo_id == self._active_id:
            # deleting the todo being timed stops the run in either mode
            self._driver.stop()
            self._mode = TimerMode.IDLE
            self._active_id = None
            if self._scheduling is SchedulingMode.TODO_QUEUE:
                self._initial = total_remaining(self._todos)
            logger.info("Active todo deleted; timer reset")
        self._refresh_queue_head()
        self._todos_mutated()
        return True

    def complete_todo(self, todo_id: str) -> bool:
        """Manual "Done": delete the todo, pausing if it was being timed."""
        idx = self._index_of(todo_id)
        if idx is None:
            return False
        title = self._todos[idx].title
        del self._todos[idx]
        if todo_id == self._active_id:
            if self._mode is TimerMode.RUNNING:
                self._driver.stop()
                self._mode = TimerMode.PAUSED
            self._active_id = None
        logger.info("Todo %r marked done", title)
        self._todos_mutated()
        return True

    def move_todo(self, todo_id: str, index: int) -> bool:
        """Reorder: place the todo at *index* (clamped to the list)."""
        idx = self._index_of(todo_id)
        if idx is None:
            return False
        todo = self._todos.pop(idx)
        index = max(0, min(int(index), len(self._todos)))
        self._todos.insert(index, todo)
        if idx == index:
            return True
        self._refresh_queue_head()
        self._todos_mutated()
        return True

    def clear_todos(self) -> None:
        self._todos.clear()
        self._active_id = None
        self._todos_mutated()

    def select_todo(self, todo_id: str) -> bool:
        """Arm a single countdown for one todo's estimate (engine goes IDLE)."""
        idx = self._index_of(todo_id)
        if idx is None:
            return False
        todo = self._todos[idx]
        self._driver.stop()
        self._mode = TimerMode.IDLE
        self._scheduling = SchedulingMode.SINGLE_DURATION
        self._active_id = todo.id
        self._remaining = todo.estimate_seconds
        self._initial = todo.estimate_seconds
        self._emit_state()
        return True

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL: TICK
    # ══════════════════════════════════════════════════════════════════

    def _on_tick(self) -> None:
        if self._mode is not TimerMode.RUNNING:
            # stale driver; only a running engine may tick
            self._driver.stop()
            return
        if self._scheduling is SchedulingMode.TODO_QUEUE:
            self._tick_queue()
        else:
            self._tick_countdown()

    def _tick_queue(self) -> None:
        head = first_pending(self._todos)
        if head is None:
            self._finish_queue()
            return

        idx = self._todos.index(head)
        todo = head.with_estimate(head.estimate_seconds - 1)
        if todo.estimate_seconds <= 0:
            del self._todos[idx]
            logger.info("Todo %r complete", todo.title)
            self.todos_changed.emit(tuple(self._todos))
            self.todo_completed.emit(todo.title)
        else:
            self._todos[idx] = todo
            self.todos_changed.emit(tuple(self._todos))

        nxt = first_pending(self._todos)
        self._active_id = nxt.id if nxt else None

        if total_remaining(self._todos) <= 0:
            self._finish_queue()
            return
        self._emit_state()

    def _tick_countdown(self) -> None:
        if self._remaining <= 0:
            self._finish_countdown()
            return
        self._remaining -= 1
        self._emit_state()
        if self._remaining == 0:
            self._finish_countdown()

    def _finish_queue(self) -> None:
        self._driver.stop()
        self._mode = TimerMode.FINISHED
        self._active_id = None
        logger.info("Todo queue complete")
        self.queue_completed.emit()
        self._emit_state()

    def _finish_countdown(self) -> None:
        self._driver.stop()
        self._mode = TimerMode.FINISHED
        logger.info("Countdown complete")
        self.timer_completed.emit()

        if self._active_id is not None:
            idx = self._index_of(self._active_id)
            self._active_id = None
            if idx is not None:
                done = self._todos.pop(idx)
                logger.info("Todo %r auto-completed with its countdown", done.title)
                self.todos_changed.emit(tuple(self._todos))
        self._emit_state()

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL: STATE PLUMBING
    # ══════════════════════════════════════════════════════════════════

    def _adopt(self, fields: Mapping[str, Any]) -> None:
        self._remaining = fields["remaining_seconds"]
        self._initial = fields["initial_seconds"]
        self._scheduling = fields["scheduling_mode"]
        self._todos = list(fields["todos"])
        self._active_id = fields["active_todo_id"]

    def _index_of(self, todo_id: str | None) -> int | None:
        for idx, todo in enumerate(self._todos):
            if todo.id == todo_id:
                return idx
        return None

    def _refresh_queue_head(self) -> None:
        if self._mode is TimerMode.RUNNING and self._scheduling is SchedulingMode.TODO_QUEUE:
            head = first_pending(self._todos)
            self._active_id = head.id if head else None

    def _display_seconds(self) -> int:
        if self._scheduling is SchedulingMode.TODO_QUEUE:
            return total_remaining(self._todos)
        return self._remaining

    def _todos_mutated(self) -> None:
        self.todos_changed.emit(tuple(self._todos))
        self._emit_state()

    def _emit_state(self) -> None:
        self._time_text = format_hms(self._display_seconds())
        self.state_changed.emit(self.get_state())
