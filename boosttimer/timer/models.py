"""Value types for the BoostTimer engine.

``Todo`` and ``TimerSnapshot`` are frozen: the engine hands out copies and
replaces entries instead of mutating them, so a snapshot taken by one
surface can never change under another.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Mapping

logger = logging.getLogger(__name__)


# ── enums ─────────────────────────────────────────────────────────────────


class TimerMode(Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    FINISHED = "finished"


class SchedulingMode(Enum):
    SINGLE_DURATION = "single_duration"
    TODO_QUEUE = "todo_queue"


# ── constants ─────────────────────────────────────────────────────────────

MAX_ESTIMATE_SECONDS = 9999 * 60  # UI accepts up to 9999 minutes per task

SNAPSHOT_FIELDS = (
    "remaining_seconds",
    "initial_seconds",
    "scheduling_mode",
    "todos",
    "active_todo_id",
)


# ── helpers ───────────────────────────────────────────────────────────────


def format_hms(seconds: int) -> str:
    """``3725`` → ``"01:02:05"``.  Negative input reads as zero."""
    total = max(0, int(seconds))
    hrs = total // 3600
    mins = (total % 3600) // 60
    secs = total % 60
    return f"{hrs:02d}:{mins:02d}:{secs:02d}"


def new_todo_id() -> str:
    return uuid.uuid4().hex


def coerce_seconds(value: Any) -> int:
    """Non-negative int from whatever a caller passed; junk becomes 0."""
    if isinstance(value, bool):
        return 0
    try:
        return max(0, int(value))
    except (TypeError, ValueError, OverflowError):
        return 0


def coerce_scheduling_mode(value: Any) -> SchedulingMode:
    if isinstance(value, SchedulingMode):
        return value
    if isinstance(value, bool):
        # legacy ``queueMode`` flag
        return SchedulingMode.TODO_QUEUE if value else SchedulingMode.SINGLE_DURATION
    try:
        return SchedulingMode(value)
    except (TypeError, ValueError):
        return SchedulingMode.SINGLE_DURATION


# ── todo ──────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Todo:
    """One queued task.  ``estimate_seconds`` is the time *left* on it."""

    title: str
    estimate_seconds: int = 0
    id: str = field(default_factory=new_todo_id)

    def with_estimate(self, seconds: int) -> Todo:
        return Todo(title=self.title, estimate_seconds=max(0, seconds), id=self.id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "estimate_seconds": self.estimate_seconds,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Todo | None:
        """Build from a stored record; returns None if it has no title.

        Older records may carry ``estimateSeconds`` and a ``completed`` flag;
        the flag is ignored because completed todos are deleted.
        """
        title = str(data.get("title") or "").strip()
        if not title:
            return None
        estimate = data.get("estimate_seconds", data.get("estimateSeconds"))
        todo_id = data.get("id")
        return cls(
            title=title,
            estimate_seconds=coerce_seconds(estimate),
            id=str(todo_id) if todo_id else new_todo_id(),
        )


def coerce_todos(items: Iterable[Any] | None) -> tuple[Todo, ...]:
    if not items or not isinstance(items, Iterable) or isinstance(items, (str, bytes, Mapping)):
        return ()
    todos: list[Todo] = []
    seen: set[str] = set()
    for item in items:
        if isinstance(item, Todo):
            todo = item
        elif isinstance(item, Mapping):
            todo = Todo.from_dict(item)
        else:
            todo = None
        if todo is None:
            logger.debug("Dropping malformed todo entry: %r", item)
            continue
        if todo.id in seen:
            # ids must stay unique; give the duplicate a fresh one
            todo = Todo(title=todo.title, estimate_seconds=todo.estimate_seconds)
        seen.add(todo.id)
        todos.append(todo)
    return tuple(todos)


def total_remaining(todos: Iterable[Todo]) -> int:
    return sum(max(0, t.estimate_seconds) for t in todos)


def first_pending(todos: Iterable[Todo]) -> Todo | None:
    """First todo (in queue order) that still has time left."""
    for todo in todos:
        if todo.estimate_seconds > 0:
            return todo
    return None


def snapshot_fields(data: Mapping[str, Any] | TimerSnapshot | None) -> dict[str, Any]:
    """Normalise a caller-supplied snapshot into engine fields.

    Omitted or malformed values fall back to 0 / ``()`` / None, and an
    ``active_todo_id`` that names no todo in ``todos`` is dropped.
    """
    if isinstance(data, TimerSnapshot):
        data = {name: getattr(data, name) for name in SNAPSHOT_FIELDS}
    data = data or {}

    if "scheduling_mode" in data:
        mode = coerce_scheduling_mode(data["scheduling_mode"])
    else:
        mode = coerce_scheduling_mode(bool(data.get("queue_mode", False)))

    todos = coerce_todos(data.get("todos"))
    active = data.get("active_todo_id")
    if active is not None and not any(t.id == active for t in todos):
        active = None

    return {
        "remaining_seconds": coerce_seconds(data.get("remaining_seconds")),
        "initial_seconds": coerce_seconds(data.get("initial_seconds")),
        "scheduling_mode": mode,
        "todos": todos,
        "active_todo_id": active,
    }


# ── snapshot ──────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class TimerSnapshot:
    """Read-only copy of the engine state at one instant."""

    mode: TimerMode = TimerMode.IDLE
    scheduling_mode: SchedulingMode = SchedulingMode.SINGLE_DURATION
    remaining_seconds: int = 0
    initial_seconds: int = 0
    todos: tuple[Todo, ...] = ()
    active_todo_id: str | None = None
    time_text: str = "00:00:00"

    @property
    def total_remaining(self) -> int:
        """Sum of every todo's remaining estimate."""
        return total_remaining(self.todos)

    @property
    def display_seconds(self) -> int:
        """The number the clock shows for the live countdown."""
        if self.scheduling_mode is SchedulingMode.TODO_QUEUE:
            return self.total_remaining
        return self.remaining_seconds

    @property
    def active_todo(self) -> Todo | None:
        if self.active_todo_id is None:
            return None
        for todo in self.todos:
            if todo.id == self.active_todo_id:
                return todo
        return None

    @property
    def is_running(self) -> bool:
        return self.mode is TimerMode.RUNNING

    @property
    def percent_complete(self) -> int:
        """0 → 100 progress through the current run."""
        current = self.display_seconds
        denom = self.initial_seconds if self.initial_seconds > 0 else current
        if denom <= 0:
            # an emptied queue is done; an unset countdown has not begun
            return 100 if self.scheduling_mode is SchedulingMode.TODO_QUEUE else 0
        pct = round((1 - current / denom) * 100)
        return max(0, min(100, pct))
