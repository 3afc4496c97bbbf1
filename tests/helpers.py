"""Shared test helpers for BoostTimer."""

from boosttimer.timer.engine import TimerEngine
from boosttimer.timer.models import SchedulingMode, Todo


class SignalCollector:
    """Utility to capture pyqtSignal emissions into a list."""

    def __init__(self):
        self.items: list = []

    def slot(self, *args):
        self.items.append(args if len(args) > 1 else args[0] if args else None)

    def __call__(self, *args):
        self.slot(*args)

    def __len__(self):
        return len(self.items)

    def __getitem__(self, idx):
        return self.items[idx]

    @property
    def last(self):
        return self.items[-1] if self.items else None

    def clear(self):
        self.items.clear()


def tick(engine: TimerEngine, times: int = 1) -> None:
    """Advance the engine as if the driver fired *times* times."""
    for _ in range(times):
        engine._on_tick()


def queue_snapshot(*estimates: int) -> dict:
    """A TODO_QUEUE start snapshot with one todo per estimate."""
    todos = [Todo(f"Task {i + 1}", est) for i, est in enumerate(estimates)]
    return {
        "scheduling_mode": SchedulingMode.TODO_QUEUE,
        "todos": todos,
        "initial_seconds": sum(estimates),
    }
