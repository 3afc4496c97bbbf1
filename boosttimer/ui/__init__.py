"""UI package."""

from .main_window import MainWindow, TodoListWidget
from .focus_overlay import FocusOverlay

__all__ = ["MainWindow", "TodoListWidget", "FocusOverlay"]
