"""Main window: duration inputs, clock, progress and the todo list.

Layout (top → bottom):
    - Clock display + progress bar
    - Hours / minutes / seconds inputs
    - Start/Pause, Reset, Focus Mode, Always-on-top
    - Todo form (title, estimate, unit)
    - Search box + todo list (drag to reorder) + item actions
"""

from __future__ import annotations

from PyQt6.QtCore import Qt, QTimer, pyqtSignal
from PyQt6.QtGui import QCloseEvent, QHideEvent, QShowEvent
from PyQt6.QtWidgets import (
    QAbstractItemView, QCheckBox, QComboBox, QHBoxLayout, QInputDialog,
    QLabel, QLineEdit, QListWidget, QListWidgetItem, QMessageBox,
    QProgressBar, QPushButton, QSpinBox, QVBoxLayout, QWidget,
)

from ..surface.projector import (
    CompletionEvent, CompletionKind, SurfaceProjector, SurfaceView, filter_todos,
)
from ..timer.models import MAX_ESTIMATE_SECONDS, TimerMode, first_pending, format_hms

TODO_ID_ROLE = Qt.ItemDataRole.UserRole


class TodoListWidget(QListWidget):
    """List with internal drag-and-drop that reports the resulting order."""

    order_changed = pyqtSignal(list)

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.setDragDropMode(QAbstractItemView.DragDropMode.InternalMove)
        self.setDefaultDropAction(Qt.DropAction.MoveAction)

    def item_ids(self) -> list[str]:
        return [self.item(i).data(TODO_ID_ROLE) for i in range(self.count())]

    def dropEvent(self, event) -> None:
        super().dropEvent(event)
        self.order_changed.emit(self.item_ids())


class MainWindow(QWidget):
    """The primary surface.  Talks to the engine only through its projector."""

    focus_requested = pyqtSignal()
    always_on_top_toggled = pyqtSignal(bool)

    def __init__(
        self,
        projector: SurfaceProjector,
        parent: QWidget | None = None,
        *,
        default_duration: int = 25 * 60,
        close_to_tray: bool = True,
    ) -> None:
        super().__init__(parent)
        self._projector = projector
        self._close_to_tray = close_to_tray
        self._quitting = False
        self.setWindowTitle("#BoostTimer")
        self.setMinimumSize(560, 420)

        self._build_ui()
        self.set_duration_inputs(default_duration)
        self._connect_signals()
        projector.attach()

    # ── build ─────────────────────────────────────────────────────────────

    def _build_ui(self) -> None:
        root = QVBoxLayout(self)
        root.setContentsMargins(20, 16, 20, 16)
        root.setSpacing(10)

        self._display = QLabel("00:00:00", self)
        self._display.setObjectName("display")
        self._display.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._display.setStyleSheet("font-size: 48px; font-weight: 600;")
        root.addWidget(self._display)

        self._progress = QProgressBar(self)
        self._progress.setRange(0, 100)
        self._progress.setTextVisible(False)
        root.addWidget(self._progress)

        self._status = QLabel("", self)
        self._status.setAlignment(Qt.AlignmentFlag.AlignCenter)
        root.addWidget(self._status)

        # ── duration inputs ──────────────────────────────────────────
        inputs = QHBoxLayout()
        self._hours = self._spin(99, "h")
        self._minutes = self._spin(59, "m")
        self._seconds = self._spin(59, "s")
        for spin in (self._hours, self._minutes, self._seconds):
            inputs.addWidget(spin)
        root.addLayout(inputs)

        # ── controls ─────────────────────────────────────────────────
        controls = QHBoxLayout()
        self._start_pause_btn = QPushButton("Start", self)
        self._reset_btn = QPushButton("Reset", self)
        self._focus_btn = QPushButton("Focus Mode", self)
        self._aot_check = QCheckBox("Always on top", self)
        controls.addWidget(self._start_pause_btn)
        controls.addWidget(self._reset_btn)
        controls.addWidget(self._focus_btn)
        controls.addStretch(1)
        controls.addWidget(self._aot_check)
        root.addLayout(controls)

        # ── todo form ────────────────────────────────────────────────
        form = QHBoxLayout()
        self._todo_title = QLineEdit(self)
        self._todo_title.setPlaceholderText("Add a task")
        self._todo_estimate = QSpinBox(self)
        self._todo_estimate.setRange(1, 9999)
        self._todo_estimate.setValue(25)
        self._todo_unit = QComboBox(self)
        self._todo_unit.addItem("min", "m")
        self._todo_unit.addItem("hr", "h")
        self._add_btn = QPushButton("Add", self)
        form.addWidget(self._todo_title, 1)
        form.addWidget(self._todo_estimate)
        form.addWidget(self._todo_unit)
        form.addWidget(self._add_btn)
        root.addLayout(form)

        # ── list toolbar ─────────────────────────────────────────────
        toolbar = QHBoxLayout()
        self._search = QLineEdit(self)
        self._search.setPlaceholderText("Search tasks")
        self._summary = QLabel("0 tasks · 00:00:00", self)
        self._clear_btn = QPushButton("Clear all", self)
        toolbar.addWidget(self._search, 1)
        toolbar.addWidget(self._summary)
        toolbar.addWidget(self._clear_btn)
        root.addLayout(toolbar)

        self._todo_list = TodoListWidget(self)
        root.addWidget(self._todo_list, 1)

        actions = QHBoxLayout()
        self._done_btn = QPushButton("Done", self)
        self._edit_btn = QPushButton("Edit", self)
        self._delete_btn = QPushButton("Delete", self)
        actions.addStretch(1)
        actions.addWidget(self._done_btn)
        actions.addWidget(self._edit_btn)
        actions.addWidget(self._delete_btn)
        root.addLayout(actions)

    def _spin(self, maximum: int, suffix: str) -> QSpinBox:
        spin = QSpinBox(self)
        spin.setRange(0, maximum)
        spin.setSuffix(f" {suffix}")
        return spin

    # ── signals ───────────────────────────────────────────────────────────

    def _connect_signals(self) -> None:
        self._projector.view_changed.connect(self._render)
        self._projector.completed.connect(self._on_completed)

        self._start_pause_btn.clicked.connect(self._on_start_pause)
        self._reset_btn.clicked.connect(self._on_reset)
        self._focus_btn.clicked.connect(self.focus_requested)
        self._aot_check.toggled.connect(self.always_on_top_toggled)

        self._add_btn.clicked.connect(self._on_add)
        self._todo_title.returnPressed.connect(self._on_add)
        self._search.textChanged.connect(lambda _text: self._render_todos())
        self._clear_btn.clicked.connect(self._on_clear)

        self._todo_list.itemDoubleClicked.connect(self._on_item_activated)
        self._todo_list.order_changed.connect(self._on_order_changed)
        self._done_btn.clicked.connect(self._on_done)
        self._edit_btn.clicked.connect(self._on_edit)
        self._delete_btn.clicked.connect(self._on_delete)

    # ── public ────────────────────────────────────────────────────────────

    @property
    def projector(self) -> SurfaceProjector:
        return self._projector

    def duration_inputs(self) -> int:
        return (
            self._hours.value() * 3600
            + self._minutes.value() * 60
            + self._seconds.value()
        )

    def set_duration_inputs(self, seconds: int) -> None:
        seconds = max(0, seconds)
        self._hours.setValue(min(seconds // 3600, 99))
        self._minutes.setValue((seconds % 3600) // 60)
        self._seconds.setValue(seconds % 60)

    def set_always_on_top(self, on_top: bool) -> None:
        self._aot_check.blockSignals(True)
        self._aot_check.setChecked(on_top)
        self._aot_check.blockSignals(False)

    @property
    def status_text(self) -> str:
        return self._status.text()

    def prepare_quit(self) -> None:
        """Let the next close event really close the window."""
        self._quitting = True

    # ── slots ─────────────────────────────────────────────────────────────

    def _on_start_pause(self) -> None:
        self._status.clear()
        self._projector.start_or_pause(self.duration_inputs())

    def _on_reset(self) -> None:
        self._status.clear()
        state = self._projector.engine.get_state()
        self._projector.reset({
            "remaining_seconds": self.duration_inputs(),
            "initial_seconds": self.duration_inputs(),
            "scheduling_mode": state.scheduling_mode,
            "todos": state.todos,
            "active_todo_id": state.active_todo_id,
        })

    def _on_add(self) -> None:
        minutes = self._todo_estimate.value()
        if self._todo_unit.currentData() == "h":
            minutes *= 60
        todo = self._projector.add_todo(self._todo_title.text(), minutes * 60)
        if todo is not None:
            self._todo_title.clear()

    def _on_clear(self) -> None:
        answer = QMessageBox.question(self, "Clear all", "Clear all tasks?")
        if answer == QMessageBox.StandardButton.Yes:
            self._projector.clear_todos()

    def _on_item_activated(self, item: QListWidgetItem) -> None:
        todo_id = item.data(TODO_ID_ROLE)
        if self._projector.select_todo(todo_id):
            self._projector.start()

    def _on_order_changed(self, ids: list) -> None:
        # the list widget is mid-drop; apply the new order after it settles
        QTimer.singleShot(0, lambda: self._apply_order(ids))

    def _apply_order(self, ids: list) -> None:
        todos = self._projector.engine.get_state().todos
        by_id = {t.id: t for t in todos}
        ordered = [by_id[i] for i in ids if i in by_id]
        # todos hidden by the search filter keep their relative order at the end
        ordered += [t for t in todos if t.id not in ids]
        self._projector.merge_state({"todos": ordered})

    def _selected_id(self) -> str | None:
        item = self._todo_list.currentItem()
        return item.data(TODO_ID_ROLE) if item is not None else None

    def _on_done(self) -> None:
        todo_id = self._selected_id()
        if todo_id:
            self._projector.complete_todo(todo_id)

    def _on_delete(self) -> None:
        todo_id = self._selected_id()
        if todo_id:
            self._projector.remove_todo(todo_id)

    def _on_edit(self) -> None:
        todo_id = self._selected_id()
        view = self._projector.view
        if not todo_id or view is None:
            return
        todo = next((t for t in view.todos if t.id == todo_id), None)
        if todo is None:
            return
        title, ok = QInputDialog.getText(
            self, "Edit task", "Title", QLineEdit.EchoMode.Normal, todo.title,
        )
        if not ok:
            return
        minutes, ok = QInputDialog.getInt(
            self, "Edit task", "Estimate (minutes)",
            max(1, round(todo.estimate_seconds / 60)), 1, MAX_ESTIMATE_SECONDS // 60,
        )
        self._projector.edit_todo(todo_id, title, minutes * 60 if ok else None)

    def _on_completed(self, event: CompletionEvent) -> None:
        if event.kind is CompletionKind.TODO:
            text = f'"{event.title}" finished.'
            nxt = first_pending(self._projector.engine.get_state().todos)
            if nxt is not None:
                text += f" Next up: {nxt.title}"
        elif event.kind is CompletionKind.QUEUE:
            text = "All tasks done."
        else:
            text = "Time's up."
        self._status.setText(text)

    # ── rendering ─────────────────────────────────────────────────────────

    def _render(self, view: SurfaceView) -> None:
        self._display.setText(view.time_text)
        self._display.setProperty("mode", view.mode.value)
        self._progress.setValue(view.percent)
        self._start_pause_btn.setText(view.start_label)
        self._reset_btn.setEnabled(view.mode is not TimerMode.IDLE or view.remaining_seconds > 0)
        self._summary.setText(f"{view.task_count} tasks · {format_hms(view.total_remaining)}")
        self._render_todos()

    def _render_todos(self) -> None:
        view = self._projector.view
        if view is None:
            return
        current = self._selected_id()
        self._todo_list.clear()
        for todo in filter_todos(view.todos, self._search.text()):
            marker = "▶ " if todo.id == view.active_todo_id else ""
            item = QListWidgetItem(f"{marker}{todo.title}    {format_hms(todo.estimate_seconds)}")
            item.setData(TODO_ID_ROLE, todo.id)
            self._todo_list.addItem(item)
            if todo.id == current:
                self._todo_list.setCurrentItem(item)

    # ── visibility ────────────────────────────────────────────────────────

    def showEvent(self, event: QShowEvent) -> None:
        super().showEvent(event)
        self._projector.on_visibility_restored()

    def hideEvent(self, event: QHideEvent) -> None:
        super().hideEvent(event)
        self._projector.on_visibility_hidden()

    def closeEvent(self, event: QCloseEvent) -> None:
        if self._close_to_tray and not self._quitting:
            event.ignore()
            self.hide()
            return
        self._projector.detach()
        super().closeEvent(event)
