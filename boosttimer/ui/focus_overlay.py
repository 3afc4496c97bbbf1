"""Compact always-on-top overlay: the clock plus the active task title."""

from __future__ import annotations

from PyQt6.QtCore import Qt, QPoint, pyqtSignal
from PyQt6.QtGui import QHideEvent, QMouseEvent, QShowEvent
from PyQt6.QtWidgets import QHBoxLayout, QLabel, QPushButton, QVBoxLayout, QWidget

from ..surface.projector import SurfaceProjector, SurfaceView

COLLAPSED_SIZE = (377, 62)
EXPANDED_SIZE = (377, 110)


class FocusOverlay(QWidget):
    """Frameless mini window.  Drag anywhere to move it."""

    close_requested = pyqtSignal()

    def __init__(self, projector: SurfaceProjector, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._projector = projector
        # the projector lives and dies with this overlay
        projector.setParent(self)
        self._drag_offset: QPoint | None = None

        self.setWindowFlags(
            Qt.WindowType.FramelessWindowHint
            | Qt.WindowType.WindowStaysOnTopHint
            | Qt.WindowType.Tool
        )
        self.setWindowTitle("Focus")
        self._build_ui()
        self.setFixedSize(*COLLAPSED_SIZE)

        projector.view_changed.connect(self._render)
        projector.attach()

    def _build_ui(self) -> None:
        root = QVBoxLayout(self)
        root.setContentsMargins(14, 8, 10, 8)
        root.setSpacing(2)

        row = QHBoxLayout()
        self._time = QLabel("00:00:00", self)
        self._time.setStyleSheet("font-size: 28px; font-weight: 600;")
        self._play_btn = QPushButton("Start", self)
        self._close_btn = QPushButton("✕", self)
        self._close_btn.setFixedWidth(28)
        row.addWidget(self._time, 1)
        row.addWidget(self._play_btn)
        row.addWidget(self._close_btn)
        root.addLayout(row)

        self._todo = QLabel("", self)
        self._todo.setVisible(False)
        root.addWidget(self._todo)

        self._play_btn.clicked.connect(self._projector.toggle)
        self._close_btn.clicked.connect(self.close_requested)

    @property
    def projector(self) -> SurfaceProjector:
        return self._projector

    @property
    def time_text(self) -> str:
        return self._time.text()

    @property
    def todo_text(self) -> str:
        return self._todo.text()

    def _render(self, view: SurfaceView) -> None:
        self._time.setText(view.time_text)
        self._play_btn.setText(view.start_label)
        expanded = bool(view.active_title)
        self._todo.setText(view.active_title or "")
        if expanded != self._todo.isVisibleTo(self):
            self._todo.setVisible(expanded)
            self.setFixedSize(*(EXPANDED_SIZE if expanded else COLLAPSED_SIZE))

    # ── visibility ────────────────────────────────────────────────────────

    def showEvent(self, event: QShowEvent) -> None:
        super().showEvent(event)
        self._projector.on_visibility_restored()

    def hideEvent(self, event: QHideEvent) -> None:
        super().hideEvent(event)
        self._projector.on_visibility_hidden()

    # ── dragging ──────────────────────────────────────────────────────────

    def mousePressEvent(self, event: QMouseEvent) -> None:
        if event.button() == Qt.MouseButton.LeftButton:
            self._drag_offset = event.globalPosition().toPoint() - self.frameGeometry().topLeft()
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event: QMouseEvent) -> None:
        if self._drag_offset is not None and event.buttons() & Qt.MouseButton.LeftButton:
            self.move(event.globalPosition().toPoint() - self._drag_offset)
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:
        self._drag_offset = None
        super().mouseReleaseEvent(event)
