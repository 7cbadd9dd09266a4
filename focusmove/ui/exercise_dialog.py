"""Blocking dialog that shows the mobility exercise after a work session.

The timer is parked at zero while this is open.  Escape and the window
close button are ignored; only "Done!" closes it.
"""

from __future__ import annotations

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QCloseEvent, QKeyEvent
from PyQt6.QtWidgets import (
    QDialog, QVBoxLayout, QLabel, QPushButton, QWidget,
)

from ..exercises.catalog import Exercise


class ExerciseDialog(QDialog):
    """Modal exercise card.  ``accepted`` fires when the user is done."""

    def __init__(self, exercise: Exercise, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.setWindowTitle("Mobility break")
        self.setModal(True)
        self.setMinimumWidth(380)
        self._exercise = exercise
        self._done = False

        layout = QVBoxLayout(self)
        layout.setContentsMargins(24, 20, 24, 20)
        layout.setSpacing(12)

        header = QLabel("Time to move!", self)
        header.setStyleSheet("font-size: 13px; color: #7A7A9A;")
        layout.addWidget(header)

        self._name_label = QLabel(exercise.name, self)
        self._name_label.setStyleSheet("font-size: 20px; font-weight: 700;")
        self._name_label.setWordWrap(True)
        layout.addWidget(self._name_label)

        self._instructions_label = QLabel(exercise.instructions, self)
        self._instructions_label.setWordWrap(True)
        layout.addWidget(self._instructions_label)

        minutes, seconds = divmod(exercise.duration_seconds, 60)
        duration = f"{minutes} min" if not seconds else f"{minutes}:{seconds:02d} min"
        self._duration_label = QLabel(f"About {duration}", self)
        self._duration_label.setStyleSheet("color: #7A7A9A;")
        layout.addWidget(self._duration_label)

        self._done_btn = QPushButton("Done!", self)
        self._done_btn.setObjectName("primaryButton")
        self._done_btn.setDefault(True)
        self._done_btn.clicked.connect(self._on_done)
        layout.addWidget(self._done_btn, alignment=Qt.AlignmentFlag.AlignRight)

    @property
    def exercise(self) -> Exercise:
        return self._exercise

    def _on_done(self) -> None:
        self._done = True
        self.accept()

    def close_silently(self) -> None:
        """Close without acknowledging (the session was reset meanwhile)."""
        self._done = True
        self.done(QDialog.DialogCode.Rejected)

    def reject(self) -> None:  # type: ignore[override]
        if self._done:
            super().reject()

    def closeEvent(self, event: QCloseEvent) -> None:  # type: ignore[override]
        if self._done:
            event.accept()
        else:
            event.ignore()

    def keyPressEvent(self, event: QKeyEvent) -> None:  # type: ignore[override]
        if event.key() == Qt.Key.Key_Escape:
            event.ignore()
            return
        super().keyPressEvent(event)
