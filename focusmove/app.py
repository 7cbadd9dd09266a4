"""FocusMove main window.

Presentation only: it renders the engine's state, forwards button
presses to the engine/dispatcher/gate, shows the exercise dialog and the
in-app banner.  All timing and notification decisions live elsewhere.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Callable, Coroutine, TypeVar

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QColor, QIcon, QImage, QPainter, QPen, QPixmap
from PyQt6.QtWidgets import (
    QApplication, QFormLayout, QFrame, QHBoxLayout, QLabel, QMainWindow,
    QMenu, QMessageBox, QProgressBar, QPushButton, QSpinBox, QSystemTrayIcon,
    QVBoxLayout, QWidget,
)

from .audio.sounds import SoundManager
from .errors import PermissionDeniedError, ValidationError
from .exercises.catalog import Exercise, ExerciseCatalog
from .exercises.gate import ExerciseGate
from .notify.capabilities import QtAudio, TrayNotifier, WindowAttention
from .notify.dispatcher import NotificationDispatcher
from .settings import Settings, load_settings, save_settings
from .timer.clock import Clock
from .timer.config import BOUNDS
from .timer.engine import Phase, SessionEngine, TimerSnapshot, format_time
from .ui.banner import BannerToast
from .ui.exercise_dialog import ExerciseDialog

logger = logging.getLogger(__name__)

T = TypeVar("T")


PHASE_LABELS: dict[Phase, str] = {
    Phase.IDLE:        "Ready to focus",
    Phase.WORKING:     "Focus",
    Phase.SHORT_BREAK: "Short break",
    Phase.LONG_BREAK:  "Long break",
}

PHASE_COLOURS: dict[Phase, str] = {
    Phase.IDLE:        "#7A7A9A",
    Phase.WORKING:     "#F38BA8",
    Phase.SHORT_BREAK: "#A6E3A1",
    Phase.LONG_BREAK:  "#89B4FA",
}


def phase_display_name(snapshot: TimerSnapshot) -> str:
    if snapshot.awaiting_exercise:
        return "Mobility break"
    label = PHASE_LABELS[snapshot.phase]
    if snapshot.is_paused:
        label += " (paused)"
    return label


# ── tray-icon image generation ────────────────────────────────────────────


def _make_tray_icon(snapshot: TimerSnapshot) -> QIcon:
    """32×32 tray icon: outline when idle, filled while running, bars when paused."""
    size = 64  # drawn at 2× for HiDPI
    img = QImage(size, size, QImage.Format.Format_ARGB32_Premultiplied)
    img.fill(Qt.GlobalColor.transparent)
    p = QPainter(img)
    p.setRenderHint(QPainter.RenderHint.Antialiasing)
    colour = QColor(PHASE_COLOURS[snapshot.phase])
    cx, cy, r = size // 2, size // 2, size // 2 - 4

    if snapshot.is_paused:
        p.setPen(Qt.PenStyle.NoPen)
        p.setBrush(colour)
        bar_w, bar_h, gap = 8, 28, 6
        y = cy - bar_h // 2
        p.drawRoundedRect(cx - gap - bar_w, y, bar_w, bar_h, 3, 3)
        p.drawRoundedRect(cx + gap, y, bar_w, bar_h, 3, 3)
    elif snapshot.is_running:
        p.setPen(Qt.PenStyle.NoPen)
        p.setBrush(colour)
        p.drawEllipse(cx - r, cy - r, r * 2, r * 2)
    else:
        p.setPen(QPen(colour, 4))
        p.setBrush(Qt.BrushStyle.NoBrush)
        p.drawEllipse(cx - r, cy - r, r * 2, r * 2)
    p.end()

    img.setDevicePixelRatio(2.0)
    return QIcon(QPixmap.fromImage(img))


class FocusMoveApp(QMainWindow):
    """Main application window.  Owns the single ``SessionEngine``."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        clock: Clock | None = None,
        sounds_dir: Path | None = None,
        persist_settings: bool = True,
    ) -> None:
        super().__init__()
        self.setWindowTitle("FocusMove")
        self.setMinimumSize(420, 520)

        self._settings = settings or load_settings()
        self._persist_settings = persist_settings
        self._permission_busy = False
        self._exercise_dialog: ExerciseDialog | None = None

        # ── core ──────────────────────────────────────────────────────
        self._engine = SessionEngine(
            self, config=self._settings.timer_config(), clock=clock,
        )
        self._sounds = SoundManager(
            self, sounds_dir=sounds_dir, volume=self._settings.sound_volume,
        )
        self._tray_icon = QSystemTrayIcon(self)
        self._dispatcher = NotificationDispatcher(
            self._engine,
            self,
            audio=QtAudio(self._sounds),
            notifier=TrayNotifier(self._tray_icon),
            attention=WindowAttention(self),
        )
        self._catalog = ExerciseCatalog()
        self._gate = ExerciseGate(self._engine, self._catalog, self)

        # ── UI ────────────────────────────────────────────────────────
        central = QWidget(self)
        self.setCentralWidget(central)
        self._build_ui(central)
        self._banner = BannerToast(central)

        self._tray_icon.setToolTip("FocusMove — Ready")
        self._tray_icon.activated.connect(self._on_tray_activated)
        self._build_tray_menu()

        # ── wiring ────────────────────────────────────────────────────
        self._engine.state_changed.connect(self._render)
        self._engine.tick.connect(self._on_tick)
        self._dispatcher.banner.connect(self._banner.show_notification)
        self._dispatcher.permissions_changed.connect(self._refresh_permission_buttons)
        self._gate.exercise_presented.connect(self._show_exercise)
        self._gate.dismissed.connect(self._close_exercise)

        self._render(self._engine.snapshot())
        self._refresh_permission_buttons()

    # ── accessors (used by tests and the tray menu) ───────────────────

    @property
    def engine(self) -> SessionEngine:
        return self._engine

    @property
    def dispatcher(self) -> NotificationDispatcher:
        return self._dispatcher

    @property
    def gate(self) -> ExerciseGate:
        return self._gate

    @property
    def banner(self) -> BannerToast:
        return self._banner

    @property
    def exercise_dialog(self) -> ExerciseDialog | None:
        return self._exercise_dialog

    # ══════════════════════════════════════════════════════════════════
    #  BUILD UI
    # ══════════════════════════════════════════════════════════════════

    def _build_ui(self, central: QWidget) -> None:
        root = QVBoxLayout(central)
        root.setContentsMargins(24, 24, 24, 24)
        root.setSpacing(12)

        self._phase_label = QLabel("", central)
        self._phase_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._phase_label.setStyleSheet("font-size: 18px; font-weight: 600;")
        root.addWidget(self._phase_label)

        self._time_label = QLabel("00:00", central)
        self._time_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._time_label.setStyleSheet("font-size: 64px; font-weight: 700;")
        root.addWidget(self._time_label)

        self._progress = QProgressBar(central)
        self._progress.setRange(0, 1000)
        self._progress.setTextVisible(False)
        root.addWidget(self._progress)

        self._session_label = QLabel("", central)
        self._session_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        root.addWidget(self._session_label)

        # ── main controls ────────────────────────────────────────────
        btn_row = QHBoxLayout()
        btn_row.setSpacing(12)
        self._reset_btn = QPushButton("Reset", central)
        self._start_pause_btn = QPushButton("Start", central)
        self._start_pause_btn.setObjectName("primaryButton")
        self._skip_btn = QPushButton("Skip", central)
        for btn in (self._reset_btn, self._start_pause_btn, self._skip_btn):
            btn_row.addWidget(btn)
        root.addLayout(btn_row)

        self._reset_btn.clicked.connect(self._engine.reset)
        self._start_pause_btn.clicked.connect(self._on_start_pause)
        self._skip_btn.clicked.connect(self._engine.skip)

        # ── permissions ──────────────────────────────────────────────
        perm_row = QHBoxLayout()
        perm_row.setSpacing(12)
        self._audio_btn = QPushButton("", central)
        self._audio_btn.clicked.connect(self._on_toggle_audio)
        self._notify_btn = QPushButton("", central)
        self._notify_btn.clicked.connect(self._on_toggle_notifications)
        perm_row.addWidget(self._audio_btn)
        perm_row.addWidget(self._notify_btn)
        root.addLayout(perm_row)

        separator = QFrame(central)
        separator.setFrameShape(QFrame.Shape.HLine)
        root.addWidget(separator)

        # ── configuration ────────────────────────────────────────────
        form = QFormLayout()
        form.setHorizontalSpacing(20)
        self._config_spins: dict[str, QSpinBox] = {}
        config = self._engine.config.as_dict()
        for name, (low, high, label) in BOUNDS.items():
            spin = QSpinBox(central)
            # wider than the valid range so bad values reach update_config
            spin.setRange(0, high * 2)
            spin.setValue(config[name])
            if name != "sessions_before_long_break":
                spin.setSuffix(" min")
            self._config_spins[name] = spin
            form.addRow(f"{label}:", spin)
        root.addLayout(form)

        self._apply_btn = QPushButton("Apply", central)
        self._apply_btn.clicked.connect(self._on_apply_config)
        root.addWidget(self._apply_btn, alignment=Qt.AlignmentFlag.AlignRight)

        self._status_label = QLabel("", central)
        self._status_label.setWordWrap(True)
        self._status_label.setStyleSheet("color: #7A7A9A;")
        root.addWidget(self._status_label)
        root.addStretch(1)

    def _build_tray_menu(self) -> None:
        menu = QMenu(self)
        self._tray_start_action = menu.addAction("Start")
        self._tray_start_action.triggered.connect(self._on_start_pause)
        skip_action = menu.addAction("Skip")
        skip_action.triggered.connect(self._engine.skip)
        menu.addSeparator()
        show_action = menu.addAction("Show FocusMove")
        show_action.triggered.connect(self._show_window)
        quit_action = menu.addAction("Quit")
        quit_action.triggered.connect(self._quit_app)
        self._tray_icon.setContextMenu(menu)

    # ══════════════════════════════════════════════════════════════════
    #  RENDERING
    # ══════════════════════════════════════════════════════════════════

    def _render(self, snapshot: TimerSnapshot) -> None:
        self._phase_label.setText(phase_display_name(snapshot))
        self._phase_label.setStyleSheet(
            f"font-size: 18px; font-weight: 600; color: {PHASE_COLOURS[snapshot.phase]};"
        )
        self._time_label.setText(snapshot.formatted_time)
        self._progress.setValue(round(snapshot.progress_percent * 10))
        self._session_label.setText(
            f"Session {snapshot.current_session_index}"
            f"  ·  {snapshot.completed_work_sessions} completed"
        )

        if snapshot.is_running:
            self._start_pause_btn.setText("Pause")
        elif snapshot.is_paused:
            self._start_pause_btn.setText("Resume")
        else:
            self._start_pause_btn.setText("Start")
        self._start_pause_btn.setEnabled(not snapshot.awaiting_exercise)
        self._skip_btn.setEnabled(snapshot.phase is not Phase.IDLE)
        self._tray_start_action.setText(self._start_pause_btn.text())

        self._tray_icon.setIcon(_make_tray_icon(snapshot))
        self._tray_icon.setToolTip(f"FocusMove — {phase_display_name(snapshot)}")

    def _on_tick(self, remaining: int) -> None:
        self._time_label.setText(format_time(remaining))
        self._progress.setValue(round(self._engine.progress_percent * 10))
        if self._engine.is_running:
            self._tray_icon.setToolTip(
                f"FocusMove — {PHASE_LABELS[self._engine.phase]} {format_time(remaining)}"
            )

    def _refresh_permission_buttons(self) -> None:
        audio_on = self._dispatcher.audio_enabled
        notify_on = self._dispatcher.notifications_enabled
        self._audio_btn.setText("Sound: on" if audio_on else "Sound: off")
        self._notify_btn.setText(
            "Notifications: on" if notify_on else "Notifications: off"
        )

    def _show_status(self, text: str) -> None:
        self._status_label.setText(text)

    # ══════════════════════════════════════════════════════════════════
    #  ACTIONS
    # ══════════════════════════════════════════════════════════════════

    def _run_async(self, request: Callable[[], Coroutine[Any, Any, T]]) -> T | None:
        """Drive a permission coroutine to completion from a Qt slot.

        Only one request runs at a time.  The audio trial pumps Qt events
        while it waits; requests that arrive meanwhile are dropped.
        """
        if self._permission_busy:
            logger.info("Permission request already in progress, ignoring")
            return None
        self._permission_busy = True
        self._set_permission_buttons_enabled(False)
        try:
            return asyncio.run(request())
        except PermissionDeniedError as exc:
            logger.info("Permission denied (%s): %s", exc.capability, exc)
            self._show_status(str(exc))
            return None
        finally:
            self._permission_busy = False
            self._set_permission_buttons_enabled(True)

    def _set_permission_buttons_enabled(self, enabled: bool) -> None:
        self._audio_btn.setEnabled(enabled)
        self._notify_btn.setEnabled(enabled)

    def _on_start_pause(self) -> None:
        if self._engine.is_running:
            self._engine.pause()
            return
        # the one-time prompt waits for a Start that is not mid-request
        if not self._dispatcher.notification_prompted and not self._permission_busy:
            self._run_async(self._dispatcher.request_notification_permission)
        self._engine.start()

    def _on_toggle_audio(self) -> None:
        self._run_async(self._dispatcher.toggle_audio)

    def _on_toggle_notifications(self) -> None:
        self._run_async(self._dispatcher.toggle_notifications)

    def _on_apply_config(self) -> None:
        values = {name: spin.value() for name, spin in self._config_spins.items()}
        try:
            config = self._engine.update_config(**values)
        except ValidationError as exc:
            QMessageBox.warning(self, "Invalid configuration", str(exc))
            return

        self._settings.apply_timer_config(config)
        if self._persist_settings:
            try:
                save_settings(self._settings)
            except OSError as exc:
                logger.warning("Could not save settings: %s", exc)
        self._show_status("Settings applied. Timer reset.")

    # ── exercise gate ─────────────────────────────────────────────────

    def _show_exercise(self, exercise: Exercise) -> None:
        self._close_exercise()
        dialog = ExerciseDialog(exercise, self)
        dialog.accepted.connect(self._on_exercise_done)
        self._exercise_dialog = dialog
        dialog.open()
        self._show_window()

    def _on_exercise_done(self) -> None:
        if self._exercise_dialog is not None:
            self._exercise_dialog.deleteLater()
            self._exercise_dialog = None
        self._gate.acknowledge()

    def _close_exercise(self) -> None:
        if self._exercise_dialog is not None:
            self._exercise_dialog.close_silently()
            self._exercise_dialog.deleteLater()
            self._exercise_dialog = None

    # ══════════════════════════════════════════════════════════════════
    #  WINDOW / TRAY
    # ══════════════════════════════════════════════════════════════════

    def _on_tray_activated(self, reason: QSystemTrayIcon.ActivationReason) -> None:
        if reason == QSystemTrayIcon.ActivationReason.Trigger:
            self._show_window()

    def _show_window(self) -> None:
        self.show()
        self.raise_()
        self.activateWindow()

    def _quit_app(self) -> None:
        self._shutdown()
        QApplication.instance().quit()

    def _shutdown(self) -> None:
        self._dispatcher.dispose()
        self._gate.dispose()
        self._engine.driver.dispose()
        self._tray_icon.hide()

    def closeEvent(self, event) -> None:  # type: ignore[override]
        """Minimize to tray instead of quitting (if enabled)."""
        if self._settings.minimize_to_tray and self._tray_icon.isVisible():
            event.ignore()
            self.hide()
        else:
            self._tray_icon.hide()
            event.accept()

    def resizeEvent(self, event) -> None:  # type: ignore[override]
        super().resizeEvent(event)
        if hasattr(self, "_banner"):
            self._banner.adjustSize()
