from __future__ import annotations

from PyQt6.QtCore import QTimer, Qt
from PyQt6.QtGui import QAction, QKeySequence
from PyQt6.QtWidgets import (
    QCheckBox,
    QComboBox,
    QFormLayout,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QSpinBox,
    QVBoxLayout,
    QWidget,
)

from timetracker.core.app_state import DURATION_PRESETS_MIN, AppState
from timetracker.core.engine import FocusEngine
from timetracker.core.models import CUSTOM_INTERVAL_RANGE_MIN, REMINDER_PRESETS_MIN, ActionResult, DisplayState
from timetracker.core.clock import format_clock


DISPLAY_REFRESH_MS = 200


class TimerWindow(QMainWindow):
    def __init__(self, engine: FocusEngine, app_state: AppState) -> None:
        super().__init__()
        self.setWindowTitle("Time Tracker")
        self.resize(420, 360)

        self.engine = engine
        self.app_state = app_state

        self._build_ui()
        self._connect_signals()
        self._load_reminder_form()

        self.display_timer = QTimer(self)
        self.display_timer.setInterval(DISPLAY_REFRESH_MS)
        self.display_timer.timeout.connect(self._refresh)
        self.display_timer.start()
        self._refresh()

    def _build_ui(self) -> None:
        central = QWidget(self)
        self.setCentralWidget(central)
        layout = QVBoxLayout(central)

        top_bar = QHBoxLayout()
        self.duration_combo = QComboBox()
        for minutes in DURATION_PRESETS_MIN:
            self.duration_combo.addItem(f"{minutes} min", minutes)
        index = self.duration_combo.findData(self.app_state.duration_minutes)
        self.duration_combo.setCurrentIndex(max(0, index))
        top_bar.addWidget(QLabel("Duration:"))
        top_bar.addWidget(self.duration_combo)
        top_bar.addStretch()
        layout.addLayout(top_bar)

        self.clock_label = QLabel("00:00")
        self.clock_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.clock_label.setStyleSheet("font-size: 48px; font-weight: bold;")
        self.status_label = QLabel("")
        self.status_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self.clock_label, 1)
        layout.addWidget(self.status_label)

        controls = QHBoxLayout()
        self.start_btn = QPushButton("Start")
        self.pause_btn = QPushButton("Pause")
        self.stop_btn = QPushButton("Stop")
        controls.addWidget(self.start_btn)
        controls.addWidget(self.pause_btn)
        controls.addWidget(self.stop_btn)
        layout.addLayout(controls)

        reminder_box = QWidget()
        form = QFormLayout(reminder_box)
        self.reminder_enabled = QCheckBox("Enabled")
        self.reminder_interval = QComboBox()
        for minutes in REMINDER_PRESETS_MIN:
            self.reminder_interval.addItem(f"{minutes} min", minutes)
        self.use_custom = QCheckBox("Custom interval")
        self.custom_minutes = QSpinBox()
        # one beyond each bound so invalid values reach validation instead of being clamped
        self.custom_minutes.setRange(CUSTOM_INTERVAL_RANGE_MIN[0] - 1, CUSTOM_INTERVAL_RANGE_MIN[1] + 1)
        self.save_reminder_btn = QPushButton("Save")
        form.addRow("Water reminder:", self.reminder_enabled)
        form.addRow("Interval:", self.reminder_interval)
        form.addRow(self.use_custom, self.custom_minutes)
        form.addRow(self.save_reminder_btn)
        layout.addWidget(reminder_box)

        space_action = QAction(self)
        space_action.setShortcut(QKeySequence(Qt.Key.Key_Space))
        space_action.triggered.connect(self._space_toggle)
        self.addAction(space_action)

    def _connect_signals(self) -> None:
        self.start_btn.clicked.connect(self.start_session)
        self.pause_btn.clicked.connect(self.toggle_pause)
        self.stop_btn.clicked.connect(self.stop_session)
        self.duration_combo.currentIndexChanged.connect(self._on_duration_changed)
        self.save_reminder_btn.clicked.connect(self.save_reminder)
        self.use_custom.toggled.connect(self.custom_minutes.setEnabled)
        self.engine.synchronizer.state_synced.connect(lambda _state: self._refresh())

    def _load_reminder_form(self) -> None:
        config = self.app_state.reminder_config
        self.reminder_enabled.setChecked(config.enabled)
        custom = config.custom_interval_minutes
        self.use_custom.setChecked(custom is not None)
        self.custom_minutes.setEnabled(custom is not None)
        self.custom_minutes.setValue(custom if custom is not None else config.effective_interval_minutes)
        index = self.reminder_interval.findData(config.interval_minutes)
        self.reminder_interval.setCurrentIndex(max(0, index))

    def _on_duration_changed(self, _index: int) -> None:
        self.app_state.set_duration_minutes(int(self.duration_combo.currentData()))

    def _space_toggle(self) -> None:
        if self.engine.state.is_running:
            self.toggle_pause()
        else:
            self.start_session()

    def start_session(self) -> None:
        self._report("Timer", self.engine.start(self.app_state.duration_minutes * 60))

    def toggle_pause(self) -> None:
        self._report("Timer", self.engine.toggle_pause())

    def stop_session(self) -> None:
        self._report("Timer", self.engine.stop())

    def save_reminder(self) -> None:
        custom = self.custom_minutes.value() if self.use_custom.isChecked() else None
        try:
            self.app_state.save_reminder_config(
                enabled=self.reminder_enabled.isChecked(),
                interval_minutes=int(self.reminder_interval.currentData()),
                custom_interval_minutes=custom,
            )
        except ValueError as exc:
            QMessageBox.warning(self, "Water reminder", str(exc))

    def _report(self, title: str, result: ActionResult) -> None:
        if result.error:
            QMessageBox.warning(self, title, result.error)
        self._refresh()

    def _refresh(self) -> None:
        display: DisplayState = self.engine.current_display_state()
        if display.is_running:
            self.clock_label.setText(display.label)
        else:
            self.clock_label.setText(format_clock(self.app_state.duration_minutes * 60))
        self.status_label.setText("Paused" if display.is_paused else ("Time remaining" if display.is_running else ""))
        self.start_btn.setEnabled(not display.is_running)
        self.duration_combo.setEnabled(not display.is_running)
        self.pause_btn.setEnabled(display.is_running)
        self.pause_btn.setText("Resume" if display.is_paused else "Pause")
        self.stop_btn.setEnabled(display.is_running)

    def showEvent(self, event) -> None:  # noqa: N802
        super().showEvent(event)
        self.engine.set_view_active(True)

    def hideEvent(self, event) -> None:  # noqa: N802
        super().hideEvent(event)
        self.engine.set_view_active(False)
