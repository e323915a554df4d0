"""Application entrypoint."""

from __future__ import annotations

import logging
import os
import sys

from config import APP_NAME, HISTORY_DIALOG_LIMIT, LOG_LEVEL_ENV, SENSOR_RATE_HZ, SHAKE_HOTKEY, JsonSettingsStore
from estimator import EstimateSelector
from history import SqliteHistoryStore
from hotkey import HotkeyShakeTrigger
from models import EstimateMode, EstimateResult, ShakeState
from overlay import EstimateOverlay
from sensors import MouseShakeSensorSource, SimulatedSensorSource
from session_coordinator import SessionCoordinator
from shake_detector import ShakeDetector

try:
    from PySide6.QtCore import QObject, QSize, Signal
    from PySide6.QtGui import QAction, QActionGroup, QBrush, QColor, QIcon, QPainter, QPixmap
    from PySide6.QtWidgets import QApplication, QInputDialog, QMenu, QMessageBox, QSystemTrayIcon
except Exception as exc:  # pragma: no cover
    raise SystemExit(f"PySide6 is required to run the desktop app: {exc}")

logger = logging.getLogger(__name__)


def _create_icon(color: str = "#888888", size: int = 22) -> QIcon:
    pixmap = QPixmap(QSize(size, size))
    pixmap.fill(QColor(0, 0, 0, 0))
    painter = QPainter(pixmap)
    painter.setRenderHint(QPainter.Antialiasing, True)
    painter.setBrush(QBrush(QColor(color)))
    painter.setPen(QColor(color))
    painter.drawEllipse(2, 2, size - 4, size - 4)
    painter.end()
    return QIcon(pixmap)


ICON_IDLE = "#888888"      # grey
ICON_SHAKING = "#3FA7FF"   # blue
ICON_ERROR = "#FF8800"     # orange

MODE_TITLES = {
    EstimateMode.WORK: "Work",
    EstimateMode.GENERIC: "Generic",
}


def configure_logging() -> None:
    level = os.environ.get(LOG_LEVEL_ENV, "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


class UIBridge(QObject):
    estimate_signal = Signal(object)
    shake_signal = Signal(object)
    error_signal = Signal(str)


class App:
    def __init__(self) -> None:
        self.app = QApplication(sys.argv)
        self.app.setQuitOnLastWindowClosed(False)
        self.overlay = EstimateOverlay()
        self.ui = UIBridge()
        self.ui.estimate_signal.connect(self._on_estimate_ui)
        self.ui.shake_signal.connect(self._on_shake_ui)
        self.ui.error_signal.connect(self._on_error_ui)

        self.simulated_sensor = SimulatedSensorSource(rate_hz=SENSOR_RATE_HZ)
        self.mouse_sensor = MouseShakeSensorSource(rate_hz=SENSOR_RATE_HZ)
        self.history_store = SqliteHistoryStore()
        self.coordinator = SessionCoordinator(
            detector=ShakeDetector(),
            estimator=EstimateSelector(),
            settings_store=JsonSettingsStore(),
            history_store=self.history_store,
            sensor=self.simulated_sensor,
            on_estimate=self._on_estimate,
            on_shake=self._on_shake,
            on_error=self._on_error,
        )
        self.hotkey = HotkeyShakeTrigger(self.simulated_sensor, hotkey_name=SHAKE_HOTKEY)

        self.tray = QSystemTrayIcon()
        self.tray.setIcon(_create_icon(ICON_IDLE))
        self.tray.setToolTip(f"{APP_NAME} — Ready")
        self._mode_actions: dict[EstimateMode, QAction] = {}
        self._setup_menu()
        self.tray.show()

    def _setup_menu(self) -> None:
        menu = QMenu()

        mode_menu = menu.addMenu("Mode")
        group = QActionGroup(mode_menu)
        group.setExclusive(True)
        for mode in EstimateMode.user_selectable():
            action = QAction(MODE_TITLES[mode], mode_menu, checkable=True)
            action.triggered.connect(lambda checked, m=mode: self._set_mode(m))
            group.addAction(action)
            mode_menu.addAction(action)
            self._mode_actions[mode] = action

        shake_action = QAction("Simulate Shake", menu)
        shake_action.triggered.connect(lambda: self.simulated_sensor.simulate_shake())
        menu.addAction(shake_action)

        self.mouse_action = QAction("Shake With Mouse", menu, checkable=True)
        self.mouse_action.setEnabled(self.mouse_sensor.is_supported)
        self.mouse_action.toggled.connect(self._toggle_mouse)
        menu.addAction(self.mouse_action)

        menu.addSeparator()
        history_action = QAction("History…", menu)
        history_action.triggered.connect(self._show_history)
        menu.addAction(history_action)

        size_action = QAction("History Size…", menu)
        size_action.triggered.connect(self._set_history_size)
        menu.addAction(size_action)

        clear_action = QAction("Clear History", menu)
        clear_action.triggered.connect(self._clear_history)
        menu.addAction(clear_action)

        menu.addSeparator()
        quit_action = QAction("Quit", menu)
        quit_action.triggered.connect(self.quit)
        menu.addAction(quit_action)

        self.tray.setContextMenu(menu)

    def _sync_mode_menu(self) -> None:
        action = self._mode_actions.get(self.coordinator.selected_mode)
        if action is not None:
            action.setChecked(True)

    def _set_mode(self, mode: EstimateMode) -> None:
        if mode != self.coordinator.selected_mode:
            self.coordinator.set_mode(mode)

    def _toggle_mouse(self, enabled: bool) -> None:
        self.coordinator.replace_sensor(self.mouse_sensor if enabled else self.simulated_sensor)

    def _show_history(self) -> None:
        results = self.coordinator.history(HISTORY_DIALOG_LIMIT)
        if not results:
            QMessageBox.information(None, "History", "No estimates yet. Give it a shake!")
            return
        lines = [
            f"{r.timestamp.astimezone().strftime('%Y-%m-%d %H:%M')}  {r.text}"
            for r in results
        ]
        QMessageBox.information(None, "History", "\n".join(lines))

    def _set_history_size(self) -> None:
        value, ok = QInputDialog.getInt(
            None,
            "History Size",
            "Number of estimates to keep",
            self.coordinator.settings.max_history_size,
            1,
            1000,
        )
        if ok:
            self.coordinator.set_max_history_size(value)

    def _clear_history(self) -> None:
        answer = QMessageBox.question(None, "Clear History", "Delete all saved estimates?")
        if answer == QMessageBox.Yes:
            self.coordinator.clear_history()

    # ------------------------------------------------------------------
    # Callbacks (called from worker threads → emit signals for UI thread)
    # ------------------------------------------------------------------

    def _on_estimate(self, result: EstimateResult) -> None:
        self.ui.estimate_signal.emit(result)

    def _on_shake(self, state: ShakeState) -> None:
        self.ui.shake_signal.emit(state)

    def _on_error(self, code: str, message: str) -> None:
        self.ui.error_signal.emit(f"{code}: {message}")

    # ------------------------------------------------------------------
    # UI thread handlers (safe for Qt)
    # ------------------------------------------------------------------

    def _on_estimate_ui(self, result: EstimateResult) -> None:
        self.tray.setIcon(_create_icon(ICON_IDLE))
        self.tray.setToolTip(f"{APP_NAME} — {result.text}")
        self.overlay.show_estimate(result)

    def _on_shake_ui(self, state: ShakeState) -> None:
        if state.is_active:
            self.tray.setIcon(_create_icon(ICON_SHAKING))
            self.overlay.show_shaking(state.intensity)

    def _on_error_ui(self, msg: str) -> None:
        self.tray.setIcon(_create_icon(ICON_ERROR))
        self.overlay.show_error(msg)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def run(self) -> int:
        self.coordinator.start()
        self._sync_mode_menu()
        try:
            self.hotkey.start()
        except Exception as exc:
            logger.warning("shake hotkey disabled: %s", exc)
            self.overlay.show_error(f"Hotkey disabled: {exc}")
        return self.app.exec()

    def quit(self) -> None:
        self.hotkey.stop()
        self.coordinator.close()
        self.history_store.close()
        self.app.quit()


def main() -> int:
    configure_logging()
    app = App()
    return app.run()


if __name__ == "__main__":
    raise SystemExit(main())
