"""App constants and a JSON-backed settings store."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from models import AppSettings, EstimateMode

logger = logging.getLogger(__name__)

APP_NAME = "Hiha-Arvio"
DATA_DIR = Path.home() / ".config" / "hiha_arvio"
SETTINGS_PATH = DATA_DIR / "settings.json"
HISTORY_DB_PATH = DATA_DIR / "history.db"

LOG_LEVEL_ENV = "HIHA_ARVIO_LOG_LEVEL"
SENSOR_RATE_HZ = 60.0
SHAKE_HOTKEY = "Key.f8"
HISTORY_DIALOG_LIMIT = 50


class JsonSettingsStore:
    def __init__(self, path: Path | None = None) -> None:
        self._path = path or SETTINGS_PATH
        self._path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> AppSettings:
        data = self._read_all()
        defaults = AppSettings()

        mode = defaults.selected_mode
        try:
            candidate = EstimateMode(data.get("selected_mode", mode.value))
        except ValueError:
            logger.warning("ignoring unknown mode in %s", self._path)
        else:
            if candidate in EstimateMode.user_selectable():
                mode = candidate

        size = data.get("max_history_size", defaults.max_history_size)
        if isinstance(size, bool) or not isinstance(size, int) or size <= 0:
            logger.warning("ignoring invalid max_history_size %r in %s", size, self._path)
            size = defaults.max_history_size

        return AppSettings(selected_mode=mode, max_history_size=size)

    def save(self, settings: AppSettings) -> None:
        data = self._read_all()
        data["selected_mode"] = settings.selected_mode.value
        data["max_history_size"] = settings.max_history_size
        self._write_all(data)

    def _read_all(self) -> dict:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError):
            logger.warning("settings file %s is unreadable, using defaults", self._path)
            return {}
        return data if isinstance(data, dict) else {}

    def _write_all(self, data: dict) -> None:
        fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, prefix=".settings-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, ensure_ascii=False, indent=2)
            os.replace(tmp_name, self._path)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except OSError:
                pass
            raise
