"""Shared error codes and user-facing messages."""

from __future__ import annotations

SENSOR_UNAVAILABLE = "SENSOR_UNAVAILABLE"
SENSOR_FAILED = "SENSOR_FAILED"
SETTINGS_LOAD_FAILED = "SETTINGS_LOAD_FAILED"
PERSISTENCE_FAILED = "PERSISTENCE_FAILED"

ERROR_MESSAGES = {
    SENSOR_UNAVAILABLE: "No motion sensor is available, shaking is disabled.",
    SENSOR_FAILED: "The motion sensor could not be started.",
    SETTINGS_LOAD_FAILED: "Settings could not be loaded, defaults are in use.",
    PERSISTENCE_FAILED: "Saving failed, the estimate was not stored.",
}
