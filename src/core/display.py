# src/core/display.py
from __future__ import annotations

from typing import Any, Protocol

# Named display slots written by the engine and controller.
HASH_RATE_TEXT = "hash_rate_text"
PROGRESS_TEXT = "progress_text"
PROGRESS_WIDTH = "progress_width"
DISCOVERY_TEXT = "discovery_text"
DISCOVERY_PULSE = "discovery_pulse"
STATUS_TEXT = "status_text"
STATUS_CLASS = "status_class"
RESPONSE_HTML = "response_html"
THINKING_VISIBLE = "thinking_visible"
INPUT_DISABLED = "input_disabled"
INPUT_OPACITY = "input_opacity"
INPUT_VALUE = "input_value"


class DisplaySink(Protocol):
    def set(self, key: str, value: Any) -> None: ...


class MemoryDisplay:
    """Display sink that keeps the latest value per slot plus a write log."""

    def __init__(self) -> None:
        self.values: dict[str, Any] = {}
        self.writes: list[tuple[str, Any]] = []

    def set(self, key: str, value: Any) -> None:
        self.values[key] = value
        self.writes.append((key, value))

    def get(self, key: str, default: Any = None) -> Any:
        return self.values.get(key, default)

    def history(self, key: str) -> list[Any]:
        return [value for k, value in self.writes if k == key]


class NullDisplay:
    def set(self, key: str, value: Any) -> None:
        return None
