# src/ui/live_panel.py
from __future__ import annotations

from typing import Any

import streamlit as st

from src.core import display as slots


class StreamlitDisplay:
    """
    Display sink backed by ``st.empty()`` placeholders.

    Placeholders belong to a single script run, so a fresh panel is built on
    every rerun and handed to the engine/controller. Values are remembered so
    the panel can redraw the last known state.
    """

    def __init__(self) -> None:
        self.values: dict[str, Any] = {}

        col_rate, col_progress, col_found, col_status = st.columns(4)
        self._hash_rate = col_rate.empty()
        self._progress_text = col_progress.empty()
        self._discoveries = col_found.empty()
        self._status = col_status.empty()
        self._progress_bar = st.empty()
        self._thinking = st.empty()
        self._response = st.empty()

    def render(self, initial: dict[str, Any]) -> None:
        for key, value in initial.items():
            self.set(key, value)

    def set(self, key: str, value: Any) -> None:
        self.values[key] = value

        if key == slots.HASH_RATE_TEXT:
            self._hash_rate.metric("Hash rate", value)
        elif key == slots.PROGRESS_TEXT:
            self._progress_text.metric("Progress", value)
        elif key == slots.PROGRESS_WIDTH:
            self._progress_bar.progress(min(max(float(value), 0.0), 100.0) / 100)
        elif key == slots.DISCOVERY_TEXT:
            self._discoveries.metric("Hashes found", value)
        elif key == slots.DISCOVERY_PULSE:
            st.toast("Hash found!")
        elif key == slots.STATUS_TEXT:
            self._status.metric("Status", value)
        elif key == slots.THINKING_VISIBLE:
            if value:
                self._thinking.info("Mining while the AI thinks...")
            else:
                self._thinking.empty()
        elif key == slots.RESPONSE_HTML:
            self._response.markdown(value, unsafe_allow_html=True)
        # Input slots are owned by st.form (clear_on_submit), nothing to draw.
