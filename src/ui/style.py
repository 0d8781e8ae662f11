# src/ui/style.py

from __future__ import annotations

"""
UI / visual style constants for the mining page.

Keep anything purely presentational in here (colours, CSS, labels),
and keep simulation constants in src/config/settings.py.
"""

# ---------------------------------------------------------------------------
# Colour palette
# ---------------------------------------------------------------------------

COLOR_ACCENT = "#00ff88"  # mining green, also used for the found-hash glow
COLOR_HASH_RATE = "#1f77b4"
COLOR_MAX_HASH_RATE = "#bfbfbf"
COLOR_ERROR = "#d62728"

LINE_WIDTH_PRIMARY = 1.25

# ---------------------------------------------------------------------------
# Response panel CSS
# ---------------------------------------------------------------------------

RESPONSE_PANEL_CSS = f"""
<style>
.ai-response {{
    white-space: pre-wrap;
    border-left: 3px solid {COLOR_ACCENT};
    padding: 0.75rem 1rem;
    background: rgba(0, 255, 136, 0.06);
}}
.error {{
    color: {COLOR_ERROR};
    border-left: 3px solid {COLOR_ERROR};
    padding: 0.5rem 1rem;
}}
.info {{
    padding: 0.5rem 1rem;
}}
.placeholder {{
    color: #888888;
    font-style: italic;
}}
</style>
"""
