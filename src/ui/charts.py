# src/ui/charts.py
from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable

import altair as alt
import pandas as pd
import plotly.graph_objects as go
import streamlit as st

from src.ui import style


def hash_history_frame(history: Iterable[tuple[float, float]]) -> pd.DataFrame:
    """
    Turn engine (seconds, H/s) samples into a chart-ready DataFrame.

    Columns: seconds (float, relative to the first sample), hash_rate (float).
    """
    df = pd.DataFrame(list(history), columns=["seconds", "hash_rate"])
    if not df.empty:
        df["seconds"] = df["seconds"] - df["seconds"].iloc[0]
    return df


def batch_listing_frame(paths: Iterable[Path]) -> pd.DataFrame:
    """One row per saved batch file: file, batch number, hashes, timestamp."""
    rows = []
    for path in paths:
        try:
            doc = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            continue
        rows.append(
            {
                "file": path.name,
                "batch": doc.get("fileNumber"),
                "hashes": doc.get("totalHashes"),
                "saved (UTC)": doc.get("timestamp"),
            }
        )
    return pd.DataFrame(rows, columns=["file", "batch", "hashes", "saved (UTC)"])


def render_hash_rate_chart(df: pd.DataFrame, max_hash_rate: float) -> None:
    if df.empty:
        st.caption("Hash-rate history will appear after the first query.")
        return

    line = (
        alt.Chart(df)
        .mark_line(color=style.COLOR_HASH_RATE, strokeWidth=style.LINE_WIDTH_PRIMARY)
        .encode(
            x=alt.X("seconds:Q", title="Seconds"),
            y=alt.Y("hash_rate:Q", title="Hash rate (H/s)"),
            tooltip=[
                alt.Tooltip("seconds:Q", title="t (s)", format=".1f"),
                alt.Tooltip("hash_rate:Q", title="H/s", format=".0f"),
            ],
        )
    )
    rule = (
        alt.Chart(pd.DataFrame({"max_hash_rate": [max_hash_rate]}))
        .mark_rule(color=style.COLOR_MAX_HASH_RATE, strokeDash=[4, 4])
        .encode(y="max_hash_rate:Q")
    )
    st.altair_chart(line + rule, width="stretch")


def build_hash_rate_gauge(hash_rate: float, max_hash_rate: float) -> go.Figure:
    fig = go.Figure(
        go.Indicator(
            mode="gauge+number",
            value=hash_rate,
            number={"suffix": " H/s"},
            gauge={
                "axis": {"range": [0, max(max_hash_rate * 1.1, 1.0)]},
                "bar": {"color": style.COLOR_ACCENT},
                "threshold": {
                    "line": {"color": style.COLOR_MAX_HASH_RATE, "width": 3},
                    "value": max_hash_rate,
                },
            },
        )
    )
    fig.update_layout(height=220, margin=dict(l=20, r=20, t=20, b=10))
    return fig
