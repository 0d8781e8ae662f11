# src/ui/layout.py
from __future__ import annotations

import asyncio

import streamlit as st

from src.config import settings
from src.config.version import APP_NAME, APP_VERSION
from src.core import display as slots
from src.core.controller import QueryWorkflowController
from src.core.engine import SimulationEngine
from src.core.sim_models import MiningVariant, SubmitResult
from src.ui import style
from src.ui.charts import (
    batch_listing_frame,
    build_hash_rate_gauge,
    hash_history_frame,
    render_hash_rate_chart,
)
from src.ui.live_panel import StreamlitDisplay

ENGINE_KEY = "mining_engine"
CONTROLLER_KEY = "query_controller"
HIDDEN_KEY = "simulate_hidden_tab"
RESPONSE_KEY = "last_response_html"


def get_controller() -> QueryWorkflowController:
    """One engine + controller per browser session, kept across reruns."""
    if CONTROLLER_KEY not in st.session_state:
        engine = SimulationEngine()
        st.session_state[ENGINE_KEY] = engine
        st.session_state[CONTROLLER_KEY] = QueryWorkflowController(engine)
    return st.session_state[CONTROLLER_KEY]


def _on_visibility_toggle() -> None:
    engine: SimulationEngine | None = st.session_state.get(ENGINE_KEY)
    if engine is not None:
        engine.on_visibility_change(bool(st.session_state.get(HIDDEN_KEY)))


async def _run_query(
    controller: QueryWorkflowController, query: str, hidden: bool
) -> SubmitResult:
    engine = controller.engine
    task = asyncio.create_task(controller.submit(query))
    # submit() starts the engine before its first await
    await asyncio.sleep(0)
    if hidden:
        engine.on_visibility_change(True)
    try:
        result = await task
        await engine.wait_until_idle()
    finally:
        # The loop dies with this script run; leave nothing scheduled on it
        engine.shutdown()
    return result


def _render_sidebar(engine: SimulationEngine) -> bool:
    st.sidebar.subheader("Simulation")
    st.sidebar.caption(f"Session `{engine.session_id[-8:]}`")
    if engine.variant is MiningVariant.hashes:
        st.sidebar.info(
            f"Collecting real SHA-256 hashes with {engine.difficulty} leading zeros. "
            "Batches are saved when the progress bar fills."
        )
    else:
        st.sidebar.info("Counting simulated shares (no real hashing).")

    st.sidebar.metric("Max hash rate", f"{engine.state.max_hash_rate:,.0f} H/s")
    hidden = st.sidebar.toggle(
        "Simulate hidden tab",
        value=False,
        key=HIDDEN_KEY,
        on_change=_on_visibility_toggle,
        help="Halves the max hash rate while mining, as a backgrounded tab would.",
    )

    with st.sidebar.expander("Support the project", expanded=False):
        st.code(settings.WALLET_ADDRESS, language=None)
    return hidden


def _render_batches(engine: SimulationEngine) -> None:
    if engine.variant is not MiningVariant.hashes:
        return

    st.markdown("### Saved hash batches")
    paths = engine.batch_writer.list_batches()
    if not paths:
        st.caption(
            f"No batches yet. {len(engine.current_hashes)} hash(es) waiting for "
            f"batch #{engine.file_counter}."
        )
        return

    st.dataframe(batch_listing_frame(paths), hide_index=True, width="stretch")
    latest = paths[-1]
    st.download_button(
        f"Download {latest.name}",
        data=latest.read_bytes(),
        file_name=latest.name,
        mime="application/json",
    )


def render_page() -> None:
    st.title(APP_NAME)
    st.caption(
        "Your device mines while the AI thinks. Numbers are simulated; "
        f"nothing is sent to a real network. v{APP_VERSION}"
    )
    st.markdown(style.RESPONSE_PANEL_CSS, unsafe_allow_html=True)

    controller = get_controller()
    engine = controller.engine
    hidden = _render_sidebar(engine)

    with st.form("command-form", clear_on_submit=True):
        query = st.text_area("Ask the AI", key="command_input", height=100)
        submitted = st.form_submit_button("Submit", disabled=controller.busy)

    panel = StreamlitDisplay()
    engine.display = panel
    controller.display = panel
    engine.update_display()
    panel.render(
        {
            slots.STATUS_TEXT: engine.status,
            slots.PROGRESS_WIDTH: engine.state.progress,
            slots.RESPONSE_HTML: st.session_state.get(RESPONSE_KEY, ""),
        }
    )

    if submitted:
        result = asyncio.run(_run_query(controller, query, hidden))
        st.session_state[RESPONSE_KEY] = panel.values.get(slots.RESPONSE_HTML, "")
        if result.provider:
            st.caption(f"Answered by {result.provider}")

    col_chart, col_gauge = st.columns([3, 2])
    with col_chart:
        render_hash_rate_chart(
            hash_history_frame(engine.hash_rate_history), engine.state.max_hash_rate
        )
    with col_gauge:
        st.plotly_chart(
            build_hash_rate_gauge(engine.state.hash_rate, engine.state.max_hash_rate),
            width="stretch",
        )

    _render_batches(engine)
