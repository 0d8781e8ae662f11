# src/core/controller.py
from __future__ import annotations

import asyncio
import html
import logging
import time
from typing import Awaitable, Callable, Optional, Sequence

import numpy as np

from src.config import settings
from src.core import display as slots
from src.core.display import DisplaySink
from src.core.engine import SimulationEngine
from src.core.providers import TextProvider, default_providers, generate_with_fallback
from src.core.responder import generate_contextual_response
from src.core.sim_models import QuerySession, SubmitResult, SubmitState

logger = logging.getLogger(__name__)


class QueryValidationError(ValueError):
    """Raised when a query is empty after trimming."""


def validate_query(query_text: str | None) -> str:
    query = (query_text or "").strip()
    if not query:
        raise QueryValidationError(settings.EMPTY_QUERY_MESSAGE)
    return query


def calculate_processing_time(max_hash_rate: float, rng: np.random.Generator) -> float:
    """
    Simulated AI processing time in milliseconds.

    Slower simulated hardware waits longer; the hash-rate factor is floored
    so the wait never exceeds BASE / MIN_FACTOR plus jitter.
    """
    factor = max(
        settings.PROCESSING_MIN_FACTOR,
        max_hash_rate / settings.PROCESSING_REFERENCE_HS,
    )
    jitter = rng.uniform(0, settings.PROCESSING_JITTER_MS)
    return float(settings.PROCESSING_BASE_MS / factor + jitter)


class QueryWorkflowController:
    """
    Runs one user query at a time against a SimulationEngine.

    ``submit`` starts the engine, waits for a provider (or the simulated
    processing time plus the canned responder), renders the answer and
    always stops the engine and re-enables input afterwards.
    """

    def __init__(
        self,
        engine: SimulationEngine,
        display: Optional[DisplaySink] = None,
        providers: Optional[Sequence[TextProvider]] = None,
        rng: Optional[np.random.Generator] = None,
        delay_scale: float = 1.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.engine = engine
        self.display = display or engine.display
        self.providers = (
            list(providers) if providers is not None else default_providers(engine.store)
        )
        self.rng = rng if rng is not None else engine.rng
        self.delay_scale = delay_scale
        self.sleep = sleep
        self.state = SubmitState.idle
        self.session: Optional[QuerySession] = None
        self.last_processing_ms: Optional[float] = None

    @property
    def busy(self) -> bool:
        return self.state is SubmitState.submitting

    def show_message(self, message: str, kind: str = "info") -> None:
        css_class = "error" if kind == "error" else "info"
        self.display.set(
            slots.RESPONSE_HTML, f'<div class="{css_class}">{html.escape(message)}</div>'
        )

    async def submit(self, query_text: str | None) -> SubmitResult:
        if self.busy:
            logger.warning("Ignoring submission while another query is in flight")
            return SubmitResult("busy")

        try:
            query = validate_query(query_text)
        except QueryValidationError as exc:
            self.show_message(str(exc), "error")
            return SubmitResult("rejected", errors=[str(exc)])

        self.state = SubmitState.submitting
        self.session = QuerySession(query_text=query)

        self.display.set(slots.INPUT_DISABLED, True)
        self.display.set(slots.INPUT_OPACITY, 0.6)
        self.display.set(slots.THINKING_VISIBLE, True)
        self.display.set(
            slots.RESPONSE_HTML,
            f'<p class="placeholder">{settings.PROCESSING_PLACEHOLDER}</p>',
        )

        self.engine.start()

        try:
            processing_ms = calculate_processing_time(
                self.engine.state.max_hash_rate, self.rng
            )
            self.last_processing_ms = processing_ms
            text, provider = await self._respond(query, processing_ms)
            self.display.set(
                slots.RESPONSE_HTML,
                f'<div class="ai-response">{html.escape(text)}</div>',
            )
            result = SubmitResult("completed", text=text, provider=provider)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Query processing failed")
            self.display.set(
                slots.RESPONSE_HTML,
                f'<div class="error">Error: {html.escape(str(exc))}</div>',
            )
            result = SubmitResult("error", errors=[str(exc)])
        finally:
            self.engine.stop()
            self.display.set(slots.THINKING_VISIBLE, False)
            self.display.set(slots.INPUT_DISABLED, False)
            self.display.set(slots.INPUT_OPACITY, 1.0)
            self.display.set(slots.INPUT_VALUE, "")
            self.session = None
            self.state = SubmitState.idle

        return result

    async def _respond(self, query: str, processing_ms: float) -> tuple[str, Optional[str]]:
        started = time.monotonic()

        winner, _failures = await generate_with_fallback(self.providers, query)
        if winner is not None:
            logger.info("AI processing took %dms", (time.monotonic() - started) * 1000)
            return winner.labelled_text(), winner.provider

        # No provider answered: let the simulated processing time play out
        remaining_s = processing_ms / 1000 * self.delay_scale - (time.monotonic() - started)
        if remaining_s > 0:
            await self.sleep(remaining_s)

        ctx = self.engine.snapshot(processing_time_s=processing_ms / 1000)
        logger.info("AI processing took %dms", (time.monotonic() - started) * 1000)
        return generate_contextual_response(query, ctx), None
