# src/core/engine.py
from __future__ import annotations

import logging
import string
import time
from collections import deque
from pathlib import Path
from typing import Callable, Iterator, Optional

import numpy as np

from src.config import settings
from src.core import display as slots
from src.core.batches import ArtifactSaveError, BatchWriter, build_batch_document
from src.core.display import DisplaySink, NullDisplay
from src.core.hardware import HardwareHints, pick_max_hash_rate, read_hardware_hints
from src.core.hash_miner import mine_once
from src.core.local_store import LocalStore
from src.core.scheduler import PeriodicTask
from src.core.sim_models import (
    CollectedHash,
    MiningVariant,
    ResponseContext,
    SimulationState,
)

logger = logging.getLogger(__name__)

STATUS_MINING = "Mining"
STATUS_IDLE = "Idle"

_BASE36 = string.digits + string.ascii_lowercase


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def _now_ms() -> int:
    return int(time.time() * 1000)


def generate_session_id(rng: np.random.Generator, now_ms: Optional[int] = None) -> str:
    """'session_' + base-36 wall clock (ms) + 5 random base-36 characters."""
    now_ms = _now_ms() if now_ms is None else now_ms
    suffix = "".join(_BASE36[int(i)] for i in rng.integers(0, 36, size=5))
    return f"session_{_to_base36(now_ms)}{suffix}"


def next_hash_rate(max_hash_rate: float, rng: np.random.Generator) -> float:
    """One step of the bursty hash-rate walk; never negative."""
    load = settings.HASH_RATE_LOAD_MIN + rng.uniform(0, settings.HASH_RATE_LOAD_SPAN)
    jitter = rng.uniform(-settings.HASH_RATE_JITTER_HS, settings.HASH_RATE_JITTER_HS)
    return max(0.0, float(max_hash_rate * load + jitter))


def decay_step(
    hash_rate: float,
    factor: float = settings.DECAY_FACTOR,
    floor: float = settings.DECAY_FLOOR_HS,
) -> float:
    """Multiply by ``factor``; anything under ``floor`` snaps to exactly 0."""
    value = hash_rate * factor
    return 0.0 if value < floor else value


def decay_sequence(
    hash_rate: float,
    factor: float = settings.DECAY_FACTOR,
    floor: float = settings.DECAY_FLOOR_HS,
) -> Iterator[float]:
    """Yield every value the wind-down passes through, ending with 0.0."""
    value = hash_rate
    while True:
        value = decay_step(value, factor, floor)
        yield value
        if value == 0.0:
            return


class SimulationEngine:
    """
    Drives the hash-rate / progress / discovery numbers shown while a query runs.

    Two periodic tasks run while active: a fast tick (hash rate and discovery)
    and a slow tick (progress). ``stop()`` swaps them for a decay task that
    winds the hash rate down to zero. Everything runs on one asyncio loop, so
    ``start()`` and ``stop()`` must be called from inside it.
    """

    def __init__(
        self,
        display: Optional[DisplaySink] = None,
        variant: MiningVariant | str | None = None,
        rng: Optional[np.random.Generator] = None,
        store: Optional[LocalStore] = None,
        batch_writer: Optional[BatchWriter] = None,
        hints_reader: Callable[[], HardwareHints] = read_hardware_hints,
        difficulty: Optional[int] = None,
        share_probability: float = settings.SHARE_PROBABILITY,
        fast_tick_s: float = settings.FAST_TICK_S,
        slow_tick_s: float = settings.SLOW_TICK_S,
        decay_tick_s: float = settings.DECAY_TICK_S,
        clock_ms: Callable[[], int] = _now_ms,
    ) -> None:
        self.display = display or NullDisplay()
        self.variant = MiningVariant(variant or settings.MINING_VARIANT)
        self.rng = rng if rng is not None else np.random.default_rng()
        self.hints_reader = hints_reader
        self.difficulty = settings.MINING_DIFFICULTY if difficulty is None else difficulty
        self.share_probability = share_probability
        self.clock_ms = clock_ms

        self.session_id = generate_session_id(self.rng, clock_ms())
        low, high = settings.INITIAL_MAX_HASH_RATE_RANGE
        self.state = SimulationState(max_hash_rate=float(self.rng.uniform(low, high)))
        self.status = STATUS_IDLE

        self.current_hashes: list[CollectedHash] = []
        self.store = store or LocalStore()
        self.batch_writer = batch_writer or BatchWriter()
        self.file_counter = 0
        if self.variant is MiningVariant.hashes:
            self.file_counter = self.store.next_file_number()

        # (seconds since construction, hash rate) for charts
        self.hash_rate_history: deque[tuple[float, float]] = deque(
            maxlen=settings.HASH_HISTORY_MAX_POINTS
        )
        self._t0 = time.monotonic()
        # max_hash_rate currently halved for a hidden page
        self.throttled = False

        self._fast = PeriodicTask("fast-tick", fast_tick_s, self._on_fast_tick)
        self._slow = PeriodicTask("slow-tick", slow_tick_s, self._on_slow_tick)
        self._decay = PeriodicTask("decay", decay_tick_s, self._on_decay_tick)

        self.detect_hardware()
        self.update_display()
        logger.info("Session initialized: %s (%s variant)", self.session_id, self.variant.value)

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def is_active(self) -> bool:
        return self.state.is_active

    @property
    def is_decaying(self) -> bool:
        return self._decay.running

    @property
    def fast_ticks(self) -> int:
        return self._fast.ticks

    @property
    def slow_ticks(self) -> int:
        return self._slow.ticks

    def snapshot(self, processing_time_s: float) -> ResponseContext:
        return ResponseContext(
            hash_rate=self.state.hash_rate,
            max_hash_rate=self.state.max_hash_rate,
            discovery_count=self.state.discovery_count,
            processing_time_s=processing_time_s,
        )

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def start(self) -> None:
        if self.state.is_active:
            return

        self.state.is_active = True
        # A restart during wind-down takes over from the decay
        self._decay.cancel()
        self._set_status(STATUS_MINING, "value")

        self._fast.start()
        self._slow.start()
        logger.info("Mining started")

    def stop(self) -> None:
        if not self.state.is_active:
            return

        self.state.is_active = False
        self._fast.cancel()
        self._slow.cancel()
        self._decay.start()
        logger.info("Mining stopped")

    async def wait_until_idle(self) -> None:
        """Wait for a running wind-down to reach zero."""
        await self._decay.wait()

    def shutdown(self) -> None:
        """Cancel every task without the wind-down (used when tearing down a loop)."""
        self._fast.cancel()
        self._slow.cancel()
        self._decay.cancel()
        self.state.is_active = False
        self.state.hash_rate = 0.0
        self._set_status(STATUS_IDLE, "value inactive")

    # ------------------------------------------------------------------
    # Hardware / visibility
    # ------------------------------------------------------------------

    def detect_hardware(self) -> float:
        hints = self.hints_reader()
        self.state.max_hash_rate = pick_max_hash_rate(hints, self.rng)
        self.throttled = False
        logger.info(
            "Detected %d cores, %dGB RAM. Max hash rate: %.1f H/s",
            hints.cpu_cores,
            hints.memory_gb,
            self.state.max_hash_rate,
        )
        return self.state.max_hash_rate

    def on_visibility_change(self, hidden: bool) -> None:
        """
        Halve the max hash rate once when a mining page is hidden.

        Repeated hide events do not stack; showing the page re-detects
        hardware, which also lifts the throttle.
        """
        if hidden and self.state.is_active:
            if self.throttled:
                return
            logger.info("Page hidden, reducing mining intensity")
            self.state.max_hash_rate *= settings.HIDDEN_TAB_THROTTLE
            self.throttled = True
        elif not hidden:
            self.detect_hardware()

    # ------------------------------------------------------------------
    # Tick bodies
    # ------------------------------------------------------------------

    def simulate_mining(self) -> None:
        self.state.hash_rate = next_hash_rate(self.state.max_hash_rate, self.rng)
        self._record_sample()

        if self.variant is MiningVariant.hashes:
            self._mine_hash()
        elif self.rng.random() < self.share_probability:
            self._register_discovery()

        self.update_display()

    def update_progress(self) -> None:
        if not self.state.is_active:
            return

        self.state.progress += (
            self.state.hash_rate / self.state.max_hash_rate
        ) * settings.PROGRESS_RATE

        if self.state.progress >= settings.PROGRESS_WRAP_PCT:
            try:
                if self.variant is MiningVariant.hashes:
                    self.flush_hashes()
            finally:
                self.state.progress = 0.0

        self.display.set(slots.PROGRESS_WIDTH, self.state.progress)

    def flush_hashes(self) -> Optional[Path]:
        """
        Write collected hashes to a batch file and start a new batch.

        Returns the written path, or None when there was nothing to write or
        the save failed. On failure the hashes and the batch number are kept,
        so the next flush rewrites the same file with everything collected.
        """
        if not self.current_hashes:
            return None

        document = build_batch_document(
            self.session_id, self.file_counter, self.current_hashes
        )
        try:
            path = self.batch_writer.write(document)
            next_number = self._claim_file_number()
        except ArtifactSaveError as exc:
            logger.error("Error saving hash file: %s", exc)
            return None

        self.current_hashes = []
        self.file_counter = next_number
        return path

    def _claim_file_number(self) -> int:
        try:
            return self.store.next_file_number()
        except OSError as exc:
            raise ArtifactSaveError(f"Could not advance batch counter: {exc}") from exc

    def _mine_hash(self) -> None:
        salt = _to_base36(int(self.rng.integers(0, 2**62)))
        found = mine_once(self.session_id, self.clock_ms(), salt, self.difficulty)
        if found is not None:
            self.current_hashes.append(found)
            self._register_discovery()

    def _register_discovery(self) -> None:
        self.state.discovery_count += 1
        self.display.set(slots.DISCOVERY_PULSE, self.state.discovery_count)

    def _on_fast_tick(self) -> bool:
        self.simulate_mining()
        return True

    def _on_slow_tick(self) -> bool:
        self.update_progress()
        return True

    def _on_decay_tick(self) -> bool:
        self.state.hash_rate = decay_step(self.state.hash_rate)
        self._record_sample()
        finished = self.state.hash_rate == 0.0
        if finished:
            self._set_status(STATUS_IDLE, "value inactive")
        self.update_display()
        return not finished

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------

    def update_display(self) -> None:
        self.display.set(slots.HASH_RATE_TEXT, f"{round(self.state.hash_rate)} H/s")
        self.display.set(slots.PROGRESS_TEXT, f"{round(self.state.progress)}%")
        self.display.set(slots.DISCOVERY_TEXT, str(self.state.discovery_count))

    def _set_status(self, text: str, css_class: str) -> None:
        self.status = text
        self.display.set(slots.STATUS_TEXT, text)
        self.display.set(slots.STATUS_CLASS, css_class)

    def _record_sample(self) -> None:
        self.hash_rate_history.append(
            (time.monotonic() - self._t0, self.state.hash_rate)
        )
