import numpy as np
import pytest

from src.core.batches import BatchWriter
from src.core.display import MemoryDisplay
from src.core.engine import SimulationEngine
from src.core.hardware import HardwareHints
from src.core.local_store import LocalStore

# Fast timings so asyncio-driven tests finish in milliseconds
FAST_TIMINGS = dict(fast_tick_s=0.001, slow_tick_s=0.002, decay_tick_s=0.001)


@pytest.fixture()
def store(tmp_path) -> LocalStore:
    return LocalStore(tmp_path / "storage.json")


@pytest.fixture()
def make_engine(tmp_path, store):
    def _make(**overrides) -> SimulationEngine:
        kwargs = dict(
            display=MemoryDisplay(),
            variant="hashes",
            rng=np.random.default_rng(1234),
            store=store,
            batch_writer=BatchWriter(tmp_path / "downloads"),
            hints_reader=lambda: HardwareHints(cpu_cores=4, memory_gb=4),
            **FAST_TIMINGS,
        )
        kwargs.update(overrides)
        return SimulationEngine(**kwargs)

    return _make
