# src/core/hardware.py
from __future__ import annotations

import os
from dataclasses import dataclass

import numpy as np

from src.config import settings


@dataclass(slots=True)
class HardwareHints:
    """
    Rough host description used to pick a cosmetic hash-rate tier.

    Nothing here is measured; the numbers only choose a random range.
    """

    cpu_cores: int
    memory_gb: int


def _read_memory_gb() -> int | None:
    try:
        page_size = os.sysconf("SC_PAGE_SIZE")
        pages = os.sysconf("SC_PHYS_PAGES")
    except (AttributeError, ValueError, OSError):
        # Not available on this platform (e.g. Windows)
        return None
    if page_size <= 0 or pages <= 0:
        return None
    return max(1, round(page_size * pages / 1024**3))


def read_hardware_hints() -> HardwareHints:
    """Read core count and memory size, defaulting to 4 / 4 when unavailable."""
    cores = os.cpu_count() or settings.DEFAULT_CPU_CORES
    memory = _read_memory_gb() or settings.DEFAULT_MEMORY_GB
    return HardwareHints(cpu_cores=cores, memory_gb=memory)


def tier_range(hints: HardwareHints) -> tuple[float, float]:
    for min_cores, min_memory, hash_range in settings.HARDWARE_TIERS:
        if hints.cpu_cores >= min_cores and hints.memory_gb >= min_memory:
            return hash_range
    return settings.FALLBACK_TIER_RANGE


def pick_max_hash_rate(hints: HardwareHints, rng: np.random.Generator) -> float:
    low, high = tier_range(hints)
    return float(rng.uniform(low, high))
