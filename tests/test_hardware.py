import numpy as np
import pytest

from src.core import hardware
from src.core.hardware import (
    HardwareHints,
    pick_max_hash_rate,
    read_hardware_hints,
    tier_range,
)


@pytest.mark.parametrize(
    "cores, memory, expected",
    [
        (8, 8, (1500.0, 3500.0)),
        (16, 32, (1500.0, 3500.0)),
        (8, 4, (500.0, 1500.0)),
        (4, 4, (500.0, 1500.0)),
        (4, 2, (200.0, 700.0)),
        (2, 16, (200.0, 700.0)),
    ],
)
def test_tier_range(cores, memory, expected):
    assert tier_range(HardwareHints(cpu_cores=cores, memory_gb=memory)) == expected


def test_pick_max_hash_rate_inside_tier():
    rng = np.random.default_rng(9)
    hints = HardwareHints(cpu_cores=12, memory_gb=16)
    values = [pick_max_hash_rate(hints, rng) for _ in range(200)]
    assert all(1500.0 <= v < 3500.0 for v in values)


def test_read_hardware_hints_defaults(monkeypatch):
    monkeypatch.setattr(hardware.os, "cpu_count", lambda: None)
    monkeypatch.setattr(hardware, "_read_memory_gb", lambda: None)
    hints = read_hardware_hints()
    assert hints == HardwareHints(cpu_cores=4, memory_gb=4)


def test_read_hardware_hints_uses_host_values(monkeypatch):
    monkeypatch.setattr(hardware.os, "cpu_count", lambda: 16)
    monkeypatch.setattr(hardware, "_read_memory_gb", lambda: 32)
    assert read_hardware_hints() == HardwareHints(cpu_cores=16, memory_gb=32)
