# src/core/sim_models.py
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class MiningVariant(str, Enum):
    """Which discovery behaviour an engine runs. One per deployment."""

    shares = "shares"
    hashes = "hashes"


class SubmitState(str, Enum):
    idle = "idle"
    submitting = "submitting"


@dataclass
class SimulationState:
    """
    Mutable counters behind the mining animation.

    Only the engine's start/stop transitions, its tick callbacks and the
    visibility handler write to this object.
    """

    max_hash_rate: float
    is_active: bool = False
    hash_rate: float = 0.0  # H/s, >= 0
    progress: float = 0.0  # %, in [0, 100)
    discovery_count: int = 0


@dataclass
class QuerySession:
    """One in-flight user query; discarded once the response is rendered."""

    query_text: str
    is_submitting: bool = True


@dataclass
class CollectedHash:
    hash: str  # hex digest
    timestamp: int  # epoch ms
    nonce: str
    difficulty: int

    def to_dict(self) -> dict:
        return {
            "hash": self.hash,
            "timestamp": self.timestamp,
            "nonce": self.nonce,
            "difficulty": self.difficulty,
        }


@dataclass(frozen=True)
class ResponseContext:
    """
    Snapshot of engine counters handed to the template responder.

    Taken once per response so the rendered text is deterministic.
    """

    hash_rate: float
    max_hash_rate: float
    discovery_count: int
    processing_time_s: float


@dataclass
class SubmitResult:
    status: str  # "completed" | "rejected" | "busy" | "error"
    text: Optional[str] = None
    provider: Optional[str] = None
    errors: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status == "completed"
