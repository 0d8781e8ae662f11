# src/core/hash_miner.py
from __future__ import annotations

import hashlib
from typing import Optional

from src.core.sim_models import CollectedHash


def build_nonce(session_id: str, now_ms: int, salt: str) -> str:
    return f"{session_id}_{now_ms}_{salt}"


def sha256_hex(data: str) -> str:
    return hashlib.sha256(data.encode("utf-8")).hexdigest()


def meets_difficulty(digest: str, difficulty: int) -> bool:
    """True when the digest starts with ``difficulty`` hex zeros."""
    return digest.startswith("0" * difficulty)


def mine_once(
    session_id: str,
    now_ms: int,
    salt: str,
    difficulty: int,
) -> Optional[CollectedHash]:
    """
    Hash one freshly built nonce and return a record if it hits the target.

    This is one real SHA-256 per call; the result is never submitted anywhere.
    """
    nonce = build_nonce(session_id, now_ms, salt)
    digest = sha256_hex(nonce)
    if not meets_difficulty(digest, difficulty):
        return None
    return CollectedHash(
        hash=digest,
        timestamp=now_ms,
        nonce=nonce,
        difficulty=difficulty,
    )
