# src/config/settings.py

import os
from pathlib import Path

from src.config.env import APP_ENV, ENV_DEV

# Settings for the Mine-for-AI simulation page.
# Anything purely presentational lives in src/ui/style.py.

# --- Mining variant ---
# "hashes": real SHA-256 digests checked against a leading-zero target,
#           found hashes are batched into downloadable JSON files.
# "shares": purely probabilistic share discovery, nothing is saved.
MINING_VARIANT = os.getenv("MINING_VARIANT", "hashes").lower()

# --- Engine timing (seconds) ---
FAST_TICK_S = 0.1  # hash rate + discovery
SLOW_TICK_S = 0.2  # progress bar
DECAY_TICK_S = 0.1  # wind-down after stop()

# --- Hash-rate random walk ---
HASH_RATE_LOAD_MIN = 0.6  # fraction of max hash rate at the bottom of a burst
HASH_RATE_LOAD_SPAN = 0.4
HASH_RATE_JITTER_HS = 50.0  # +/- H/s noise added on every fast tick

# Initial range used before hardware detection runs (H/s)
INITIAL_MAX_HASH_RATE_RANGE = (300.0, 1800.0)

# Wind-down after mining stops
DECAY_FACTOR = 0.8
DECAY_FLOOR_HS = 10.0

# --- Progress ---
PROGRESS_RATE = 0.5  # % per slow tick at full hash rate
PROGRESS_WRAP_PCT = 100.0

# --- Discovery ---
SHARE_PROBABILITY = 0.02  # per fast tick, "shares" variant
# Leading hex zeros required on a digest ("hashes" variant). Tunable; 4 zeros
# is roughly one hit every 65k attempts.
MINING_DIFFICULTY = int(os.getenv("MINING_DIFFICULTY", "4"))

# --- Hardware tiers ---
# (min cores, min memory GB, (low H/s, high H/s)); first match wins.
DEFAULT_CPU_CORES = 4
DEFAULT_MEMORY_GB = 4
HARDWARE_TIERS = [
    (8, 8, (1500.0, 3500.0)),  # high-end
    (4, 4, (500.0, 1500.0)),  # mid-range
]
FALLBACK_TIER_RANGE = (200.0, 700.0)  # low-end

# Hidden tab throttling
HIDDEN_TAB_THROTTLE = 0.5

# --- Simulated AI processing time (ms) ---
# T = BASE / max(MIN_FACTOR, max_hash_rate / REFERENCE) + U(0, JITTER)
PROCESSING_BASE_MS = 1000.0 if APP_ENV == ENV_DEV else 3000.0
PROCESSING_MIN_FACTOR = 0.3
PROCESSING_REFERENCE_HS = 2000.0
PROCESSING_JITTER_MS = 2000.0

# --- Local persisted storage ---
LOCAL_STORE_PATH = Path(os.getenv("MINEAI_STORE_PATH", ".mineai_storage.json"))
FILE_COUNTER_KEY = "mineAI_fileCounter"
OPENAI_KEY_STORE_KEY = "openai_api_key"
ANTHROPIC_KEY_STORE_KEY = "anthropic_api_key"

# --- Hash batch artifacts ---
DOWNLOAD_DIR = Path(os.getenv("MINEAI_DOWNLOAD_DIR", "downloads"))
BATCH_FILENAME_PREFIX = "mining_hashes_"
BATCH_NUMBER_WIDTH = 6

# --- External text generation (best effort) ---
AI_PROVIDERS_ENABLED = os.getenv("AI_PROVIDERS_ENABLED", "1").lower() not in (
    "0",
    "false",
    "no",
)
OPENAI_CHAT_URL = "https://api.openai.com/v1/chat/completions"
OPENAI_MODEL = "gpt-3.5-turbo"
OPENAI_MAX_TOKENS = 500
# Ollama-style local service
LOCAL_AI_URL = os.getenv("LOCAL_AI_URL", "http://localhost:11434/api/generate")
LOCAL_AI_MODEL = os.getenv("LOCAL_AI_MODEL", "llama2")

# Requests config
PROVIDER_REQUEST_TIMEOUT_S = 30
PROVIDER_USER_AGENT = "MineForAI/0.3"

# --- Logging ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# --- Misc UI text ---
WALLET_ADDRESS = "0x6f602be9fccf656c8c3e9f36d2064d580264b393"
EMPTY_QUERY_MESSAGE = "Please enter a question or command."
PROCESSING_PLACEHOLDER = "AI is processing your request..."
HASH_HISTORY_MAX_POINTS = 600  # one minute of fast ticks
