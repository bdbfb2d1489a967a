"""Centralized constants for the lexiqueue engine.

All magic numbers and configuration defaults live here so every layer
imports from a single source of truth.
"""

# ---------- Session ----------
DEFAULT_MODE = "learn"
MODES = ("learn", "review")
DEFAULT_LIMIT = 10
MAX_LIMIT = 40  # Server caps page size at 40

# ---------- Top-up ----------
TOPUP_MIN_THRESHOLD = 3

# ---------- Requeue offsets ----------
AGAIN_REQUEUE_OFFSET = 1
HARD_REQUEUE_OFFSET = 3

# ---------- HTTP ----------
DEFAULT_API_BASE = "http://localhost:8888/.netlify/functions"
REVIEW_ENDPOINT = "vocabulary-review"
REQUEST_TIMEOUT = 30.0
