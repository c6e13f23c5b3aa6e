"""
Engine search limits.

Every search loop in the engines is bounded by one of these caps so it always
terminates. Values can be overridden through the environment (or .env).
"""
import os

from dotenv import load_dotenv

load_dotenv()


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    value = int(raw)
    if value < 1:
        raise ValueError(f"{name} must be >= 1, got {value}")
    return value


# Scheduler: forward search window and candidate step
SCHEDULER_SEARCH_DAYS = _int_env("SCHEDULER_SEARCH_DAYS", 7)
SCHEDULER_STEP_MINUTES = _int_env("SCHEDULER_STEP_MINUTES", 30)

# Default slot length when a ranking has no scheduler config
DEFAULT_SLOT_DURATION_MINUTES = 90

# Randomized pairing searches
AMERICANO_MAX_ATTEMPTS = _int_env("AMERICANO_MAX_ATTEMPTS", 5000)
LEAGUE8_MAX_ATTEMPTS = _int_env("LEAGUE8_MAX_ATTEMPTS", 50)
