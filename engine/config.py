"""
config.py — Playback Configuration
===================================
Speed presets plus the few limits the web surface enforces.

StepperConfig is built from a mapping of UPPER_CASE keys, which is what
Flask's app.config holds after from_mapping() / from_prefixed_env():

    ALGOSTEP_DEFAULT_DELAY_MS=150 flask --app main run
"""

import math
from dataclasses import dataclass, fields
from numbers import Real
from typing import Any, Dict, Mapping

from engine.errors import InvalidConfig


# ---------------------------------------------------------------------------
# Speed presets (milliseconds per step)
# ---------------------------------------------------------------------------
SPEED_PRESETS: Dict[str, float] = {
    "slow":   1000,   # teaching mode
    "medium": 400,
    "fast":   150,    # demo mode
    "turbo":  50,
}

MAX_DELAY_MS = 3_600_000   # one hour

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def validate_delay(delay_ms: Any) -> float:
    """Return `delay_ms` if it is a usable delay, else raise InvalidConfig."""
    if isinstance(delay_ms, bool) or not isinstance(delay_ms, Real):
        raise InvalidConfig(f"delay_ms must be a number, got {delay_ms!r}")
    if isinstance(delay_ms, float) and not math.isfinite(delay_ms):
        raise InvalidConfig(f"delay_ms must be finite, got {delay_ms}")
    if delay_ms < 0:
        raise InvalidConfig(f"delay_ms must be >= 0, got {delay_ms}")
    if delay_ms > MAX_DELAY_MS:
        raise InvalidConfig(f"delay_ms must be at most {MAX_DELAY_MS}, got {delay_ms}")
    return delay_ms


def preset_delay(preset: str) -> float:
    try:
        return SPEED_PRESETS[preset]
    except (KeyError, TypeError):
        raise InvalidConfig(
            f"unknown speed preset {preset!r}; choose from {', '.join(SPEED_PRESETS)}"
        ) from None


@dataclass
class StepperConfig:
    """Configuration for the playback engine and its web surface."""

    default_delay_ms: float = SPEED_PRESETS["medium"]  # delay a fresh controller starts with
    max_matrix_size:  int   = 12    # Floyd-Warshall: largest n accepted over the API
    max_fib_n:        int   = 30    # Fibonacci: largest n accepted over the API
    max_nodes:        int   = 50    # Topological sort: most graph nodes accepted over the API
    max_words:        int   = 200   # Trie: most words accepted over the API
    log_level:        str   = "INFO"

    def __post_init__(self):
        """Validate every field."""
        validate_delay(self.default_delay_ms)
        for name in ("max_matrix_size", "max_fib_n", "max_nodes", "max_words"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise InvalidConfig(f"{name} must be a non-negative integer, got {value!r}")
        if not isinstance(self.log_level, str) or self.log_level.upper() not in _LOG_LEVELS:
            raise InvalidConfig(f"log_level must be one of {', '.join(_LOG_LEVELS)}")
        self.log_level = self.log_level.upper()

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "StepperConfig":
        """Pick DEFAULT_DELAY_MS, MAX_MATRIX_SIZE, … out of `mapping` (e.g. app.config)."""
        kwargs = {}
        for f in fields(cls):
            key = f.name.upper()
            if key in mapping:
                kwargs[f.name] = mapping[key]
        return cls(**kwargs)

    def to_mapping(self) -> Dict[str, Any]:
        return {f.name.upper(): getattr(self, f.name) for f in fields(self)}
