"""StepperConfig and speed presets."""

import pytest

from engine import SPEED_PRESETS, InvalidConfig, StepperConfig
from engine.config import MAX_DELAY_MS, preset_delay, validate_delay


def test_defaults():
    cfg = StepperConfig()
    assert cfg.default_delay_ms == SPEED_PRESETS["medium"] == 400
    assert cfg.log_level == "INFO"


def test_presets_get_faster():
    delays = [SPEED_PRESETS[k] for k in ("slow", "medium", "fast", "turbo")]
    assert delays == sorted(delays, reverse=True)
    assert preset_delay("turbo") == 50


@pytest.mark.parametrize("bad", [-0.1, float("nan"), float("inf"), "400", None, False])
def test_validate_delay_rejects(bad):
    with pytest.raises(InvalidConfig):
        validate_delay(bad)


def test_zero_delay_is_allowed():
    assert validate_delay(0) == 0


@pytest.mark.parametrize("kwargs", [
    {"default_delay_ms": -1},
    {"max_fib_n": -3},
    {"max_matrix_size": 2.5},
    {"max_words": True},
    {"log_level": "LOUD"},
])
def test_invalid_fields(kwargs):
    with pytest.raises(InvalidConfig):
        StepperConfig(**kwargs)


def test_log_level_is_normalised():
    assert StepperConfig(log_level="debug").log_level == "DEBUG"


def test_mapping_round_trip():
    cfg = StepperConfig(default_delay_ms=150, max_fib_n=20)
    mapping = cfg.to_mapping()
    assert mapping["DEFAULT_DELAY_MS"] == 150
    assert StepperConfig.from_mapping({**mapping, "SECRET_KEY": "x"}) == cfg


def test_huge_integer_delay_is_rejected_not_overflowed():
    with pytest.raises(InvalidConfig, match="at most"):
        validate_delay(10 ** 400)
    assert validate_delay(MAX_DELAY_MS) == MAX_DELAY_MS


def test_environment_style_mapping():
    # what app.config holds after from_prefixed_env("ALGOSTEP")
    cfg = StepperConfig.from_mapping({"MAX_NODES": 10, "LOG_LEVEL": "warning"})
    assert cfg.max_nodes == 10
    assert cfg.log_level == "WARNING"
