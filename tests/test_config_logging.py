import io

import pytest
from loguru import logger
from pydantic import ValidationError

from estate_intel.adapters.config import AppConfig
from estate_intel.adapters.logging_utils import configure_logging


def test_defaults():
    cfg = AppConfig()
    assert cfg.AVERAGE_FLOOR == 10
    assert cfg.FLOOR_ADJUSTMENT_PER_FLOOR == pytest.approx(0.005)
    assert cfg.STALE_BATCH_LIMIT == 100


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("ESTATE_INTEL_AVERAGE_FLOOR", "8")
    monkeypatch.setenv("ESTATE_INTEL_FLOOR_ADJUSTMENT_PER_FLOOR", "0.5%")
    monkeypatch.setenv("ESTATE_INTEL_STALE_AFTER_HOURS", "6")

    cfg = AppConfig()

    assert cfg.AVERAGE_FLOOR == 8
    assert cfg.FLOOR_ADJUSTMENT_PER_FLOOR == pytest.approx(0.005)
    assert cfg.STALE_AFTER_HOURS == 6.0


def test_invalid_values_rejected(monkeypatch):
    monkeypatch.setenv("ESTATE_INTEL_FLOOR_ADJUSTMENT_PER_FLOOR", "-1")
    with pytest.raises(ValidationError):
        AppConfig()

    monkeypatch.setenv("ESTATE_INTEL_FLOOR_ADJUSTMENT_PER_FLOOR", "0.005")
    monkeypatch.setenv("ESTATE_INTEL_STALE_BATCH_LIMIT", "0")
    with pytest.raises(ValidationError):
        AppConfig()


def test_configure_logging_respects_level():
    buf = io.StringIO()
    configure_logging("WARNING", json=False, sink=buf)
    logger.info("hidden message")
    logger.warning("visible message")

    err = buf.getvalue()
    assert "visible message" in err
    assert "hidden message" not in err

    configure_logging("INFO")


@pytest.mark.parametrize(
    "raw,expected",
    [("0.5%", 0.005), ("0.05%", 0.0005), ("0.1", 0.1), ("0.005", 0.005)],
)
def test_floor_rate_percent_suffix_decides_scaling(monkeypatch, raw, expected):
    monkeypatch.setenv("ESTATE_INTEL_FLOOR_ADJUSTMENT_PER_FLOOR", raw)
    assert AppConfig().FLOOR_ADJUSTMENT_PER_FLOOR == pytest.approx(expected)
