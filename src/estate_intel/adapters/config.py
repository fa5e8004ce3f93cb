# src/estate_intel/adapters/config.py
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseSettings):
    # App & logging
    ENV: str = Field(default="dev")
    LOG_LEVEL: str = Field(default="INFO")
    LOG_JSON: bool = Field(default=False)

    # persistence
    DB_URI: str = Field(default="sqlite:///estate_intel.db")

    # -----------------------------
    # Fair value model
    # -----------------------------
    # Condo floor adjustment: +/- FLOOR_ADJUSTMENT_PER_FLOOR for every floor
    # away from AVERAGE_FLOOR.
    AVERAGE_FLOOR: int = Field(default=10)
    FLOOR_ADJUSTMENT_PER_FLOOR: float = Field(default=0.005)

    # -----------------------------
    # Batch refresh
    # -----------------------------
    STALE_AFTER_HOURS: float = Field(default=24.0)
    STALE_BATCH_LIMIT: int = Field(default=100)

    model_config = SettingsConfigDict(
        env_prefix="ESTATE_INTEL_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("FLOOR_ADJUSTMENT_PER_FLOOR", mode="before")
    @classmethod
    def _to_non_negative_fraction(cls, v: Any) -> Any:
        if v is None:
            return v
        is_percent = False
        if isinstance(v, str):
            v = v.strip()
            is_percent = v.endswith("%")
            v = v.rstrip("%").strip()
        try:
            f = float(v)
        except Exception as err:
            raise ValueError("rate must be numeric or percent-like") from err
        # "0.5%" is half a percent per floor; bare numbers are fractions
        if is_percent:
            f = f / 100.0
        if f < 0:
            raise ValueError("rate must be non-negative")
        return f

    @field_validator("STALE_AFTER_HOURS", "STALE_BATCH_LIMIT", mode="before")
    @classmethod
    def _positive(cls, v: Any) -> Any:
        f = float(v)
        if f <= 0:
            raise ValueError("must be > 0")
        return v


config = AppConfig()
