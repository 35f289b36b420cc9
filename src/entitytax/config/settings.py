"""Engine settings using Pydantic Settings.

Tunable knobs for the comparison engine. Statutory figures (brackets,
contribution rates, thresholds) live in the YAML tax parameters instead;
these settings cover the search and presentation behaviour around them.

Every field can be set from the environment, e.g.::

    ENTITYTAX_TAX_YEAR=YA2024-2025
    ENTITYTAX_SIMILARITY_THRESHOLD=3000
    ENTITYTAX_CROSSOVER_CACHE_SIZE=50
"""

import logging
from functools import lru_cache

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class CrossoverSettings(BaseSettings):
    """Binary-search parameters for the crossover profit."""

    model_config = SettingsConfigDict(
        env_prefix="ENTITYTAX_CROSSOVER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    min_profit: float = Field(default=0.0, ge=0, description="Lower search bound (RM)")
    max_profit: float = Field(default=2_000_000.0, gt=0, description="Upper search bound (RM)")
    tolerance: float = Field(default=100.0, gt=0, description="Stop once the interval is this narrow (RM)")
    max_iterations: int = Field(default=50, ge=1, description="Bisection iteration cap")
    early_exit_threshold: float = Field(
        default=100.0,
        ge=0,
        description="Return the current profit if the structures already differ by less than this",
    )
    cache_size: int = Field(default=50, ge=1, description="Memoized crossover results kept")

    @model_validator(mode="after")
    def check_bounds(self) -> "CrossoverSettings":
        if self.max_profit <= self.min_profit:
            raise ValueError("max_profit must be greater than min_profit")
        return self


class EngineSettings(BaseSettings):
    """Main engine settings."""

    model_config = SettingsConfigDict(
        env_prefix="ENTITYTAX_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    tax_year: str = Field(default="YA2024-2025", description="Year of Assessment to load")

    # Comparator
    similarity_threshold: float = Field(
        default=3000.0, ge=0, description="Net-cash gap below which both structures are 'similar'"
    )
    tight_margin_ratio: float = Field(
        default=0.8, gt=0, description="Salary cost / profit ratio that triggers a tight-margin warning"
    )

    # Defaults applied when the caller leaves a field out
    default_monthly_salary: float = Field(default=5000.0, ge=0, description="Director salary per month (RM)")
    default_compliance_costs: float = Field(default=5000.0, ge=0, description="Annual Sdn Bhd compliance (RM)")

    # Crossover search; built from ENTITYTAX_CROSSOVER_* unless passed in
    crossover: CrossoverSettings = Field(default_factory=CrossoverSettings)

    # Logging
    log_level: str = Field(default="INFO", description="Root log level")
    log_json: bool = Field(default=False, description="Emit JSON log lines")

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level

@lru_cache
def get_settings() -> EngineSettings:
    """
    Get cached engine settings instance.

    Returns:
        EngineSettings: Cached settings loaded from environment.
    """
    return EngineSettings()
