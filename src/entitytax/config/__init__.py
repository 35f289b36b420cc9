"""Configuration module for the comparison engine."""

from .settings import CrossoverSettings, EngineSettings, get_settings
from .tax_config_loader import (
    TaxConfigError,
    TaxConfigLoader,
    clear_config_cache,
    get_config_loader,
    get_tax_parameter,
)

__all__ = [
    "CrossoverSettings",
    "EngineSettings",
    "get_settings",
    "TaxConfigError",
    "TaxConfigLoader",
    "clear_config_cache",
    "get_config_loader",
    "get_tax_parameter",
]
