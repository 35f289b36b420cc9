"""
Tax Configuration Loader.

Loads Malaysian tax parameters from YAML files, enabling:
- Annual updates (new Year of Assessment) without code changes
- Environment-specific overrides
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

logger = logging.getLogger(__name__)

# Default config directory
CONFIG_DIR = Path(__file__).parent / "tax_parameters"

# Environment overrides look like TAXPARAM_ZAKAT__NISAB_THRESHOLD=30500
ENV_OVERRIDE_PREFIX = "TAXPARAM_"

REQUIRED_SECTIONS = (
    "personal",
    "corporate",
    "epf",
    "socso",
    "dividend",
    "zakat",
    "audit_exemption",
)


class TaxConfigError(Exception):
    """Raised when tax parameters are missing or incomplete."""


@dataclass
class ConfigMetadata:
    """Metadata about a configuration file."""
    version: str
    year_assessment: str
    effective_date: str
    source: str
    references: List[str] = field(default_factory=list)
    last_updated: str = ""
    notes: str = ""


class TaxConfigLoader:
    """
    Loads and manages tax parameters from YAML files.

    Features:
    - File discovery by Year of Assessment (``<year>.yaml``)
    - Environment variable overrides for nested keys
    - Required-section validation
    """

    def __init__(self, config_dir: Optional[Path] = None):
        """
        Initialize the config loader.

        Args:
            config_dir: Directory containing YAML parameter files.
                       Defaults to the packaged ``tax_parameters`` directory.
        """
        self.config_dir = config_dir or CONFIG_DIR
        self._configs: Dict[str, Dict[str, Any]] = {}
        self._metadata: Dict[str, ConfigMetadata] = {}

    def available_years(self) -> List[str]:
        """List Years of Assessment that have a parameter file."""
        return sorted(path.stem for path in self.config_dir.glob("*.yaml"))

    def load_config(self, year: str) -> Dict[str, Any]:
        """
        Load parameters for a Year of Assessment.

        Args:
            year: e.g. ``"YA2024-2025"``

        Returns:
            Nested dictionary of tax parameters

        Raises:
            TaxConfigError: if no file exists or required sections are missing
        """
        if year in self._configs:
            return self._configs[year]

        config = self._load_from_file(year)
        config = self._apply_env_overrides(config)
        self._validate_config(config, year)

        self._configs[year] = config
        return config

    def _load_from_file(self, year: str) -> Dict[str, Any]:
        """Load parameters from the year's YAML file."""
        year_file = self.config_dir / f"{year}.yaml"
        if not year_file.exists():
            logger.error(f"No tax parameter file for {year} in {self.config_dir}")
            raise TaxConfigError(
                f"Unsupported year of assessment {year!r}; "
                f"available: {', '.join(self.available_years()) or 'none'}"
            )

        logger.info(f"Loading tax parameters from {year_file}")
        with open(year_file, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}

        if "_metadata" in config:
            self._metadata[year] = ConfigMetadata(**config.pop("_metadata"))

        return config

    def _apply_env_overrides(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Apply environment variable overrides to scalar parameters."""
        for key, value in os.environ.items():
            if not key.startswith(ENV_OVERRIDE_PREFIX):
                continue
            path = [part.lower() for part in key[len(ENV_OVERRIDE_PREFIX):].split("__")]
            target = config
            for part in path[:-1]:
                target = target.get(part)
                if not isinstance(target, dict):
                    break
            if not isinstance(target, dict) or path[-1] not in target:
                logger.warning(f"Ignoring env override for unknown parameter: {key}")
                continue
            try:
                parsed = yaml.safe_load(value)
            except yaml.YAMLError:
                logger.warning(f"Could not parse env override: {key}={value}")
                continue
            if isinstance(target[path[-1]], (dict, list)) or not isinstance(parsed, (int, float)):
                logger.warning(f"Env override must be a number for scalar parameter: {key}")
                continue
            target[path[-1]] = parsed
            logger.info(f"Applied env override: {'.'.join(path)}={parsed}")

        return config

    def _validate_config(self, config: Dict[str, Any], year: str) -> None:
        """Validate configuration for completeness."""
        missing = [section for section in REQUIRED_SECTIONS if section not in config]
        if missing:
            logger.error(f"Missing required tax parameter sections for {year}: {missing}")
            raise TaxConfigError(f"Tax parameters for {year} are missing sections: {missing}")

    def get_parameter(self, path: str, year: str, default: Any = None) -> Any:
        """
        Get a parameter by dotted path, e.g. ``"zakat.nisab_threshold"``.
        """
        value: Any = self.load_config(year)
        for part in path.split("."):
            if not isinstance(value, dict) or part not in value:
                return default
            value = value[part]
        return value

    def get_metadata(self, year: str) -> Optional[ConfigMetadata]:
        """Get metadata for a year's configuration."""
        self.load_config(year)
        return self._metadata.get(year)


# Global singleton
_config_loader: Optional[TaxConfigLoader] = None


def get_config_loader() -> TaxConfigLoader:
    """Get the global config loader instance."""
    global _config_loader
    if _config_loader is None:
        _config_loader = TaxConfigLoader()
    return _config_loader


@lru_cache(maxsize=32)
def get_tax_parameter(path: str, year: str) -> Any:
    """
    Convenience accessor for a single parameter.

    Example:
        >>> get_tax_parameter("zakat.nisab_threshold", "YA2024-2025")
        29961
    """
    return get_config_loader().get_parameter(path, year)


def clear_config_cache() -> None:
    """Clear the configuration cache (useful for testing)."""
    get_tax_parameter.cache_clear()
    global _config_loader
    _config_loader = None
