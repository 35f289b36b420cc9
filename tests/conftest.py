"""Pytest configuration and fixtures for test suite."""

import sys
from pathlib import Path

import pytest

# Add src to path for imports
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))


def _reset_engine_state():
    """Reset module-level caches so each test starts from the environment."""
    from entitytax.calculator.engine import reset_default_engine
    from entitytax.calculator.tax_year_config import clear_current_cache
    from entitytax.config.settings import get_settings
    from entitytax.config.tax_config_loader import clear_config_cache

    reset_default_engine()
    get_settings.cache_clear()
    clear_config_cache()
    clear_current_cache()


@pytest.fixture(autouse=True)
def reset_engine_globals(monkeypatch):
    """Isolate tests from ENTITYTAX_/TAXPARAM_ variables and shared state."""
    import os

    for key in list(os.environ):
        if key.startswith(("ENTITYTAX_", "TAXPARAM_")):
            monkeypatch.delenv(key, raising=False)
    _reset_engine_state()
    yield
    _reset_engine_state()


@pytest.fixture
def config():
    """Tax year configuration for YA2024-2025."""
    from entitytax.calculator.tax_year_config import TaxYearConfig

    return TaxYearConfig.for_year("YA2024-2025")


@pytest.fixture
def engine(config):
    """Fresh comparison engine with its own crossover cache."""
    from entitytax.calculator.engine import ComparisonEngine

    return ComparisonEngine(config=config)


@pytest.fixture
def resolve(engine):
    """Resolve keyword inputs into the shape calculators take."""
    from entitytax.models.inputs import TaxCalculationInputs

    def _resolve(**fields):
        fields.setdefault("business_profit", 0.0)
        return engine.resolve_inputs(TaxCalculationInputs(**fields))

    return _resolve
