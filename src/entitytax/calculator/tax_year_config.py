"""
Statutory constants for one Year of Assessment.

Builds a validated, immutable ``TaxYearConfig`` from the YAML tax
parameters so calculators never touch the loader themselves.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, List, Optional, Tuple

from entitytax.calculator.brackets import RateTier, TaxBracket, validate_brackets
from entitytax.config.tax_config_loader import TaxConfigError, TaxConfigLoader, get_config_loader


@dataclass(frozen=True)
class TaxYearConfig:
    """
    Centralized statutory constants for one Year of Assessment.

    NOTE: Values are loaded from ``config/tax_parameters/<year>.yaml`` and
    should be reviewed annually against LHDN, KWSP and PERKESO figures.
    Calculators receive one instance per calculation and never read YAML.
    """

    year_assessment: str

    # Personal income tax (Schedule 1)
    personal_brackets: Tuple[TaxBracket, ...]
    relief_limits: Dict[str, float]
    default_reliefs: Dict[str, float]

    # Corporate income tax
    sme_brackets: Tuple[TaxBracket, ...]
    standard_corporate_rate: float = 0.24
    sme_revenue_limit: float = 50_000_000.0
    sme_foreign_ownership_limit: float = 0.20

    # EPF (KWSP); employer rate steps down above the monthly ceiling
    epf_employee_rate: float = 0.11
    epf_employer_tiers: Tuple[RateTier, ...] = ()
    epf_max_relief: float = 7000.0

    # SOCSO (PERKESO); nothing is due above the wage ceiling
    socso_employer_tiers: Tuple[RateTier, ...] = ()
    socso_employee_tiers: Tuple[RateTier, ...] = ()

    # YA2025 dividend surcharge
    dividend_threshold: float = 100_000.0
    dividend_surcharge_rate: float = 0.02

    # Zakat
    zakat_rate: float = 0.025
    zakat_nisab: float = 29_961.0
    zakat_max_business_deduction_rate: float = 0.025

    # Audit exemption (all three must hold)
    audit_revenue_limit: float = 100_000.0
    audit_assets_limit: float = 300_000.0
    audit_employees_limit: int = 5

    def corporate_brackets(self, sme_qualified: bool = True) -> Tuple[TaxBracket, ...]:
        """SME table, or a single flat bracket at the standard rate."""
        if sme_qualified:
            return self.sme_brackets
        return (TaxBracket(min=0.0, max=None, rate=self.standard_corporate_rate),)

    @staticmethod
    def from_parameters(year: str, data: Dict[str, Any]) -> "TaxYearConfig":
        """
        Build a config from a parameter mapping as read from YAML.

        Raises:
            TaxConfigError: if a required key is missing or a bracket table
                is malformed.
        """
        def convert_brackets(rows: List[Dict[str, Any]]) -> Tuple[TaxBracket, ...]:
            brackets = tuple(
                TaxBracket(
                    min=float(row["min"]),
                    max=None if row.get("max") is None else float(row["max"]),
                    rate=float(row["rate"]),
                )
                for row in rows
            )
            validate_brackets(brackets)
            return brackets

        def convert_tiers(rows: List[Dict[str, Any]]) -> Tuple[RateTier, ...]:
            return tuple(
                RateTier(
                    ceiling=None if row.get("ceiling") is None else float(row["ceiling"]),
                    rate=float(row["rate"]),
                )
                for row in rows
            )

        try:
            personal = data["personal"]
            corporate = data["corporate"]
            epf = data["epf"]
            socso = data["socso"]
            dividend = data["dividend"]
            zakat = data["zakat"]
            audit = data["audit_exemption"]

            return TaxYearConfig(
                year_assessment=year,
                personal_brackets=convert_brackets(personal["brackets"]),
                relief_limits={k: float(v) for k, v in personal["relief_limits"].items()},
                default_reliefs={k: float(v) for k, v in personal["default_reliefs"].items()},
                sme_brackets=convert_brackets(corporate["sme_brackets"]),
                standard_corporate_rate=float(corporate["standard_rate"]),
                sme_revenue_limit=float(corporate.get("sme_revenue_limit", 50_000_000)),
                sme_foreign_ownership_limit=float(corporate.get("sme_foreign_ownership_limit", 0.20)),
                epf_employee_rate=float(epf["employee_rate"]),
                epf_employer_tiers=convert_tiers(epf["employer_tiers"]),
                epf_max_relief=float(epf["max_relief_contribution"]),
                socso_employer_tiers=convert_tiers(socso["employer_tiers"]),
                socso_employee_tiers=convert_tiers(socso["employee_tiers"]),
                dividend_threshold=float(dividend["threshold"]),
                dividend_surcharge_rate=float(dividend["surcharge_rate"]),
                zakat_rate=float(zakat["rate"]),
                zakat_nisab=float(zakat["nisab_threshold"]),
                zakat_max_business_deduction_rate=float(
                    zakat.get("max_business_deduction_rate", zakat["rate"])
                ),
                audit_revenue_limit=float(audit["revenue"]),
                audit_assets_limit=float(audit["total_assets"]),
                audit_employees_limit=int(audit["employees"]),
            )
        except KeyError as exc:
            raise TaxConfigError(f"Tax parameters for {year} are missing key {exc}") from exc
        except ValueError as exc:
            raise TaxConfigError(f"Tax parameters for {year} are invalid: {exc}") from exc

    @staticmethod
    def for_year(year: str, loader: Optional[TaxConfigLoader] = None) -> "TaxYearConfig":
        """
        Load the configuration for a Year of Assessment from YAML.

        Args:
            year: e.g. ``"YA2024-2025"``
            loader: Loader to read from; defaults to the global loader.

        Raises:
            TaxConfigError: If the year is not supported or incomplete.
        """
        loader = loader or get_config_loader()
        return TaxYearConfig.from_parameters(year, loader.load_config(year))

    @staticmethod
    def current() -> "TaxYearConfig":
        """
        Get the configuration for the Year of Assessment in settings.

        This is the RECOMMENDED entry point; it honours ENTITYTAX_TAX_YEAR.
        Built once per year; call ``clear_current_cache`` after changing
        the parameters on disk or in the environment.
        """
        from entitytax.config.settings import get_settings

        return _config_for_year(get_settings().tax_year)


@lru_cache(maxsize=8)
def _config_for_year(year: str) -> TaxYearConfig:
    return TaxYearConfig.for_year(year)


def clear_current_cache() -> None:
    """Forget configurations built by ``TaxYearConfig.current``."""
    _config_for_year.cache_clear()
