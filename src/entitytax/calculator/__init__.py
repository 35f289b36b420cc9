from .brackets import RateTier, TaxBracket, calculate_progressive_tax, progressive_tax
from .comparator import ScenarioComparator
from .corporate_tax import CorporateTaxResult, calculate_corporate_tax
from .personal_tax import PersonalTaxResult, calculate_personal_tax, required_income_for_net_cash
from .sdn_bhd import SdnBhdCalculator, calculate_sdn_bhd_scenario
from .sole_prop import SolePropCalculator, calculate_sole_prop_scenario
from .tax_year_config import TaxYearConfig

# The engine facade pulls in validation, which depends on this package;
# import it from ``entitytax.calculator.engine`` or ``entitytax``.

__all__ = [
    "RateTier",
    "TaxBracket",
    "calculate_progressive_tax",
    "progressive_tax",
    "ScenarioComparator",
    "CorporateTaxResult",
    "calculate_corporate_tax",
    "PersonalTaxResult",
    "calculate_personal_tax",
    "required_income_for_net_cash",
    "SdnBhdCalculator",
    "calculate_sdn_bhd_scenario",
    "SolePropCalculator",
    "calculate_sole_prop_scenario",
    "TaxYearConfig",
]
