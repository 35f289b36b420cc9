from .inputs import (
    AuditCriteria,
    InputMode,
    ProfitMode,
    Reliefs,
    ResolvedInputs,
    TargetMode,
    TaxCalculationInputs,
    ZakatDeductions,
    ZakatInput,
    ZakatMethod,
)
from .results import (
    ComparisonResult,
    SalaryAffordability,
    SdnBhdBreakdown,
    SdnBhdScenarioResult,
    SolePropBreakdown,
    SolePropScenarioResult,
    StepKind,
    StructureChoice,
    TaxBracketBreakdown,
    WaterfallStep,
    ZakatResult,
)

__all__ = [
    "AuditCriteria",
    "InputMode",
    "ProfitMode",
    "Reliefs",
    "ResolvedInputs",
    "TargetMode",
    "TaxCalculationInputs",
    "ZakatDeductions",
    "ZakatInput",
    "ZakatMethod",
    "ComparisonResult",
    "SalaryAffordability",
    "SdnBhdBreakdown",
    "SdnBhdScenarioResult",
    "SolePropBreakdown",
    "SolePropScenarioResult",
    "StepKind",
    "StructureChoice",
    "TaxBracketBreakdown",
    "WaterfallStep",
    "ZakatResult",
]
