"""
Progressive bracket engine shared by the personal and corporate calculators.

A bracket table is an ordered, contiguous list of ``TaxBracket`` covering
[0, infinity). Each bracket taxes only the slice of the amount that falls
inside it, so for any amount >= 0 the slices sum back to the amount and
the tax is non-decreasing in the amount.

The same module holds ``RateTier`` threshold tables used for step
functions (EPF and SOCSO rates that depend on the monthly salary band).
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, List, Optional, Sequence, Tuple

from entitytax.calculator.decimal_math import money, to_decimal
from entitytax.models.results import TaxBracketBreakdown


@dataclass(frozen=True)
class TaxBracket:
    min: float
    max: Optional[float]  # None means no upper bound
    rate: float           # e.g. 0.24 for 24%


@dataclass(frozen=True)
class ProgressiveTaxResult:
    tax: float
    breakdown: Tuple[TaxBracketBreakdown, ...]


@dataclass(frozen=True)
class RateTier:
    """One row of a threshold table: applies while value <= ceiling."""
    ceiling: Optional[float]  # None means no upper bound
    rate: float


def _slices(amount: Decimal, brackets: Sequence[TaxBracket]) -> Iterable[Tuple[TaxBracket, Decimal]]:
    for bracket in brackets:
        lower = to_decimal(bracket.min)
        if amount <= lower:
            break
        upper = amount if bracket.max is None else min(amount, to_decimal(bracket.max))
        in_bracket = upper - lower
        if in_bracket > 0:
            yield bracket, in_bracket


def calculate_progressive_tax(amount: float, brackets: Sequence[TaxBracket]) -> ProgressiveTaxResult:
    """
    Compute tax and the per-bracket breakdown for ``amount``.

    The total is rounded once from the exact sum; each breakdown row is
    rounded on its own, so rows may differ from the total by a sen.

    Args:
        amount: taxable amount (anything <= 0 yields zero tax).
        brackets: ordered low-to-high bracket table.

    Returns:
        ProgressiveTaxResult with the rounded tax and touched brackets only.
    """
    if amount <= 0:
        return ProgressiveTaxResult(tax=0.0, breakdown=())

    amount_d = to_decimal(amount)
    total = Decimal("0")
    breakdown: List[TaxBracketBreakdown] = []

    for bracket, in_bracket in _slices(amount_d, brackets):
        bracket_tax = in_bracket * to_decimal(bracket.rate)
        total += bracket_tax
        breakdown.append(
            TaxBracketBreakdown(
                bracket_min=bracket.min,
                bracket_max=bracket.max,
                rate=bracket.rate,
                amount_in_bracket=float(money(in_bracket)),
                tax_for_bracket=float(money(bracket_tax)),
            )
        )

    return ProgressiveTaxResult(tax=float(money(total)), breakdown=tuple(breakdown))


def progressive_tax(amount: float, brackets: Sequence[TaxBracket]) -> float:
    """Shortcut returning only the rounded tax."""
    return calculate_progressive_tax(amount, brackets).tax


def validate_brackets(brackets: Sequence[TaxBracket]) -> None:
    """
    Check that a table starts at 0, is contiguous and ends unbounded.

    Raises:
        ValueError: if the table has gaps, overlaps or a bounded top.
    """
    if not brackets:
        raise ValueError("Bracket table must not be empty")
    if brackets[0].min != 0:
        raise ValueError("First bracket must start at 0")
    for current, following in zip(brackets, brackets[1:]):
        if current.max is None or current.max != following.min:
            raise ValueError(
                f"Brackets must be contiguous: {current.max} does not meet {following.min}"
            )
    if brackets[-1].max is not None:
        raise ValueError("Last bracket must be unbounded")
    for bracket in brackets:
        if bracket.rate < 0:
            raise ValueError("Bracket rates must be non-negative")


def rate_for(value: float, tiers: Sequence[RateTier]) -> float:
    """
    Look up the rate of the first tier whose ceiling covers ``value``.

    Examples:
        >>> tiers = [RateTier(5000, 0.13), RateTier(None, 0.12)]
        >>> rate_for(5000, tiers)
        0.13
        >>> rate_for(5000.01, tiers)
        0.12
    """
    for tier in tiers:
        if tier.ceiling is None or value <= tier.ceiling:
            return tier.rate
    return 0.0


def tier_ceilings(*tables: Sequence[RateTier]) -> List[float]:
    """Sorted union of every bounded ceiling across the given tables."""
    return sorted({tier.ceiling for table in tables for tier in table if tier.ceiling is not None})
