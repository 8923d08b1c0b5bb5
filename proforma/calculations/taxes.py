"""Income tax on real estate income for individual and corporate owners."""

import math

from ..models.lookups import (
    INDIVIDUAL_TAX_BRACKETS,
    LARGE_CORPORATE_RATE,
    RESIDENT_TAX_RATE,
    SMALL_BUSINESS_LOWER_RATE,
    SMALL_BUSINESS_THRESHOLD,
    SMALL_BUSINESS_UPPER_RATE,
    TaxBracket,
)
from ..models.simulation import TaxMode


def find_bracket(total_income: float) -> TaxBracket:
    """Find the progressive bracket that contains `total_income`."""
    for bracket in INDIVIDUAL_TAX_BRACKETS:
        if total_income <= bracket.limit:
            return bracket
    return INDIVIDUAL_TAX_BRACKETS[-1]


def individual_tax(taxable_income: float, other_income: float = 0.0) -> int:
    """Calculate income and resident tax on real estate income.

    The bracket is chosen from real estate income plus other income
    (salary etc.), and its marginal rate is applied to the real estate
    income alone. This is a flat marginal approximation, not a bracket
    by bracket integration. Losses produce zero tax and are not carried
    forward.

    Args:
        taxable_income: Real estate taxable income (NOI - depreciation - interest).
        other_income: Other annual income, used only to pick the bracket.

    Returns:
        Income tax plus 10% resident tax, floored.

    Example:
        >>> individual_tax(1_000_000, other_income=5_000_000)
        300000  # 20% bracket + 10% resident
    """
    if taxable_income <= 0:
        return 0

    bracket = find_bracket(taxable_income + other_income)
    income_tax = taxable_income * bracket.rate
    resident_tax = taxable_income * RESIDENT_TAX_RATE

    return math.floor(income_tax + resident_tax)


def corporate_tax(taxable_income: float, is_small_business: bool = True) -> int:
    """Calculate corporate tax with simplified effective rates.

    Small businesses pay 25% up to 8M and 35% above; others pay a flat 30%.

    Args:
        taxable_income: Corporate taxable income.
        is_small_business: Capital of 100M yen or less.

    Returns:
        Tax amount, floored.
    """
    if taxable_income <= 0:
        return 0

    if is_small_business:
        if taxable_income <= SMALL_BUSINESS_THRESHOLD:
            return math.floor(taxable_income * SMALL_BUSINESS_LOWER_RATE)
        return math.floor(
            SMALL_BUSINESS_THRESHOLD * SMALL_BUSINESS_LOWER_RATE
            + (taxable_income - SMALL_BUSINESS_THRESHOLD) * SMALL_BUSINESS_UPPER_RATE
        )
    return math.floor(taxable_income * LARGE_CORPORATE_RATE)


def compute_tax(
    taxable_income: float,
    tax_mode: TaxMode,
    other_income: float = 0.0,
    is_small_business: bool = True,
) -> int:
    """Dispatch to the individual or corporate calculation."""
    if tax_mode == TaxMode.CORPORATE:
        return corporate_tax(taxable_income, is_small_business)
    return individual_tax(taxable_income, other_income)
