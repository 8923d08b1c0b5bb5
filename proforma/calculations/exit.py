"""Exit (sale) analysis: sale price, selling costs, capital gains tax, and total return."""

import math
from dataclasses import dataclass, field
from typing import List, Sequence

from ..models.lookups import (
    BROKERAGE_FLAT_FEE,
    BROKERAGE_RATE,
    CONSUMPTION_TAX_RATE,
    LONG_TERM_GAINS_RATE,
    LONG_TERM_HOLDING_YEARS,
    SHORT_TERM_GAINS_RATE,
    STAMP_DUTY_DEFAULT,
    STAMP_DUTY_TIERS,
)
from ..models.simulation import SimulationInput
from .depreciation import DepreciationInfo, accumulated_depreciation
from .projection import AnnualRecord, depreciation_for, record_for_year

DEFAULT_SALE_YEARS = (5, 10, 15, 20, 25, 30)


@dataclass(frozen=True)
class SaleExpenses:
    """Transaction costs paid by the seller (yen)."""

    brokerage: int = 0
    stamp_duty: int = 0
    other: int = 0

    @property
    def total(self) -> int:
        return self.brokerage + self.stamp_duty + self.other


@dataclass(frozen=True)
class ExitAnalysis:
    """Result of selling at the end of a given projection year."""

    sale_year: int
    sale_price: int = 0
    sale_expenses: SaleExpenses = field(default_factory=SaleExpenses)
    loan_balance_at_sale: float = 0.0
    accumulated_depreciation: int = 0
    capital_gains_tax: int = 0
    net_sale_proceeds: float = 0.0  # Price - loan balance - expenses - gains tax
    total_cash_flow_during_holding: float = 0.0  # Sum of ATCF through the sale year
    total_return: float = 0.0  # Net proceeds + holding cash flow - equity
    total_return_rate: float = 0.0  # Total return / equity
    annualized_return: float = 0.0


def estimate_sale_price(noi: float, cap_rate_percent: float) -> int:
    """Direct capitalization: NOI / cap rate, floored.

    Args:
        noi: Net operating income of the sale year.
        cap_rate_percent: Exit cap rate in percent.

    Returns:
        Sale price, or 0 when the cap rate is not positive.

    Example:
        >>> estimate_sale_price(6_000_000, 6.0)
        100000000
    """
    if cap_rate_percent <= 0:
        return 0
    return math.floor(noi / (cap_rate_percent / 100))


def stamp_duty(sale_price: float) -> int:
    """Stamp duty on the sale contract, tiered by price."""
    for threshold, duty in STAMP_DUTY_TIERS:
        if sale_price > threshold:
            return duty
    return STAMP_DUTY_DEFAULT


def sale_expenses(sale_price: float) -> SaleExpenses:
    """Seller's brokerage (3% + 60,000, plus consumption tax) and stamp duty."""
    brokerage = math.floor(
        (sale_price * BROKERAGE_RATE + BROKERAGE_FLAT_FEE) * (1 + CONSUMPTION_TAX_RATE)
    )
    return SaleExpenses(brokerage=brokerage, stamp_duty=stamp_duty(sale_price), other=0)


def capital_gains_tax(
    sale_price: float,
    original_building_cost: float,
    accumulated_dep: float,
    sale_expenses_total: float,
    holding_years: int,
    land_price: float,
) -> int:
    """Calculate separate-taxation capital gains tax on the sale.

    Book value is land plus depreciated building (never below zero).
    Holdings longer than five years get the long-term rate.

    Args:
        sale_price: Sale price.
        original_building_cost: Building cost at acquisition.
        accumulated_dep: Depreciation taken through the sale year.
        sale_expenses_total: Seller's transaction costs.
        holding_years: Years held.
        land_price: Land cost at acquisition.

    Returns:
        Tax amount, floored; 0 when there is no gain.
    """
    book_value = land_price + max(original_building_cost - accumulated_dep, 0)
    gain = sale_price - book_value - sale_expenses_total
    if gain <= 0:
        return 0

    rate = LONG_TERM_GAINS_RATE if holding_years > LONG_TERM_HOLDING_YEARS else SHORT_TERM_GAINS_RATE
    return math.floor(gain * rate)


def annualized_return(own_equity: float, total_return: float, years: int) -> float:
    """Compound annual return on equity; 0 when undefined."""
    final_value = own_equity + total_return
    if own_equity <= 0 or final_value <= 0 or years <= 0:
        return 0.0
    return (final_value / own_equity) ** (1 / years) - 1


def exit_analysis(
    projection: Sequence[AnnualRecord],
    sale_year: int,
    cap_rate: float,
    building_cost: float,
    land_price: float,
    own_equity: float,
    dep_info: DepreciationInfo,
) -> ExitAnalysis:
    """Analyze a sale at the end of `sale_year`.

    Args:
        projection: Annual records from `project()`.
        sale_year: Year of sale (1-indexed).
        cap_rate: Exit cap rate in percent.
        building_cost: Original building cost (yen).
        land_price: Original land price (yen).
        own_equity: Owner equity (yen).
        dep_info: Depreciation schedule used by the projection.

    Returns:
        ExitAnalysis. All amounts are zero when `sale_year` is not in the projection.
    """
    record = record_for_year(projection, sale_year)
    if record is None:
        return ExitAnalysis(sale_year=sale_year)

    price = estimate_sale_price(record.noi, cap_rate)
    expenses = sale_expenses(price)
    acc_dep = accumulated_depreciation(dep_info, sale_year)
    gains_tax = capital_gains_tax(
        price, building_cost, acc_dep, expenses.total, sale_year, land_price
    )

    net_proceeds = price - record.loan_balance - expenses.total - gains_tax
    holding_cf = sum(r.atcf for r in projection if r.year <= sale_year)
    total_return = net_proceeds + holding_cf - own_equity

    return ExitAnalysis(
        sale_year=sale_year,
        sale_price=price,
        sale_expenses=expenses,
        loan_balance_at_sale=record.loan_balance,
        accumulated_depreciation=acc_dep,
        capital_gains_tax=gains_tax,
        net_sale_proceeds=net_proceeds,
        total_cash_flow_during_holding=holding_cf,
        total_return=total_return,
        total_return_rate=total_return / own_equity if own_equity > 0 else 0.0,
        annualized_return=annualized_return(own_equity, total_return, sale_year),
    )


def exit_table(
    projection: Sequence[AnnualRecord],
    cap_rate: float,
    building_cost: float,
    land_price: float,
    own_equity: float,
    dep_info: DepreciationInfo,
    sale_years: Sequence[int] = DEFAULT_SALE_YEARS,
) -> List[ExitAnalysis]:
    """Run `exit_analysis` independently for each candidate sale year."""
    return [
        exit_analysis(projection, year, cap_rate, building_cost, land_price, own_equity, dep_info)
        for year in sale_years
    ]


def exit_table_for(
    inputs: SimulationInput,
    projection: Sequence[AnnualRecord],
    sale_years: Sequence[int] = DEFAULT_SALE_YEARS,
) -> List[ExitAnalysis]:
    """Exit table using the cap rate, costs, and equity of a simulation input."""
    return exit_table(
        projection,
        cap_rate=inputs.advanced.exit_cap_rate,
        building_cost=inputs.building_cost,
        land_price=inputs.land_price,
        own_equity=inputs.own_equity,
        dep_info=depreciation_for(inputs),
        sale_years=sale_years,
    )
