"""Annual projection engine.

Produces one AnnualRecord per year from a SimulationInput, covering:
- Rent decline and vacancy escalation
- Operating expenses and NOI
- Debt service across all loans, re-amortized each year
- Depreciation, taxable income, and income tax
- Before/after-tax cash flow and cumulative cash position
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from ..models.simulation import Expenses, ManagementFeeMode, SimulationInput
from .amortization import LoanState, LoanYear, advance_loan
from .depreciation import DepreciationInfo, compute_depreciation, yearly_depreciation
from .taxes import compute_tax

logger = logging.getLogger(__name__)

DEFAULT_PROJECTION_YEARS = 35


@dataclass(frozen=True)
class AnnualRecord:
    """Projected results for a single year."""

    year: int

    # Income
    gross_income: float  # Potential gross income after rent decline
    vacancy_rate: float  # Percent
    vacancy_loss: float
    effective_income: float  # EGI

    # Expenses
    management_fee: float
    opex: float  # Total, including management fee
    noi: float

    # Financing
    debt_service: float  # ADS across all loans
    interest: float
    principal: float
    btcf: float
    loan_balance: float  # Aggregate closing balance

    # Tax
    depreciation: float
    taxable_income: float
    tax_amount: float
    atcf: float

    cumulative_cash_flow: float  # Running ATCF, seeded at -equity

    # Ratios
    dscr: float  # inf when there is no debt service
    ccr: float

    loans: Tuple[LoanYear, ...] = ()


def potential_gross_income(inputs: SimulationInput) -> float:
    """Annual income at 100% occupancy before rent decline (yen)."""
    return inputs.rent_roll.monthly_potential_income * 12


def fixed_operating_expenses(inputs: SimulationInput) -> float:
    """Annual operating expenses that do not depend on income (yen)."""
    return inputs.expenses.fixed_annual


def management_fee(expenses: Expenses, effective_income: float) -> float:
    """Annual management fee as a share of EGI or a fixed monthly amount.

    Args:
        expenses: Expense assumptions.
        effective_income: Annual effective gross income.

    Returns:
        Annual management fee.
    """
    if expenses.management_fee_mode == ManagementFeeMode.RATIO:
        return effective_income * (expenses.management_fee_ratio / 100)
    return expenses.management_fee_fixed * 12


def depreciation_for(inputs: SimulationInput) -> DepreciationInfo:
    """Depreciation schedule implied by the input's building cost and structure."""
    return compute_depreciation(
        structure=inputs.property_details.structure,
        building_cost=inputs.building_cost,
        equipment_ratio=inputs.advanced.equipment_ratio,
        is_used=inputs.is_used_property,
        building_age=inputs.property_details.building_age,
    )


def _advance_loans(
    states: Sequence[LoanState],
    year: int,
    interest_rate_rise: float,
) -> tuple[Tuple[LoanState, ...], Tuple[LoanYear, ...]]:
    """Advance every loan one year; returns replacement states and yearly results."""
    results = [advance_loan(state, year, interest_rate_rise) for state in states]
    new_states = tuple(state for state, _ in results)
    loan_years = tuple(loan_year for _, loan_year in results)
    return new_states, loan_years


def project(
    inputs: SimulationInput,
    years: int = DEFAULT_PROJECTION_YEARS,
) -> List[AnnualRecord]:
    """Run the annual projection.

    Args:
        inputs: Simulation input record.
        years: Number of years to project.

    Returns:
        List of AnnualRecord for years 1..years.

    Example:
        >>> records = project(inputs)
        >>> records[0].noi
        2350000.0
    """
    inputs = inputs.resolve_defaults()
    settings = inputs.advanced

    base_gross_income = potential_gross_income(inputs)
    base_vacancy_rate = inputs.base_vacancy_rate
    fixed_opex = fixed_operating_expenses(inputs)
    dep_info = depreciation_for(inputs)
    own_equity = inputs.own_equity

    loan_states = tuple(LoanState.open(loan) for loan in inputs.funding.loans)
    cumulative_cf = -own_equity

    records: List[AnnualRecord] = []

    for year in range(1, years + 1):
        # Income
        gross_income = base_gross_income * (1 - settings.rent_decline_rate / 100) ** (year - 1)
        vacancy_rate = base_vacancy_rate + settings.vacancy_rise_rate * (year - 1)
        vacancy_rate = min(100.0, max(0.0, vacancy_rate))
        vacancy_loss = gross_income * (vacancy_rate / 100)
        effective_income = gross_income - vacancy_loss

        # Expenses
        mgmt_fee = management_fee(inputs.expenses, effective_income)
        opex = fixed_opex + mgmt_fee
        noi = effective_income - opex

        # Debt service
        loan_states, loan_years = _advance_loans(loan_states, year, settings.interest_rate_rise)
        debt_service = sum(ly.debt_service for ly in loan_years if ly.active)
        interest = sum(ly.interest for ly in loan_years if ly.active)
        principal = sum(ly.principal for ly in loan_years if ly.active)
        loan_balance = sum(state.balance for state in loan_states)

        btcf = noi - debt_service

        # Tax: only interest is deductible, principal is not
        depreciation = yearly_depreciation(dep_info, year)
        taxable_income = noi - depreciation - interest
        tax_amount = compute_tax(
            taxable_income,
            settings.tax_mode,
            other_income=settings.other_income,
            is_small_business=settings.is_small_business,
        )
        atcf = btcf - tax_amount
        cumulative_cf += atcf

        dscr = noi / debt_service if debt_service > 0 else math.inf
        ccr = btcf / own_equity if own_equity > 0 else 0.0

        records.append(AnnualRecord(
            year=year,
            gross_income=gross_income,
            vacancy_rate=vacancy_rate,
            vacancy_loss=vacancy_loss,
            effective_income=effective_income,
            management_fee=mgmt_fee,
            opex=opex,
            noi=noi,
            debt_service=debt_service,
            interest=interest,
            principal=principal,
            btcf=btcf,
            loan_balance=loan_balance,
            depreciation=depreciation,
            taxable_income=taxable_income,
            tax_amount=tax_amount,
            atcf=atcf,
            cumulative_cash_flow=cumulative_cf,
            dscr=dscr,
            ccr=ccr,
            loans=loan_years,
        ))

    logger.debug(
        "Projected %d years for %r: year-1 NOI %.0f, final balance %.0f",
        years, inputs.title, records[0].noi if records else 0.0,
        records[-1].loan_balance if records else 0.0,
    )
    return records


def record_for_year(projection: Sequence[AnnualRecord], year: int) -> AnnualRecord | None:
    """Find the record for a given year, or None if outside the projection."""
    for record in projection:
        if record.year == year:
            return record
    return None
