"""Loan amortization: level monthly payments and year-by-year principal/interest split."""

from dataclasses import dataclass, replace

import numpy_financial as npf

from ..models.lookups import round_half_up
from ..models.simulation import Loan


@dataclass(frozen=True)
class AmortizationYear:
    """Twelve months of payments on one loan."""

    interest: float
    principal: float
    closing_balance: float

    @property
    def debt_service(self) -> float:
        """Total paid during the year."""
        return self.interest + self.principal


@dataclass(frozen=True)
class LoanYear:
    """One loan's contribution to a projection year."""

    name: str
    year: int
    active: bool  # False once year > duration
    rate: float  # Effective annual rate (%) applied this year
    monthly_payment: float
    interest: float
    principal: float
    debt_service: float
    closing_balance: float


@dataclass(frozen=True)
class LoanState:
    """Outstanding position of one loan between projection years."""

    loan: Loan
    balance: float

    @classmethod
    def open(cls, loan: Loan) -> "LoanState":
        """State at drawdown: full principal outstanding."""
        return cls(loan=loan, balance=loan.principal_yen)


def compute_monthly_payment(
    principal: float,
    annual_rate_percent: float,
    term_years: float,
) -> int:
    """Calculate the level monthly payment for a fully amortizing loan.

    PMT = P x r(1 + r)^n / ((1 + r)^n - 1)
    where r = annual rate / 100 / 12 and n = term in months.

    Args:
        principal: Loan amount.
        annual_rate_percent: Annual nominal rate in percent (e.g., 1.5).
        term_years: Remaining term in years.

    Returns:
        Monthly payment rounded to the nearest unit.

    Example:
        >>> compute_monthly_payment(20_000_000, 2.0, 30)
        73924
    """
    if principal <= 0 or term_years <= 0:
        return 0

    n_payments = term_years * 12
    if annual_rate_percent == 0:
        return round_half_up(principal / n_payments)

    monthly_rate = annual_rate_percent / 100 / 12
    payment = -npf.pmt(rate=monthly_rate, nper=n_payments, pv=principal, fv=0)
    return round_half_up(float(payment))


def simulate_year(
    opening_balance: float,
    monthly_payment: float,
    monthly_rate: float,
) -> AmortizationYear:
    """Run twelve monthly payments against an opening balance.

    Each month: interest = balance x rate, principal = payment - interest.
    The principal is clamped to the outstanding balance on the payoff month,
    and no further payments are made once the balance reaches zero.

    Args:
        opening_balance: Balance at the start of the year.
        monthly_payment: Level monthly payment.
        monthly_rate: Monthly interest rate as decimal.

    Returns:
        AmortizationYear with interest, principal, and closing balance.
    """
    balance = opening_balance
    total_interest = 0.0
    total_principal = 0.0

    for _month in range(12):
        if balance <= 0:
            break
        interest = balance * monthly_rate
        principal = monthly_payment - interest
        if principal > balance:
            principal = balance

        balance -= principal
        total_interest += interest
        total_principal += principal

    return AmortizationYear(
        interest=total_interest,
        principal=total_principal,
        closing_balance=max(0.0, balance),
    )


def advance_loan(
    state: LoanState,
    year: int,
    interest_rate_rise: float = 0.0,
) -> tuple[LoanState, LoanYear]:
    """Advance one loan through a projection year.

    The payment is re-derived every year from the current balance over the
    remaining term at that year's effective rate, so a rising rate
    re-amortizes the loan instead of leaving a balloon.

    Args:
        state: Loan position at the start of the year.
        year: Projection year (1-indexed).
        interest_rate_rise: Annual rate increase in percentage points (cumulative).

    Returns:
        Tuple of (new LoanState, LoanYear for this year).
    """
    loan = state.loan

    if year > loan.duration:
        # Paid off: drop any rounding residual
        return replace(state, balance=0.0), LoanYear(
            name=loan.name,
            year=year,
            active=False,
            rate=0.0,
            monthly_payment=0.0,
            interest=0.0,
            principal=0.0,
            debt_service=0.0,
            closing_balance=0.0,
        )

    rate = loan.rate + interest_rate_rise * (year - 1)
    remaining_years = loan.duration - year + 1
    payment = compute_monthly_payment(state.balance, rate, remaining_years)
    result = simulate_year(state.balance, payment, rate / 100 / 12)

    principal = result.principal
    closing_balance = result.closing_balance
    if year == loan.duration and closing_balance > 0:
        # Final scheduled year settles the rounding residual
        principal += closing_balance
        closing_balance = 0.0

    loan_year = LoanYear(
        name=loan.name,
        year=year,
        active=True,
        rate=rate,
        monthly_payment=payment,
        interest=result.interest,
        principal=principal,
        debt_service=result.interest + principal,
        closing_balance=closing_balance,
    )
    return replace(state, balance=closing_balance), loan_year


def amortization_schedule(
    principal: float,
    annual_rate_percent: float,
    term_years: int,
    interest_rate_rise: float = 0.0,
) -> list[LoanYear]:
    """Build the year-by-year schedule for a single loan.

    Args:
        principal: Loan amount in yen.
        annual_rate_percent: Starting annual rate in percent.
        term_years: Loan term in years.
        interest_rate_rise: Annual rate increase in percentage points.

    Returns:
        One LoanYear per year of the term.
    """
    state = LoanState(
        loan=Loan(name="loan", amount=0.0, rate=annual_rate_percent, duration=term_years),
        balance=principal,
    )
    schedule = []
    for year in range(1, term_years + 1):
        state, loan_year = advance_loan(state, year, interest_rate_rise)
        schedule.append(loan_year)
    return schedule
