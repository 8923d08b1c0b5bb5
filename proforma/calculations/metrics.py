"""Investment metrics derived from the annual projection."""

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np
import numpy_financial as npf

from ..models.lookups import MAN_YEN
from ..models.simulation import SimulationInput
from .projection import AnnualRecord, potential_gross_income

logger = logging.getLogger(__name__)

IRR_TOLERANCE = 1e-7
IRR_MAX_ITERATIONS = 100
IRR_RATE_FLOOR = -0.9999  # Keeps (1 + rate) positive
IRR_FLOOR_MARGIN = 0.01  # Estimates this close to the floor are pinned, not roots
IRR_RESIDUAL_RATIO = 1e-6  # Largest |NPV| per unit of total cash flow still taken as a root


@dataclass
class InvestmentMetrics:
    """Summary metrics for one projection run."""

    # Returns
    irr: Optional[float]  # None when undefined for the cash-flow shape
    npv: Optional[float]  # Only when a discount rate is supplied
    payback_year: Optional[int]  # None means beyond the projection horizon

    # Coverage
    year1_dscr: float
    average_dscr: Optional[float]
    year1_ccr: float
    break_even_ratio: float

    # Yields (percent of total budget)
    gross_yield: float
    net_yield: float


def npv(cashflows: Sequence[float], rate: float) -> float:
    """Calculate net present value; the first cash flow is at t=0 and undiscounted.

    Args:
        cashflows: Cash flows at t = 0, 1, 2, ...
        rate: Discount rate per period as decimal.

    Returns:
        Net present value.
    """
    return float(npf.npv(rate, list(cashflows)))


def irr(
    cashflows: Sequence[float],
    guess: float = 0.10,
) -> Optional[float]:
    """Solve NPV(rate) = 0 by Newton-Raphson.

    Iterates until |NPV| < 1e-7 or 100 iterations, whichever is first.
    An unconverged estimate is returned only when NPV there is negligible
    against the cash flows and the rate is not pinned at the -100% clamp;
    cash flows with no root give None.

    Args:
        cashflows: Equity cash flows, cashflows[0] is the (negative) investment.
        guess: Starting rate.

    Returns:
        IRR as decimal, or None if no root was found (degenerate shape,
        divergence, or NPV of one sign everywhere).

    Example:
        >>> irr([-1000, 1100])
        0.1
    """
    flows = np.asarray(cashflows, dtype=float)
    if flows.size < 2:
        return None

    periods = np.arange(flows.size)
    rate = guess

    with np.errstate(over="ignore", divide="ignore", invalid="ignore"):
        for iteration in range(IRR_MAX_ITERATIONS):
            discount = (1 + rate) ** periods
            value = np.sum(flows / discount)
            if abs(value) < IRR_TOLERANCE:
                return float(rate)

            derivative = np.sum(-periods * flows / (discount * (1 + rate)))
            if not np.isfinite(value) or not np.isfinite(derivative):
                logger.debug("IRR diverged at iteration %d (rate %.6f)", iteration, rate)
                return None
            if abs(derivative) < IRR_TOLERANCE:
                logger.debug("IRR derivative vanished at iteration %d", iteration)
                return None

            rate = max(rate - value / derivative, IRR_RATE_FLOOR)

        value = np.sum(flows / (1 + rate) ** periods)

    # Unconverged estimates count only when NPV is already negligible there
    scale = np.sum(np.abs(flows))
    if rate - IRR_RATE_FLOOR < IRR_FLOOR_MARGIN or not abs(value) <= IRR_RESIDUAL_RATIO * scale:
        logger.debug("IRR has no root near %.6f (NPV %.3g), returning None", rate, value)
        return None

    logger.debug("IRR did not converge in %d iterations, returning %.6f", IRR_MAX_ITERATIONS, rate)
    return float(rate)


def equity_cash_flows(
    inputs: SimulationInput,
    projection: Sequence[AnnualRecord],
) -> List[float]:
    """Build the equity cash-flow series: -equity, then ATCF for each year."""
    return [-inputs.own_equity] + [record.atcf for record in projection]


def payback_year(projection: Sequence[AnnualRecord]) -> Optional[int]:
    """First year whose cumulative cash flow is non-negative, or None."""
    for record in projection:
        if record.cumulative_cash_flow >= 0:
            return record.year
    return None


def average_dscr(projection: Sequence[AnnualRecord]) -> Optional[float]:
    """Mean DSCR over years with debt service and a positive, finite DSCR.

    Years without debt service (DSCR = inf) are excluded.

    Returns:
        Average DSCR, or None if no year qualifies.
    """
    values = [r.dscr for r in projection if math.isfinite(r.dscr) and r.dscr > 0]
    if not values:
        return None
    return float(np.mean(values))


def break_even_ratio(projection: Sequence[AnnualRecord]) -> float:
    """Year-1 break-even ratio: (OPEX + ADS) / gross income."""
    if not projection:
        return 0.0
    year1 = projection[0]
    if year1.gross_income <= 0:
        return 0.0
    return (year1.opex + year1.debt_service) / year1.gross_income


def gross_yield(inputs: SimulationInput) -> float:
    """Potential gross income as percent of total budget."""
    total_budget = inputs.budget.total * MAN_YEN
    if total_budget <= 0:
        return 0.0
    return potential_gross_income(inputs) / total_budget * 100


def net_yield(inputs: SimulationInput, projection: Sequence[AnnualRecord]) -> float:
    """Year-1 NOI as percent of total budget."""
    total_budget = inputs.budget.total * MAN_YEN
    if total_budget <= 0 or not projection:
        return 0.0
    return projection[0].noi / total_budget * 100


def calculate_metrics(
    inputs: SimulationInput,
    projection: Sequence[AnnualRecord],
    discount_rate: Optional[float] = None,
) -> InvestmentMetrics:
    """Calculate summary metrics from a projection.

    Args:
        inputs: Simulation input the projection was built from.
        projection: Annual records from `project()`.
        discount_rate: Optional rate for NPV (decimal).

    Returns:
        InvestmentMetrics with all summary values.
    """
    flows = equity_cash_flows(inputs, projection)
    year1 = projection[0] if projection else None

    return InvestmentMetrics(
        irr=irr(flows),
        npv=npv(flows, discount_rate) if discount_rate is not None else None,
        payback_year=payback_year(projection),
        year1_dscr=year1.dscr if year1 else 0.0,
        average_dscr=average_dscr(projection),
        year1_ccr=year1.ccr if year1 else 0.0,
        break_even_ratio=break_even_ratio(projection),
        gross_yield=gross_yield(inputs),
        net_yield=net_yield(inputs, projection),
    )


def format_metrics_table(metrics: InvestmentMetrics) -> str:
    """Format metrics as a text table.

    Args:
        metrics: Investment metrics.

    Returns:
        Formatted string table.
    """
    def pct(value: Optional[float]) -> str:
        return f"{value:>14.2%}" if value is not None else f"{'N/A':>14}"

    def ratio(value: Optional[float]) -> str:
        if value is None:
            return f"{'N/A':>14}"
        if math.isinf(value):
            return f"{'inf':>14}"
        return f"{value:>13.2f}x"

    payback = f"{metrics.payback_year} yrs" if metrics.payback_year else "beyond horizon"

    lines = [
        "=" * 45,
        "INVESTMENT METRICS",
        "=" * 45,
        f"{'Gross Yield':<28} {metrics.gross_yield / 100:>14.2%}",
        f"{'Net Yield':<28} {metrics.net_yield / 100:>14.2%}",
        f"{'IRR (after tax)':<28} {pct(metrics.irr)}",
    ]
    if metrics.npv is not None:
        lines.append(f"{'NPV':<28} {metrics.npv:>14,.0f}")
    lines.extend([
        f"{'DSCR (year 1)':<28} {ratio(metrics.year1_dscr)}",
        f"{'DSCR (average)':<28} {ratio(metrics.average_dscr)}",
        f"{'CCR (year 1)':<28} {metrics.year1_ccr:>14.2%}",
        f"{'Break-even Ratio':<28} {metrics.break_even_ratio:>14.2%}",
        f"{'Payback':<28} {payback:>14}",
        "=" * 45,
    ])

    return "\n".join(lines)
