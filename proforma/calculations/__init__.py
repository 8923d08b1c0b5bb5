"""Calculation modules for the rental property pro-forma engine."""

from .amortization import (
    LoanYear,
    LoanState,
    compute_monthly_payment,
    advance_loan,
    amortization_schedule,
)
from .depreciation import (
    DepreciationInfo,
    compute_useful_life,
    compute_depreciation,
    yearly_depreciation,
    accumulated_depreciation,
)
from .taxes import individual_tax, corporate_tax, compute_tax

# Projection engine
from .projection import (
    AnnualRecord,
    project,
    record_for_year,
    depreciation_for,
)
from .metrics import (
    InvestmentMetrics,
    irr,
    npv,
    payback_year,
    average_dscr,
    break_even_ratio,
    equity_cash_flows,
    gross_yield,
    net_yield,
    calculate_metrics,
    format_metrics_table,
)
from .exit import (
    SaleExpenses,
    ExitAnalysis,
    estimate_sale_price,
    sale_expenses,
    capital_gains_tax,
    exit_analysis,
    exit_table,
    exit_table_for,
)
from .budget import (
    FundingSummary,
    AcquisitionCostEstimate,
    UpfrontRentalIncome,
    total_budget,
    summarize_funding,
    estimate_acquisition_costs,
    upfront_rental_income,
)

__all__ = [
    # Amortization
    "LoanYear",
    "LoanState",
    "compute_monthly_payment",
    "advance_loan",
    "amortization_schedule",
    # Depreciation
    "DepreciationInfo",
    "compute_useful_life",
    "compute_depreciation",
    "yearly_depreciation",
    "accumulated_depreciation",
    # Taxes
    "individual_tax",
    "corporate_tax",
    "compute_tax",
    # Projection
    "AnnualRecord",
    "project",
    "record_for_year",
    "depreciation_for",
    # Metrics
    "InvestmentMetrics",
    "irr",
    "npv",
    "payback_year",
    "average_dscr",
    "break_even_ratio",
    "equity_cash_flows",
    "gross_yield",
    "net_yield",
    "calculate_metrics",
    "format_metrics_table",
    # Exit
    "SaleExpenses",
    "ExitAnalysis",
    "estimate_sale_price",
    "sale_expenses",
    "capital_gains_tax",
    "exit_analysis",
    "exit_table",
    "exit_table_for",
    # Budget
    "FundingSummary",
    "AcquisitionCostEstimate",
    "UpfrontRentalIncome",
    "total_budget",
    "summarize_funding",
    "estimate_acquisition_costs",
    "upfront_rental_income",
]
