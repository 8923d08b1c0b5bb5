"""Tabular export of inputs and results: pandas DataFrames, CSV, and Excel.

Generates:
- Annual projection table
- Exit table by sale year
- IRR sensitivity grid
- Input summary (Category / Item / Value / Unit rows)
"""

import csv
import io
import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.utils.dataframe import dataframe_to_rows

from ..calculations.exit import ExitAnalysis
from ..calculations.projection import AnnualRecord
from ..models.simulation import ManagementFeeMode, SimulationInput
from ..scenarios import SensitivityMatrix

logger = logging.getLogger(__name__)

PROJECTION_COLUMNS = {
    "year": "Year",
    "gross_income": "Gross Income",
    "vacancy_rate": "Vacancy (%)",
    "vacancy_loss": "Vacancy Loss",
    "effective_income": "EGI",
    "management_fee": "Management Fee",
    "opex": "OpEx",
    "noi": "NOI",
    "debt_service": "Debt Service",
    "interest": "Interest",
    "principal": "Principal",
    "btcf": "BTCF",
    "loan_balance": "Loan Balance",
    "depreciation": "Depreciation",
    "taxable_income": "Taxable Income",
    "tax_amount": "Tax",
    "atcf": "ATCF",
    "cumulative_cash_flow": "Cumulative CF",
    "dscr": "DSCR",
    "ccr": "CCR",
}


@dataclass
class WorkbookConfig:
    """Configuration for workbook generation."""
    include_inputs: bool = True
    include_projection: bool = True
    include_exit: bool = True
    include_sensitivity: bool = True


def projection_to_dataframe(projection: Sequence[AnnualRecord]) -> pd.DataFrame:
    """Convert annual records to a DataFrame indexed by year.

    Per-loan detail is left out; aggregate debt columns are kept.
    """
    rows = [
        {field: getattr(record, field) for field in PROJECTION_COLUMNS}
        for record in projection
    ]
    df = pd.DataFrame(rows, columns=list(PROJECTION_COLUMNS))
    return df.rename(columns=PROJECTION_COLUMNS).set_index("Year")


def exit_table_to_dataframe(exits: Sequence[ExitAnalysis]) -> pd.DataFrame:
    """Convert an exit table to a DataFrame indexed by sale year."""
    rows = [
        {
            "Sale Year": e.sale_year,
            "Sale Price": e.sale_price,
            "Sale Expenses": e.sale_expenses.total,
            "Loan Balance": e.loan_balance_at_sale,
            "Accumulated Depreciation": e.accumulated_depreciation,
            "Capital Gains Tax": e.capital_gains_tax,
            "Net Proceeds": e.net_sale_proceeds,
            "Holding CF": e.total_cash_flow_during_holding,
            "Total Return": e.total_return,
            "Total Return Rate": e.total_return_rate,
            "Annualized Return": e.annualized_return,
        }
        for e in exits
    ]
    return pd.DataFrame(rows).set_index("Sale Year")


def sensitivity_to_dataframe(matrix: SensitivityMatrix, value: str = "irr") -> pd.DataFrame:
    """Pivot one cell attribute into a vacancy (rows) x rent decline (columns) grid.

    Args:
        matrix: Sensitivity grid.
        value: Cell attribute to show ("irr", "noi_year10", or "btcf_year10").

    Returns:
        DataFrame with NaN where the value is undefined.
    """
    data = [
        [getattr(cell, value) if getattr(cell, value) is not None else float("nan") for cell in row]
        for row in matrix.cells
    ]
    df = pd.DataFrame(
        data,
        index=pd.Index(matrix.vacancy_rise_values, name="Vacancy Rise (%/yr)"),
        columns=pd.Index(matrix.rent_decline_values, name="Rent Decline (%/yr)"),
    )
    return df


def inputs_to_dataframe(inputs: SimulationInput) -> pd.DataFrame:
    """Summarize the input record as Category / Item / Value / Unit rows."""
    rows: List[tuple] = []

    def add(category: str, item: str, value, unit: str = "") -> None:
        rows.append((category, item, value, unit))

    prop = inputs.property_details
    add("Property", "Mode", inputs.mode.value)
    add("Property", "Land Area", prop.land_area_m2, "m2")
    add("Property", "Structure", prop.structure.value)
    if inputs.is_used_property:
        add("Property", "Building Age", prop.building_age, "Years")

    budget = inputs.budget
    add("Budget", "Land Price", budget.land_price, "Man-yen")
    add("Budget", "Construction Cost", budget.building_works_cost, "Man-yen")
    add("Budget", "Total Budget", budget.total, "Man-yen")

    funding = inputs.funding
    add("Funding", "Own Capital", funding.own_capital, "Man-yen")
    add("Funding", "Total Loans", funding.total_loans, "Man-yen")
    for i, loan in enumerate(funding.loans, 1):
        add("Funding", f"Loan {i} Name", loan.name)
        add("Funding", f"Loan {i} Amount", loan.amount, "Man-yen")
        add("Funding", f"Loan {i} Rate", loan.rate, "%")
        add("Funding", f"Loan {i} Duration", loan.duration, "Years")

    for i, room in enumerate(inputs.rent_roll.room_types, 1):
        add("RentRoll", f"Room {i} Name", room.name)
        add("RentRoll", f"Room {i} Count", room.count, "Units")
        add("RentRoll", f"Room {i} Rent", room.rent, "Yen")
    occupancy = inputs.rent_roll.occupancy_rate
    add("RentRoll", "Occupancy Rate", "" if occupancy is None else occupancy, "%")

    expenses = inputs.expenses
    add("Expenses", "Management Fee Mode", expenses.management_fee_mode.value)
    if expenses.management_fee_mode == ManagementFeeMode.RATIO:
        add("Expenses", "Management Fee Ratio", expenses.management_fee_ratio, "%")
    else:
        add("Expenses", "Management Fee Fixed", expenses.management_fee_fixed, "Yen")

    return pd.DataFrame(rows, columns=["Category", "Item", "Value", "Unit"])


def inputs_to_csv(inputs: SimulationInput) -> str:
    """Render the input summary as CSV with every cell quoted."""
    return inputs_to_dataframe(inputs).to_csv(
        index=False, quoting=csv.QUOTE_ALL, lineterminator="\n"
    )


def _add_header_style(ws, row: int, cols: int) -> None:
    """Apply header styling to a row."""
    header_fill = PatternFill(start_color="1F4E79", end_color="1F4E79", fill_type="solid")
    header_font = Font(color="FFFFFF", bold=True)

    for col in range(1, cols + 1):
        cell = ws.cell(row=row, column=col)
        cell.fill = header_fill
        cell.font = header_font
        cell.alignment = Alignment(horizontal="center")


def _cell_value(value):
    """Blank out NaN and infinite values, which Excel cannot store."""
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


def _write_dataframe(ws, df: pd.DataFrame, index: bool = True, width: int = 15) -> None:
    """Write a DataFrame to a sheet with a styled header row."""
    frame = df.reset_index() if index else df
    for row in dataframe_to_rows(frame, index=False, header=True):
        ws.append([_cell_value(v) for v in row])

    _add_header_style(ws, 1, len(frame.columns))
    for col in range(1, len(frame.columns) + 1):
        ws.column_dimensions[get_column_letter(col)].width = width


def write_workbook(
    inputs: SimulationInput,
    projection: Sequence[AnnualRecord],
    exits: Optional[Sequence[ExitAnalysis]] = None,
    sensitivity: Optional[SensitivityMatrix] = None,
    config: Optional[WorkbookConfig] = None,
) -> bytes:
    """Generate an Excel workbook of the simulation.

    Args:
        inputs: Simulation input.
        projection: Annual records from `project()`.
        exits: Optional exit table.
        sensitivity: Optional sensitivity grid.
        config: Optional sheet selection.

    Returns:
        Excel file as bytes
    """
    if config is None:
        config = WorkbookConfig()

    wb = Workbook()
    wb.remove(wb.active)

    if config.include_inputs:
        ws = wb.create_sheet("Inputs")
        _write_dataframe(ws, inputs_to_dataframe(inputs), index=False, width=25)

    if config.include_projection:
        ws = wb.create_sheet("Projection")
        _write_dataframe(ws, projection_to_dataframe(projection))

    if config.include_exit and exits:
        ws = wb.create_sheet("Exit")
        _write_dataframe(ws, exit_table_to_dataframe(exits))

    if config.include_sensitivity and sensitivity is not None:
        ws = wb.create_sheet("Sensitivity")
        _write_dataframe(ws, sensitivity_to_dataframe(sensitivity))

    output = io.BytesIO()
    wb.save(output)
    output.seek(0)
    logger.debug("Wrote workbook with sheets %s", wb.sheetnames)
    return output.getvalue()
