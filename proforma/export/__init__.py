"""Export module for tables, CSV, and Excel workbooks."""

from .tables import (
    WorkbookConfig,
    projection_to_dataframe,
    exit_table_to_dataframe,
    sensitivity_to_dataframe,
    inputs_to_dataframe,
    inputs_to_csv,
    write_workbook,
)

__all__ = [
    "WorkbookConfig",
    "projection_to_dataframe",
    "exit_table_to_dataframe",
    "sensitivity_to_dataframe",
    "inputs_to_dataframe",
    "inputs_to_csv",
    "write_workbook",
]
