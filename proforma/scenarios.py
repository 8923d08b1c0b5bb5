"""Scenario and sensitivity analysis.

Every scenario and every sensitivity cell is a full, independent re-run of
the projection and metrics on a derived copy of the input.
"""

import concurrent.futures
import logging
import multiprocessing
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np

from .models.simulation import SimulationInput
from .calculations.projection import AnnualRecord, project
from .calculations.metrics import equity_cash_flows, irr, payback_year

logger = logging.getLogger(__name__)

SENSITIVITY_YEAR = 10
DEFAULT_RENT_DECLINE_VALUES = (0.0, 0.5, 1.0, 1.5, 2.0)
DEFAULT_VACANCY_RISE_VALUES = (0.0, 0.25, 0.5, 0.75, 1.0)

# Shifts applied to the base advanced settings
RENT_DECLINE_SHIFT = 0.5
VACANCY_RISE_SHIFT = 0.3
INTEREST_RATE_RISE_SHIFT = 0.05


@dataclass(frozen=True)
class ScenarioDefinition:
    """A named transformation of the base input."""

    name: str
    label: str
    apply: Callable[[SimulationInput], SimulationInput]


@dataclass(frozen=True)
class ScenarioResult:
    """Year-1 figures and full-run returns for one scenario."""

    name: str
    label: str
    rent_decline_rate: float
    vacancy_rise_rate: float
    interest_rate_rise: float

    noi: float
    btcf: float
    atcf: float
    dscr: float
    irr: Optional[float]
    payback_year: Optional[int]


@dataclass(frozen=True)
class SensitivityCell:
    """Outcome of one (vacancy rise, rent decline) combination."""

    rent_decline_rate: float
    vacancy_rise_rate: float
    irr: Optional[float]
    noi_year10: float
    btcf_year10: float


@dataclass
class SensitivityMatrix:
    """Grid of sensitivity cells indexed as cells[vacancy][rent]."""

    rent_decline_values: List[float]
    vacancy_rise_values: List[float]
    cells: List[List[SensitivityCell]]

    def cell(self, vacancy_rise: float, rent_decline: float) -> SensitivityCell:
        """Look up a cell by its parameter values."""
        i = self.vacancy_rise_values.index(vacancy_rise)
        j = self.rent_decline_values.index(rent_decline)
        return self.cells[i][j]

    def get_heatmap_data(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Get data formatted for heatmap visualization.

        Returns:
            Tuple of (rent_declines, vacancy_rises, irr_matrix) with NaN
            where IRR is undefined.
        """
        rent = np.array(self.rent_decline_values)
        vacancy = np.array(self.vacancy_rise_values)
        irr_matrix = np.array([
            [c.irr if c.irr is not None else np.nan for c in row]
            for row in self.cells
        ], dtype=float)
        return rent, vacancy, irr_matrix


def _optimistic(inputs: SimulationInput) -> SimulationInput:
    settings = inputs.advanced
    return inputs.with_advanced(
        rent_decline_rate=max(settings.rent_decline_rate - RENT_DECLINE_SHIFT, 0.0),
        vacancy_rise_rate=max(settings.vacancy_rise_rate - VACANCY_RISE_SHIFT, 0.0),
        interest_rate_rise=0.0,
    )


def _pessimistic(inputs: SimulationInput) -> SimulationInput:
    settings = inputs.advanced
    return inputs.with_advanced(
        rent_decline_rate=settings.rent_decline_rate + RENT_DECLINE_SHIFT,
        vacancy_rise_rate=settings.vacancy_rise_rate + VACANCY_RISE_SHIFT,
        interest_rate_rise=settings.interest_rate_rise + INTEREST_RATE_RISE_SHIFT,
    )


SCENARIOS: List[ScenarioDefinition] = [
    ScenarioDefinition("optimistic", "Optimistic", _optimistic),
    ScenarioDefinition("standard", "Standard", lambda inputs: inputs),
    ScenarioDefinition("pessimistic", "Pessimistic", _pessimistic),
]


def run_scenario(definition: ScenarioDefinition, inputs: SimulationInput) -> ScenarioResult:
    """Run one scenario end to end.

    Args:
        definition: Scenario to apply.
        inputs: Base simulation input.

    Returns:
        ScenarioResult with year-1 figures, IRR and payback.
    """
    derived = definition.apply(inputs)
    projection = project(derived)
    year1 = projection[0]

    return ScenarioResult(
        name=definition.name,
        label=definition.label,
        rent_decline_rate=derived.advanced.rent_decline_rate,
        vacancy_rise_rate=derived.advanced.vacancy_rise_rate,
        interest_rate_rise=derived.advanced.interest_rate_rise,
        noi=year1.noi,
        btcf=year1.btcf,
        atcf=year1.atcf,
        dscr=year1.dscr,
        irr=irr(equity_cash_flows(derived, projection)),
        payback_year=payback_year(projection),
    )


def generate_scenarios(inputs: SimulationInput) -> List[ScenarioResult]:
    """Run the optimistic, standard, and pessimistic scenarios.

    Optimistic eases rent decline by 0.5 and vacancy rise by 0.3 (floored
    at 0) with no rate rise. Pessimistic adds the same amounts and raises
    rates a further 0.05 points per year.

    Args:
        inputs: Base simulation input (left untouched).

    Returns:
        Three ScenarioResults in optimistic, standard, pessimistic order.
    """
    return [run_scenario(definition, inputs) for definition in SCENARIOS]


def _year_value(projection: Sequence[AnnualRecord], year: int, attr: str) -> float:
    if len(projection) < year:
        return 0.0
    return getattr(projection[year - 1], attr)


def _run_cell(
    inputs: SimulationInput,
    vacancy_rise: float,
    rent_decline: float,
) -> SensitivityCell:
    derived = inputs.with_advanced(
        rent_decline_rate=rent_decline,
        vacancy_rise_rate=vacancy_rise,
    )
    projection = project(derived)
    return SensitivityCell(
        rent_decline_rate=rent_decline,
        vacancy_rise_rate=vacancy_rise,
        irr=irr(equity_cash_flows(derived, projection)),
        noi_year10=_year_value(projection, SENSITIVITY_YEAR, "noi"),
        btcf_year10=_year_value(projection, SENSITIVITY_YEAR, "btcf"),
    )


def sensitivity_matrix(
    inputs: SimulationInput,
    rent_decline_values: Sequence[float] = DEFAULT_RENT_DECLINE_VALUES,
    vacancy_rise_values: Sequence[float] = DEFAULT_VACANCY_RISE_VALUES,
    parallel: bool = False,
    max_workers: Optional[int] = None,
) -> SensitivityMatrix:
    """Run the rent decline x vacancy rise sensitivity grid.

    Each cell is an independent full projection, so the grid can be fanned
    out over a thread pool. Results are placed by index, so the grid is the
    same with or without `parallel`.

    Args:
        inputs: Base simulation input.
        rent_decline_values: Rent decline rates (%/year), the columns.
        vacancy_rise_values: Vacancy rise rates (points/year), the rows.
        parallel: Whether to run cells in parallel.
        max_workers: Max parallel workers (None = CPU count, capped at 8).

    Returns:
        SensitivityMatrix with cells[vacancy][rent].
    """
    rent_values = list(rent_decline_values)
    vacancy_values = list(vacancy_rise_values)
    positions = [
        (i, j) for i in range(len(vacancy_values)) for j in range(len(rent_values))
    ]
    results: Dict[Tuple[int, int], SensitivityCell] = {}

    if parallel and len(positions) > 1:
        max_workers = max_workers or min(multiprocessing.cpu_count(), 8)

        with concurrent.futures.ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = {
                executor.submit(_run_cell, inputs, vacancy_values[i], rent_values[j]): (i, j)
                for i, j in positions
            }
            for future in concurrent.futures.as_completed(futures):
                results[futures[future]] = future.result()
    else:
        for i, j in positions:
            results[(i, j)] = _run_cell(inputs, vacancy_values[i], rent_values[j])

    cells = [
        [results[(i, j)] for j in range(len(rent_values))]
        for i in range(len(vacancy_values))
    ]
    logger.debug(
        "Sensitivity grid %dx%d complete (parallel=%s)",
        len(vacancy_values), len(rent_values), parallel,
    )
    return SensitivityMatrix(
        rent_decline_values=rent_values,
        vacancy_rise_values=vacancy_values,
        cells=cells,
    )


def format_scenario_table(results: List[ScenarioResult]) -> str:
    """Format scenario results as a text table.

    Args:
        results: Scenario results.

    Returns:
        Formatted string table.
    """
    lines = [
        "=" * 90,
        "SCENARIO COMPARISON",
        "=" * 90,
        f"{'Scenario':<14} {'NOI':>14} {'BTCF':>14} {'ATCF':>14} {'DSCR':>8} {'IRR':>10} {'Payback':>9}",
        "-" * 90,
    ]

    for result in results:
        irr_text = f"{result.irr:>9.2%}" if result.irr is not None else f"{'N/A':>9}"
        payback_text = str(result.payback_year) if result.payback_year else "-"
        dscr_text = f"{result.dscr:>7.2f}x" if result.dscr != float("inf") else f"{'inf':>8}"
        lines.append(
            f"{result.label:<14} {result.noi:>14,.0f} {result.btcf:>14,.0f} "
            f"{result.atcf:>14,.0f} {dscr_text} {irr_text:>10} {payback_text:>9}"
        )

    lines.append("=" * 90)
    return "\n".join(lines)


def format_sensitivity_table(matrix: SensitivityMatrix) -> str:
    """Format the IRR grid as a text table (vacancy rows x rent columns)."""
    header = f"{'Vac/Rent':<11}" + "".join(
        f"{rent:>10.2f}%" for rent in matrix.rent_decline_values
    )
    lines = [
        "=" * len(header),
        "IRR SENSITIVITY (vacancy rise x rent decline)",
        "=" * len(header),
        header,
        "-" * len(header),
    ]

    for vacancy, row in zip(matrix.vacancy_rise_values, matrix.cells):
        cells = "".join(
            f"{cell.irr:>11.2%}" if cell.irr is not None else f"{'N/A':>11}"
            for cell in row
        )
        lines.append(f"{vacancy:>10.2f}%" + cells)

    lines.append("=" * len(header))
    return "\n".join(lines)
