"""Tests for scenario and sensitivity analysis."""

import numpy as np
import pytest

from proforma.calculations.metrics import equity_cash_flows, irr
from proforma.calculations.projection import project
from proforma.scenarios import (
    format_scenario_table,
    format_sensitivity_table,
    generate_scenarios,
    sensitivity_matrix,
)


class TestGenerateScenarios:
    """Tests for optimistic / standard / pessimistic runs."""

    def test_three_named_scenarios(self, demo_inputs):
        results = generate_scenarios(demo_inputs)
        assert [r.name for r in results] == ["optimistic", "standard", "pessimistic"]

    def test_overrides(self, demo_inputs):
        optimistic, standard, pessimistic = generate_scenarios(demo_inputs)

        assert optimistic.rent_decline_rate == pytest.approx(0.5)
        assert optimistic.vacancy_rise_rate == pytest.approx(0.2)
        assert optimistic.interest_rate_rise == 0
        assert standard.rent_decline_rate == demo_inputs.advanced.rent_decline_rate
        assert pessimistic.rent_decline_rate == pytest.approx(1.5)
        assert pessimistic.vacancy_rise_rate == pytest.approx(0.8)
        assert pessimistic.interest_rate_rise == pytest.approx(0.05)

    def test_optimistic_floors_at_zero(self, simple_inputs):
        optimistic = generate_scenarios(simple_inputs)[0]
        assert optimistic.rent_decline_rate == 0
        assert optimistic.vacancy_rise_rate == 0

    def test_year1_noi_unaffected_by_growth_rates(self, demo_inputs):
        """Decline and rise rates only act from year 2."""
        optimistic, standard, pessimistic = generate_scenarios(demo_inputs)
        assert pessimistic.noi == pytest.approx(standard.noi)
        assert optimistic.noi == pytest.approx(standard.noi)

    def test_irr_ordering(self, simple_inputs):
        inputs = simple_inputs.with_advanced(rent_decline_rate=1.0, vacancy_rise_rate=0.5)
        optimistic, standard, pessimistic = generate_scenarios(inputs)
        assert pessimistic.irr is not None and optimistic.irr is not None
        assert pessimistic.irr <= standard.irr <= optimistic.irr

    def test_rootless_scenarios_report_no_irr(self, demo_inputs):
        """Scenarios without an IRR show N/A instead of a pinned -100% rate."""
        results = generate_scenarios(demo_inputs)
        _, standard, pessimistic = results

        assert standard.irr is None
        assert pessimistic.irr is None
        assert "N/A" in format_scenario_table(results)

    def test_standard_matches_base_run(self, demo_inputs):
        standard = generate_scenarios(demo_inputs)[1]
        projection = project(demo_inputs)

        assert standard.btcf == projection[0].btcf
        assert standard.irr == irr(equity_cash_flows(demo_inputs, projection))

    def test_base_input_untouched(self, demo_inputs):
        before = demo_inputs.advanced
        generate_scenarios(demo_inputs)
        assert demo_inputs.advanced == before

    def test_format_table(self, demo_inputs):
        table = format_scenario_table(generate_scenarios(demo_inputs))
        assert "Optimistic" in table
        assert "Pessimistic" in table


class TestSensitivityMatrix:
    """Tests for the rent decline x vacancy rise grid."""

    def test_grid_shape(self, demo_inputs):
        matrix = sensitivity_matrix(demo_inputs)

        assert len(matrix.cells) == 5
        assert all(len(row) == 5 for row in matrix.cells)
        assert matrix.cells[0][0].rent_decline_rate == 0
        assert matrix.cells[4][0].vacancy_rise_rate == 1.0

    def test_cells_are_independent_runs(self, demo_inputs):
        matrix = sensitivity_matrix(demo_inputs)
        cell = matrix.cell(vacancy_rise=0.5, rent_decline=1.5)
        derived = demo_inputs.with_advanced(rent_decline_rate=1.5, vacancy_rise_rate=0.5)
        projection = project(derived)

        assert cell.noi_year10 == projection[9].noi
        assert cell.btcf_year10 == projection[9].btcf
        assert cell.irr == irr(equity_cash_flows(derived, projection))

    def test_worse_assumptions_lower_noi(self, demo_inputs):
        matrix = sensitivity_matrix(demo_inputs)
        for row in matrix.cells:
            nois = [c.noi_year10 for c in row]
            assert nois == sorted(nois, reverse=True)
        column = [row[0].noi_year10 for row in matrix.cells]
        assert column == sorted(column, reverse=True)

    def test_parallel_matches_sequential(self, demo_inputs):
        sequential = sensitivity_matrix(demo_inputs, parallel=False)
        parallel = sensitivity_matrix(demo_inputs, parallel=True, max_workers=4)
        assert parallel.cells == sequential.cells

    def test_custom_values(self, demo_inputs):
        matrix = sensitivity_matrix(
            demo_inputs, rent_decline_values=[0, 3], vacancy_rise_values=[2]
        )
        assert len(matrix.cells) == 1
        assert len(matrix.cells[0]) == 2

    def test_short_projection_year10_is_zero(self, demo_inputs, monkeypatch):
        import proforma.scenarios as scenarios

        monkeypatch.setattr(scenarios, "project", lambda inputs: project(inputs, years=5))
        matrix = scenarios.sensitivity_matrix(
            demo_inputs, rent_decline_values=[1.0], vacancy_rise_values=[0.5]
        )
        assert matrix.cells[0][0].noi_year10 == 0

    def test_heatmap_data(self, demo_inputs):
        matrix = sensitivity_matrix(demo_inputs)
        rents, vacancies, irr_matrix = matrix.get_heatmap_data()

        assert isinstance(irr_matrix, np.ndarray)
        assert irr_matrix.shape == (5, 5)
        np.testing.assert_array_equal(rents, [0, 0.5, 1, 1.5, 2])
        np.testing.assert_array_equal(vacancies, [0, 0.25, 0.5, 0.75, 1])

    def test_format_table(self, demo_inputs):
        table = format_sensitivity_table(sensitivity_matrix(demo_inputs))
        assert "IRR SENSITIVITY" in table
