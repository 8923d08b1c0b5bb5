"""Tests for investment metrics."""

import math

import numpy_financial as npf
import pytest

from proforma.calculations.metrics import (
    average_dscr,
    break_even_ratio,
    calculate_metrics,
    equity_cash_flows,
    format_metrics_table,
    gross_yield,
    irr,
    net_yield,
    npv,
    payback_year,
)
from proforma.calculations.projection import project


class TestIRR:
    """Tests for the Newton-Raphson IRR."""

    def test_single_period(self):
        assert irr([-1000, 1100]) == pytest.approx(0.10, abs=1e-6)

    def test_matches_numpy_financial(self):
        flows = [-5_000_000, 600_000, 650_000, 700_000, 750_000, 5_800_000]
        assert irr(flows) == pytest.approx(npf.irr(flows), abs=1e-6)

    def test_negative_irr(self):
        flows = [-1000, 300, 300, 300]
        result = irr(flows)
        assert result < 0
        assert result == pytest.approx(npf.irr(flows), abs=1e-6)

    def test_zero_irr_is_a_result(self):
        """A break-even cash flow returns 0%, not None."""
        assert irr([-1000, 500, 500]) == pytest.approx(0.0, abs=1e-6)

    def test_degenerate_shape_returns_none(self):
        """No future cash flow: derivative vanishes."""
        assert irr([-1000, 0, 0, 0]) is None
        assert irr([-1000]) is None

    def test_no_root_returns_none(self):
        """Cash flows whose NPV never crosses zero have no IRR."""
        assert irr([-1000, -100, -100]) is None

    def test_demo_flows_without_root_return_none(self, demo_inputs):
        """Late negative ATCF keeps NPV below zero at every rate."""
        flows = equity_cash_flows(demo_inputs, project(demo_inputs))
        assert math.isnan(npf.irr(flows))
        assert irr(flows) is None

    def test_rate_stays_above_minus_one(self):
        result = irr([-1000, 1, 1, 1])
        assert result is None or result > -1


class TestNPV:
    """Tests for net present value."""

    def test_first_flow_undiscounted(self):
        assert npv([-1000, 1100], 0.10) == pytest.approx(0.0)

    def test_matches_numpy_financial(self):
        flows = [-5_000_000, 600_000, 650_000, 700_000]
        assert npv(flows, 0.05) == pytest.approx(npf.npv(0.05, flows))


class TestProjectionMetrics:
    """Metrics derived from a projection."""

    def test_equity_cash_flows(self, simple_inputs):
        projection = project(simple_inputs)
        flows = equity_cash_flows(simple_inputs, projection)

        assert len(flows) == 36
        assert flows[0] == -5_000_000
        assert flows[1] == projection[0].atcf

    def test_payback_year(self, simple_inputs):
        projection = project(simple_inputs)
        year = payback_year(projection)

        assert year is not None
        assert projection[year - 1].cumulative_cash_flow >= 0
        if year > 1:
            assert projection[year - 2].cumulative_cash_flow < 0

    def test_payback_beyond_horizon(self, simple_inputs):
        projection = project(simple_inputs, years=1)
        assert payback_year(projection) is None

    def test_average_dscr_excludes_years_without_debt(self, simple_inputs):
        projection = project(simple_inputs)
        expected = sum(r.dscr for r in projection[:30]) / 30
        assert average_dscr(projection) == pytest.approx(expected)

    def test_average_dscr_without_debt_is_none(self, simple_inputs):
        projection = project(simple_inputs)[30:]
        assert average_dscr(projection) is None

    def test_break_even_ratio(self, simple_inputs):
        projection = project(simple_inputs)
        year1 = projection[0]
        expected = (500_000 + year1.debt_service) / 3_000_000
        assert break_even_ratio(projection) == pytest.approx(expected)

    def test_break_even_ratio_without_income(self):
        assert break_even_ratio([]) == 0

    def test_yields(self, simple_inputs):
        projection = project(simple_inputs)
        assert gross_yield(simple_inputs) == pytest.approx(12.0)  # 3M / 25M
        assert net_yield(simple_inputs, projection) == pytest.approx(9.4)  # 2.35M / 25M


class TestCalculateMetrics:
    """Tests for the metrics bundle."""

    def test_bundle_matches_individual_functions(self, demo_inputs):
        projection = project(demo_inputs)
        metrics = calculate_metrics(demo_inputs, projection, discount_rate=0.04)

        flows = equity_cash_flows(demo_inputs, projection)
        assert metrics.irr == irr(flows)
        assert metrics.npv == pytest.approx(npv(flows, 0.04))
        assert metrics.payback_year == payback_year(projection)
        assert metrics.year1_dscr == projection[0].dscr
        assert metrics.break_even_ratio == break_even_ratio(projection)

    def test_npv_omitted_without_rate(self, demo_inputs):
        metrics = calculate_metrics(demo_inputs, project(demo_inputs))
        assert metrics.npv is None

    def test_format_table(self, demo_inputs):
        metrics = calculate_metrics(demo_inputs, project(demo_inputs))
        table = format_metrics_table(metrics)

        assert "INVESTMENT METRICS" in table
        assert "IRR (after tax)" in table
        assert "Break-even Ratio" in table

    def test_all_equity_metrics(self, simple_inputs):
        from dataclasses import replace
        from proforma.models.simulation import FundingPlan

        inputs = replace(simple_inputs, funding=FundingPlan(own_capital=2500, loans=()))
        metrics = calculate_metrics(inputs, project(inputs))

        assert math.isinf(metrics.year1_dscr)
        assert metrics.average_dscr is None
        assert "inf" in format_metrics_table(metrics)
