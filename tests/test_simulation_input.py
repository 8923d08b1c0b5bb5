"""Tests for the simulation input model."""

from dataclasses import FrozenInstanceError, replace

import pytest

from proforma.models.lookups import Structure
from proforma.models.simulation import (
    DEFAULT_OCCUPANCY_RATE,
    Loan,
    ManagementFeeMode,
    SimulationInput,
    SimulationMode,
    TaxMode,
)


class TestValidate:
    """Tests for caller-side validation."""

    def test_demo_is_valid(self, demo_inputs):
        assert demo_inputs.validate() == []

    def test_empty_input_reports_budget_and_rent(self):
        errors = SimulationInput().validate()
        assert any("building_works_cost" in e for e in errors)
        assert any("monthly rent" in e for e in errors)

    def test_loan_checks(self, demo_inputs):
        inputs = replace(
            demo_inputs,
            funding=replace(
                demo_inputs.funding,
                loans=(Loan(amount=-1, rate=25.0, duration=60),),
            ),
        )
        errors = inputs.validate()

        assert any("amount" in e for e in errors)
        assert any("rate" in e for e in errors)
        assert any("duration" in e for e in errors)

    def test_occupancy_and_equipment_ratio(self, demo_inputs):
        inputs = replace(
            demo_inputs, rent_roll=replace(demo_inputs.rent_roll, occupancy_rate=120)
        ).with_advanced(equipment_ratio=1.5)
        errors = inputs.validate()

        assert any("occupancy_rate" in e for e in errors)
        assert any("equipment_ratio" in e for e in errors)


class TestDerivedValues:
    """Tests for unit conversion and defaults."""

    def test_man_yen_to_yen(self, demo_inputs):
        assert demo_inputs.own_equity == 10_000_000
        assert demo_inputs.building_cost == 120_000_000
        assert demo_inputs.land_price == 85_000_000
        assert demo_inputs.funding.loans[0].principal_yen == 204_200_000

    def test_resolve_defaults_fills_occupancy(self, simple_inputs):
        unset = replace(simple_inputs, rent_roll=replace(simple_inputs.rent_roll, occupancy_rate=None))
        resolved = unset.resolve_defaults()

        assert resolved.rent_roll.occupancy_rate == DEFAULT_OCCUPANCY_RATE
        assert unset.rent_roll.occupancy_rate is None
        assert simple_inputs.resolve_defaults() is simple_inputs

    def test_with_advanced_copies(self, demo_inputs):
        derived = demo_inputs.with_advanced(rent_decline_rate=2.0)

        assert derived.advanced.rent_decline_rate == 2.0
        assert demo_inputs.advanced.rent_decline_rate == 1.0
        assert derived.budget is demo_inputs.budget

    def test_immutable(self, demo_inputs):
        with pytest.raises(FrozenInstanceError):
            demo_inputs.title = "changed"


class TestSerialization:
    """Tests for dictionary round-trip."""

    def test_round_trip(self, used_inputs):
        assert SimulationInput.from_dict(used_inputs.to_dict()) == used_inputs

    def test_enums_serialized_as_values(self, used_inputs):
        data = used_inputs.to_dict()

        assert data["mode"] == "investment_used"
        assert data["property_details"]["structure"] == "Wood"
        assert data["advanced"]["tax_mode"] == "corporate"
        assert data["expenses"]["management_fee_mode"] == "ratio"
        assert isinstance(data["funding"]["loans"], list)

    def test_missing_keys_use_defaults(self):
        inputs = SimulationInput.from_dict({
            "mode": "land_new",
            "advanced": {"rent_decline_rate": None, "tax_mode": "corporate"},
        })

        assert inputs.mode == SimulationMode.LAND_NEW
        assert inputs.advanced.rent_decline_rate == 1.0
        assert inputs.advanced.tax_mode == TaxMode.CORPORATE
        assert inputs.expenses.management_fee_mode == ManagementFeeMode.RATIO
        assert inputs.property_details.structure == Structure.RC

    def test_explicit_null_occupancy_is_kept(self):
        inputs = SimulationInput.from_dict({"rent_roll": {"occupancy_rate": None}})
        assert inputs.rent_roll.occupancy_rate is None

    def test_unknown_keys_ignored(self):
        inputs = SimulationInput.from_dict({"title": "x", "id": "abc123", "budget": {"notes": ""}})
        assert inputs.title == "x"

    @pytest.mark.parametrize("data", [
        {"mode": "condo"},
        {"property_details": {"structure": "brick"}},
        {"advanced": {"tax_mode": "partnership"}},
    ])
    def test_unknown_enum_value_raises(self, data):
        with pytest.raises(ValueError):
            SimulationInput.from_dict(data)
