"""Tests for useful life and straight-line depreciation."""

import pytest

from proforma.models.lookups import Structure
from proforma.calculations.depreciation import (
    accumulated_depreciation,
    compute_depreciation,
    compute_useful_life,
    yearly_depreciation,
)


class TestUsefulLife:
    """Tests for statutory and used-property useful life."""

    @pytest.mark.parametrize("structure,life", [
        (Structure.RC, 47),
        (Structure.S, 34),
        (Structure.WOOD, 22),
        (Structure.STEEL_LIGHT, 27),
    ])
    def test_new_property_uses_statutory_life(self, structure, life):
        assert compute_useful_life(structure) == life

    def test_used_within_life(self):
        """(life - age) + age x 20%, floored."""
        assert compute_useful_life(Structure.RC, is_used=True, building_age=10) == 39

    def test_used_beyond_life(self):
        """Life x 20% once the statutory life has elapsed."""
        assert compute_useful_life(Structure.RC, is_used=True, building_age=50) == 9
        assert compute_useful_life(Structure.WOOD, is_used=True, building_age=30) == 4

    def test_used_life_has_two_year_minimum(self):
        """Short statutory lives never drop below two years."""
        assert compute_useful_life(Structure.WOOD, is_used=True, building_age=22) >= 2


class TestComputeDepreciation:
    """Tests for building and equipment split."""

    def test_new_rc_split(self):
        """80/20 split: building over 47 years, equipment over 15."""
        info = compute_depreciation(Structure.RC, 15_000_000, 0.2)

        assert info.building_life == 47
        assert info.equipment_life == 15
        assert info.building_annual == 255_319  # floor(12M / 47)
        assert info.equipment_annual == 200_000
        assert info.total_annual == 455_319

    def test_zero_equipment_ratio(self):
        """No equipment portion means no equipment depreciation."""
        info = compute_depreciation(Structure.S, 3_400_000, 0.0)
        assert info.equipment_annual == 0
        assert info.building_annual == 100_000

    def test_used_equipment_uses_wood_table(self):
        """Equipment life on used property comes from the wood table, age capped at 15."""
        info = compute_depreciation(Structure.RC, 10_000_000, 0.2, is_used=True, building_age=10)
        assert info.equipment_life == 14  # (22 - 10) + 10 x 0.2

        info = compute_depreciation(Structure.RC, 10_000_000, 0.2, is_used=True, building_age=40)
        assert info.equipment_life == 10  # (22 - 15) + 15 x 0.2


class TestYearlyDepreciation:
    """Tests for per-year lookups."""

    def test_equipment_drops_off_after_its_life(self):
        info = compute_depreciation(Structure.RC, 15_000_000, 0.2)

        assert yearly_depreciation(info, 1) == info.total_annual
        assert yearly_depreciation(info, 15) == info.total_annual
        assert yearly_depreciation(info, 16) == info.building_annual
        assert yearly_depreciation(info, 48) == 0

    def test_accumulated_is_sum_of_years(self):
        info = compute_depreciation(Structure.RC, 15_000_000, 0.2)
        expected = 15 * info.total_annual + 5 * info.building_annual
        assert accumulated_depreciation(info, 20) == expected
        assert accumulated_depreciation(info, 0) == 0


@pytest.mark.parametrize("structure", list(Structure))
@pytest.mark.parametrize("is_used,building_age", [(False, 0), (True, 10), (True, 40)])
def test_building_fully_depreciated_over_life(structure, is_used, building_age):
    """Building depreciation over its life recovers the building portion, less flooring."""
    cost, ratio = 100_000_000, 0.3
    info = compute_depreciation(structure, cost, ratio, is_used=is_used, building_age=building_age)

    recovered = info.building_annual * info.building_life
    assert abs(recovered - cost * (1 - ratio)) <= info.building_life

    if is_used:
        assert yearly_depreciation(info, max(info.building_life, info.equipment_life) + 1) == 0
