"""Straight-line depreciation of building and equipment."""

import math
from dataclasses import dataclass

from ..models.lookups import (
    EQUIPMENT_USEFUL_LIFE,
    USED_LIFE_ELAPSED_FACTOR,
    USED_LIFE_MINIMUM,
    Structure,
    get_useful_life,
)


@dataclass(frozen=True)
class DepreciationInfo:
    """Annual depreciation and useful lives for building and equipment."""

    building_annual: int
    equipment_annual: int
    building_life: int
    equipment_life: int

    @property
    def total_annual(self) -> int:
        """Depreciation while both components are within their lives."""
        return self.building_annual + self.equipment_annual


def compute_useful_life(
    structure: Structure,
    is_used: bool = False,
    building_age: int = 0,
) -> int:
    """Calculate useful life in years.

    New property uses the statutory life. Used property uses the
    simplified method:
    - Age >= statutory life: life x 20% (minimum 2 years)
    - Otherwise: (life - age) + age x 20%

    Args:
        structure: Building structure.
        is_used: True for an existing building.
        building_age: Years since completion.

    Returns:
        Useful life in whole years.
    """
    full_life = get_useful_life(structure)
    if not is_used:
        return full_life

    if building_age >= full_life:
        return max(math.floor(full_life * USED_LIFE_ELAPSED_FACTOR), USED_LIFE_MINIMUM)
    return math.floor((full_life - building_age) + building_age * USED_LIFE_ELAPSED_FACTOR)


def compute_depreciation(
    structure: Structure,
    building_cost: float,
    equipment_ratio: float,
    is_used: bool = False,
    building_age: int = 0,
) -> DepreciationInfo:
    """Split building cost into building and equipment and depreciate each.

    Equipment on a used property takes its life from the wood entry of the
    statutory table with age capped at the equipment life, regardless of
    the actual structure.

    Args:
        structure: Building structure.
        building_cost: Depreciable cost in yen.
        equipment_ratio: Share of cost treated as equipment (0-1).
        is_used: True for an existing building.
        building_age: Years since completion.

    Returns:
        DepreciationInfo with floored annual amounts.
    """
    building_portion = building_cost * (1 - equipment_ratio)
    equipment_portion = building_cost * equipment_ratio

    building_life = compute_useful_life(structure, is_used, building_age)
    if is_used:
        equipment_life = compute_useful_life(
            Structure.WOOD, True, min(building_age, EQUIPMENT_USEFUL_LIFE)
        )
    else:
        equipment_life = EQUIPMENT_USEFUL_LIFE

    building_annual = building_portion / building_life
    equipment_annual = equipment_portion / equipment_life if equipment_ratio > 0 else 0.0

    return DepreciationInfo(
        building_annual=math.floor(building_annual),
        equipment_annual=math.floor(equipment_annual),
        building_life=building_life,
        equipment_life=equipment_life,
    )


def yearly_depreciation(info: DepreciationInfo, year: int) -> int:
    """Get depreciation for a projection year (1-indexed)."""
    total = 0
    if year <= info.building_life:
        total += info.building_annual
    if year <= info.equipment_life:
        total += info.equipment_annual
    return total


def accumulated_depreciation(info: DepreciationInfo, through_year: int) -> int:
    """Sum of depreciation from year 1 through `through_year` inclusive."""
    return sum(yearly_depreciation(info, year) for year in range(1, through_year + 1))
