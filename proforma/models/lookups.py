"""Lookup tables for structures, statutory useful lives, and tax rates."""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List


# Budget and funding figures are entered in man-yen (10,000 yen)
MAN_YEN = 10_000


class Structure(Enum):
    """Building structure determines the statutory useful life."""

    RC = "RC"  # Reinforced concrete
    S = "S"  # Steel frame
    WOOD = "Wood"
    STEEL_LIGHT = "SteelLight"  # Light-gauge steel


# Statutory useful life (years) for residential buildings
USEFUL_LIFE: Dict[Structure, int] = {
    Structure.RC: 47,
    Structure.S: 34,
    Structure.WOOD: 22,
    Structure.STEEL_LIGHT: 27,
}

# Building fixtures and equipment (plumbing, electrical, elevators)
EQUIPMENT_USEFUL_LIFE = 15

# Used-property shortcut: elapsed years count at 20%
USED_LIFE_ELAPSED_FACTOR = 0.2
USED_LIFE_MINIMUM = 2


@dataclass(frozen=True)
class TaxBracket:
    """One bracket of the progressive individual income tax table."""

    limit: float  # Upper bound of total income for this bracket
    rate: float  # Marginal rate
    deduction: int  # Quick-calculation deduction


# Individual income tax brackets (2024)
INDIVIDUAL_TAX_BRACKETS: List[TaxBracket] = [
    TaxBracket(limit=1_950_000, rate=0.05, deduction=0),
    TaxBracket(limit=3_300_000, rate=0.10, deduction=97_500),
    TaxBracket(limit=6_950_000, rate=0.20, deduction=427_500),
    TaxBracket(limit=9_000_000, rate=0.23, deduction=636_000),
    TaxBracket(limit=18_000_000, rate=0.33, deduction=1_536_000),
    TaxBracket(limit=40_000_000, rate=0.40, deduction=2_796_000),
    TaxBracket(limit=float("inf"), rate=0.45, deduction=4_796_000),
]

RESIDENT_TAX_RATE = 0.10

# Simplified effective corporate rates
SMALL_BUSINESS_THRESHOLD = 8_000_000
SMALL_BUSINESS_LOWER_RATE = 0.25
SMALL_BUSINESS_UPPER_RATE = 0.35
LARGE_CORPORATE_RATE = 0.30

# Capital gains on real estate sales (income + resident tax)
LONG_TERM_HOLDING_YEARS = 5
LONG_TERM_GAINS_RATE = 0.20315
SHORT_TERM_GAINS_RATE = 0.39630

# Brokerage fee: 3% + 60,000 yen, plus 10% consumption tax
BROKERAGE_RATE = 0.03
BROKERAGE_FLAT_FEE = 60_000
CONSUMPTION_TAX_RATE = 0.10
BROKERAGE_MINIMUM_BASE = 4_000_000

# Stamp duty on the sale contract, checked top-down (price strictly above threshold)
STAMP_DUTY_TIERS: List[tuple[int, int]] = [
    (100_000_000, 60_000),
    (50_000_000, 30_000),
    (10_000_000, 10_000),
]
STAMP_DUTY_DEFAULT = 10_000


@dataclass(frozen=True)
class AcquisitionTaxRates:
    """Rates used to estimate one-time acquisition costs."""

    land_transfer_registration: float = 0.015  # Land ownership transfer
    building_preservation_registration: float = 0.004  # New building preservation
    land_acquisition: float = 0.03
    building_acquisition: float = 0.03
    residential_land_reduction: int = 12_000_000
    land_assessment_ratio: float = 0.7  # Assessed value / market price
    building_assessment_ratio: float = 0.5


ACQUISITION_TAX_RATES = AcquisitionTaxRates()


def get_useful_life(structure: Structure) -> int:
    """Get the statutory useful life for a structure.

    Args:
        structure: Building structure.

    Returns:
        Useful life in years.
    """
    return USEFUL_LIFE[structure]


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves rounded up.

    Example:
        >>> round_half_up(2.5), round_half_up(-2.5)
        (3, -2)
    """
    return math.floor(value + 0.5)
