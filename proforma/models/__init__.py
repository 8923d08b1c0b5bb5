"""Data models for the rental property pro-forma engine."""

from .lookups import (
    MAN_YEN,
    Structure,
    TaxBracket,
    USEFUL_LIFE,
    EQUIPMENT_USEFUL_LIFE,
    INDIVIDUAL_TAX_BRACKETS,
    get_useful_life,
)
from .simulation import (
    SimulationMode,
    ManagementFeeMode,
    TaxMode,
    PropertyDetails,
    ProjectBudget,
    Loan,
    FundingPlan,
    RoomType,
    RentRoll,
    Expenses,
    AdvancedSettings,
    SimulationInput,
)

__all__ = [
    # Lookups
    "MAN_YEN",
    "Structure",
    "TaxBracket",
    "USEFUL_LIFE",
    "EQUIPMENT_USEFUL_LIFE",
    "INDIVIDUAL_TAX_BRACKETS",
    "get_useful_life",
    # Simulation input
    "SimulationMode",
    "ManagementFeeMode",
    "TaxMode",
    "PropertyDetails",
    "ProjectBudget",
    "Loan",
    "FundingPlan",
    "RoomType",
    "RentRoll",
    "Expenses",
    "AdvancedSettings",
    "SimulationInput",
]
