"""Simulation input model containing everything needed for a projection run."""

from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from .lookups import MAN_YEN, Structure


class SimulationMode(Enum):
    """Investment type being modeled."""

    LAND_NEW = "land_new"  # Build new on purchased land
    INVESTMENT_USED = "investment_used"  # Buy an existing income property


class ManagementFeeMode(Enum):
    """How the property management fee is charged."""

    RATIO = "ratio"  # Percentage of effective gross income
    FIXED = "fixed"  # Fixed monthly amount


class TaxMode(Enum):
    """Who owns the property for income tax purposes."""

    INDIVIDUAL = "individual"
    CORPORATE = "corporate"


DEFAULT_OCCUPANCY_RATE = 95.0  # i.e. 5% vacancy when occupancy is unset


@dataclass(frozen=True)
class PropertyDetails:
    """Site and building description."""

    structure: Structure = Structure.RC
    building_age: int = 0  # Years since completion (used property only)
    address: str = ""
    land_area_m2: float = 0.0
    total_units: int = 0


@dataclass(frozen=True)
class ProjectBudget:
    """Project budget. All amounts in man-yen."""

    land_price: float = 0.0
    demolition_cost: float = 0.0
    building_works_cost: float = 0.0

    # One-time acquisition costs
    stamp_duty: float = 0.0
    registration_tax: float = 0.0
    acquisition_tax: float = 0.0
    fire_insurance_prepaid: float = 0.0
    water_contribution: float = 0.0
    brokerage_fee: float = 0.0
    other_initial_cost: float = 0.0
    construction_interest: float = 0.0

    @property
    def acquisition_costs(self) -> float:
        """Sum of one-time acquisition costs (man-yen)."""
        return (
            self.stamp_duty
            + self.registration_tax
            + self.acquisition_tax
            + self.fire_insurance_prepaid
            + self.water_contribution
            + self.brokerage_fee
            + self.other_initial_cost
            + self.construction_interest
        )

    @property
    def total(self) -> float:
        """Total project budget (man-yen)."""
        return (
            self.land_price
            + self.demolition_cost
            + self.building_works_cost
            + self.acquisition_costs
        )


@dataclass(frozen=True)
class Loan:
    """A single amortizing loan (equal principal-and-interest payments)."""

    name: str = "Bank loan"
    amount: float = 0.0  # Man-yen
    rate: float = 1.5  # Annual nominal rate in percent
    duration: int = 35  # Years

    @property
    def principal_yen(self) -> float:
        """Loan principal in yen."""
        return self.amount * MAN_YEN


@dataclass(frozen=True)
class FundingPlan:
    """Sources of funds. All amounts in man-yen."""

    own_capital: float = 0.0
    loans: Tuple[Loan, ...] = field(default_factory=lambda: (Loan(),))
    cooperation_money: float = 0.0  # Construction cooperation money from a tenant
    security_deposit_in: float = 0.0  # Deposits received

    @property
    def total_loans(self) -> float:
        """Sum of loan amounts (man-yen)."""
        return sum(loan.amount for loan in self.loans)


@dataclass(frozen=True)
class RoomType:
    """One row of the rent roll. Monetary values in yen per month."""

    name: str = "1K"
    count: int = 0
    area_m2: float = 25.0
    rent: float = 0.0
    common_fee: float = 0.0

    @property
    def monthly_income(self) -> float:
        """Monthly rent plus common fee for all rooms of this type."""
        return (self.rent + self.common_fee) * self.count


@dataclass(frozen=True)
class RentRoll:
    """Rental income assumptions. Monetary values in yen per month."""

    room_types: Tuple[RoomType, ...] = field(default_factory=tuple)
    parking_count: int = 0
    parking_fee: float = 0.0
    other_revenue: float = 0.0  # Vending, solar, antenna leases, etc.

    occupancy_rate: Optional[float] = DEFAULT_OCCUPANCY_RATE  # Percent; None = unset

    # One-time terms, in months of rent (informational)
    security_deposit_months: float = 1.0
    key_money_months: float = 1.0
    renewal_fee_months: float = 1.0

    @property
    def monthly_rent(self) -> float:
        """Monthly rent and common fees across all room types."""
        return sum(room.monthly_income for room in self.room_types)

    @property
    def monthly_potential_income(self) -> float:
        """Monthly income at 100% occupancy, including parking and other revenue."""
        return (
            self.monthly_rent
            + self.parking_count * self.parking_fee
            + self.other_revenue
        )


@dataclass(frozen=True)
class Expenses:
    """Operating expenses in yen. Monthly items are noted."""

    management_fee_mode: ManagementFeeMode = ManagementFeeMode.RATIO
    management_fee_ratio: float = 5.0  # Percent of EGI
    management_fee_fixed: float = 0.0  # Monthly

    building_maintenance: float = 0.0  # Monthly (cleaning, inspections)
    maintenance_reserve: float = 0.0  # Monthly

    fixed_asset_tax_land: float = 0.0
    city_planning_tax_land: float = 0.0
    fixed_asset_tax_building: float = 0.0
    city_planning_tax_building: float = 0.0

    fire_insurance_annual: float = 0.0
    other_expenses: float = 0.0  # Annual

    @property
    def property_taxes(self) -> float:
        """Annual fixed-asset and city-planning taxes on land and building."""
        return (
            self.fixed_asset_tax_land
            + self.city_planning_tax_land
            + self.fixed_asset_tax_building
            + self.city_planning_tax_building
        )

    @property
    def fixed_annual(self) -> float:
        """Annual operating expenses excluding the management fee."""
        return (
            self.building_maintenance * 12
            + self.maintenance_reserve * 12
            + self.property_taxes
            + self.fire_insurance_annual
            + self.other_expenses
        )


@dataclass(frozen=True)
class AdvancedSettings:
    """Stress assumptions, tax treatment, and exit assumptions."""

    rent_decline_rate: float = 1.0  # Percent per year, compounding
    vacancy_rise_rate: float = 0.5  # Percentage points per year
    interest_rate_rise: float = 0.0  # Percentage points per year, cumulative

    tax_mode: TaxMode = TaxMode.INDIVIDUAL
    other_income: float = 0.0  # Yen per year, sets the individual bracket
    is_small_business: bool = True  # Corporate tier selection

    equipment_ratio: float = 0.2  # Share of building cost depreciated as equipment
    exit_cap_rate: float = 6.0  # Percent


@dataclass(frozen=True)
class SimulationInput:
    """Complete input record for a projection run.

    Instances are immutable. Scenario variants are built with
    `with_advanced()` or `dataclasses.replace()`, never by mutation.
    """

    title: str = "New simulation"
    mode: SimulationMode = SimulationMode.LAND_NEW
    property_details: PropertyDetails = field(default_factory=PropertyDetails)
    budget: ProjectBudget = field(default_factory=ProjectBudget)
    funding: FundingPlan = field(default_factory=FundingPlan)
    rent_roll: RentRoll = field(default_factory=RentRoll)
    expenses: Expenses = field(default_factory=Expenses)
    advanced: AdvancedSettings = field(default_factory=AdvancedSettings)

    @property
    def is_used_property(self) -> bool:
        """True when buying an existing building."""
        return self.mode == SimulationMode.INVESTMENT_USED

    @property
    def own_equity(self) -> float:
        """Owner equity in yen."""
        return self.funding.own_capital * MAN_YEN

    @property
    def building_cost(self) -> float:
        """Depreciable building cost in yen."""
        return self.budget.building_works_cost * MAN_YEN

    @property
    def land_price(self) -> float:
        """Land price in yen."""
        return self.budget.land_price * MAN_YEN

    @property
    def base_vacancy_rate(self) -> float:
        """Year-1 vacancy rate in percent."""
        occupancy = self.rent_roll.occupancy_rate
        if occupancy is None:
            occupancy = DEFAULT_OCCUPANCY_RATE
        return 100 - occupancy

    def with_advanced(self, **overrides: Any) -> "SimulationInput":
        """Return a copy with some advanced settings overridden.

        Args:
            **overrides: AdvancedSettings field values to replace.

        Returns:
            New SimulationInput; this instance is left untouched.
        """
        return replace(self, advanced=replace(self.advanced, **overrides))

    def resolve_defaults(self) -> "SimulationInput":
        """Fill unset optional values so downstream code never re-derives a default.

        Returns:
            SimulationInput with every optional field resolved.
        """
        if self.rent_roll.occupancy_rate is not None:
            return self
        return replace(
            self,
            rent_roll=replace(self.rent_roll, occupancy_rate=DEFAULT_OCCUPANCY_RATE),
        )

    def validate(self) -> list[str]:
        """Validate inputs and return list of errors.

        The engine itself never rejects input; this check belongs to the
        caller assembling the record.

        Returns:
            List of validation error messages. Empty if valid.
        """
        errors = []

        # Budget
        if self.budget.land_price + self.budget.building_works_cost <= 0:
            errors.append("land_price or building_works_cost must be positive")
        if self.budget.land_price < 0:
            errors.append(f"land_price must be >= 0, got {self.budget.land_price}")
        if self.budget.building_works_cost < 0:
            errors.append(
                f"building_works_cost must be >= 0, got {self.budget.building_works_cost}"
            )

        # Funding
        if self.funding.own_capital < 0:
            errors.append(f"own_capital must be >= 0, got {self.funding.own_capital}")
        for i, loan in enumerate(self.funding.loans, 1):
            if loan.amount < 0:
                errors.append(f"loan {i} amount must be >= 0, got {loan.amount}")
            if not 1 <= loan.duration <= 50:
                errors.append(f"loan {i} duration must be 1-50 years, got {loan.duration}")
            if not 0 <= loan.rate <= 20:
                errors.append(f"loan {i} rate must be 0-20%, got {loan.rate}")

        # Rent roll
        monthly_rent = sum(room.rent * room.count for room in self.rent_roll.room_types)
        if monthly_rent <= 0:
            errors.append("monthly rent must be positive (set rent and count per room type)")
        occupancy = self.rent_roll.occupancy_rate
        if occupancy is not None and not 0 <= occupancy <= 100:
            errors.append(f"occupancy_rate must be 0-100, got {occupancy}")

        # Advanced settings
        if not 0 <= self.advanced.equipment_ratio <= 1:
            errors.append(
                f"equipment_ratio must be 0-1, got {self.advanced.equipment_ratio}"
            )
        if self.is_used_property and self.property_details.building_age < 0:
            errors.append(f"building_age must be >= 0, got {self.property_details.building_age}")

        return errors

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-compatible dictionary."""
        return _to_plain(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SimulationInput":
        """Build an input record from a dictionary.

        Missing keys (or None values) fall back to field defaults.

        Args:
            data: Dictionary as produced by `to_dict()`.

        Returns:
            SimulationInput.

        Raises:
            ValueError: If an enum value is not recognised.
        """
        prop = _known_fields(PropertyDetails, data.get("property_details") or {})
        if "structure" in prop:
            prop["structure"] = Structure(prop["structure"])

        funding = _known_fields(FundingPlan, data.get("funding") or {})
        if "loans" in funding:
            funding["loans"] = tuple(
                Loan(**_known_fields(Loan, loan)) for loan in funding["loans"]
            )

        rent_roll_data = data.get("rent_roll") or {}
        rent_roll = _known_fields(RentRoll, rent_roll_data)
        if "room_types" in rent_roll:
            rent_roll["room_types"] = tuple(
                RoomType(**_known_fields(RoomType, room)) for room in rent_roll["room_types"]
            )
        if "occupancy_rate" in rent_roll_data:
            # Explicit None means "unset"
            rent_roll["occupancy_rate"] = rent_roll_data["occupancy_rate"]

        expenses = _known_fields(Expenses, data.get("expenses") or {})
        if "management_fee_mode" in expenses:
            expenses["management_fee_mode"] = ManagementFeeMode(expenses["management_fee_mode"])

        advanced = _known_fields(AdvancedSettings, data.get("advanced") or {})
        if "tax_mode" in advanced:
            advanced["tax_mode"] = TaxMode(advanced["tax_mode"])

        top = _known_fields(cls, data)
        return cls(
            title=top.get("title", "New simulation"),
            mode=SimulationMode(top.get("mode", SimulationMode.LAND_NEW.value)),
            property_details=PropertyDetails(**prop),
            budget=ProjectBudget(**_known_fields(ProjectBudget, data.get("budget") or {})),
            funding=FundingPlan(**funding),
            rent_roll=RentRoll(**rent_roll),
            expenses=Expenses(**expenses),
            advanced=AdvancedSettings(**advanced),
        )


def _known_fields(cls, data: Dict[str, Any]) -> Dict[str, Any]:
    """Keep only keys that are fields of `cls` and not None."""
    names = {f.name for f in fields(cls)}
    return {k: v for k, v in data.items() if k in names and v is not None}


def _to_plain(value: Any) -> Any:
    """Recursively convert dataclasses, enums, and tuples to plain Python values."""
    if isinstance(value, Enum):
        return value.value
    if hasattr(value, "__dataclass_fields__"):
        return {f.name: _to_plain(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, (list, tuple)):
        return [_to_plain(v) for v in value]
    return value
