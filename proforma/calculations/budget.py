"""Project budget totals, funding balance, and acquisition cost estimates.

Budget and funding amounts are in man-yen; rent roll amounts are in yen.
"""

from dataclasses import dataclass, replace

from ..models.lookups import (
    ACQUISITION_TAX_RATES,
    BROKERAGE_FLAT_FEE,
    BROKERAGE_MINIMUM_BASE,
    BROKERAGE_RATE,
    CONSUMPTION_TAX_RATE,
    MAN_YEN,
    round_half_up,
)
from ..models.simulation import ProjectBudget, RentRoll, SimulationInput, SimulationMode

BALANCE_TOLERANCE = 0.1  # Man-yen
ESTIMATED_STAMP_DUTY = 1  # Man-yen


@dataclass(frozen=True)
class FundingSummary:
    """Sources of funds compared against the project budget (man-yen)."""

    total_budget: float
    total_loans: float
    own_capital: float
    cooperation_money: float
    security_deposit_in: float

    @property
    def total_funding(self) -> float:
        return (
            self.total_loans
            + self.own_capital
            + self.cooperation_money
            + self.security_deposit_in
        )

    @property
    def balance(self) -> float:
        """Funding minus budget; negative means a shortfall."""
        return self.total_funding - self.total_budget

    @property
    def is_balanced(self) -> bool:
        return abs(self.balance) < BALANCE_TOLERANCE

    @property
    def coverage_ratio(self) -> float:
        """Funding / budget, 0 when the budget is 0."""
        if self.total_budget <= 0:
            return 0.0
        return self.total_funding / self.total_budget

    @property
    def loan_to_cost(self) -> float:
        """Loans / budget, 0 when the budget is 0."""
        if self.total_budget <= 0:
            return 0.0
        return self.total_loans / self.total_budget


@dataclass(frozen=True)
class AcquisitionCostEstimate:
    """Estimated one-time taxes and fees on acquisition (man-yen)."""

    registration_tax: int
    acquisition_tax: int
    brokerage_fee: int
    stamp_duty: int = ESTIMATED_STAMP_DUTY

    @property
    def total(self) -> int:
        return self.registration_tax + self.acquisition_tax + self.brokerage_fee + self.stamp_duty

    def apply_to(self, budget: ProjectBudget) -> ProjectBudget:
        """Return a copy of `budget` with the estimated lines filled in."""
        return replace(
            budget,
            registration_tax=self.registration_tax,
            acquisition_tax=self.acquisition_tax,
            brokerage_fee=self.brokerage_fee,
            stamp_duty=self.stamp_duty,
        )


@dataclass(frozen=True)
class UpfrontRentalIncome:
    """One-time amounts collected from tenants at lease-up (yen)."""

    security_deposit: float
    key_money: float

    @property
    def total(self) -> float:
        return self.security_deposit + self.key_money


def total_budget(budget: ProjectBudget) -> float:
    """Sum of every budget line (man-yen)."""
    return budget.total


def summarize_funding(inputs: SimulationInput) -> FundingSummary:
    """Compare the funding plan against the project budget.

    Args:
        inputs: Simulation input record.

    Returns:
        FundingSummary in man-yen.
    """
    funding = inputs.funding
    return FundingSummary(
        total_budget=total_budget(inputs.budget),
        total_loans=funding.total_loans,
        own_capital=funding.own_capital,
        cooperation_money=funding.cooperation_money,
        security_deposit_in=funding.security_deposit_in,
    )


def estimate_acquisition_costs(
    budget: ProjectBudget,
    mode: SimulationMode,
) -> AcquisitionCostEstimate:
    """Estimate registration tax, acquisition tax, and brokerage from prices.

    Assessed values are approximated as 70% of the land price and 50% of
    the building cost. New construction registers building preservation
    and takes the residential land reduction on acquisition tax; a used
    building registers a transfer at the land rate. Brokerage is charged
    on land only for new construction and on land plus building for used,
    and only when that base exceeds 4,000,000 yen.

    Args:
        budget: Project budget with land price and building cost set.
        mode: Investment type.

    Returns:
        AcquisitionCostEstimate in man-yen, rounded.

    Example:
        >>> est = estimate_acquisition_costs(ProjectBudget(land_price=6000), SimulationMode.LAND_NEW)
        >>> est.registration_tax, est.acquisition_tax, est.brokerage_fee
        (63, 90, 205)
    """
    rates = ACQUISITION_TAX_RATES
    is_new = mode == SimulationMode.LAND_NEW

    land_price = budget.land_price * MAN_YEN
    building_cost = budget.building_works_cost * MAN_YEN
    land_assessed = land_price * rates.land_assessment_ratio
    building_assessed = building_cost * rates.building_assessment_ratio

    # Registration and license tax
    land_registration = land_assessed * rates.land_transfer_registration
    if is_new:
        building_registration = building_assessed * rates.building_preservation_registration
    else:
        building_registration = building_assessed * rates.land_transfer_registration

    # Real estate acquisition tax
    land_reduction = rates.residential_land_reduction if is_new else 0
    land_acquisition = (land_assessed - land_reduction) * rates.land_acquisition
    building_acquisition = building_assessed * rates.building_acquisition

    # Brokerage
    brokerage_base = land_price if is_new else land_price + building_cost
    brokerage = 0.0
    if brokerage_base > BROKERAGE_MINIMUM_BASE:
        brokerage = (brokerage_base * BROKERAGE_RATE + BROKERAGE_FLAT_FEE) * (1 + CONSUMPTION_TAX_RATE)

    return AcquisitionCostEstimate(
        registration_tax=round_half_up((land_registration + building_registration) / MAN_YEN),
        acquisition_tax=max(0, round_half_up((land_acquisition + building_acquisition) / MAN_YEN)),
        brokerage_fee=round_half_up(brokerage / MAN_YEN),
    )


def upfront_rental_income(rent_roll: RentRoll) -> UpfrontRentalIncome:
    """Security deposit and key money for a fully let building (yen)."""
    monthly_rent = rent_roll.monthly_rent
    return UpfrontRentalIncome(
        security_deposit=monthly_rent * rent_roll.security_deposit_months,
        key_money=monthly_rent * rent_roll.key_money_months,
    )
