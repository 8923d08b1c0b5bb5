#!/usr/bin/env python3
"""Example script to run the pro-forma engine on a demo RC apartment."""

import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from proforma.models.lookups import Structure
from proforma.models.simulation import (
    AdvancedSettings,
    Expenses,
    FundingPlan,
    Loan,
    ProjectBudget,
    PropertyDetails,
    RentRoll,
    RoomType,
    SimulationInput,
    SimulationMode,
)
from proforma.calculations.budget import summarize_funding
from proforma.calculations.exit import exit_table_for
from proforma.calculations.metrics import calculate_metrics, format_metrics_table
from proforma.calculations.projection import project
from proforma.scenarios import (
    format_scenario_table,
    format_sensitivity_table,
    generate_scenarios,
    sensitivity_matrix,
)


def get_demo_inputs() -> SimulationInput:
    """Get the demo inputs: new RC building, 9 units, one bank loan."""
    return SimulationInput(
        title="Demo RC apartment",
        mode=SimulationMode.LAND_NEW,
        property_details=PropertyDetails(
            structure=Structure.RC,
            address="Setagaya, Tokyo",
            land_area_m2=165.0,
            total_units=9,
        ),
        budget=ProjectBudget(
            land_price=8500,
            demolition_cost=200,
            building_works_cost=12000,
            stamp_duty=10,
            registration_tax=50,
            acquisition_tax=120,
            fire_insurance_prepaid=80,
            water_contribution=30,
            brokerage_fee=280,
            other_initial_cost=100,
            construction_interest=50,
        ),
        funding=FundingPlan(
            own_capital=1000,
            loans=(Loan(name="Bank loan", amount=20420, rate=1.8, duration=35),),
        ),
        rent_roll=RentRoll(
            room_types=(
                RoomType(name="1K (25㎡)", count=6, area_m2=25.0, rent=89000, common_fee=5000),
                RoomType(name="1LDK (40㎡)", count=3, area_m2=40.0, rent=135000, common_fee=8000),
            ),
            parking_count=1,
            parking_fee=20000,
            occupancy_rate=96,
        ),
        expenses=Expenses(
            management_fee_ratio=5.0,
            building_maintenance=30000,
            maintenance_reserve=15000,
            fixed_asset_tax_land=250000,
            city_planning_tax_land=50000,
            fixed_asset_tax_building=300000,
            city_planning_tax_building=60000,
            other_expenses=50000,
        ),
        advanced=AdvancedSettings(
            other_income=5_000_000,
            equipment_ratio=0.2,
            exit_cap_rate=6.0,
        ),
    )


def run_projection(inputs: SimulationInput):
    """Run and print the annual projection with summary metrics."""
    print("\n" + "=" * 60)
    print("RENTAL PROPERTY PRO-FORMA")
    print(inputs.title)
    print("=" * 60 + "\n")

    errors = inputs.validate()
    if errors:
        print("Input errors:")
        for error in errors:
            print(f"  - {error}")
        return

    funding = summarize_funding(inputs)
    print(f"Total budget:  {funding.total_budget:>12,.0f} man-yen")
    print(f"Total funding: {funding.total_funding:>12,.0f} man-yen "
          f"({'balanced' if funding.is_balanced else f'{funding.balance:+,.0f}'})")

    projection = project(inputs)

    print(f"\n{'Year':>4} {'NOI':>12} {'ADS':>12} {'BTCF':>12} {'Tax':>10} {'ATCF':>12} {'Balance':>14}")
    print("-" * 82)
    for record in projection:
        if record.year in (1, 2, 3, 5, 10, 15, 20, 25, 30, 35):
            print(
                f"{record.year:>4} {record.noi:>12,.0f} {record.debt_service:>12,.0f} "
                f"{record.btcf:>12,.0f} {record.tax_amount:>10,.0f} "
                f"{record.atcf:>12,.0f} {record.loan_balance:>14,.0f}"
            )

    metrics = calculate_metrics(inputs, projection)
    print("\n" + format_metrics_table(metrics))

    print(f"\n{'Sale Year':>9} {'Price':>14} {'Net Proceeds':>14} {'Total Return':>14} {'Annualized':>11}")
    print("-" * 66)
    for exit_result in exit_table_for(inputs, projection):
        print(
            f"{exit_result.sale_year:>9} {exit_result.sale_price:>14,.0f} "
            f"{exit_result.net_sale_proceeds:>14,.0f} {exit_result.total_return:>14,.0f} "
            f"{exit_result.annualized_return:>10.2%}"
        )


def run_scenarios(inputs: SimulationInput):
    """Run and print scenario and sensitivity analysis."""
    print("\n" + format_scenario_table(generate_scenarios(inputs)))
    print("\n" + format_sensitivity_table(sensitivity_matrix(inputs, parallel=True)))


if __name__ == "__main__":
    if "--debug" in sys.argv:
        logging.basicConfig(level=logging.DEBUG)

    demo = get_demo_inputs()
    run_projection(demo)

    if "--scenarios" in sys.argv or "--all" in sys.argv:
        run_scenarios(demo)
    else:
        print("\nRun with --scenarios to see scenario and sensitivity analysis")
