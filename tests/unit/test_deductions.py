"""Unit tests for statutory deduction resolution and calculation traces."""

from __future__ import annotations

import pytest

from ngtax.backend.app.models import TaxInput
from ngtax.backend.app.services.calculators import normalise_income, resolve_deductions
from ngtax.backend.app.services.calculators.deductions import (
    RESOLVERS,
    RuleContext,
    resolve_deduction,
)
from ngtax.backend.config.regime_config import (
    DeductionRuleConfig,
    RegimeConfiguration,
    load_regime_configuration,
)


@pytest.fixture()
def rent_regime() -> RegimeConfiguration:
    return load_regime_configuration("rent_relief")


@pytest.fixture()
def consolidated_regime() -> RegimeConfiguration:
    return load_regime_configuration("consolidated_relief")


def _resolve(payload: TaxInput, config: RegimeConfiguration):
    income = normalise_income(payload)
    return resolve_deductions(payload, income, config.deductions, config.currency)


def _detail(resolution, name: str):
    return next(detail for detail in resolution.details if detail.name == name)


def test_every_rule_kind_has_a_resolver(rent_regime: RegimeConfiguration) -> None:
    kinds = {"income_capped", "actual", "rate_with_cap", "rate_with_floor", "per_head"}
    assert kinds == set(RESOLVERS)
    assert {rule.kind for rule in rent_regime.deductions} <= kinds


def test_pension_is_capped_at_eight_percent_of_employment_income(
    rent_regime: RegimeConfiguration,
) -> None:
    payload = TaxInput(employment_income=10_000_000, pension_contrib=2_000_000)

    resolution = _resolve(payload, rent_regime)

    assert resolution.summary.pension == pytest.approx(800_000)
    detail = _detail(resolution, "Pension Contribution")
    assert detail.amount == pytest.approx(800_000)
    assert detail.original_amount == pytest.approx(2_000_000)
    assert detail.limit == pytest.approx(800_000)
    assert detail.calculation == "Limited to 8% of employment income (₦800,000)"


def test_uncapped_pension_trace_states_the_formula(
    rent_regime: RegimeConfiguration,
) -> None:
    payload = TaxInput(employment_income=6_000_000, pension_contrib=100_000)

    resolution = _resolve(payload, rent_regime)

    detail = _detail(resolution, "Pension Contribution")
    assert detail.amount == pytest.approx(100_000)
    assert detail.calculation == "8% of employment income: ₦6,000,000 × 8% = ₦480,000"


def test_nhf_is_capped_at_two_and_a_half_percent(rent_regime: RegimeConfiguration) -> None:
    payload = TaxInput(employment_income=4_000_000, nhf_contrib=150_000)

    resolution = _resolve(payload, rent_regime)

    assert resolution.summary.nhf == pytest.approx(100_000)
    detail = _detail(resolution, "National Housing Fund (NHF)")
    assert detail.calculation == "Limited to 2.5% of employment income (₦100,000)"


def test_pass_through_deductions_use_actual_amounts(
    rent_regime: RegimeConfiguration,
) -> None:
    payload = TaxInput(nhis_contrib=60_000, life_insurance=100_000, loan_interest=200_000)

    resolution = _resolve(payload, rent_regime)

    assert resolution.summary.nhis == pytest.approx(60_000)
    assert resolution.summary.life_insurance == pytest.approx(100_000)
    assert resolution.summary.loan_interest == pytest.approx(200_000)

    nhis = _detail(resolution, "National Health Insurance Scheme (NHIS)")
    assert nhis.calculation == "Actual contribution: ₦60,000"
    assert nhis.limit is None
    life = _detail(resolution, "Life Insurance / Annuity Premium")
    assert life.calculation == "Actual premium paid: ₦100,000"
    loan = _detail(resolution, "Loan Interest (Home Ownership)")
    assert loan.calculation == "Actual interest paid: ₦200,000"


def test_rent_relief_is_capped_at_fixed_amount(rent_regime: RegimeConfiguration) -> None:
    payload = TaxInput(rent_paid=3_000_000)

    resolution = _resolve(payload, rent_regime)

    assert resolution.summary.rent_relief == pytest.approx(500_000)
    detail = _detail(resolution, "Rent Relief")
    assert detail.original_amount == pytest.approx(3_000_000)
    assert detail.limit == pytest.approx(500_000)
    assert detail.calculation == "20% of rent (₦600,000) capped at ₦500,000 maximum"


def test_rent_relief_below_cap(rent_regime: RegimeConfiguration) -> None:
    payload = TaxInput(rent_paid=1_500_000)

    resolution = _resolve(payload, rent_regime)

    assert resolution.summary.rent_relief == pytest.approx(300_000)
    detail = _detail(resolution, "Rent Relief")
    assert detail.calculation == "20% of rent paid: ₦1,500,000 × 20% = ₦300,000"


def test_donations_are_capped_by_total_income(rent_regime: RegimeConfiguration) -> None:
    payload = TaxInput(
        employment_income=6_000_000,
        rental_income=3_400_000,
        donations=1_500_000,
    )

    resolution = _resolve(payload, rent_regime)

    assert resolution.summary.donations == pytest.approx(940_000)
    detail = _detail(resolution, "Charitable Donations")
    assert detail.calculation == "Limited to 10% of total income (₦940,000)"


def test_dependent_relief_caps_head_count(rent_regime: RegimeConfiguration) -> None:
    payload = TaxInput(dependents=7)

    resolution = _resolve(payload, rent_regime)

    assert resolution.summary.dependent_relief == pytest.approx(10_000)
    detail = _detail(resolution, "Dependent Relief")
    assert detail.original_amount == 7
    assert detail.limit == 4
    assert (
        detail.calculation == "4 dependents × ₦2,500 = ₦10,000 (capped at 4 dependents)"
    )


def test_single_dependent_trace_is_singular(rent_regime: RegimeConfiguration) -> None:
    payload = TaxInput(dependents=1)

    resolution = _resolve(payload, rent_regime)

    detail = _detail(resolution, "Dependent Relief")
    assert detail.calculation == "1 dependent × ₦2,500 = ₦2,500"


def test_zero_amount_deductions_are_omitted_from_details(
    rent_regime: RegimeConfiguration,
) -> None:
    payload = TaxInput(employment_income=5_000_000, pension_contrib=200_000)

    resolution = _resolve(payload, rent_regime)

    assert [detail.name for detail in resolution.details] == ["Pension Contribution"]
    assert len(resolution.outcomes) == len(rent_regime.deductions)
    assert resolution.summary.rent_relief == 0
    assert resolution.summary.consolidated_relief == 0


def test_details_follow_configured_order(rent_regime: RegimeConfiguration) -> None:
    payload = TaxInput(
        employment_income=6_000_000,
        pension_contrib=480_000,
        nhf_contrib=150_000,
        nhis_contrib=60_000,
        life_insurance=100_000,
        rent_paid=1_500_000,
        loan_interest=200_000,
        donations=1_500_000,
        dependents=2,
    )

    resolution = _resolve(payload, rent_regime)

    assert [detail.name for detail in resolution.details] == [
        rule.name for rule in rent_regime.deductions
    ]
    assert resolution.total == pytest.approx(
        480_000 + 150_000 + 60_000 + 100_000 + 300_000 + 200_000 + 600_000 + 5_000
    )


def test_contribution_without_employment_income_is_not_deductible(
    rent_regime: RegimeConfiguration,
) -> None:
    payload = TaxInput(
        freelance_income=2_000_000, employment_type="freelancer", pension_contrib=50_000
    )

    resolution = _resolve(payload, rent_regime)

    assert resolution.summary.pension == 0
    assert all(detail.name != "Pension Contribution" for detail in resolution.details)


def test_consolidated_relief_applies_floor(
    consolidated_regime: RegimeConfiguration,
) -> None:
    payload = TaxInput(employment_income=500_000)

    resolution = _resolve(payload, consolidated_regime)

    assert resolution.summary.consolidated_relief == pytest.approx(200_000)
    assert resolution.summary.rent_relief == 0
    detail = _detail(resolution, "Consolidated Relief Allowance (CRA)")
    assert detail.limit == pytest.approx(200_000)
    assert (
        detail.calculation
        == "Minimum allowance of ₦200,000 applies (20% of total income is ₦100,000)"
    )


def test_consolidated_relief_uses_percentage_above_floor(
    consolidated_regime: RegimeConfiguration,
) -> None:
    payload = TaxInput(employment_income=5_000_000, rent_paid=2_000_000)

    resolution = _resolve(payload, consolidated_regime)

    assert resolution.summary.consolidated_relief == pytest.approx(1_000_000)
    # Rent paid carries no relief in this regime.
    assert resolution.summary.rent_relief == 0
    detail = _detail(resolution, "Consolidated Relief Allowance (CRA)")
    assert detail.calculation == "20% of total income: ₦5,000,000 × 20% = ₦1,000,000"


def test_custom_rule_is_resolved_from_configuration_alone() -> None:
    rule = DeductionRuleConfig.model_validate(
        {
            "id": "life_cover",
            "summary_field": "life_insurance",
            "name": "Life Cover",
            "description": "Premiums capped at a flat amount.",
            "kind": "rate_with_cap",
            "source": "life_insurance",
            "rate": 1.0,
            "cap": 50_000,
            "trace": {
                "applied": "Premium {amount}",
                "limited": "Premium {original} capped at {cap}",
            },
        }
    )
    payload = TaxInput(life_insurance=80_000)
    context = RuleContext(payload=payload, income=normalise_income(payload))

    outcome = resolve_deduction(rule, context, load_regime_configuration("rent_relief").currency)

    assert outcome.amount == pytest.approx(50_000)
    assert outcome.limited is True
    assert outcome.trace == "Premium ₦80,000 capped at ₦50,000"
