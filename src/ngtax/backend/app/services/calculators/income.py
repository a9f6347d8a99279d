"""Income normalisation for the calculation pipeline."""

from __future__ import annotations

from ngtax.backend.app.models import IncomeSummary, TaxInput


def normalise_income(payload: TaxInput) -> IncomeSummary:
    """Offset business expenses and digital losses, then total every stream.

    Business expenses only reduce freelance income for non-employees, and
    digital losses only reduce digital income; neither can push its stream
    below zero.
    """

    adjusted_business_income = payload.freelance_income
    if payload.employment_type != "employee":
        adjusted_business_income = max(
            0.0, payload.freelance_income - payload.business_expenses
        )

    net_digital_income = max(0.0, payload.digital_income - payload.losses_digital)

    total_income = (
        payload.employment_income
        + adjusted_business_income
        + net_digital_income
        + payload.rental_income
        + payload.investment_income
        + payload.capital_gains
    )

    return IncomeSummary(
        employment_income=payload.employment_income,
        adjusted_business_income=adjusted_business_income,
        net_digital_income=net_digital_income,
        total_income=total_income,
    )


__all__ = ["normalise_income"]
