"""Orchestrate request validation and the tax calculation pipeline.

``compute_tax_liability`` is the engine proper: a pure function running the
five stages (income normalisation, deduction resolution, taxable income
reduction, band allocation and result assembly) strictly in order.
``calculate_tax`` wraps it for the HTTP boundary by validating payloads,
selecting the configured regime and converting failures into a single
:class:`TaxCalculationError`. Profiling hooks live here so the stage modules
can focus on their own arithmetic.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from contextlib import contextmanager
from time import perf_counter
from typing import Any

from pydantic import ValidationError

from ngtax.backend.app.models import (
    ResultMeta,
    TaxCalculationResult,
    TaxInput,
    format_validation_error,
)
from ngtax.backend.config.regime_config import (
    RegimeConfiguration,
    load_active_configuration,
    load_regime_configuration,
)

from .calculators import (
    allocate_bands,
    normalise_income,
    reduce_taxable_income,
    resolve_deductions,
)

_LOGGER = logging.getLogger(__name__)

CALCULATION_FAILED_MESSAGE = "Failed to calculate tax. Please check your inputs."


class TaxCalculationError(ValueError):
    """Raised when a payload cannot be turned into a tax calculation."""

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(CALCULATION_FAILED_MESSAGE)
        self.detail = detail


def _profiling_enabled() -> bool:
    """Return ``True`` when calculation profiling should be captured."""

    flag = os.getenv("NGTAX_PROFILE_CALCULATIONS", "")
    return flag.strip().lower() in {"1", "true", "yes", "on"}


@contextmanager
def _profile_section(name: str, store: dict[str, float] | None):
    """Capture the duration of a named section when profiling is enabled."""

    if store is None:
        yield
        return

    start = perf_counter()
    try:
        yield
    finally:
        store[name] = perf_counter() - start


def compute_tax_liability(
    payload: TaxInput,
    config: RegimeConfiguration,
    *,
    timings: dict[str, float] | None = None,
) -> TaxCalculationResult:
    """Compute the full tax breakdown for ``payload`` under ``config``."""

    with _profile_section("income", timings):
        income = normalise_income(payload)

    with _profile_section("deductions", timings):
        deductions = resolve_deductions(
            payload, income, config.deductions, config.currency
        )
    total_deductions = deductions.total

    with _profile_section("taxable_income", timings):
        taxable_income = reduce_taxable_income(income.total_income, total_deductions)

    with _profile_section("bands", timings):
        allocation = allocate_bands(
            taxable_income, config.bands, config.top_rate, config.currency
        )

    total_income = income.total_income
    tax_payable = allocation.tax_payable
    effective_tax_rate = (
        (tax_payable / total_income) * 100 if total_income > 0 else 0.0
    )

    return TaxCalculationResult(
        total_income=total_income,
        adjusted_business_income=income.adjusted_business_income,
        net_digital_income=income.net_digital_income,
        total_deductions=total_deductions,
        taxable_income=taxable_income,
        tax_payable=tax_payable,
        effective_tax_rate=effective_tax_rate,
        band_breakdown=allocation.bands,
        savings_from_deductions=total_deductions,
        deduction_details=deductions.summary,
        detailed_deductions=deductions.details,
        meta=ResultMeta(
            regime=config.id,
            resident=payload.resident,
            employment_type=payload.employment_type,
        ),
    )


def _parse_payload(payload: Mapping[str, Any] | TaxInput) -> TaxInput:
    if isinstance(payload, TaxInput):
        return payload
    if not isinstance(payload, Mapping):
        raise TaxCalculationError("Payload must be a mapping")
    try:
        return TaxInput.model_validate(payload)
    except ValidationError as exc:
        raise TaxCalculationError(format_validation_error(exc)) from exc


def calculate_tax(
    payload: Mapping[str, Any] | TaxInput,
    *,
    regime: str | None = None,
) -> dict[str, Any]:
    """Validate ``payload`` and return the JSON-ready calculation result.

    ``regime`` overrides the configured regime; by default the one selected
    through ``NGTAX_TAX_REGIME`` (or the manifest default) is used.
    """

    try:
        tax_input = _parse_payload(payload)
    except TaxCalculationError as exc:
        _LOGGER.info("Rejected calculation payload: %s", exc.detail)
        raise

    config = (
        load_regime_configuration(regime)
        if regime is not None
        else load_active_configuration()
    )

    timings: dict[str, float] | None = {} if _profiling_enabled() else None
    overall_start = perf_counter() if timings is not None else None

    try:
        result = compute_tax_liability(tax_input, config, timings=timings)
    except (ArithmeticError, TypeError, ValueError) as exc:
        _LOGGER.exception("Tax calculation failed under regime %s", config.id)
        raise TaxCalculationError(str(exc)) from exc

    if timings is not None and overall_start is not None:
        timings["total"] = perf_counter() - overall_start
        _LOGGER.debug(
            "calculate_tax timings (ms): %s",
            {name: round(duration * 1000, 3) for name, duration in timings.items()},
        )

    _LOGGER.debug(
        "Calculated tax %.2f on taxable income %.2f (regime %s)",
        result.tax_payable,
        result.taxable_income,
        config.id,
    )

    return result.to_payload()


__all__ = [
    "CALCULATION_FAILED_MESSAGE",
    "TaxCalculationError",
    "calculate_tax",
    "compute_tax_liability",
]
