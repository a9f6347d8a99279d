"""Typed request/response models shared across the calculation services.

Wire-facing shapes are Pydantic models (see :mod:`.api`). Each engine stage
hands its output to the next through the small frozen dataclasses defined
here, so a stage can be tested on its own without building a full result.
"""

from __future__ import annotations

from dataclasses import dataclass

from .api import (
    DeductionDetail,
    DeductionSummary,
    EmploymentType,
    ResultMeta,
    TaxBand,
    TaxCalculationResult,
    TaxInput,
    format_validation_error,
)

__all__ = [
    "BandAllocation",
    "DeductionDetail",
    "DeductionOutcome",
    "DeductionResolution",
    "DeductionSummary",
    "EmploymentType",
    "IncomeSummary",
    "ResultMeta",
    "TaxBand",
    "TaxCalculationResult",
    "TaxInput",
    "format_validation_error",
]


@dataclass(frozen=True)
class IncomeSummary:
    """Income streams after business expenses and digital losses are offset."""

    employment_income: float
    adjusted_business_income: float
    net_digital_income: float
    total_income: float


@dataclass(frozen=True)
class DeductionOutcome:
    """Resolved amount for a single deduction rule."""

    rule_id: str
    summary_field: str
    amount: float
    original_amount: float
    limit: float | None
    limited: bool
    trace: str


@dataclass(frozen=True)
class DeductionResolution:
    """Aggregate of every resolved deduction for one calculation."""

    outcomes: tuple[DeductionOutcome, ...]
    details: tuple[DeductionDetail, ...]
    summary: DeductionSummary

    @property
    def total(self) -> float:
        return sum(outcome.amount for outcome in self.outcomes)


@dataclass(frozen=True)
class BandAllocation:
    """Taxable income spread across the progressive bands."""

    bands: tuple[TaxBand, ...]
    tax_payable: float

    @property
    def allocated(self) -> float:
        return sum(band.amount for band in self.bands)
