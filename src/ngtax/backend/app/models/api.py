"""Pydantic models describing the public API surface."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
)
from pydantic.alias_generators import to_camel

__all__ = [
    "EmploymentType",
    "MAX_DEPENDENTS",
    "TaxInput",
    "TaxBand",
    "DeductionDetail",
    "DeductionSummary",
    "ResultMeta",
    "TaxCalculationResult",
    "format_validation_error",
]


EmploymentType = Literal["employee", "self-employed", "freelancer", "both"]

MAX_DEPENDENTS = 1_000_000


class ApiModel(BaseModel):
    """Base for wire models: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        frozen=True,
        allow_inf_nan=False,
    )


class TaxInput(ApiModel):
    """Income and deduction figures supplied for one calculation.

    Omitted amounts default to zero, ``employmentType`` defaults to
    ``employee`` and ``resident`` to ``True``. Explicit ``null`` values,
    negative or non-finite numbers and unknown fields are rejected.
    Values are validated strictly: booleans are not numbers, and numeric or
    boolean strings are not coerced. Integers are accepted for amounts.
    """

    model_config = ConfigDict(strict=True)

    employment_type: EmploymentType = "employee"
    resident: bool = True

    employment_income: float = Field(default=0.0, ge=0)
    freelance_income: float = Field(default=0.0, ge=0)
    digital_income: float = Field(default=0.0, ge=0)
    rental_income: float = Field(default=0.0, ge=0)
    investment_income: float = Field(default=0.0, ge=0)
    capital_gains: float = Field(default=0.0, ge=0)

    business_expenses: float = Field(default=0.0, ge=0)
    losses_digital: float = Field(default=0.0, ge=0)

    pension_contrib: float = Field(default=0.0, ge=0)
    nhf_contrib: float = Field(default=0.0, ge=0)
    nhis_contrib: float = Field(default=0.0, ge=0)
    life_insurance: float = Field(default=0.0, ge=0)
    rent_paid: float = Field(default=0.0, ge=0)
    loan_interest: float = Field(default=0.0, ge=0)
    donations: float = Field(default=0.0, ge=0)
    dependents: int = Field(default=0, ge=0, le=MAX_DEPENDENTS)

    @field_validator("employment_type", mode="before")
    @classmethod
    def _normalise_employment_type(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value


class TaxBand(ApiModel):
    """A slice of taxable income and the tax charged on it."""

    range: str
    amount: float
    rate: float
    tax: float


class DeductionDetail(ApiModel):
    """Itemised deduction with its calculation trace."""

    name: str
    amount: float
    original_amount: float
    limit: float | None = None
    calculation: str
    description: str


class DeductionSummary(ApiModel):
    """Final amount for every deduction kind known to any regime."""

    pension: float = 0.0
    nhf: float = 0.0
    nhis: float = 0.0
    life_insurance: float = 0.0
    rent_relief: float = 0.0
    loan_interest: float = 0.0
    donations: float = 0.0
    dependent_relief: float = 0.0
    consolidated_relief: float = 0.0


class ResultMeta(ApiModel):
    """Context echoed back alongside the calculation output."""

    regime: str
    resident: bool
    employment_type: EmploymentType


class TaxCalculationResult(ApiModel):
    """Full breakdown produced by the tax engine."""

    total_income: float
    adjusted_business_income: float
    net_digital_income: float
    total_deductions: float
    taxable_income: float
    tax_payable: float
    effective_tax_rate: float
    band_breakdown: tuple[TaxBand, ...]
    savings_from_deductions: float
    deduction_details: DeductionSummary
    detailed_deductions: tuple[DeductionDetail, ...]
    meta: ResultMeta

    def to_payload(self) -> dict[str, Any]:
        """Return the camelCase JSON payload for this result."""

        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def format_validation_error(error: ValidationError) -> str:
    """Return a concise human-readable description of validation issues."""

    messages: list[str] = []
    for issue in error.errors():
        location = ".".join(str(part) for part in issue.get("loc", ()))
        message = issue.get("msg", "Invalid value")
        if "greater than or equal to 0" in message.lower():
            message = "value cannot be negative"
        if location:
            messages.append(f"{location}: {message}")
        else:
            messages.append(message)

    details = "; ".join(messages) if messages else str(error)
    return f"Invalid calculation payload: {details}"
