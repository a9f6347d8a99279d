"""Domain-specific calculation helpers."""

from .bands import allocate_bands, reduce_taxable_income
from .deductions import resolve_deductions
from .income import normalise_income
from .utils import format_currency, format_percentage, round_half_up

__all__ = [
    "allocate_bands",
    "format_currency",
    "format_percentage",
    "normalise_income",
    "reduce_taxable_income",
    "resolve_deductions",
    "round_half_up",
]
