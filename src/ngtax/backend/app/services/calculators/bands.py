"""Taxable income reduction and progressive band allocation."""

from __future__ import annotations

from typing import Sequence

from ngtax.backend.app.models import BandAllocation, TaxBand
from ngtax.backend.config.regime_config import CurrencyConfig, IncomeBand

from .utils import format_currency, rate_as_percent


def reduce_taxable_income(total_income: float, total_deductions: float) -> float:
    """Return taxable income; deductions beyond total income are not usable."""

    return max(0.0, total_income - total_deductions)


def allocate_bands(
    taxable_income: float,
    bands: Sequence[IncomeBand],
    top_rate: float,
    currency: CurrencyConfig,
) -> BandAllocation:
    """Walk ``bands`` in order, taxing each slice of ``taxable_income``.

    A band is consumed in full only while the remaining income strictly
    exceeds its width, so an amount landing exactly on a threshold stays in
    the lower band. Whatever is left once the table is exhausted is taxed at
    ``top_rate``.
    """

    def money(value: float) -> str:
        return format_currency(value, currency.symbol)

    remaining = taxable_income
    previous_threshold = 0.0
    total_tax = 0.0
    slices: list[TaxBand] = []

    for band in bands:
        if remaining <= 0:
            break

        if remaining > band.width:
            amount = band.width
            upper = previous_threshold + band.width
        else:
            amount = remaining
            upper = previous_threshold + remaining

        tax = amount * band.rate
        total_tax += tax
        slices.append(
            TaxBand(
                range=f"{money(previous_threshold)} - {money(upper)}",
                amount=amount,
                rate=rate_as_percent(band.rate),
                tax=tax,
            )
        )
        remaining -= amount
        previous_threshold += band.width

    if remaining > 0:
        tax = remaining * top_rate
        total_tax += tax
        slices.append(
            TaxBand(
                range=f"Above {money(previous_threshold)}",
                amount=remaining,
                rate=rate_as_percent(top_rate),
                tax=tax,
            )
        )

    return BandAllocation(bands=tuple(slices), tax_payable=total_tax)


__all__ = ["allocate_bands", "reduce_taxable_income"]
