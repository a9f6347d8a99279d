"""Utility helpers for calculator modules."""

from __future__ import annotations

import math


def round_half_up(value: float) -> int:
    """Round ``value`` to the nearest integer, with halves rounding up.

    Python's ``round`` uses banker's rounding, which would render
    ``₦2.5`` as ``₦2`` in labels.
    """

    return int(math.floor(value + 0.5))


def format_number(value: float) -> str:
    """Return ``value`` as a rounded integer with thousands separators."""

    return f"{round_half_up(value):,}"


def format_currency(value: float, symbol: str = "₦") -> str:
    """Return a currency label such as ``₦1,250,000``."""

    return f"{symbol}{format_number(value)}"


def format_percentage(value: float) -> str:
    """Return a human-readable percentage label for ``value``."""

    percentage = round(value * 100, 4)
    if float(int(percentage)) == percentage:
        return f"{int(percentage)}%"
    return f"{percentage:g}%"


def rate_as_percent(value: float) -> float:
    """Convert a fractional rate into a percentage number (``0.15`` -> ``15.0``)."""

    return round(value * 100, 4)
