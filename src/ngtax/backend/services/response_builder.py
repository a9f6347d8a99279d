"""Utilities for serialising calculation responses."""

from __future__ import annotations

from collections.abc import Mapping
from http import HTTPStatus
from typing import Any, Tuple

from flask import jsonify

from ngtax.backend.app.models import TaxCalculationResult

ResponseTuple = Tuple[Any, int]


def build_calculation_response(
    result: TaxCalculationResult | Mapping[str, Any],
) -> ResponseTuple:
    """Return a Flask JSON response for a calculation ``result``.

    Model instances are dumped with their camelCase wire names; mappings are
    assumed to be serialised already.
    """

    if isinstance(result, TaxCalculationResult):
        payload = result.to_payload()
    else:
        payload = dict(result)
    return jsonify(payload), HTTPStatus.OK
