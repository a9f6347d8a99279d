"""REST endpoints for tax calculations."""

from __future__ import annotations

from typing import Any

from flask import Blueprint, request

from ngtax.backend.services import (
    build_calculation_response,
    calculate_tax,
    parse_calculation_payload,
)

blueprint = Blueprint("calculations", __name__, url_prefix="/api/v1")

# Path used by earlier front-end builds.
legacy_blueprint = Blueprint("legacy_calculations", __name__, url_prefix="/api")


def _calculate() -> tuple[Any, int]:
    payload = parse_calculation_payload(request)
    result = calculate_tax(payload)

    return build_calculation_response(result)


@blueprint.post("/calculations")
def create_calculation() -> tuple[Any, int]:
    """Create a tax calculation using the submitted JSON payload."""

    return _calculate()


@legacy_blueprint.post("/calculate-tax")
def calculate_tax_legacy() -> tuple[Any, int]:
    """Alias of :func:`create_calculation` kept for existing clients."""

    return _calculate()
