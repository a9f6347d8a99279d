"""Expose regime configuration metadata consumed by the front-end.

These endpoints bridge the YAML-backed regime configuration and the UI so that
forms can show band tables, deduction limits and descriptions without
duplicating business rules.
"""

from __future__ import annotations

from typing import Any

from flask import Blueprint, jsonify

from ngtax.backend.app.http import problem_response
from ngtax.backend.app.services.calculators import format_currency
from ngtax.backend.app.services.calculators.utils import rate_as_percent
from ngtax.backend.config.regime_config import (
    DeductionRuleConfig,
    RegimeConfiguration,
    active_regime_id,
    load_manifest,
    load_regime_configuration,
)
from ngtax.backend.version import get_project_version

blueprint = Blueprint("config", __name__, url_prefix="/api/v1/config")


def get_configuration_metadata() -> dict[str, Any]:
    """Expose runtime metadata derived from the configuration manifest."""

    manifest = load_manifest()
    return {
        "version": get_project_version(),
        "regime": active_regime_id(),
        "available_regimes": list(manifest.supported_regimes),
    }


def _serialise_bands(config: RegimeConfiguration) -> list[dict[str, Any]]:
    symbol = config.currency.symbol
    bands: list[dict[str, Any]] = []
    lower = 0.0
    for band in config.bands:
        upper = lower + band.width
        bands.append(
            {
                "label": f"{format_currency(lower, symbol)} - {format_currency(upper, symbol)}",
                "lower": lower,
                "upper": upper,
                "width": band.width,
                "rate": rate_as_percent(band.rate),
            }
        )
        lower = upper

    bands.append(
        {
            "label": f"Above {format_currency(lower, symbol)}",
            "lower": lower,
            "upper": None,
            "width": None,
            "rate": rate_as_percent(config.top_rate),
        }
    )
    return bands


def _serialise_rule(rule: DeductionRuleConfig) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "id": rule.id,
        "name": rule.name,
        "description": rule.description,
        "kind": rule.kind,
        "source": rule.source,
    }
    for field in ("basis", "rate", "cap", "floor", "per_head", "max_count"):
        value = getattr(rule, field)
        if value is not None:
            payload[field] = value
    return payload


def _serialise_regime(config: RegimeConfiguration) -> dict[str, Any]:
    return {
        "id": config.id,
        "title": config.title,
        "notes": config.notes,
        "currency": config.currency.model_dump(),
        "bands": _serialise_bands(config),
        "top_rate": rate_as_percent(config.top_rate),
        "deductions": [_serialise_rule(rule) for rule in config.deductions],
    }


@blueprint.get("/meta")
def get_meta():
    """Return the application version for diagnostics."""

    return jsonify({"version": get_project_version()})


@blueprint.get("/regimes")
def list_regimes():
    """List the regimes declared in the manifest and the active selection."""

    manifest = load_manifest()
    regimes = [
        {"id": entry.id, "status": entry.status, "notes_url": entry.notes_url}
        for entry in manifest.regimes
    ]
    return jsonify(
        {
            "regimes": regimes,
            "default": manifest.default,
            "active": active_regime_id(),
        }
    )


@blueprint.get("/regime")
def get_active_regime():
    """Describe the regime currently used for calculations."""

    config = load_regime_configuration(active_regime_id())
    return jsonify(_serialise_regime(config))


@blueprint.get("/regimes/<regime_id>")
def get_regime(regime_id: str):
    """Describe a specific regime from the manifest."""

    try:
        config = load_regime_configuration(regime_id)
    except FileNotFoundError as exc:
        return problem_response(str(exc), status=404, code="not_found").to_response()

    return jsonify(_serialise_regime(config))


__all__ = ["blueprint", "get_configuration_metadata"]
