"""Utilities for validating regime configuration data and surfacing issues."""

from __future__ import annotations

import argparse
from string import Formatter
from typing import Sequence

from .regime_config import (
    ConfigurationError,
    DeductionRuleConfig,
    IncomeBand,
    RegimeConfiguration,
    available_regimes,
    load_regime_configuration,
)


def _format_scope(scope: str, message: str) -> str:
    return f"{scope}: {message}"


def _validate_bands(bands: Sequence[IncomeBand], top_rate: float) -> list[str]:
    errors: list[str] = []

    previous_rate: float | None = None
    for index, band in enumerate(bands, start=1):
        if previous_rate is not None and band.rate < previous_rate:
            errors.append(
                _format_scope(
                    f"bands[{index}]",
                    f"rate {band.rate} is lower than the preceding band rate {previous_rate}",
                )
            )
        previous_rate = band.rate

    if previous_rate is not None and top_rate < previous_rate:
        errors.append(
            _format_scope(
                "top_rate",
                f"top rate {top_rate} is lower than the final band rate {previous_rate}",
            )
        )

    return errors


def _template_fields(template: str) -> set[str]:
    return {
        field_name.split(".")[0].split("[")[0]
        for _, field_name, _, _ in Formatter().parse(template)
        if field_name
    }


def _validate_rule(rule: DeductionRuleConfig) -> list[str]:
    # Imported lazily so the config package stays importable without the app.
    from ngtax.backend.app.models import DeductionSummary, TaxInput
    from ngtax.backend.app.services.calculators.deductions import TRACE_FIELDS

    scope = f"deductions.{rule.id}"
    errors: list[str] = []

    if rule.source and rule.source not in TaxInput.model_fields:
        errors.append(
            _format_scope(scope, f"source '{rule.source}' is not a calculation input field")
        )

    if rule.summary_field not in DeductionSummary.model_fields:
        errors.append(
            _format_scope(
                scope,
                f"summary field '{rule.summary_field}' is not reported in deduction details",
            )
        )

    if rule.kind == "per_head" and rule.source != "dependents":
        errors.append(_format_scope(scope, "per-head rules must count 'dependents'"))

    templates = {"applied": rule.trace.applied, "limited": rule.trace.limited}
    for label, template in templates.items():
        if template is None:
            continue
        try:
            unknown = _template_fields(template) - set(TRACE_FIELDS)
        except ValueError as error:
            errors.append(
                _format_scope(scope, f"{label} trace template is malformed: {error}")
            )
            continue
        if unknown:
            errors.append(
                _format_scope(
                    scope,
                    f"{label} trace template uses unknown placeholders: {sorted(unknown)}",
                )
            )

    return errors


def validate_regime_configuration(config: RegimeConfiguration) -> list[str]:
    """Return a list of validation issues for the provided configuration."""

    errors: list[str] = []

    errors.extend(_validate_bands(config.bands, config.top_rate))
    for rule in config.deductions:
        errors.extend(_validate_rule(rule))

    return errors


def validate_all_regimes(regimes: Sequence[str] | None = None) -> dict[str, list[str]]:
    """Validate all configured regimes and return issues keyed by regime id."""

    targets = regimes or available_regimes()
    results: dict[str, list[str]] = {}

    for regime_id in targets:
        config = load_regime_configuration(regime_id)
        results[regime_id] = validate_regime_configuration(config)

    return results


def _build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=(
            "Validate configured tax regimes and report issues helpful to contributors."
        )
    )
    parser.add_argument(
        "regimes",
        nargs="*",
        help="Specific regime ids to validate (defaults to all configured regimes)",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for running validations from the command line."""

    parser = _build_argument_parser()
    args = parser.parse_args(argv)
    regimes = args.regimes or available_regimes()

    if not regimes:
        parser.print_help()
        return 1

    exit_code = 0

    for regime_id in regimes:
        try:
            config = load_regime_configuration(regime_id)
        except (FileNotFoundError, ConfigurationError) as error:
            print(f"[{regime_id}] failed to load configuration: {error}")
            exit_code = 1
            continue

        issues = validate_regime_configuration(config)
        if issues:
            exit_code = 1
            print(f"[{regime_id}] {len(issues)} issue(s) detected:")
            for issue in issues:
                print(f"  - {issue}")
        else:
            print(f"[{regime_id}] OK")

    return exit_code


if __name__ == "__main__":  # pragma: no cover - CLI invocation
    raise SystemExit(main())
