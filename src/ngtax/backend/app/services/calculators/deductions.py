"""Statutory deduction and relief resolution.

Every deduction is described by a :class:`DeductionRuleConfig` loaded from the
regime YAML. The rule ``kind`` selects one of the resolvers registered below,
which applies the cap, limit or floor for that kind. Rules are independent of
one another; the configured order only determines the order of the itemised
breakdown.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Sequence

from ngtax.backend.app.models import (
    DeductionDetail,
    DeductionOutcome,
    DeductionResolution,
    DeductionSummary,
    IncomeSummary,
    TaxInput,
)
from ngtax.backend.config.regime_config import CurrencyConfig, DeductionRuleConfig

from .utils import format_currency, format_percentage

TRACE_FIELDS = (
    "rate",
    "basis",
    "limit",
    "amount",
    "original",
    "raw",
    "cap",
    "floor",
    "count",
    "per_head",
    "max_count",
    "plural",
)


@dataclass(frozen=True)
class RuleContext:
    """Inputs available to every deduction resolver."""

    payload: TaxInput
    income: IncomeSummary

    def claimed(self, rule: DeductionRuleConfig) -> float:
        if not rule.source:
            return 0.0
        return float(getattr(self.payload, rule.source))

    def basis(self, rule: DeductionRuleConfig) -> float:
        if rule.basis == "employment_income":
            return self.income.employment_income
        if rule.basis == "total_income":
            return self.income.total_income
        return 0.0


@dataclass(frozen=True)
class RuleResult:
    """Numbers produced by a resolver before the trace is rendered."""

    amount: float
    original: float
    limit: float | None = None
    limited: bool = False
    basis: float = 0.0
    raw: float = 0.0
    count: int = 0


Resolver = Callable[[DeductionRuleConfig, RuleContext], RuleResult]


def _resolve_income_capped(rule: DeductionRuleConfig, context: RuleContext) -> RuleResult:
    basis = context.basis(rule)
    limit = basis * (rule.rate or 0.0)
    claimed = context.claimed(rule)
    return RuleResult(
        amount=min(claimed, limit),
        original=claimed,
        limit=limit,
        limited=limit < claimed,
        basis=basis,
        raw=claimed,
    )


def _resolve_actual(rule: DeductionRuleConfig, context: RuleContext) -> RuleResult:
    claimed = context.claimed(rule)
    return RuleResult(amount=claimed, original=claimed, raw=claimed)


def _resolve_rate_with_cap(rule: DeductionRuleConfig, context: RuleContext) -> RuleResult:
    claimed = context.claimed(rule)
    cap = rule.cap or 0.0
    raw = claimed * (rule.rate or 0.0)
    return RuleResult(
        amount=min(raw, cap),
        original=claimed,
        limit=cap,
        limited=raw > cap,
        raw=raw,
    )


def _resolve_rate_with_floor(
    rule: DeductionRuleConfig, context: RuleContext
) -> RuleResult:
    basis = context.basis(rule)
    floor = rule.floor or 0.0
    raw = basis * (rule.rate or 0.0)
    return RuleResult(
        amount=max(raw, floor),
        original=raw,
        limit=floor,
        limited=raw < floor,
        basis=basis,
        raw=raw,
    )


def _resolve_per_head(rule: DeductionRuleConfig, context: RuleContext) -> RuleResult:
    requested = int(context.claimed(rule))
    max_count = rule.max_count or 0
    counted = min(requested, max_count)
    return RuleResult(
        amount=counted * (rule.per_head or 0.0),
        original=float(requested),
        limit=float(max_count),
        limited=requested > max_count,
        count=counted,
    )


RESOLVERS: dict[str, Resolver] = {
    "income_capped": _resolve_income_capped,
    "actual": _resolve_actual,
    "rate_with_cap": _resolve_rate_with_cap,
    "rate_with_floor": _resolve_rate_with_floor,
    "per_head": _resolve_per_head,
}


def _trace_values(
    rule: DeductionRuleConfig, result: RuleResult, currency: CurrencyConfig
) -> dict[str, Any]:
    def money(value: float) -> str:
        return format_currency(value, currency.symbol)

    return {
        "rate": format_percentage(rule.rate or 0.0),
        "basis": money(result.basis),
        "limit": money(result.limit or 0.0),
        "amount": money(result.amount),
        "original": money(result.original),
        "raw": money(result.raw),
        "cap": money(rule.cap or 0.0),
        "floor": money(rule.floor or 0.0),
        "count": result.count,
        "per_head": money(rule.per_head or 0.0),
        "max_count": rule.max_count or 0,
        "plural": "s" if result.count > 1 else "",
    }


def render_trace(
    rule: DeductionRuleConfig, result: RuleResult, currency: CurrencyConfig
) -> str:
    """Return the calculation trace for ``result`` using the rule's templates."""

    template = rule.trace.applied
    if result.limited and rule.trace.limited:
        template = rule.trace.limited
    return template.format(**_trace_values(rule, result, currency))


def resolve_deduction(
    rule: DeductionRuleConfig, context: RuleContext, currency: CurrencyConfig
) -> DeductionOutcome:
    """Apply a single rule and return its outcome."""

    result = RESOLVERS[rule.kind](rule, context)
    return DeductionOutcome(
        rule_id=rule.id,
        summary_field=rule.summary_field,
        amount=result.amount,
        original_amount=result.original,
        limit=result.limit,
        limited=result.limited,
        trace=render_trace(rule, result, currency),
    )


def resolve_deductions(
    payload: TaxInput,
    income: IncomeSummary,
    rules: Sequence[DeductionRuleConfig],
    currency: CurrencyConfig,
) -> DeductionResolution:
    """Resolve every configured deduction and build the itemised breakdown."""

    context = RuleContext(payload=payload, income=income)

    outcomes: list[DeductionOutcome] = []
    details: list[DeductionDetail] = []
    for rule in rules:
        outcome = resolve_deduction(rule, context, currency)
        outcomes.append(outcome)
        if outcome.amount > 0:
            details.append(
                DeductionDetail(
                    name=rule.name,
                    amount=outcome.amount,
                    original_amount=outcome.original_amount,
                    limit=outcome.limit,
                    calculation=outcome.trace,
                    description=rule.description,
                )
            )

    summary = DeductionSummary(
        **{outcome.summary_field: outcome.amount for outcome in outcomes}
    )

    return DeductionResolution(
        outcomes=tuple(outcomes),
        details=tuple(details),
        summary=summary,
    )


__all__ = [
    "RESOLVERS",
    "TRACE_FIELDS",
    "RuleContext",
    "RuleResult",
    "render_trace",
    "resolve_deduction",
    "resolve_deductions",
]
