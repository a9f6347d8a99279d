"""Pydantic models describing the tax regime configuration schema."""

from __future__ import annotations

from typing import Any, Literal, Sequence

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    computed_field,
    field_validator,
    model_validator,
)
from typing_extensions import Self


class ConfigurationError(ValueError):
    """Raised when configuration values violate schema expectations."""


class ImmutableModel(BaseModel):
    """Base class that freezes instances and rejects unknown fields."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)


DeductionKind = Literal[
    "income_capped",
    "actual",
    "rate_with_cap",
    "rate_with_floor",
    "per_head",
]

DeductionBasis = Literal["employment_income", "total_income"]


class CurrencyConfig(ImmutableModel):
    """Currency presentation settings used for labels and traces."""

    code: str = "NGN"
    symbol: str = "₦"


class IncomeBand(ImmutableModel):
    """A slice of taxable income taxed at a single rate."""

    width: float
    rate: float

    @model_validator(mode="after")
    def _validate_values(self) -> Self:
        if self.width <= 0:
            raise ConfigurationError("Band widths must be positive values")
        if self.rate < 0 or self.rate > 1:
            raise ConfigurationError("Band rates must be between 0 and 1")
        return self


class TraceTemplates(ImmutableModel):
    """Format strings describing how a deduction amount was derived."""

    applied: str
    limited: str | None = None


_REQUIRED_PARAMETERS: dict[str, tuple[str, ...]] = {
    "income_capped": ("basis", "rate"),
    "actual": (),
    "rate_with_cap": ("rate", "cap"),
    "rate_with_floor": ("basis", "rate", "floor"),
    "per_head": ("per_head", "max_count"),
}


class DeductionRuleConfig(ImmutableModel):
    """A single statutory deduction or relief and its limiting rule."""

    id: str
    summary_field: str
    name: str
    description: str
    kind: DeductionKind
    source: str | None = None
    basis: DeductionBasis | None = None
    rate: float | None = None
    cap: float | None = None
    floor: float | None = None
    per_head: float | None = None
    max_count: int | None = None
    trace: TraceTemplates

    @field_validator("id", "summary_field", "name")
    @classmethod
    def _require_text(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ConfigurationError("Deduction identifiers and names must be non-empty")
        return text

    @model_validator(mode="after")
    def _validate_parameters(self) -> Self:
        missing = [
            name
            for name in _REQUIRED_PARAMETERS[self.kind]
            if getattr(self, name) is None
        ]
        if missing:
            raise ConfigurationError(
                f"Deduction '{self.id}' of kind '{self.kind}' requires: {', '.join(missing)}"
            )
        if self.kind != "rate_with_floor" and not self.source:
            raise ConfigurationError(f"Deduction '{self.id}' must declare a 'source' field")
        for name in ("rate", "cap", "floor", "per_head"):
            value = getattr(self, name)
            if value is not None and value < 0:
                raise ConfigurationError(
                    f"Deduction '{self.id}' parameter '{name}' must be non-negative"
                )
        if self.rate is not None and self.rate > 1:
            raise ConfigurationError(f"Deduction '{self.id}' rate must not exceed 1")
        if self.max_count is not None and self.max_count < 0:
            raise ConfigurationError(
                f"Deduction '{self.id}' parameter 'max_count' must be non-negative"
            )
        if self.kind != "actual" and self.trace.limited is None:
            raise ConfigurationError(
                f"Deduction '{self.id}' must provide a 'limited' trace template"
            )
        return self


class RegimeConfiguration(ImmutableModel):
    """Complete band table and deduction rule set for one tax regime."""

    id: str
    title: str
    currency: CurrencyConfig = Field(default_factory=CurrencyConfig)
    bands: Sequence[IncomeBand]
    top_rate: float
    deductions: Sequence[DeductionRuleConfig] = Field(default_factory=tuple)
    notes: str | None = None

    @field_validator("bands", "deductions", mode="before")
    @classmethod
    def _coerce_sequences(cls, value: Any) -> Any:
        if value is None:
            return ()
        if isinstance(value, list):
            return tuple(value)
        return value

    @model_validator(mode="after")
    def _validate_regime(self) -> Self:
        if not self.bands:
            raise ConfigurationError("At least one income band must be defined")
        if self.top_rate < 0 or self.top_rate > 1:
            raise ConfigurationError("The top rate must be between 0 and 1")

        seen_ids: set[str] = set()
        seen_fields: set[str] = set()
        for rule in self.deductions:
            if rule.id in seen_ids:
                raise ConfigurationError(f"Duplicate deduction identifier '{rule.id}'")
            if rule.summary_field in seen_fields:
                raise ConfigurationError(
                    f"Duplicate deduction summary field '{rule.summary_field}'"
                )
            seen_ids.add(rule.id)
            seen_fields.add(rule.summary_field)
        return self


class RegimeManifestEntry(ImmutableModel):
    """Entry describing an available regime in the manifest."""

    id: str
    filename: str | None = None
    status: str = "active"
    notes_url: str | None = None

    @computed_field
    @property
    def resolved_filename(self) -> str:
        return self.filename or f"{self.id}.yaml"


class RegimeManifest(ImmutableModel):
    """Manifest describing the regime configuration files shipped with the app."""

    default: str
    regimes: Sequence[RegimeManifestEntry]

    @model_validator(mode="after")
    def _validate_regimes(self) -> Self:
        seen: set[str] = set()
        for entry in self.regimes:
            if entry.id in seen:
                raise ConfigurationError(
                    f"Duplicate regime '{entry.id}' declared in the configuration manifest"
                )
            seen.add(entry.id)
        if self.default not in seen:
            raise ConfigurationError(
                f"Default regime '{self.default}' is not declared in the manifest"
            )
        return self

    def get_entry(self, regime_id: str) -> RegimeManifestEntry:
        for entry in self.regimes:
            if entry.id == regime_id:
                return entry
        raise KeyError(regime_id)

    @computed_field
    @property
    def supported_regimes(self) -> tuple[str, ...]:
        return tuple(entry.id for entry in self.regimes)


__all__ = [
    "ConfigurationError",
    "CurrencyConfig",
    "DeductionBasis",
    "DeductionKind",
    "DeductionRuleConfig",
    "ImmutableModel",
    "IncomeBand",
    "RegimeConfiguration",
    "RegimeManifest",
    "RegimeManifestEntry",
    "TraceTemplates",
    "ValidationError",
]
