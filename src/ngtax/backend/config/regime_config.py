"""Configuration loader wrapping the shared schema models."""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Sequence

import yaml
from pydantic import ValidationError

from .schema import (
    ConfigurationError,
    CurrencyConfig,
    DeductionRuleConfig,
    IncomeBand,
    RegimeConfiguration,
    RegimeManifest,
    RegimeManifestEntry,
    TraceTemplates,
)

CONFIG_DIRECTORY = Path(__file__).resolve().parent / "data"
MANIFEST_FILE = CONFIG_DIRECTORY / "manifest.yaml"
REGIME_ENV = "NGTAX_TAX_REGIME"

_LOGGER = logging.getLogger(__name__)


def _load_yaml(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ConfigurationError("Configuration file must define a mapping at the top level")
    return data


@lru_cache(maxsize=1)
def load_manifest() -> RegimeManifest:
    """Load and cache the configuration manifest."""

    if not MANIFEST_FILE.exists():
        raise FileNotFoundError("Configuration manifest not found")

    raw_manifest = _load_yaml(MANIFEST_FILE)

    try:
        return RegimeManifest.model_validate(raw_manifest)
    except ValidationError as error:
        raise ConfigurationError(f"Manifest validation failed: {error}") from error


@lru_cache(maxsize=8)
def load_regime_configuration(regime_id: str) -> RegimeConfiguration:
    """Load configuration for the named regime from disk."""

    try:
        manifest_entry = load_manifest().get_entry(regime_id)
    except KeyError as exc:
        raise FileNotFoundError(
            f"Configuration for regime '{regime_id}' not declared in manifest"
        ) from exc

    config_file = CONFIG_DIRECTORY / manifest_entry.resolved_filename
    if not config_file.exists():
        raise FileNotFoundError(
            f"Configuration file for regime '{regime_id}' missing: {config_file.name}"
        )

    raw_config = _load_yaml(config_file)
    raw_config.setdefault("id", regime_id)

    try:
        configuration = RegimeConfiguration.model_validate(raw_config)
    except ValidationError as error:
        raise ConfigurationError(
            f"Configuration validation failed for '{regime_id}': {error}"
        ) from error

    if configuration.id != regime_id:
        raise ConfigurationError(
            f"Configuration id mismatch: expected '{regime_id}', found '{configuration.id}'"
        )

    return configuration


def available_regimes() -> Sequence[str]:
    """Return the regime identifiers declared in the manifest."""

    return load_manifest().supported_regimes


def active_regime_id() -> str:
    """Return the regime selected through ``NGTAX_TAX_REGIME`` or the manifest default."""

    manifest = load_manifest()
    requested = os.getenv(REGIME_ENV, "").strip()
    if not requested:
        return manifest.default
    if requested not in manifest.supported_regimes:
        _LOGGER.warning(
            "Ignoring unknown value for %s: %s (using %s)",
            REGIME_ENV,
            requested,
            manifest.default,
        )
        return manifest.default
    return requested


def load_active_configuration() -> RegimeConfiguration:
    """Load the configuration for the currently selected regime."""

    return load_regime_configuration(active_regime_id())


__all__ = [
    "CONFIG_DIRECTORY",
    "ConfigurationError",
    "CurrencyConfig",
    "DeductionRuleConfig",
    "IncomeBand",
    "MANIFEST_FILE",
    "REGIME_ENV",
    "RegimeConfiguration",
    "RegimeManifest",
    "RegimeManifestEntry",
    "TraceTemplates",
    "active_regime_id",
    "available_regimes",
    "load_active_configuration",
    "load_manifest",
    "load_regime_configuration",
]
