#!/usr/bin/env python3
"""Collect baseline timings for the ngtax calculation pipeline."""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path
from time import perf_counter

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from ngtax.backend.app.models import TaxInput  # noqa: E402
from ngtax.backend.app.services.calculation_service import (  # noqa: E402
    calculate_tax,
    compute_tax_liability,
)
from ngtax.backend.config.regime_config import (  # noqa: E402
    available_regimes,
    load_regime_configuration,
)

SAMPLE_PAYLOAD = {
    "employmentType": "both",
    "resident": True,
    "employmentIncome": 6_000_000,
    "freelanceIncome": 2_000_000,
    "businessExpenses": 500_000,
    "digitalIncome": 300_000,
    "lossesDigital": 100_000,
    "rentalIncome": 1_200_000,
    "investmentIncome": 400_000,
    "capitalGains": 100_000,
    "pensionContrib": 480_000,
    "nhfContrib": 150_000,
    "nhisContrib": 60_000,
    "lifeInsurance": 100_000,
    "rentPaid": 1_500_000,
    "loanInterest": 200_000,
    "donations": 1_500_000,
    "dependents": 2,
}


def _timed(iterations: int, func) -> dict[str, float]:
    func()  # Warm caches
    start = perf_counter()
    for _ in range(iterations):
        func()
    elapsed = perf_counter() - start
    return {
        "iterations": iterations,
        "total_ms": elapsed * 1000,
        "average_ms": (elapsed / iterations) * 1000,
    }


def measure_service(iterations: int) -> dict[str, float]:
    """Time the boundary function, including payload validation."""

    return _timed(iterations, lambda: calculate_tax(dict(SAMPLE_PAYLOAD)))


def measure_engine(iterations: int) -> dict[str, dict[str, float]]:
    """Time the pure engine for every configured regime."""

    tax_input = TaxInput.model_validate(SAMPLE_PAYLOAD)
    report: dict[str, dict[str, float]] = {}
    for regime_id in available_regimes():
        config = load_regime_configuration(regime_id)
        report[regime_id] = _timed(
            iterations, lambda: compute_tax_liability(tax_input, config)
        )
    return report


def main() -> None:
    iterations = int(os.getenv("NGTAX_PROFILE_ITERATIONS", "500"))
    report = {
        "service": measure_service(iterations),
        "engine": measure_engine(iterations),
    }
    print(json.dumps(report, indent=2, sort_keys=True))


if __name__ == "__main__":
    main()
