"""Regression coverage ensuring calculator outputs stay stable."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from ngtax.backend.app.services.calculation_service import calculate_tax

_DATA_PATH = Path(__file__).resolve().parents[1] / "data" / "regression_scenarios.json"


@pytest.mark.parametrize(
    "scenario",
    json.loads(_DATA_PATH.read_text("utf-8")),
    ids=lambda item: item["name"],
)
def test_calculate_tax_matches_regression_scenario(scenario: dict[str, object]) -> None:
    """The calculation service returns the expected results for known payloads."""

    payload = scenario["payload"]
    expectations = scenario["expectations"]

    result = calculate_tax(payload)

    for key, value in expectations["summary"].items():
        assert result[key] == pytest.approx(value), key

    bands = result["bandBreakdown"]
    expected_bands = expectations["bands"]
    assert [band["range"] for band in bands] == [band["range"] for band in expected_bands]
    for band, expected in zip(bands, expected_bands):
        for field in ("amount", "rate", "tax"):
            assert band[field] == pytest.approx(expected[field])

    summary = result["deductionDetails"]
    for field, value in expectations["deductionDetails"].items():
        assert summary[field] == pytest.approx(value), field
