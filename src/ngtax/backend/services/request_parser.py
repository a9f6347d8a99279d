"""Helpers for extracting incoming calculation requests."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from flask import Request
from werkzeug.exceptions import BadRequest


def parse_calculation_payload(req: Request) -> dict[str, Any]:
    """Extract the JSON object submitted in ``req``.

    The body is parsed as JSON whatever the declared content type. Field-level
    validation happens in the calculation service; this helper only
    guarantees that an object was supplied.
    """

    data = req.get_json(force=True, silent=True)
    if data is None:
        raise BadRequest("Request body must be valid JSON")
    if not isinstance(data, Mapping):
        raise BadRequest("Request JSON must be an object")

    return dict(data)
