"""Helpers that build JSON HTTP responses."""

from __future__ import annotations

import json
import logging
from typing import Any

from flask import Response

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"


def respond_with_json(code: int, payload: Any) -> Response:
    """Serialise the payload as JSON and return it with the given status code.

    A payload that cannot be serialised yields an empty 500 response.
    """
    try:
        body = json.dumps(payload, ensure_ascii=False, allow_nan=False, separators=(",", ":"))
    except (TypeError, ValueError) as exc:
        logger.error("Error marshalling JSON: %s", exc)
        return Response(b"", status=500, content_type=JSON_CONTENT_TYPE)
    return Response(body, status=code, content_type=JSON_CONTENT_TYPE)


def respond_with_error(code: int, msg: str, log_err: BaseException | None = None) -> Response:
    """Log the cause and return a JSON body of the form {"error": msg}."""
    if log_err is not None:
        logger.error("%s", log_err)
    if code > 499:
        logger.error("Responding with 5XX error: %s", msg)
    return respond_with_json(code, {"error": msg})