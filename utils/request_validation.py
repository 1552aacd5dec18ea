"""Utilities for validating incoming Flask requests."""

from __future__ import annotations

from flask import Request
from werkzeug.exceptions import BadRequest


def parse_json_request(req: Request) -> dict:
    """Return the parsed JSON body or raise a 400 error."""

    if not req.is_json:
        raise BadRequest("Request content type must be application/json.")

    data = req.get_json(silent=False)
    if data is None:
        raise BadRequest("Request JSON body is required.")

    if not isinstance(data, dict):
        raise BadRequest("Request JSON payload must be an object.")

    if not data:
        raise BadRequest("Request JSON body must not be empty.")

    return data


def parse_payload(req: Request) -> dict:
    """Return a JSON body, or the form fields of a multipart/urlencoded body.

    Signup and campaign requests may carry a file next to their fields, in
    which case the fields arrive as form data.
    """

    if req.is_json:
        return parse_json_request(req)

    if req.mimetype not in {"multipart/form-data", "application/x-www-form-urlencoded"}:
        raise BadRequest(
            "Request content type must be application/json or multipart/form-data."
        )

    data = req.form.to_dict()
    if not data:
        raise BadRequest("Request body must not be empty.")

    return data


def parse_bool(value: object) -> bool | None:
    """Interpret common truthy/falsy spellings; ``None`` when unrecognised."""

    if value is None:
        return None
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in {"1", "true", "yes", "y", "on"}:
        return True
    if text in {"0", "false", "no", "n", "off"}:
        return False
    return None
