"""
Helper utility functions shared by the API blueprints.
"""

from flask import request

from validators import ValidationError


def get_json_body(default=None):
    """
    Parse the request body as JSON.

    Args:
        default: Value returned for an empty body (defaults to {})

    Raises:
        ValidationError: body present but not valid JSON
    """
    if not request.get_data():
        return {} if default is None else default
    data = request.get_json(silent=True)
    if data is None:
        raise ValidationError("Request body must be valid JSON")
    return data


def acting_user_id():
    """
    ID of the user making the request, from the X-User-Id header.

    Authentication happens upstream; the header is trusted as-is.
    """
    return request.headers.get('X-User-Id') or None


def require_valid(result):
    """Raise ValidationError for a failed (is_valid, error) validator result."""
    is_valid, error = result
    if not is_valid:
        raise ValidationError(error)
