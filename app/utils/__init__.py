"""
Utilities Package

Shared helper functions used across the application.
"""

from app.utils.helpers import (
    get_json_body,
    acting_user_id,
    require_valid,
)

__all__ = [
    'get_json_body',
    'acting_user_id',
    'require_valid',
]
