"""
Miscellaneous utility helper functions.
Provides request parsing and file name helpers used across the routes.
"""

import os

from flask import request

from utils.exceptions import ValidationError
from utils.messages import MESSAGES


def get_request_data() -> dict:
    """
    Get the request body as a dict.

    JSON bodies are returned as-is; form and multipart bodies are flattened
    to single values.

    Raises:
        ValidationError: Body is JSON but not an object
    """
    if request.is_json:
        data = request.get_json(silent=True)
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValidationError(MESSAGES['invalid_payload'])
        return data
    return request.form.to_dict()


def parse_int(value, field: str) -> int:
    """
    Parse an integer request value.

    Args:
        value: Raw value
        field: Field name for the error message

    Returns:
        int value

    Raises:
        ValidationError: Missing or not an integer
    """
    if value is None or value == '':
        raise ValidationError(MESSAGES['field_required'].format(field=field))
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(MESSAGES['invalid_choice'].format(field=field))


def parse_bool(value) -> bool:
    """Interpret common truthy strings ('1', 'true', 'yes', 'on')."""
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ('1', 'true', 'yes', 'on')


def get_file_extension(filename: str) -> str:
    """
    Get file extension from filename.

    Args:
        filename: Filename

    Returns:
        Extension without dot (lowercase)
    """
    if not filename:
        return ''

    return os.path.splitext(filename)[1][1:].lower()


def allowed_file(filename: str, allowed_extensions: set) -> bool:
    """
    Check if file extension is allowed.

    Args:
        filename: Filename to check
        allowed_extensions: Set of allowed extensions

    Returns:
        True if extension is allowed
    """
    return get_file_extension(filename) in allowed_extensions
