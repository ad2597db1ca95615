"""
Standardized API response helpers.

Every JSON endpoint answers with the same envelope:

    Success:  {"success": true, "data": {...}, "message": "..."}
    Error:    {"success": false, "error": "Pesan kesalahan", ...context}

Usage:
    from utils.api_response import api_success, api_error

    return api_success(data=reservation, message=MESSAGES['reservation_created'], status=201)
    return api_error(MESSAGES['reservation_not_found'], status=404)
"""

from flask import jsonify
from typing import Any


def api_success(
    data: Any = None,
    message: str | None = None,
    status: int = 200,
    **extra_fields: Any
) -> tuple:
    """
    Build a standardized success JSON response.

    Args:
        data: Optional payload placed under the 'data' key.
        message: Optional success message (Indonesian).
        status: HTTP status code (default 200).
        **extra_fields: Additional top-level fields (e.g. available, pagination).

    Returns:
        Tuple of (Response, status_code)
    """
    response = {'success': True}

    if data is not None:
        response['data'] = data

    if message:
        response['message'] = message

    if extra_fields:
        response.update(extra_fields)

    return jsonify(response), status


def api_error(error: str, status: int = 400, **extra_fields: Any) -> tuple:
    """
    Build a standardized error JSON response.

    Args:
        error: Error message (Indonesian).
        status: HTTP status code (default 400).
        **extra_fields: Additional top-level fields (e.g. conflict, retry_after).

    Returns:
        Tuple of (Response, status_code)
    """
    response = {'success': False, 'error': error}

    if extra_fields:
        response.update(extra_fields)

    return jsonify(response), status


def api_paginated(result: dict, message: str | None = None) -> tuple:
    """
    Build a success response from a paginated query result.

    Args:
        result: Dict with 'items', 'total', 'page', 'pages' keys.
        message: Optional success message.

    Returns:
        Tuple of (Response, status_code)
    """
    return api_success(
        data=result['items'],
        message=message,
        count=len(result['items']),
        pagination={
            'page': result['page'],
            'per_page': result.get('per_page'),
            'total': result['total'],
            'pages': result['pages'],
        }
    )
