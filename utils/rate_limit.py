"""
Rate limit keys and limits for Flask-Limiter.

The limiter itself lives in extensions.py. Clients are keyed by user ID
when logged in and by IP address otherwise; login attempts are always
keyed by IP and get their own, smaller budget. Limit strings are read
from the app config on every request.
"""

from flask import current_app, request
from flask_login import current_user


def get_client_ip() -> str:
    """Get client IP, considering proxies."""
    ip_address = request.headers.get('X-Forwarded-For', request.remote_addr) or 'unknown'
    if ',' in ip_address:
        ip_address = ip_address.split(',')[0].strip()
    return ip_address


def client_ip_key() -> str:
    return f'ip:{get_client_ip()}'


def rate_limit_key() -> str:
    """Bucket key for the default API limit."""
    if current_user.is_authenticated:
        return f'user:{current_user.id}'
    return client_ip_key()


def default_limit() -> str:
    return current_app.config['RATELIMIT_DEFAULT']


def auth_limit() -> str:
    return current_app.config['RATELIMIT_AUTH']
