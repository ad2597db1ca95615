"""
API routes for service-level JSON endpoints.
"""

from flask import Blueprint, current_app

from database import get_db
from extensions import limiter
from utils.api_response import api_success
from utils.datetime_helpers import format_datetime, get_now

api_bp = Blueprint('api', __name__)


@api_bp.route('/health')
@limiter.exempt
def health_check():
    """
    Health check endpoint (no authentication required).

    Returns:
        JSON with status, version and server time
    """
    get_db().execute('SELECT 1')
    return api_success(data={
        'status': 'ok',
        'version': current_app.config.get('APP_VERSION', '1.0.0'),
        'app': current_app.config.get('APP_NAME', 'LibRoom'),
        'timezone': current_app.config.get('TIMEZONE'),
        'server_time': format_datetime(get_now()),
    })
