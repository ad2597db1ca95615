"""
Flask extensions initialization.
Extensions are initialized here and then initialized with the app in app.py.
"""

from flask_limiter import Limiter
from flask_login import LoginManager
from flask_wtf.csrf import CSRFProtect

from utils.api_response import api_error
from utils.messages import MESSAGES
from utils.rate_limit import rate_limit_key, default_limit

# Initialize Flask-Login
login_manager = LoginManager()

# Initialize CSRF Protection
csrf = CSRFProtect()

# Initialize rate limiting (storage and strategy come from RATELIMIT_* config)
limiter = Limiter(rate_limit_key, default_limits=[default_limit])

# Configure Login Manager
login_manager.session_protection = 'basic'


@login_manager.user_loader
def load_user(user_id):
    """
    Load user by ID for Flask-Login.

    Args:
        user_id: The user ID as a string

    Returns:
        User object or None if not found
    """
    from models.user import get_user_by_id, User

    user_dict = get_user_by_id(int(user_id))
    if user_dict:
        return User(user_dict)
    return None


@login_manager.unauthorized_handler
def unauthorized():
    """Answer JSON 401 instead of redirecting to a login page."""
    return api_error(MESSAGES['login_required'], status=401)
