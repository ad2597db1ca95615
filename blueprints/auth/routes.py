"""
Authentication routes: registration, login, logout, profile, password change.
Session-based JSON endpoints mounted under /api/auth.
"""

import sqlite3

from flask import Blueprint, current_app
from flask_login import login_user, logout_user, login_required, current_user
from flask_wtf.csrf import generate_csrf

from blueprints.auth.forms import LoginForm, ChangePasswordForm, ProfileForm, RegisterForm
from blueprints.users.services import validate_account_uniqueness
from extensions import limiter
from models.user import (
    User, check_password, create_user, get_user_by_id, get_user_by_username, update_last_login,
    update_password, update_user
)
from utils.api_response import api_success, api_error
from utils.helpers import get_request_data
from utils.messages import MESSAGES
from utils.permissions import load_user_permissions
from utils.rate_limit import auth_limit, client_ip_key

auth_bp = Blueprint('auth', __name__)


@auth_bp.route('/csrf-token', methods=['GET'])
def csrf_token():
    """Issue a CSRF token for JSON clients (send back as X-CSRFToken)."""
    return api_success(data={'csrf_token': generate_csrf()})


@auth_bp.route('/login', methods=['POST'])
@limiter.limit(auth_limit, key_func=client_ip_key)
def login():
    """Log in with username and password."""
    form = LoginForm()

    if not form.validate_on_submit():
        return api_error(MESSAGES['invalid_payload'], status=400, errors=form.errors)

    user_dict = get_user_by_username(form.username.data.strip())

    # Check credentials
    if user_dict is None or not check_password(user_dict, form.password.data):
        current_app.logger.warning('Failed login for %s', form.username.data)
        return api_error(MESSAGES['invalid_credentials'], status=401)

    # Check if user is active
    if not user_dict.get('active'):
        return api_error(MESSAGES['account_inactive'], status=403)

    user = User(user_dict)
    login_user(user, remember=form.remember_me.data)
    update_last_login(user.id)

    current_app.logger.info('User %s logged in', user.username)
    return api_success(
        data=user.to_dict(),
        message=MESSAGES['login_success'].format(name=user.full_name or user.username)
    )


@auth_bp.route('/logout', methods=['POST'])
@login_required
def logout():
    """Logout current user."""
    logout_user()
    return api_success(message=MESSAGES['logout_success'])


@auth_bp.route('/me', methods=['GET'])
@login_required
def me():
    """Get the logged-in user with their permission codes."""
    data = current_user.to_dict()
    data['permissions'] = sorted(load_user_permissions(current_user.id))
    return api_success(data=data)


@auth_bp.route('/change-password', methods=['PUT'])
@login_required
def change_password():
    """Change the logged-in user's password."""
    form = ChangePasswordForm()

    if not form.validate_on_submit():
        return api_error(MESSAGES['invalid_payload'], status=400, errors=form.errors)

    user_dict = get_user_by_id(current_user.id)
    if not check_password(user_dict, form.current_password.data):
        return api_error(MESSAGES['wrong_password'], status=400)

    update_password(current_user.id, form.new_password.data)
    current_app.logger.info('User %s changed password', current_user.username)
    return api_success(message=MESSAGES['password_updated'])


@auth_bp.route('/register', methods=['POST'])
@limiter.limit(auth_limit, key_func=client_ip_key)
def register():
    """Create a requester account. New accounts always get the 'user' role."""
    form = RegisterForm()

    if not form.validate_on_submit():
        return api_error(MESSAGES['invalid_payload'], status=400, errors=form.errors)

    username = form.username.data.strip()
    email = form.email.data.strip().lower()

    is_valid, error_msg = validate_account_uniqueness(username=username, email=email)
    if not is_valid:
        return api_error(error_msg, status=400)

    try:
        user_id = create_user(
            username=username,
            email=email,
            password=form.password.data,
            full_name=form.full_name.data.strip(),
            institution=(form.institution.data or '').strip() or None,
            phone=(form.phone.data or '').strip() or None,
        )
    except sqlite3.IntegrityError:
        # Lost a race with a concurrent registration
        return api_error(MESSAGES['username_exists'], status=400)

    current_app.logger.info('User %s registered', username)
    return api_success(
        data=User(get_user_by_id(user_id)).to_dict(),
        message=MESSAGES['register_success'],
        status=201
    )


@auth_bp.route('/profile', methods=['PUT'])
@login_required
def update_profile():
    """Update the logged-in user's email, name, institution or phone."""
    form = ProfileForm()

    if not form.validate_on_submit():
        return api_error(MESSAGES['invalid_payload'], status=400, errors=form.errors)

    data = get_request_data()
    updates = {}
    for name in ('email', 'full_name', 'institution', 'phone'):
        if name in data:
            updates[name] = (form[name].data or '').strip() or None

    if 'email' in updates:
        if not updates['email']:
            return api_error(MESSAGES['field_required'].format(field='email'), status=400)
        updates['email'] = updates['email'].lower()
        is_valid, error_msg = validate_account_uniqueness(email=updates['email'],
                                                          exclude_user_id=current_user.id)
        if not is_valid:
            return api_error(error_msg, status=400)

    if updates:
        update_user(current_user.id, **updates)
        current_app.logger.info('User %s updated profile (%s)',
                                current_user.username, ', '.join(updates))

    return api_success(
        data=User(get_user_by_id(current_user.id)).to_dict(),
        message=MESSAGES['profile_updated']
    )
