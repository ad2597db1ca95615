"""
User management routes for administrators.
List, inspect, activate/deactivate and soft-delete accounts under /api/users.
"""

from flask import Blueprint, current_app, request
from flask_login import login_required, current_user

from blueprints.users.services import can_disable_user
from models.user import delete_user, get_all_users, get_user_by_id, update_user
from utils.api_response import api_success
from utils.decorators import permission_required
from utils.exceptions import NotFoundError, ValidationError
from utils.helpers import parse_bool
from utils.messages import MESSAGES

users_bp = Blueprint('users', __name__)

USER_ROLES = ('admin', 'user')


def _public(user: dict) -> dict:
    user = dict(user)
    user.pop('password_hash', None)
    return user


def _require_user(user_id: int) -> dict:
    user = get_user_by_id(user_id)
    if not user:
        raise NotFoundError(MESSAGES['user_not_found'])
    return user


@users_bp.route('', methods=['GET'])
@login_required
@permission_required('users.manage')
def users_list():
    """List accounts (?role=admin|user, ?active_only=1)."""
    role = request.args.get('role') or None
    if role and role not in USER_ROLES:
        raise ValidationError(MESSAGES['invalid_choice'].format(field='role'))

    users = get_all_users(role=role, active_only=parse_bool(request.args.get('active_only', '')))
    return api_success(data=users, total=len(users))


@users_bp.route('/<int:user_id>', methods=['GET'])
@login_required
@permission_required('users.manage')
def users_detail(user_id):
    """Get one account."""
    return api_success(data=_public(_require_user(user_id)))


@users_bp.route('/<int:user_id>/status', methods=['PATCH'])
@login_required
@permission_required('users.manage')
def users_toggle_status(user_id):
    """Flip an account between active and inactive."""
    user = _require_user(user_id)

    if user['active']:
        allowed, error_msg = can_disable_user(user_id, current_user.id)
        if not allowed:
            raise ValidationError(error_msg)

    active = 0 if user['active'] else 1
    update_user(user_id, active=active)
    current_app.logger.info('User %s %s by %s', user['username'],
                            'activated' if active else 'deactivated', current_user.username)

    return api_success(
        data=_public(get_user_by_id(user_id)),
        message=MESSAGES['user_activated'] if active else MESSAGES['user_deactivated']
    )


@users_bp.route('/<int:user_id>', methods=['DELETE'])
@login_required
@permission_required('users.manage')
def users_delete(user_id):
    """Soft delete an account; its reservations are kept."""
    user = _require_user(user_id)

    allowed, error_msg = can_disable_user(user_id, current_user.id)
    if not allowed:
        raise ValidationError(error_msg)

    delete_user(user_id)
    current_app.logger.info('User %s deleted by %s', user['username'], current_user.username)
    return api_success(message=MESSAGES['user_deleted'])
