"""
Account rules shared by registration, profile edits and user management.
"""

from models.user import count_active_admins, get_user_by_email, get_user_by_id, get_user_by_username
from utils.messages import MESSAGES


def validate_account_uniqueness(username: str = None, email: str = None,
                                exclude_user_id: int = None) -> tuple:
    """
    Check that username and email are not taken by another account.

    Args:
        username: Username to check (optional)
        email: Email to check (optional)
        exclude_user_id: Account allowed to already own them (profile edits)

    Returns:
        Tuple of (is_valid, error_message)
    """
    if username:
        existing = get_user_by_username(username)
        if existing and existing['id'] != exclude_user_id:
            return False, MESSAGES['username_exists']

    if email:
        existing = get_user_by_email(email)
        if existing and existing['id'] != exclude_user_id:
            return False, MESSAGES['email_exists']

    return True, None


def can_disable_user(user_id: int, current_user_id: int) -> tuple:
    """
    Check if an account can be deactivated or deleted.

    Args:
        user_id: Target user ID
        current_user_id: Current logged-in user ID

    Returns:
        Tuple of (can_disable, error_message)
    """
    # Cannot disable self
    if user_id == current_user_id:
        return False, MESSAGES['cannot_modify_self']

    user = get_user_by_id(user_id)
    if not user:
        return False, MESSAGES['user_not_found']

    if user['role'] == 'admin' and user['active'] and count_active_admins() <= 1:
        return False, MESSAGES['last_admin']

    return True, None
