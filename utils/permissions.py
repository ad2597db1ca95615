"""
Permission checking utilities.
Maps account roles to permission codes and answers permission checks.
"""

from database import get_db

# Permission codes granted to each role
ROLE_PERMISSIONS = {
    'admin': frozenset({
        'resources.view',
        'resources.manage',
        'reservations.create',
        'reservations.view_own',
        'reservations.view_all',
        'reservations.manage',
        'users.manage',
    }),
    'user': frozenset({
        'resources.view',
        'reservations.create',
        'reservations.view_own',
    }),
}


def load_user_permissions(user_id: int) -> set:
    """
    Load all permissions for a user based on their role.

    Args:
        user_id: User ID

    Returns:
        Set of permission codes
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('SELECT role, active FROM users WHERE id = ?', (user_id,))
    row = cursor.fetchone()

    if not row or not row['active']:
        return set()

    return set(ROLE_PERMISSIONS.get(row['role'], ()))


def has_permission(user, permission_code: str) -> bool:
    """
    Check if user has a specific permission.

    Args:
        user: User object (Flask-Login)
        permission_code: Permission code to check

    Returns:
        True if user has permission
    """
    if not user or not user.is_authenticated:
        return False
    return permission_code in load_user_permissions(user.id)
