"""
User model and data access functions.
Handles requester/admin accounts and Flask-Login integration.
"""

from werkzeug.security import generate_password_hash, check_password_hash
from database import get_db


class User:
    """
    User class for Flask-Login integration.
    Wraps database row dictionary with required Flask-Login properties.
    """

    def __init__(self, user_dict):
        """
        Initialize User from database row.

        Args:
            user_dict: Dictionary with user data from database
        """
        self.id = user_dict['id']
        self.username = user_dict['username']
        self.email = user_dict['email']
        self.full_name = user_dict['full_name']
        self.role = user_dict['role']
        self.institution = user_dict.get('institution')
        self.phone = user_dict.get('phone')
        self.active = user_dict['active']
        self.created_at = user_dict['created_at']
        self.last_login = user_dict.get('last_login')

    @property
    def is_authenticated(self):
        """Required by Flask-Login."""
        return True

    @property
    def is_active(self):
        """Required by Flask-Login."""
        return self.active == 1

    @property
    def is_anonymous(self):
        """Required by Flask-Login."""
        return False

    @property
    def is_admin(self):
        return self.role == 'admin'

    def get_id(self):
        """Required by Flask-Login. Returns user ID as unicode string."""
        return str(self.id)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'username': self.username,
            'email': self.email,
            'full_name': self.full_name,
            'role': self.role,
            'institution': self.institution,
            'phone': self.phone,
        }


def get_user_by_id(user_id: int) -> dict:
    """
    Get user by ID.

    Args:
        user_id: User ID

    Returns:
        User dict or None if not found
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('SELECT * FROM users WHERE id = ?', (user_id,))
    row = cursor.fetchone()
    return dict(row) if row else None


def get_user_by_username(username: str) -> dict:
    """
    Get user by username.

    Args:
        username: Username to search for

    Returns:
        User dict or None if not found
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('SELECT * FROM users WHERE username = ?', (username,))
    row = cursor.fetchone()
    return dict(row) if row else None


def get_user_by_email(email: str) -> dict:
    """Get user by email, or None."""
    db = get_db()
    cursor = db.cursor()
    cursor.execute('SELECT * FROM users WHERE email = ?', (email,))
    row = cursor.fetchone()
    return dict(row) if row else None


def get_all_users(role: str = None, active_only: bool = False) -> list:
    """
    Get all users.

    Args:
        role: Only users with this role (optional)
        active_only: If True, only return active users

    Returns:
        List of user dicts without password hashes
    """
    db = get_db()
    cursor = db.cursor()

    query = '''
        SELECT id, username, email, full_name, role, institution, phone, active,
               created_at, updated_at, last_login
        FROM users
        WHERE 1=1
    '''
    params = []

    if role:
        query += ' AND role = ?'
        params.append(role)

    if active_only:
        query += ' AND active = 1'

    query += ' ORDER BY created_at DESC, id DESC'

    cursor.execute(query, params)
    return [dict(row) for row in cursor.fetchall()]


def count_active_admins() -> int:
    """Count active admin accounts."""
    db = get_db()
    row = db.execute("SELECT COUNT(*) FROM users WHERE role = 'admin' AND active = 1").fetchone()
    return row[0]


def create_user(username: str, email: str, password: str, full_name: str = None,
                role: str = 'user', institution: str = None, phone: str = None) -> int:
    """
    Create new user with hashed password.

    Args:
        username: Unique username
        email: Unique email
        password: Plain text password (will be hashed)
        full_name: User's full name
        role: 'admin' or 'user'
        institution: Origin institution
        phone: Contact phone

    Returns:
        New user ID

    Raises:
        sqlite3.IntegrityError if username or email already exists
    """
    db = get_db()
    password_hash = generate_password_hash(password)

    cursor = db.cursor()
    cursor.execute('''
        INSERT INTO users (username, email, password_hash, full_name, role, institution, phone)
        VALUES (?, ?, ?, ?, ?, ?, ?)
    ''', (username, email, password_hash, full_name, role, institution, phone))

    db.commit()
    return cursor.lastrowid


def update_last_login(user_id: int) -> None:
    """Stamp the last successful login."""
    db = get_db()
    db.execute('UPDATE users SET last_login = CURRENT_TIMESTAMP WHERE id = ?', (user_id,))
    db.commit()


def update_password(user_id: int, new_password: str) -> bool:
    """
    Update user password.

    Args:
        user_id: User ID
        new_password: New plain text password (will be hashed)

    Returns:
        True if updated successfully
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('''
        UPDATE users
        SET password_hash = ?, updated_at = CURRENT_TIMESTAMP
        WHERE id = ?
    ''', (generate_password_hash(new_password), user_id))

    db.commit()
    return cursor.rowcount > 0


def check_password(user_dict: dict, password: str) -> bool:
    """
    Check password against stored hash.

    Args:
        user_dict: User dict with password_hash
        password: Plain text password

    Returns:
        True if password matches
    """
    if not user_dict or not password:
        return False
    return check_password_hash(user_dict['password_hash'], password)


def update_user(user_id: int, **kwargs) -> bool:
    """
    Update user fields.

    Args:
        user_id: User ID to update
        **kwargs: Fields to update (email, full_name, institution, phone, active)

    Returns:
        True if updated successfully

    Raises:
        sqlite3.IntegrityError if the new email belongs to another user
    """
    db = get_db()

    # Build dynamic update query
    allowed_fields = ['email', 'full_name', 'institution', 'phone', 'active']
    updates = []
    values = []

    for field in allowed_fields:
        if field in kwargs:
            updates.append(f'{field} = ?')
            values.append(kwargs[field])

    if not updates:
        return False

    updates.append('updated_at = CURRENT_TIMESTAMP')
    values.append(user_id)

    cursor = db.cursor()
    cursor.execute(f'UPDATE users SET {", ".join(updates)} WHERE id = ?', values)
    db.commit()

    return cursor.rowcount > 0


def delete_user(user_id: int) -> bool:
    """
    Soft delete user (set active = 0).

    Reservations keep pointing at the account, so rows are never removed.

    Args:
        user_id: User ID to delete

    Returns:
        True if deleted successfully
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('''
        UPDATE users SET active = 0, updated_at = CURRENT_TIMESTAMP
        WHERE id = ?
    ''', (user_id,))

    db.commit()
    return cursor.rowcount > 0
