"""
Resource catalog data access functions.
Handles rooms and the tour guide: CRUD, operating windows and activation.
"""

import sqlite3
from datetime import date, datetime

from flask import current_app

from database import get_db, begin_immediate
from .reservation_history import record_status_history
from utils.datetime_helpers import format_datetime, get_now, parse_time_of_day
from utils.exceptions import ResourceUnavailableError, ValidationError
from utils.messages import MESSAGES, HISTORY_NOTES
from utils.validators import parse_csv_list, sanitize_input, validate_time_format

ROOM = 'room'
TOUR_GUIDE = 'tour-guide'
RESOURCE_KINDS = (ROOM, TOUR_GUIDE)

MAX_ROOM_CAPACITY = 1000

UPDATABLE_FIELDS = ('name', 'description', 'capacity', 'location', 'facilities',
                    'open_time', 'close_time')


def _row_to_resource(row) -> dict:
    resource = dict(row)
    resource['facilities'] = parse_csv_list(resource.get('facilities'))
    resource['active'] = bool(resource['active'])
    return resource


# =============================================================================
# QUERIES
# =============================================================================

def get_all_resources(kind: str = None, active_only: bool = True) -> list:
    """
    Get catalog resources.

    Args:
        kind: Filter by kind ('room' or 'tour-guide', optional)
        active_only: If True, only return active resources

    Returns:
        List of resource dicts ordered by kind and name
    """
    db = get_db()
    cursor = db.cursor()

    query = 'SELECT * FROM resources WHERE 1=1'
    params = []

    if kind:
        query += ' AND kind = ?'
        params.append(kind)

    if active_only:
        query += ' AND active = 1'

    query += ' ORDER BY kind, name'

    cursor.execute(query, params)
    return [_row_to_resource(row) for row in cursor.fetchall()]


def get_resource_by_id(resource_id: int) -> dict:
    """
    Get resource by ID.

    Args:
        resource_id: Resource ID

    Returns:
        Resource dict or None if not found
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('SELECT * FROM resources WHERE id = ?', (resource_id,))
    row = cursor.fetchone()
    return _row_to_resource(row) if row else None


def get_resource(resource_id: int) -> dict:
    """Get resource by ID or raise ResourceUnavailableError."""
    resource = get_resource_by_id(resource_id)
    if resource is None:
        raise ResourceUnavailableError(MESSAGES['resource_not_found'], resource_id=resource_id)
    return resource


def require_active_resource(resource_id: int) -> dict:
    """
    Get an active resource.

    Args:
        resource_id: Resource ID

    Returns:
        Resource dict

    Raises:
        ResourceUnavailableError: If the resource is missing or inactive
    """
    resource = get_resource_by_id(resource_id)
    if resource is None or not resource['active']:
        raise ResourceUnavailableError(MESSAGES['resource_unavailable'], resource_id=resource_id)
    return resource


def get_tour_guide_resource() -> dict:
    """Get the active tour guide resource (tours are one at a time)."""
    db = get_db()
    cursor = db.cursor()
    cursor.execute('''
        SELECT * FROM resources
        WHERE kind = ? AND active = 1
        ORDER BY id
        LIMIT 1
    ''', (TOUR_GUIDE,))
    row = cursor.fetchone()
    if row is None:
        raise ResourceUnavailableError(MESSAGES['resource_unavailable'])
    return _row_to_resource(row)


def operating_window(resource: dict, day: date) -> tuple:
    """
    Get the operating window of a resource on a given day.

    Args:
        resource: Resource dict with open_time/close_time
        day: Calendar day

    Returns:
        Tuple (open_dt, close_dt) of naive local datetimes
    """
    if isinstance(day, datetime):
        day = day.date()
    open_dt = datetime.combine(day, parse_time_of_day(resource['open_time']))
    close_dt = datetime.combine(day, parse_time_of_day(resource['close_time']))
    return open_dt, close_dt


# =============================================================================
# VALIDATION
# =============================================================================

def _normalize_time(value: str) -> str:
    value = sanitize_input(value)
    if not validate_time_format(value):
        raise ValidationError(MESSAGES['invalid_time_format'])
    parsed = parse_time_of_day(value)
    return f'{parsed.hour:02d}:{parsed.minute:02d}'


def _normalize_capacity(kind: str, capacity):
    if kind == TOUR_GUIDE:
        # Tour groups are bounded by participants validation, not capacity
        return None
    try:
        capacity = int(capacity)
    except (TypeError, ValueError):
        raise ValidationError(MESSAGES['invalid_capacity'])
    if capacity < 1 or capacity > MAX_ROOM_CAPACITY:
        raise ValidationError(MESSAGES['invalid_capacity'])
    return capacity


def _validate_fields(kind: str, fields: dict) -> dict:
    """Validate and normalize resource fields; returns the cleaned dict."""
    cleaned = {}

    if 'name' in fields:
        name = sanitize_input(fields['name'], max_length=100)
        if not name:
            raise ValidationError(MESSAGES['field_required'].format(field='name'))
        cleaned['name'] = name

    if 'description' in fields:
        cleaned['description'] = sanitize_input(fields['description'], max_length=500)

    if 'location' in fields:
        cleaned['location'] = sanitize_input(fields['location'], max_length=100)

    if 'facilities' in fields:
        cleaned['facilities'] = ','.join(parse_csv_list(fields['facilities']))

    if 'capacity' in fields:
        cleaned['capacity'] = _normalize_capacity(kind, fields['capacity'])

    for key in ('open_time', 'close_time'):
        if key in fields:
            cleaned[key] = _normalize_time(fields[key])

    return cleaned


# =============================================================================
# CRUD
# =============================================================================

def create_resource(name: str, kind: str = ROOM, capacity: int = None, **kwargs) -> int:
    """
    Create new catalog resource.

    Args:
        name: Unique display name
        kind: 'room' or 'tour-guide'
        capacity: Maximum participants (rooms only)
        **kwargs: Optional fields (description, location, facilities, open_time, close_time)

    Returns:
        New resource ID

    Raises:
        ValidationError: Invalid fields or duplicate name
    """
    if kind not in RESOURCE_KINDS:
        raise ValidationError(MESSAGES['invalid_kind'])

    fields = {'name': name, 'capacity': capacity}
    fields.update({k: v for k, v in kwargs.items() if k in UPDATABLE_FIELDS})
    fields.setdefault('open_time', '08:00')
    fields.setdefault('close_time', '17:00')
    cleaned = _validate_fields(kind, fields)

    if cleaned['open_time'] >= cleaned['close_time']:
        raise ValidationError(MESSAGES['invalid_operating_hours'])

    db = get_db()
    cursor = db.cursor()
    try:
        cursor.execute('''
            INSERT INTO resources
            (name, kind, description, capacity, location, facilities, open_time, close_time)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        ''', (cleaned['name'], kind, cleaned.get('description', ''), cleaned['capacity'],
              cleaned.get('location', ''), cleaned.get('facilities', ''),
              cleaned['open_time'], cleaned['close_time']))
        db.commit()
    except sqlite3.IntegrityError:
        db.rollback()
        raise ValidationError(MESSAGES['resource_name_exists'])

    current_app.logger.info('Resource created: %s (%s)', cleaned['name'], kind)
    return cursor.lastrowid


def update_resource(resource_id: int, **kwargs) -> bool:
    """
    Update resource fields. Kind is immutable.

    Args:
        resource_id: Resource ID to update
        **kwargs: Fields to update

    Returns:
        True if updated successfully
    """
    resource = get_resource(resource_id)
    cleaned = _validate_fields(resource['kind'],
                               {k: v for k, v in kwargs.items() if k in UPDATABLE_FIELDS})
    if not cleaned:
        return False

    open_time = cleaned.get('open_time', resource['open_time'])
    close_time = cleaned.get('close_time', resource['close_time'])
    if open_time >= close_time:
        raise ValidationError(MESSAGES['invalid_operating_hours'])

    updates = [f'{field} = ?' for field in cleaned]
    values = list(cleaned.values())
    updates.append('updated_at = CURRENT_TIMESTAMP')
    values.append(resource_id)

    db = get_db()
    cursor = db.cursor()
    try:
        cursor.execute(f'UPDATE resources SET {", ".join(updates)} WHERE id = ?', values)
        db.commit()
    except sqlite3.IntegrityError:
        db.rollback()
        raise ValidationError(MESSAGES['resource_name_exists'])

    return cursor.rowcount > 0


def _cancel_future_reservations(cursor, resource_id: int, changed_by: int, note: str,
                                now: datetime) -> int:
    """Cancel pending/approved reservations that have not started yet."""
    cursor.execute('''
        SELECT id FROM reservations
        WHERE resource_id = ?
          AND status IN ('pending', 'approved')
          AND start_time > ?
    ''', (resource_id, format_datetime(now)))
    reservation_ids = [row['id'] for row in cursor.fetchall()]

    for reservation_id in reservation_ids:
        cursor.execute('''
            UPDATE reservations
            SET status = 'cancelled', admin_note = ?, updated_at = CURRENT_TIMESTAMP
            WHERE id = ?
        ''', (note, reservation_id))
        record_status_history(cursor, reservation_id, 'cancelled', changed_by, note, changed_at=now)

    return len(reservation_ids)


def set_resource_active(resource_id: int, active: bool, changed_by: int = None,
                        now: datetime = None) -> int:
    """
    Activate or deactivate a resource.

    Deactivation cancels every future pending/approved reservation on the
    resource, with a history entry each, in the same transaction.

    Args:
        resource_id: Resource ID
        active: New active flag
        changed_by: Admin user ID
        now: Reference time (default: now)

    Returns:
        Number of reservations cancelled
    """
    get_resource(resource_id)
    now = now or get_now()

    db = get_db()
    cursor = db.cursor()
    cancelled = 0
    try:
        begin_immediate(db)
        cursor.execute('''
            UPDATE resources SET active = ?, updated_at = CURRENT_TIMESTAMP WHERE id = ?
        ''', (1 if active else 0, resource_id))
        if not active:
            cancelled = _cancel_future_reservations(
                cursor, resource_id, changed_by, HISTORY_NOTES['resource_deactivated'], now
            )
        db.commit()
    except Exception:
        db.rollback()
        raise

    current_app.logger.info(
        'Resource %s %s by user %s (%d reservations cancelled)',
        resource_id, 'activated' if active else 'deactivated', changed_by, cancelled
    )
    return cancelled


def toggle_resource_status(resource_id: int, changed_by: int = None, now: datetime = None) -> tuple:
    """
    Flip the active flag of a resource.

    Returns:
        Tuple (active, cancelled_count)
    """
    resource = get_resource(resource_id)
    active = not resource['active']
    cancelled = set_resource_active(resource_id, active, changed_by=changed_by, now=now)
    return active, cancelled


def delete_resource(resource_id: int) -> bool:
    """
    Delete a resource that no reservation references.

    Resources with reservation history must be deactivated instead.

    Args:
        resource_id: Resource ID

    Returns:
        True if deleted

    Raises:
        ValidationError: If reservations still reference the resource
    """
    get_resource(resource_id)

    db = get_db()
    cursor = db.cursor()
    cursor.execute('SELECT COUNT(*) as count FROM reservations WHERE resource_id = ?',
                   (resource_id,))
    if cursor.fetchone()['count'] > 0:
        raise ValidationError(MESSAGES['resource_has_reservations'])

    cursor.execute('DELETE FROM resources WHERE id = ?', (resource_id,))
    db.commit()
    current_app.logger.info('Resource %s deleted', resource_id)
    return cursor.rowcount > 0

